"""配置管理"""

from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# 加载 .env 文件
load_dotenv()


class BrowserConfig(BaseModel):
    """浏览器渲染配置"""

    headless: bool = Field(default_factory=lambda: os.getenv("HEADLESS", "true").lower() == "true")
    viewport_width: int = Field(default_factory=lambda: int(os.getenv("VIEWPORT_WIDTH", "1920")))
    viewport_height: int = Field(default_factory=lambda: int(os.getenv("VIEWPORT_HEIGHT", "1080")))
    # 页面导航超时（毫秒），调用方可覆盖
    timeout_ms: int = Field(default_factory=lambda: int(os.getenv("RENDER_TIMEOUT_MS", "25000")))
    # 等待选择器的超时（毫秒），超时不算错误
    selector_wait_ms: int = Field(
        default_factory=lambda: int(os.getenv("SELECTOR_WAIT_MS", "5000"))
    )
    stealth: bool = Field(
        default_factory=lambda: os.getenv("STEALTH_ENABLED", "true").lower() == "true"
    )
    browser_type: str = Field(default_factory=lambda: os.getenv("BROWSER_TYPE", "chromium"))
    max_launch_retries: int = Field(
        default_factory=lambda: int(os.getenv("MAX_LAUNCH_RETRIES", "2"))
    )

    # ===== 反爬虫节奏 =====
    # 导航前随机延迟区间（毫秒）
    pre_nav_delay_min_ms: int = Field(
        default_factory=lambda: int(os.getenv("PRE_NAV_DELAY_MIN_MS", "500"))
    )
    pre_nav_delay_max_ms: int = Field(
        default_factory=lambda: int(os.getenv("PRE_NAV_DELAY_MAX_MS", "1500"))
    )

    # ===== 自动滚动 =====
    scroll_step_px: int = Field(default_factory=lambda: int(os.getenv("SCROLL_STEP_PX", "500")))
    scroll_interval_ms: int = Field(
        default_factory=lambda: int(os.getenv("SCROLL_INTERVAL_MS", "500"))
    )
    # 滚动结束后等待懒加载内容渲染（毫秒）
    settle_after_scroll_ms: int = Field(
        default_factory=lambda: int(os.getenv("SETTLE_AFTER_SCROLL_MS", "2000"))
    )


class ExtractorConfig(BaseModel):
    """商品列表抽取配置

    这些阈值均为经验值，保留为可覆盖的命名配置。
    """

    # 某一策略累计达到该数量即停止后续策略
    min_products: int = Field(default_factory=lambda: int(os.getenv("MIN_PRODUCTS", "10")))
    # 单个策略最多处理的商品数
    max_items_per_strategy: int = Field(
        default_factory=lambda: int(os.getenv("MAX_ITEMS_PER_STRATEGY", "30"))
    )
    # 属性直取策略：带 data 属性的链接数需超过该值
    attribute_min_links: int = Field(
        default_factory=lambda: int(os.getenv("ATTRIBUTE_MIN_LINKS", "5"))
    )
    # 链接模式策略：商品链接数需超过该值
    anchor_min_links: int = Field(default_factory=lambda: int(os.getenv("ANCHOR_MIN_LINKS", "5")))
    # 向上查找价格文本的祖先层数
    ancestor_levels: int = Field(default_factory=lambda: int(os.getenv("ANCESTOR_LEVELS", "3")))
    # 容器模式策略：累计命中达到该数量即停止尝试后续模式
    container_min_matches: int = Field(
        default_factory=lambda: int(os.getenv("CONTAINER_MIN_MATCHES", "5"))
    )
    # 重复 class 频率区间
    repeating_class_min: int = Field(
        default_factory=lambda: int(os.getenv("REPEATING_CLASS_MIN", "5"))
    )
    repeating_class_max: int = Field(
        default_factory=lambda: int(os.getenv("REPEATING_CLASS_MAX", "50"))
    )
    # 只检查出现次数最多的前 N 个 class
    repeating_class_top_n: int = Field(
        default_factory=lambda: int(os.getenv("REPEATING_CLASS_TOP_N", "5"))
    )
    # 重复 class 策略：商品数达到该值即接受
    repeating_accept_min: int = Field(
        default_factory=lambda: int(os.getenv("REPEATING_ACCEPT_MIN", "3"))
    )
    name_max_length: int = Field(default_factory=lambda: int(os.getenv("NAME_MAX_LENGTH", "100")))


class SelectorConfig(BaseModel):
    """选择器评分/聚合配置"""

    max_sample_urls: int = Field(default_factory=lambda: int(os.getenv("MAX_SAMPLE_URLS", "5")))
    fetch_timeout_s: float = Field(
        default_factory=lambda: float(os.getenv("FETCH_TIMEOUT_S", "15"))
    )
    fetch_user_agent: str = Field(
        default_factory=lambda: os.getenv(
            "FETCH_USER_AGENT", "AutoParse-Selector-Optimizer/1.0"
        )
    )


class Config(BaseModel):
    """全局配置"""

    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    extractor: ExtractorConfig = Field(default_factory=ExtractorConfig)
    selector: SelectorConfig = Field(default_factory=SelectorConfig)

    @classmethod
    def load(cls) -> "Config":
        """加载配置"""
        return cls()


# 全局配置实例
config = Config.load()
