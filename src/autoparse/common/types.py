"""核心数据类型定义"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .constants import PRODUCT_NAME_HARD_LIMIT


class _CamelModel(BaseModel):
    """对外以 camelCase 输出，对内以 snake_case 访问"""

    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> dict:
        """序列化为调用方使用的 JSON 结构（省略空字段）"""
        return self.model_dump(by_alias=True, exclude_none=True)


# ============================================================================
# 渲染输入
# ============================================================================


class CookieSpec(BaseModel):
    """调用方或站点配置提供的 Cookie"""

    name: str
    value: str
    domain: str | None = Field(default=None, description="为空时绑定到请求域名")


class RenderOptions(BaseModel):
    """单次渲染参数

    未设置的项回退到站点配置（SiteProfile）与全局配置。
    """

    timeout_ms: int | None = Field(default=None, description="导航超时（毫秒）")
    wait_for_selector: str | None = Field(default=None, description="导航后等待的选择器")
    proxy: str | None = Field(default=None, description="代理服务器，如 http://host:port")
    cookies: list[CookieSpec] = Field(default_factory=list)
    headers: dict[str, str] = Field(default_factory=dict)
    stealth: bool | None = Field(default=None, description="是否启用反检测脚本")
    user_agent: str | None = Field(default=None, description="为空时从 UA 池随机选择")
    scroll_to_load: bool = Field(default=True, description="是否自动滚动加载")
    wait_ms: int | None = Field(default=None, description="覆盖站点等待时间")
    scroll_count: int | None = Field(default=None, description="覆盖站点滚动次数")


# ============================================================================
# 商品列表
# ============================================================================


class Product(_CamelModel):
    """单个商品

    同一结果内不存在 url 相同、或 name 与 price 同时相同的两个商品。
    """

    name: str = Field(..., min_length=1, max_length=PRODUCT_NAME_HARD_LIMIT)
    price: str | None = None
    original_price: str | None = Field(default=None, alias="originalPrice")
    discount_percent: str | None = Field(default=None, alias="discountPercent")
    image: str | None = None
    url: str | None = None
    brand: str | None = None
    rating: str | None = None
    review_count: str | None = Field(default=None, alias="reviewCount")


class Pagination(_CamelModel):
    """分页信息"""

    current_page: int = Field(default=1, alias="currentPage")
    total_pages: int | None = Field(default=None, alias="totalPages")
    has_next: bool = Field(default=False, alias="hasNext")


class ExtractionResult(_CamelModel):
    """列表页抽取结果"""

    url: str
    title: str = ""
    total_count: int | None = Field(default=None, alias="totalProducts", description="页面文案中的总数，不权威")
    products: list[Product] = Field(default_factory=list)
    pagination: Pagination | None = None
    parsed_at: str = Field(default_factory=lambda: datetime.now().isoformat(), alias="parsedAt")


# ============================================================================
# 商品详情
# ============================================================================


class DetailFields(_CamelModel):
    """详情页抽取结果"""

    url: str
    title: str | None = None
    description: str | None = None
    image: str | None = None
    price: str | None = None
    currency: str | None = None
    sku: str | None = None
    brand: str | None = None
    availability: str | None = None
    rating: str | None = None
    review_count: str | None = Field(default=None, alias="reviewCount")
    source: str = Field(default="dom", description="数据来源: json-ld / meta / dom")


# ============================================================================
# 选择器
# ============================================================================


class SelectorCandidate(_CamelModel):
    """单个候选选择器及其得分"""

    field_type: str = Field(..., alias="fieldType")
    selector: str
    score: float = Field(default=0, ge=0)
    sample: str = Field(default="", max_length=100)


class AggregatedSelector(_CamelModel):
    """跨样本聚合后的最佳选择器"""

    field_type: str = Field(..., alias="fieldType")
    selector: str
    confidence: int = Field(..., ge=0, le=100)
    sample: str = ""


class AggregatedSelectorSet(_CamelModel):
    """每个字段一个最佳选择器，以及与当前配置的差异"""

    analyzed_urls: int = Field(default=0, alias="analyzedUrls")
    details: dict[str, AggregatedSelector | None] = Field(default_factory=dict)
    improvements: list[str] = Field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.improvements)

    def optimized_selectors(self, current: dict[str, str] | None = None) -> dict[str, str]:
        """最佳选择器映射，未找到的字段保留当前配置"""
        current = current or {}
        return {
            field_type: (best.selector if best else current.get(field_type, ""))
            for field_type, best in self.details.items()
        }

    def to_response(self, current: dict[str, str] | None = None) -> dict:
        return {
            "analyzedUrls": self.analyzed_urls,
            "optimizedSelectors": self.optimized_selectors(current),
            "details": {k: (v.to_dict() if v else None) for k, v in self.details.items()},
            "improvements": list(self.improvements),
            "hasChanges": self.has_changes,
        }


class SelectorRecommendation(_CamelModel):
    """按已知取值反查得到的选择器推荐"""

    selector: str
    score: float
    match_count: int = Field(default=1, alias="matchCount")
    sample_value: str | None = Field(default=None, alias="sampleValue")
