"""常量定义

集中存放跨模块共享的固定取值。可调的经验阈值放在 config 中。
"""

from __future__ import annotations

# ============================================================================
# 输入验证
# ============================================================================

MAX_URL_LENGTH = 2048
VALID_URL_SCHEMES = ("http", "https")

# ============================================================================
# 渲染相关
# ============================================================================

# 站点未命中配置表时使用的默认等待时间与滚动次数
DEFAULT_WAIT_MS = 2000
DEFAULT_SCROLL_COUNT = 5

# User-Agent 池（每个会话随机选择一个）
USER_AGENTS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.1 Safari/605.1.15",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
)

# 浏览器默认请求头（站点配置和调用方请求头依次覆盖）
DEFAULT_BROWSER_HEADERS = {
    "Accept-Language": "ko-KR,ko;q=0.9,en-US;q=0.8,en;q=0.7",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
    "sec-ch-ua": '"Not_A Brand";v="8", "Chromium";v="120", "Google Chrome";v="120"',
    "sec-ch-ua-mobile": "?0",
    "sec-ch-ua-platform": '"Windows"',
    "Upgrade-Insecure-Requests": "1",
}

# 浏览器启动参数
DEFAULT_LAUNCH_ARGS = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-blink-features=AutomationControlled",
    "--disable-infobars",
    "--disable-background-timer-throttling",
    "--disable-popup-blocking",
    "--disable-prompt-on-repost",
)

# ============================================================================
# 选择器相关
# ============================================================================

FIELD_TYPES = (
    "title",
    "price",
    "image",
    "description",
    "currency",
    "sku",
    "brand",
    "availability",
    "rating",
    "reviewCount",
)

# 选择器样本文本最大长度
SAMPLE_MAX_LENGTH = 100

# 商品名最大长度（数据模型上限）
PRODUCT_NAME_HARD_LIMIT = 200

# 差异描述中"当前未配置"的占位文本
MISSING_SELECTOR_LABEL = "(없음)"
