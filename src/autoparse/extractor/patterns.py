"""
价格/折扣/评分等文本模式

所有从自由文本中抽取字段的正则集中在这里，按优先级排列。
"""

from __future__ import annotations

import re
from typing import Optional, Tuple
from urllib.parse import urljoin

# ============================================================================
# 价格
# ============================================================================

# 判断文本中是否含有价格（宽松，允许无千分位）
PRICE_PRESENCE_RE = re.compile(r"\d{1,3}(,\d{3})*\s*원")
# 仅自身文本（不含后代）匹配价格的元素
OWN_TEXT_PRICE_RE = re.compile(r"(\d{1,3}(,\d{3})+|\d{4,})\s*원")
# 重复 class 策略的价格过滤（韩元或美元）
LISTING_PRICE_RE = re.compile(r"\d{1,3}(,\d{3})+\s*원|\$\d+")
# 带千分位的韩元价格
GROUPED_WON_RE = re.compile(r"(\d{1,3}(?:,\d{3})+)\s*원")

# 按优先级排列：(正则, 价格分组, 折扣分组)
PRICE_PATTERNS: Tuple[Tuple[re.Pattern, int, Optional[int]], ...] = (
    (re.compile(r"판매가\s*(\d{1,3}(?:,\d{3})*)\s*원"), 1, None),
    (re.compile(r"할인가\s*(\d{1,3}(?:,\d{3})*)\s*원"), 1, None),
    (GROUPED_WON_RE, 1, None),
    (re.compile(r"(\d{1,2})%\s*(\d{1,3}(?:,\d{3})+)\s*원"), 2, 1),
    (re.compile(r"(\d{4,})\s*원"), 1, None),
)

ORIGINAL_PRICE_RE = re.compile(r"원가\s*(\d{1,3}(?:,\d{3})*)\s*원")
NUMBER_GROUP_RE = re.compile(r"[\d,]+")

# ============================================================================
# 折扣 / 评分 / 评论数
# ============================================================================

DISCOUNT_RE = re.compile(r"(\d{1,2})%")
DISCOUNT_ANY_RE = re.compile(r"(\d+)%")
LABELED_DISCOUNT_RE = re.compile(r"할인률\s*(\d{1,2})%")

RATING_RE = re.compile(r"(\d\.\d)\s*/\s*5|(\d\.\d)점|(\d\.\d)")
PARENT_RATING_RE = re.compile(r"(\d\.\d)\s*점?")
REVIEW_RE = re.compile(r"\((\d{1,3}(?:,\d{3})*|\d+)\)|리뷰\s*(\d+)")
PARENT_REVIEW_RE = re.compile(r"\((\d{1,3}(?:,\d{3})*|\d+)\)")

# ============================================================================
# 页面级信息
# ============================================================================

_COUNT = r"(\d{1,3}(?:,\d{3})*|\d+)"
TOTAL_COUNT_PATTERNS: Tuple[re.Pattern, ...] = (
    re.compile(rf"총\s*{_COUNT}\s*개"),
    re.compile(rf"{_COUNT}\s*개의?\s*상품"),
    re.compile(rf"{_COUNT}\s*items?", re.IGNORECASE),
    re.compile(rf"검색결과\s*{_COUNT}"),
)

BACKGROUND_URL_RE = re.compile(r"url\(['\"]?([^'\")]+)['\"]?\)")


def find_price(text: str) -> Tuple[Optional[str], Optional[str]]:
    """按优先级从文本中找价格

    Returns:
        (价格, 折扣)，折扣仅在"折扣%+价格"组合命中时给出

    Example:
        >>> find_price("판매가30,820원")
        ('30,820', None)
    """
    for pattern, price_group, discount_group in PRICE_PATTERNS:
        match = pattern.search(text)
        if match:
            discount = f"{match.group(discount_group)}%" if discount_group else None
            return match.group(price_group), discount
    return None, None


def find_original_price(text: str) -> Optional[str]:
    match = ORIGINAL_PRICE_RE.search(text)
    return match.group(1) if match else None


def find_discount(text: str) -> Optional[str]:
    """折扣率，优先带"할인률"标签的"""
    match = LABELED_DISCOUNT_RE.search(text) or DISCOUNT_RE.search(text)
    return f"{match.group(1)}%" if match else None


def find_rating(text: str) -> Optional[str]:
    match = RATING_RE.search(text)
    if not match:
        return None
    return match.group(1) or match.group(2) or match.group(3)


def find_review_count(text: str) -> Optional[str]:
    match = REVIEW_RE.search(text)
    if not match:
        return None
    return match.group(1) or match.group(2)


def find_total_count(text: str) -> Optional[int]:
    """页面文案中的商品总数（去掉千分位）"""
    for pattern in TOTAL_COUNT_PATTERNS:
        match = pattern.search(text)
        if match:
            return int(match.group(1).replace(",", ""))
    return None


_AMOUNT_TOKEN_RE = re.compile(r"\d[\d.,]*")
_DECIMAL_TAIL_RE = re.compile(r"^(.*)\.(\d{1,2})$")


def format_amount(raw: Optional[str]) -> Optional[str]:
    """金额格式化为千分位，保留小数部分

    "30820" -> "30,820"，"19.99" -> "19.99"，"10000.00" -> "10,000"；无数字时返回 None
    """
    if raw is None:
        return None
    match = _AMOUNT_TOKEN_RE.search(raw)
    if not match:
        return None
    token = match.group(0).rstrip(".,")
    fraction = ""
    decimal = _DECIMAL_TAIL_RE.match(token)
    if decimal:
        token, fraction = decimal.group(1), decimal.group(2)
    digits = re.sub(r"[^\d]", "", token) or "0"
    amount = f"{int(digits):,}"
    if fraction.strip("0"):
        amount = f"{amount}.{fraction}"
    return amount


def absolutize_url(href: Optional[str], base_url: str) -> Optional[str]:
    """补全协议相对/相对路径的链接"""
    if not href:
        return None
    href = href.strip()
    if href.startswith("//"):
        return "https:" + href
    if href.startswith("http"):
        return href
    if not base_url:
        return href
    return urljoin(base_url, href)
