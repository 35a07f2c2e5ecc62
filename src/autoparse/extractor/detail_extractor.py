"""
商品详情抽取器

优先级：JSON-LD Product（权威，命中即返回）> meta 标签 > DOM 候选选择器。
"""

from __future__ import annotations

import re
from typing import Dict, NamedTuple, Optional, Tuple

from ..common.exceptions import ValidationError
from ..common.logger import get_logger
from ..common.types import DetailFields
from ..document import HtmlDocument
from . import jsonld
from .patterns import absolutize_url

logger = get_logger(__name__)

DETAIL_MODES = ("auto", "json-ld", "dom")

# 每个字段的候选选择器，取第一个存在且非空的
DOM_CANDIDATES: Dict[str, Tuple[str, ...]] = {
    "title": (
        'h1[itemprop="name"]',
        ".product-title",
        ".product-name",
        "#product-name",
        "h1.title",
        "[data-product-name]",
    ),
    "price": (
        '[itemprop="price"]',
        ".product-price",
        ".price",
        "#product-price",
        "[data-price]",
        ".sale-price",
    ),
    "description": (
        '[itemprop="description"]',
        ".product-description",
        "#product-description",
        ".description",
    ),
    "image": (
        '[itemprop="image"]',
        ".product-image img",
        "#product-image",
        ".main-image img",
    ),
    "sku": ('[itemprop="sku"]', ".product-sku", "[data-sku]"),
    "brand": ('[itemprop="brand"]', ".product-brand", "[data-brand]", ".brand"),
    "availability": ('[itemprop="availability"]', ".availability", ".stock-status"),
    "rating": ('[itemprop="ratingValue"]', ".rating-value", "[data-rating]", ".rating"),
    "review_count": ('[itemprop="reviewCount"]', ".review-count", "[data-review-count]"),
}

# 属性优先的字段
ATTRIBUTE_FIELDS = {"image": ("src", "content", "data-src")}

CURRENCY_SYMBOLS = (
    ("$", "USD"),
    ("€", "EUR"),
    ("£", "GBP"),
    ("¥", "JPY"),
    ("₩", "KRW"),
    ("원", "KRW"),
)
DEFAULT_CURRENCY = "KRW"

AVAILABILITY_KEYWORDS = (
    ("OutOfStock", ("out of stock", "품절", "sold out")),
    ("PreOrder", ("pre-order", "예약")),
    ("LimitedAvailability", ("limited", "한정")),
)


class PriceInfo(NamedTuple):
    amount: float
    currency: str

    def amount_text(self) -> str:
        return str(int(self.amount)) if self.amount.is_integer() else str(self.amount)


def parse_price(text: str) -> PriceInfo:
    """价格文本 -> 金额与币种（无币种标记时默认 KRW）

    Example:
        >>> parse_price("₩30,820")
        PriceInfo(amount=30820.0, currency='KRW')
    """
    currency = DEFAULT_CURRENCY
    amount_text = text
    for symbol, code in CURRENCY_SYMBOLS:
        if symbol in text:
            currency = code
            amount_text = text.replace(symbol, "", 1)
            break
    digits = re.sub(r"[^\d.]", "", amount_text)
    try:
        amount = float(digits) if digits else 0.0
    except ValueError:
        amount = 0.0
    return PriceInfo(amount=amount, currency=currency)


def parse_availability(text: Optional[str]) -> str:
    """库存文本归一为 schema.org 可用性取值"""
    if not text:
        return "InStock"
    lower = text.lower()
    for value, keywords in AVAILABILITY_KEYWORDS:
        if any(keyword in lower for keyword in keywords):
            return value
    return "InStock"


class ProductDetailExtractor:
    """单个商品页抽取"""

    def __init__(self, candidates: Optional[Dict[str, Tuple[str, ...]]] = None):
        self.candidates = candidates or DOM_CANDIDATES

    # ------------------------------------------------------------------
    # 各层数据源
    # ------------------------------------------------------------------

    def from_json_ld(self, document: HtmlDocument) -> Optional[Dict[str, Optional[str]]]:
        product = jsonld.find_by_type(jsonld.load_json_ld(document), "Product")
        if product is None:
            return None
        return jsonld.product_fields(product)

    def from_meta(self, document: HtmlDocument) -> Dict[str, Optional[str]]:
        availability = document.meta_content("product:availability")
        return {
            "title": document.meta_content("og:title"),
            "description": document.meta_content("og:description"),
            "image": document.meta_content("og:image"),
            "price": document.meta_content("product:price:amount"),
            "currency": document.meta_content("product:price:currency"),
            "availability": parse_availability(availability) if availability else None,
        }

    def _first_value(self, document: HtmlDocument, field: str) -> Optional[str]:
        attrs = ATTRIBUTE_FIELDS.get(field)
        for selector in self.candidates.get(field, ()):
            element = document.find(selector).first()
            if element is None:
                continue
            if attrs:
                value = next((element.attr(a) for a in attrs if element.attr(a)), None) or element.text()
            else:
                value = element.text() or element.attr("content")
            if value and value.strip():
                return value.strip()
        return None

    def from_dom(self, document: HtmlDocument) -> Dict[str, Optional[str]]:
        fields = {field: self._first_value(document, field) for field in self.candidates}
        price_text = fields.get("price")
        if price_text:
            price = parse_price(price_text)
            fields["price"] = price.amount_text()
            fields["currency"] = price.currency
            fields["availability"] = parse_availability(fields.get("availability"))
        elif fields.get("availability"):
            fields["availability"] = parse_availability(fields["availability"])
        return fields

    # ------------------------------------------------------------------

    def extract(self, document: HtmlDocument, url: str, mode: str = "auto") -> Optional[DetailFields]:
        """按模式抽取详情字段

        Args:
            document: 页面文档
            url: 页面 URL
            mode: auto / json-ld / dom

        Returns:
            DetailFields，未找到商品名时返回 None

        Raises:
            ValidationError: 模式无效
        """
        if mode not in DETAIL_MODES:
            raise ValidationError(f"不支持的抽取模式: {mode}")

        fields: Optional[Dict[str, Optional[str]]] = None
        source = "dom"

        if mode in ("auto", "json-ld"):
            fields = self.from_json_ld(document)
            source = "json-ld"
            if fields is None and mode == "json-ld":
                logger.info(f"[DetailExtractor] 页面没有 JSON-LD Product: {url}")
                return None

        if fields is None and mode == "auto":
            meta = self.from_meta(document)
            dom = self.from_dom(document)
            if meta.get("price"):
                source = "meta"
                fields = {k: meta.get(k) or dom.get(k) for k in {*meta, *dom}}
            else:
                source = "dom"
                fields = {k: dom.get(k) or meta.get(k) for k in {*meta, *dom}}

        if fields is None:
            fields = self.from_dom(document)
            source = "dom"

        if not fields.get("title"):
            logger.info(f"[DetailExtractor] 未找到商品名: {url}")
            return None

        fields["image"] = absolutize_url(fields.get("image"), url)
        logger.debug(f"[DetailExtractor] {url} 数据来源: {source}")
        return DetailFields(url=url, source=source, **fields)


def extract_detail(html: str, url: str, mode: str = "auto") -> Optional[DetailFields]:
    return ProductDetailExtractor().extract(HtmlDocument(html, url), url, mode)
