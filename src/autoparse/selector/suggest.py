"""单页选择器建议"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from ..document import HtmlDocument
from ..extractor import jsonld

JSON_LD_PREFIX = "json-ld:Product."

JSON_LD_PATHS: Tuple[Tuple[str, str], ...] = (
    ("title", "name"),
    ("price", "offers.price"),
    ("currency", "offers.priceCurrency"),
    ("image", "image"),
    ("description", "description"),
    ("sku", "sku"),
    ("brand", "brand.name"),
    ("availability", "offers.availability"),
)

JSON_LD_RATING_PATHS: Tuple[Tuple[str, str], ...] = (
    ("rating", "aggregateRating.ratingValue"),
    ("reviewCount", "aggregateRating.reviewCount"),
)

DOM_PATTERNS: Dict[str, Tuple[str, ...]] = {
    "title": (
        "h1.product-title",
        "h1.product-name",
        ".product-title h1",
        ".product-name",
        "[data-product-title]",
        ".prd_name",
        "h1",
    ),
    "price": (
        ".product-price .sale-price",
        ".product-price .current",
        ".price .current-price",
        ".price-value",
        "[data-price]",
        ".prd-price",
        ".sale_price",
        ".total_price",
    ),
    "image": (
        ".product-image img",
        ".product-gallery img",
        ".main-image img",
        "[data-product-image]",
        ".prd-img img",
        ".thumb_box img",
    ),
    "description": (
        ".product-description",
        ".product-detail",
        ".prd-desc",
        "[data-product-description]",
        ".detail_cont",
    ),
}


def _first_existing(document: HtmlDocument, patterns: Tuple[str, ...], require_text: bool) -> Optional[str]:
    for selector in patterns:
        matches = document.find(selector)
        if not matches:
            continue
        if require_text and not matches.text():
            continue
        return selector
    return None


def suggest_selectors(
    document: HtmlDocument,
    is_product_page: bool = False,
    blocks: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, str]:
    """
    建议字段选择器。

    页面有 JSON-LD Product 时返回 ``json-ld:Product.<路径>`` 伪选择器；
    否则仅在商品详情页上按常见 DOM 模式给出 title/price/image/description。
    """
    blocks = blocks if blocks is not None else jsonld.load_json_ld(document)
    product = jsonld.find_by_type(blocks, "Product")

    if product is not None:
        paths = JSON_LD_PATHS
        if product.get("aggregateRating"):
            paths = paths + JSON_LD_RATING_PATHS
        return {field: JSON_LD_PREFIX + path for field, path in paths}

    selectors: Dict[str, str] = {}
    if not is_product_page:
        return selectors

    for field, patterns in DOM_PATTERNS.items():
        selector = _first_existing(document, patterns, require_text=(field == "title"))
        if selector:
            selectors[field] = selector
    return selectors
