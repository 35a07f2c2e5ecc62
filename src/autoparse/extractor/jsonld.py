"""JSON-LD 结构化数据读取"""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Optional

from ..common.exceptions import ParseFailure
from ..common.logger import get_logger
from ..document import HtmlDocument

logger = get_logger(__name__)

JSON_LD_SELECTOR = 'script[type="application/ld+json"]'


def _parse_block(content: str) -> List[Dict[str, Any]]:
    try:
        parsed = json.loads(content)
    except (json.JSONDecodeError, ValueError) as e:
        raise ParseFailure("json-ld", f"JSON-LD 解析失败 ({e})") from e

    items = parsed if isinstance(parsed, list) else [parsed]
    blocks: List[Dict[str, Any]] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        blocks.append(item)
        graph = item.get("@graph")
        if isinstance(graph, list):
            blocks.extend(node for node in graph if isinstance(node, dict))
    return blocks


def load_json_ld(document: HtmlDocument) -> List[Dict[str, Any]]:
    """读取页面中全部 JSON-LD 块，格式错误的块被跳过"""
    blocks: List[Dict[str, Any]] = []
    for script in document.find(JSON_LD_SELECTOR):
        content = script.string().strip()
        if not content:
            continue
        try:
            blocks.extend(_parse_block(content))
        except ParseFailure as e:
            logger.debug(f"[JsonLd] 跳过: {e}")
    return blocks


def has_type(block: Dict[str, Any], type_name: str) -> bool:
    declared = block.get("@type")
    if isinstance(declared, list):
        return type_name in declared
    return declared == type_name


def find_by_type(blocks: Iterable[Dict[str, Any]], type_name: str) -> Optional[Dict[str, Any]]:
    for block in blocks:
        if has_type(block, type_name):
            return block
    return None


def find_all_by_type(blocks: Iterable[Dict[str, Any]], type_name: str) -> List[Dict[str, Any]]:
    return [block for block in blocks if has_type(block, type_name)]


def first_offer(product: Dict[str, Any]) -> Dict[str, Any]:
    offers = product.get("offers")
    if isinstance(offers, list):
        offers = offers[0] if offers else None
    return offers if isinstance(offers, dict) else {}


def image_url(image: Any) -> Optional[str]:
    """image 可能是字符串、列表或 ImageObject"""
    if isinstance(image, list):
        image = image[0] if image else None
    if isinstance(image, dict):
        image = image.get("url") or image.get("contentUrl")
    return str(image) if image else None


def brand_name(brand: Any) -> Optional[str]:
    if isinstance(brand, dict):
        brand = brand.get("name")
    return str(brand) if brand else None


def text_value(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def availability_value(value: Any) -> Optional[str]:
    """去掉 schema.org 前缀，如 https://schema.org/InStock -> InStock"""
    text = text_value(value)
    if not text:
        return None
    return text.rstrip("/").rsplit("/", 1)[-1]


def product_fields(product: Dict[str, Any]) -> Dict[str, Optional[str]]:
    """Product 块转为扁平字段"""
    offer = first_offer(product)
    rating = product.get("aggregateRating") if isinstance(product.get("aggregateRating"), dict) else {}
    return {
        "title": text_value(product.get("name")),
        "description": text_value(product.get("description")),
        "image": image_url(product.get("image")),
        "sku": text_value(product.get("sku")),
        "brand": brand_name(product.get("brand")),
        "price": text_value(offer.get("price") or offer.get("lowPrice")),
        "currency": text_value(offer.get("priceCurrency")),
        "availability": availability_value(offer.get("availability")),
        "rating": text_value(rating.get("ratingValue")),
        "review_count": text_value(rating.get("reviewCount") or rating.get("ratingCount")),
    }


def item_list_entries(item_list: Dict[str, Any], limit: int) -> List[Dict[str, Any]]:
    """ItemList 的条目，ListItem 包装的 item 会被展开"""
    elements = item_list.get("itemListElement")
    if isinstance(elements, dict):
        elements = [elements]
    if not isinstance(elements, list):
        return []
    entries: List[Dict[str, Any]] = []
    for element in elements[:limit]:
        if not isinstance(element, dict):
            continue
        item = element.get("item")
        if isinstance(item, dict):
            merged = {**item}
            merged.setdefault("url", element.get("url"))
            entries.append(merged)
        else:
            entries.append({
                "name": element.get("name"),
                "url": item if isinstance(item, str) else element.get("url"),
                "image": element.get("image"),
            })
    return entries
