"""
页面结构分析

对单个已渲染页面做一次性概览：基础元信息、JSON-LD、标题/图片/链接、
正文样本、数据来源判断、URL 模式、商品样本与建议选择器。
另提供按调用方选择器读取样本字段的 sample_fields（用于不渲染的快速预览）。
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urljoin

from ..common.logger import get_logger
from ..document import Element, HtmlDocument
from ..pattern import generalize_url
from ..selector.suggest import suggest_selectors
from . import jsonld
from .patterns import absolutize_url

logger = get_logger(__name__)

MAX_HEADINGS = 20
MAX_IMAGES = 20
MAX_LINKS = 30
MAX_PRODUCTS = 20
TEXT_SAMPLE_LENGTH = 2000
SNIPPET_LENGTH = 100

TEXT_SAMPLE_EXCLUDE = ("script", "style", "noscript", "header", "footer", "nav")
META_PRICE_KEYS = ("product:price:amount", "og:product:price:amount")

_AMOUNT_RE = re.compile(r"\d[\d,]*")

ANALYSIS_CONTAINER_PATTERNS: Tuple[str, ...] = (
    ".product-card",
    ".product-item",
    "[data-product]",
    ".goods-item",
    ".item-card",
    ".product-list-item",
    ".prd-item",
    ".goods_list li",
    ".item_list li",
    ".n-search-product-list__content > li",
    ".n-search-contents__inner .n-card",
    ".product-list .product",
    ".item-wrap",
    ".section__module .link__item",
    ".box__item-container",
    ".itemcard_item",
    ".c-card-item",
    ".c_card_wrap",
    ".l_product_cont li",
    ".search-product",
    ".baby-product-wrap",
    "[data-product-id]",
    ".fr-ec-product-tile",
    ".product-tile",
    ".cunit_t232",
    ".cunit_t216",
    ".mndtl_unit",
    '[data-auto-id="productTile"]',
    ".product_card",
    ".product-grid-product",
    ".product-grid__product-item",
    ".prd-list-item",
    '[data-testid="product-item"]',
)

ANALYSIS_NAME_SELECTORS: Tuple[str, ...] = (
    ".product-name",
    ".item-name",
    ".prd-name",
    ".goods_name",
    "h3",
    "h4",
    '[class*="name"]',
    '[class*="title"]',
    ".n-card__name",
    ".item_name",
    ".c-card-item__name",
    ".product__name",
    ".itemcard_name",
    ".prd_name",
    ".product-tile__name",
    ".cunit_info .title",
)

ANALYSIS_PRICE_SELECTORS: Tuple[str, ...] = (
    ".price",
    ".product-price",
    ".prd-price",
    '[class*="price"]',
    ".n-card__price",
    ".item_price",
    ".c-card-item__price",
    ".product__price",
    ".itemcard_price",
    ".price_num",
    ".product-tile__price",
    ".cunit_info .price",
    ".sale-price",
    ".discount-price",
    ".final-price",
)


# ============================================================================
# 页面内容概览
# ============================================================================


def collect_headings(document: HtmlDocument, limit: int = MAX_HEADINGS) -> List[Dict[str, Any]]:
    headings: List[Dict[str, Any]] = []
    for element in document.find("h1, h2, h3"):
        if len(headings) >= limit:
            break
        text = element.text()[:SNIPPET_LENGTH]
        if text:
            headings.append({"level": int(element.tag[1]), "text": text})
    return headings


def collect_images(document: HtmlDocument, limit: int = MAX_IMAGES) -> List[Dict[str, str]]:
    """只收集绝对地址（http 或 //）的图片"""
    images: List[Dict[str, str]] = []
    for img in document.find("img"):
        if len(images) >= limit:
            break
        src = img.attr("src") or img.attr("data-src") or img.attr("data-lazy-src")
        if src and (src.startswith("http") or src.startswith("//")):
            images.append({"src": "https:" + src if src.startswith("//") else src, "alt": img.attr("alt") or ""})
    return images


def collect_links(document: HtmlDocument, base_url: str, limit: int = MAX_LINKS) -> List[Dict[str, str]]:
    links: List[Dict[str, str]] = []
    for anchor in document.find("a[href]"):
        if len(links) >= limit:
            break
        href = anchor.attr("href") or ""
        text = anchor.text()[:SNIPPET_LENGTH]
        if not text or not (href.startswith("http") or href.startswith("/")):
            continue
        links.append({"text": text, "href": urljoin(base_url, href) if href.startswith("/") else href})
    return links


def detect_data_source(blocks: List[Dict[str, Any]], meta: Dict[str, str]) -> str:
    """json-ld（存在 Product / ItemList） > meta（存在价格 meta） > dom"""
    if jsonld.find_by_type(blocks, "Product") or jsonld.find_by_type(blocks, "ItemList"):
        return "json-ld"
    if any(meta.get(key) for key in META_PRICE_KEYS):
        return "meta"
    return "dom"


# ============================================================================
# 商品样本
# ============================================================================


def _json_ld_sample_products(blocks: List[Dict[str, Any]], base_url: str) -> List[Dict[str, Any]]:
    products: List[Dict[str, Any]] = []
    for block in blocks:
        entries: List[Dict[str, Any]] = []
        if jsonld.has_type(block, "Product"):
            entries.append(block)
        if jsonld.has_type(block, "ItemList"):
            entries.extend(jsonld.item_list_entries(block, MAX_PRODUCTS))
        for entry in entries:
            name = jsonld.text_value(entry.get("name"))
            if not name:
                continue
            offer = jsonld.first_offer(entry)
            products.append({
                "name": name,
                "price": jsonld.text_value(offer.get("price") or offer.get("lowPrice")),
                "image": absolutize_url(jsonld.image_url(entry.get("image")), base_url),
                "url": absolutize_url(jsonld.text_value(entry.get("url")), base_url),
            })
    return products


def _container_product(element: Element, base_url: str) -> Optional[Dict[str, Any]]:
    name = ""
    for selector in ANALYSIS_NAME_SELECTORS:
        found = element.find(selector).first()
        text = found.text() if found else ""
        if len(text) > 2:
            name = text[:200]
            break
    if not name:
        return None

    price = None
    for selector in ANALYSIS_PRICE_SELECTORS:
        found = element.find(selector).first()
        match = _AMOUNT_RE.search(found.text()) if found else None
        if match:
            price = match.group(0)
            break

    img = element.find("img").first()
    image = (img.attr("src") or img.attr("data-src")) if img else None
    return {
        "name": name,
        "price": price,
        "image": absolutize_url(image, base_url),
        "url": absolutize_url(element.find("a").attr("href"), base_url),
    }


def sample_products(document: HtmlDocument, base_url: str, blocks: Optional[List[Dict[str, Any]]] = None) -> List[Dict[str, Any]]:
    """
    页面商品样本（最多 20 个）。

    有 JSON-LD 商品时只用 JSON-LD；否则依次尝试容器模式，
    第一个产出商品的模式即为结果。
    """
    blocks = blocks if blocks is not None else jsonld.load_json_ld(document)
    products = _json_ld_sample_products(blocks, base_url)
    if products:
        return products[:MAX_PRODUCTS]

    for pattern in ANALYSIS_CONTAINER_PATTERNS:
        for element in document.find(pattern):
            if len(products) >= MAX_PRODUCTS:
                break
            product = _container_product(element, base_url)
            if product:
                products.append(product)
        if products:
            logger.debug(f"[Analysis] 容器模式命中: {pattern}")
            break
    return products[:MAX_PRODUCTS]


def _drop_none(item: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in item.items() if v is not None}


def analyze_page(document: HtmlDocument, url: str, is_product_page: bool = False) -> Dict[str, Any]:
    """页面结构概览

    Args:
        document: 已渲染页面
        url: 页面 URL
        is_product_page: 是否为商品详情页（影响 DOM 选择器建议）

    Returns:
        JSON 结构的分析结果
    """
    blocks = jsonld.load_json_ld(document)
    meta = document.all_meta()
    description_tag = document.find('meta[name="description"]').attr("content")

    result = {
        "url": url,
        "title": document.title() or document.meta_content("og:title") or "",
        "description": description_tag or document.meta_content("og:description") or "",
        "image": document.meta_content("og:image") or "",
        "meta": meta,
        "jsonLd": blocks,
        "suggestedSelectors": suggest_selectors(document, is_product_page, blocks=blocks),
        "products": [_drop_none(p) for p in sample_products(document, url, blocks)],
        "urlPattern": generalize_url(url),
        "dataSource": detect_data_source(blocks, meta),
        "content": {
            "headings": collect_headings(document),
            "images": collect_images(document),
            "links": collect_links(document, url),
            "textSample": document.text_sample(TEXT_SAMPLE_EXCLUDE, TEXT_SAMPLE_LENGTH),
        },
        "parsedAt": datetime.now().isoformat(),
    }
    logger.info(
        f"[Analysis] {url}: dataSource={result['dataSource']}, "
        f"{len(result['products'])} 个商品样本, {len(blocks)} 个 JSON-LD 块"
    )
    return result


# ============================================================================
# 样本字段读取
# ============================================================================


def _selector_value(document: HtmlDocument, selector: Optional[str], attribute: Optional[str] = None) -> Optional[str]:
    if not selector:
        return None
    found = document.find(selector).first()
    if found is None:
        return None
    value = found.attr(attribute) if attribute else found.text()
    return value or None


def sample_fields(document: HtmlDocument, selectors: Optional[Dict[str, str]] = None) -> Dict[str, Optional[str]]:
    """
    按调用方选择器读取 title / description / price / image，
    取不到时依次回退到 og meta、JSON-LD Product，标题最后回退到 <title>。
    """
    selectors = selectors or {}
    product = jsonld.find_by_type(jsonld.load_json_ld(document), "Product") or {}
    structured = jsonld.product_fields(product) if product else {}

    return {
        "title": (
            _selector_value(document, selectors.get("title"))
            or document.meta_content("og:title")
            or structured.get("title")
            or document.title()
            or None
        ),
        "description": (
            _selector_value(document, selectors.get("description"))
            or document.meta_content("og:description")
            or structured.get("description")
            or document.find('meta[name="description"]').attr("content")
        ),
        "price": (
            _selector_value(document, selectors.get("price"))
            or document.meta_content("product:price:amount")
            or structured.get("price")
        ),
        "image": absolutize_url(
            _selector_value(document, selectors.get("image"), attribute="src")
            or document.meta_content("og:image")
            or structured.get("image"),
            document.url,
        ),
    }
