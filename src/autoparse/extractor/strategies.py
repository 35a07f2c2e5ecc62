"""
商品列表抽取策略

每个策略都是纯函数 ``(HtmlDocument, StrategyContext) -> list[Product]``，
由 ProductListExtractor 按顺序组合，累计达到阈值即停止。
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple

from ..common.config import ExtractorConfig, config as global_config
from ..common.logger import get_logger
from ..common.types import Product
from ..document import HtmlDocument, collapse_whitespace
from . import jsonld
from .fields import ProductFields, extract_from_ancestor, extract_product_info
from .name_normalizer import NameNormalizer
from .patterns import (
    LISTING_PRICE_RE,
    OWN_TEXT_PRICE_RE,
    PRICE_PRESENCE_RE,
    absolutize_url,
    format_amount,
)

logger = get_logger(__name__)

ATTRIBUTE_LINK_SELECTOR = "a[data-price], a[data-item-id]"
ANCHOR_SELECTOR = 'a[href*="/products/"], a[href*="/item/"], a[href*="/goods/"]'

CONTAINER_PATTERNS: Tuple[str, ...] = (
    # 무신사
    '[class*="GoodsList__Row"]',
    '[class*="sc-hdBJTi"]',
    ".sc-u940qw-0",
    ".sc-1y072ns-0",
    "a[data-gtm-cd4]",
    # 하이버 / W컨셉
    '[class*="prd_info"]',
    '[class*="item-info"]',
    # 通用
    '[class*="product-card"]',
    '[class*="product-item"]',
    '[class*="goods-item"]',
    '[class*="item-card"]',
    "[data-product]",
    "[data-item-id]",
    # G마켓 / 옥션
    ".box__item-container",
    '[class*="box__item"]',
    ".itemcard_item",
    # 11번가
    ".c-card-item",
    ".l_product_cont li",
    '[class*="c-card"]',
    # 쿠팡
    ".search-product a",
    "[data-product-id]",
    # 유니클로
    ".fr-ec-product-tile",
    # SSG
    ".cunit_t232, .cunit_t216",
    # 其他
    'li[class*="product"]',
    'div[class*="product"]',
    'article[class*="product"]',
)

# 文本+图片策略中不参与扫描的标签
NON_CONTENT_TAGS = frozenset({"script", "style", "noscript", "template", "head", "title", "meta"})


class ProductCollector:
    """按去重规则收集商品：url 相同，或 name 与 price 同时相同，视为重复"""

    def __init__(self, products: Iterable[Product] = ()):
        self.products: List[Product] = []
        self._urls: Set[str] = set()
        self._name_prices: Set[Tuple[str, Optional[str]]] = set()
        for product in products:
            self.add(product)

    def is_duplicate(self, product: Product) -> bool:
        if product.url and product.url in self._urls:
            return True
        return (product.name, product.price) in self._name_prices

    def add(self, product: Optional[Product]) -> bool:
        if product is None or self.is_duplicate(product):
            return False
        self.products.append(product)
        if product.url:
            self._urls.add(product.url)
        self._name_prices.add((product.name, product.price))
        return True

    def __len__(self) -> int:
        return len(self.products)


@dataclass
class StrategyContext:
    """策略共享的只读参数"""

    base_url: str
    config: ExtractorConfig = field(default_factory=lambda: global_config.extractor)
    normalizer: NameNormalizer = field(default_factory=NameNormalizer)

    @property
    def cap(self) -> int:
        return self.config.max_items_per_strategy

    def make_product(self, fields: ProductFields, min_name_length: int = 1) -> Optional[Product]:
        """清洗商品名并构建 Product，名称过短时返回 None"""
        normalized = self.normalizer.normalize(fields.get("name"))
        if len(normalized.name) < max(min_name_length, 1):
            return None
        values: Dict[str, Any] = {k: (v or None) for k, v in fields.items() if k != "name"}
        values["brand"] = values.get("brand") or normalized.brand
        return Product(name=normalized.name, **values)


Strategy = Callable[[HtmlDocument, StrategyContext], List[Product]]


# ============================================================================
# 0. JSON-LD（零成本前置策略）
# ============================================================================


def _json_ld_price(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return format_amount(str(value))
    return f"{int(amount):,}" if amount.is_integer() else f"{amount:,.2f}"


def json_ld_products(document: HtmlDocument, ctx: StrategyContext) -> List[Product]:
    """页面内 ItemList / Product 结构化数据"""
    blocks = jsonld.load_json_ld(document)
    entries: List[Dict[str, Any]] = []
    for item_list in jsonld.find_all_by_type(blocks, "ItemList"):
        entries.extend(jsonld.item_list_entries(item_list, ctx.cap))
    entries.extend(jsonld.find_all_by_type(blocks, "Product"))

    collector = ProductCollector()
    for entry in entries:
        if len(collector) >= ctx.cap:
            break
        offer = jsonld.first_offer(entry)
        collector.add(ctx.make_product({
            "name": jsonld.text_value(entry.get("name")),
            "price": _json_ld_price(offer.get("price") or offer.get("lowPrice")),
            "image": absolutize_url(jsonld.image_url(entry.get("image")), ctx.base_url),
            "url": absolutize_url(jsonld.text_value(entry.get("url")), ctx.base_url),
            "brand": jsonld.brand_name(entry.get("brand")),
        }))
    return collector.products


# ============================================================================
# 1. 属性直取
# ============================================================================


def attribute_direct(document: HtmlDocument, ctx: StrategyContext) -> List[Product]:
    """链接上直接带 data-item-id / data-price 的站点"""
    links = document.find(ATTRIBUTE_LINK_SELECTOR)
    if len(links) <= ctx.config.attribute_min_links:
        return []

    seen_ids: Set[str] = set()
    collector = ProductCollector()
    for link in links:
        if len(collector) >= ctx.cap:
            break
        item_id = link.attr("data-item-id")
        if not item_id or item_id in seen_ids:
            continue
        seen_ids.add(item_id)

        name = link.find('span[class*="Typography"]').text()
        if not name:
            name = (link.attr("aria-label") or "").replace("상품상세로 이동", "").strip()
        price = format_amount(link.attr("data-price"))
        if not name or not price:
            continue

        discount_rate = link.attr("data-discount-rate")
        collector.add(ctx.make_product({
            "name": name,
            "price": price,
            "original_price": format_amount(link.attr("data-original-price")),
            "discount_percent": f"{discount_rate}%" if discount_rate else None,
            "url": absolutize_url(link.attr("href"), ctx.base_url),
        }))
    return collector.products


# ============================================================================
# 2. 商品链接 + 祖先查找
# ============================================================================


def anchor_pattern(document: HtmlDocument, ctx: StrategyContext) -> List[Product]:
    """商品详情链接向上若干层查找价格文本"""
    links = document.find(ANCHOR_SELECTOR)
    if len(links) <= ctx.config.anchor_min_links:
        return []

    seen_hrefs: Set[str] = set()
    collector = ProductCollector()
    for link in links:
        if len(collector) >= ctx.cap:
            break
        href = link.attr("href") or ""
        if href in seen_hrefs:
            continue
        seen_hrefs.add(href)

        container = link
        found_price = False
        for _ in range(ctx.config.ancestor_levels):
            parent = container.parent()
            if parent is None:
                break
            if PRICE_PRESENCE_RE.search(collapse_whitespace(parent.raw_text())):
                collector.add(ctx.make_product(extract_from_ancestor(parent, link, ctx.base_url)))
                found_price = True
                break
            container = parent

        if not found_price:
            # 低置信度：只有链接文本和图片
            link_text = link.text()
            if 3 < len(link_text) < 200:
                image = link.find("img").attr("src")
                collector.add(ctx.make_product({
                    "name": link_text,
                    "url": absolutize_url(href, ctx.base_url),
                    "image": absolutize_url(image, ctx.base_url),
                }))
    return collector.products


# ============================================================================
# 3. 已知容器模式
# ============================================================================


def container_patterns(
    document: HtmlDocument,
    ctx: StrategyContext,
    patterns: Tuple[str, ...] = CONTAINER_PATTERNS,
) -> List[Product]:
    """依次尝试常见店铺的商品容器选择器"""
    collector = ProductCollector()
    for pattern in patterns:
        for element in document.find(pattern):
            if len(collector) >= ctx.cap:
                break
            fields = extract_product_info(element, ctx.base_url)
            collector.add(ctx.make_product(fields, min_name_length=3))
        if len(collector) >= ctx.config.container_min_matches:
            logger.debug(f"[Strategy] 容器模式命中: {pattern}")
            break
    return collector.products


# ============================================================================
# 4. 价格文本 + 父容器
# ============================================================================


def text_and_image(document: HtmlDocument, ctx: StrategyContext) -> List[Product]:
    """自身文本含价格的元素，以其父元素作为商品容器"""
    seen_names: Set[str] = set()
    collector = ProductCollector()
    for element in document.all_elements():
        if len(collector) >= ctx.cap:
            break
        if element.tag in NON_CONTENT_TAGS:
            continue
        own_text = element.own_text()
        if not own_text or not OWN_TEXT_PRICE_RE.search(own_text):
            continue
        parent = element.parent()
        if parent is None:
            continue
        product = ctx.make_product(extract_product_info(parent, ctx.base_url))
        if product is None or product.name in seen_names:
            continue
        seen_names.add(product.name)
        collector.add(product)
    return collector.products


# ============================================================================
# 5. 重复 class 频率
# ============================================================================


def repeating_classes(document: HtmlDocument, ctx: StrategyContext) -> List[str]:
    """出现次数在 [min, max] 区间内的 class，按次数降序"""
    counts: Counter = Counter()
    for element in document.all_elements():
        for cls in element.classes():
            if len(cls) > 2:
                counts[cls] += 1
    low, high = ctx.config.repeating_class_min, ctx.config.repeating_class_max
    candidates = [(cls, count) for cls, count in counts.items() if low <= count <= high]
    candidates.sort(key=lambda item: item[1], reverse=True)
    return [cls for cls, _ in candidates[: ctx.config.repeating_class_top_n]]


def repeating_class(document: HtmlDocument, ctx: StrategyContext) -> List[Product]:
    """高频 class 视为列表项，含价格文本的元素达到阈值即接受"""
    for cls in repeating_classes(document, ctx):
        seen_names: Set[str] = set()
        collector = ProductCollector()
        for element in document.find_by_class(cls):
            if len(collector) >= ctx.cap:
                break
            if not LISTING_PRICE_RE.search(element.raw_text()):
                continue
            product = ctx.make_product(extract_product_info(element, ctx.base_url), min_name_length=4)
            if product is None or product.name in seen_names:
                continue
            seen_names.add(product.name)
            collector.add(product)
        if len(collector) >= ctx.config.repeating_accept_min:
            logger.debug(f"[Strategy] 重复 class 命中: .{cls} ({len(collector)})")
            return collector.products
    return []


# 默认策略顺序
DEFAULT_STRATEGIES: Tuple[Tuple[str, Strategy], ...] = (
    ("json-ld", json_ld_products),
    ("attribute", attribute_direct),
    ("anchor", anchor_pattern),
    ("container", container_patterns),
    ("text-image", text_and_image),
    ("repeating-class", repeating_class),
)
