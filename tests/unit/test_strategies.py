"""列表抽取策略单元测试"""

import json

import pytest

from autoparse.common.config import ExtractorConfig
from autoparse.common.types import Product
from autoparse.document import HtmlDocument
from autoparse.extractor import strategies
from autoparse.extractor.strategies import ProductCollector, StrategyContext

BASE_URL = "https://shop.example.com/list"


@pytest.fixture
def ctx():
    return StrategyContext(base_url=BASE_URL, config=ExtractorConfig())


def _doc(html: str) -> HtmlDocument:
    return HtmlDocument(html, BASE_URL)


class TestProductCollector:
    """去重规则"""

    def test_same_url_is_duplicate(self):
        collector = ProductCollector()
        assert collector.add(Product(name="A", price="1,000", url="https://x/1"))
        assert not collector.add(Product(name="B", price="2,000", url="https://x/1"))
        assert len(collector) == 1

    def test_same_name_and_price_is_duplicate(self):
        collector = ProductCollector()
        collector.add(Product(name="A", price="1,000", url="https://x/1"))
        assert not collector.add(Product(name="A", price="1,000", url="https://x/2"))
        assert collector.add(Product(name="A", price="2,000", url="https://x/3"))

    def test_none_is_ignored(self):
        assert not ProductCollector().add(None)


class TestStrategyContext:

    def test_make_product_applies_normalizer(self, ctx):
        product = ctx.make_product({"name": "NIKE Air Zoom", "price": "99,000", "image": ""})
        assert product.name == "Air Zoom"
        assert product.brand == "NIKE"
        assert product.image is None

    def test_make_product_rejects_short_name(self, ctx):
        assert ctx.make_product({"name": "ab"}, min_name_length=3) is None
        assert ctx.make_product({"name": "   "}) is None


class TestAttributeDirect:

    def test_reads_data_attributes(self, ctx, attribute_list_html):
        products = strategies.attribute_direct(_doc(attribute_list_html), ctx)
        assert len(products) == 12
        first = products[0]
        assert first.name == "테스트 상품 1"
        assert first.price == "10,000"
        assert first.original_price == "12,000"
        assert first.discount_percent == "10%"
        assert first.url == "https://shop.example.com/products/1000"

    def test_decimal_data_price(self, ctx, attribute_list_html):
        html = attribute_list_html.replace('data-price="10000"', 'data-price="19.99"', 1)
        products = strategies.attribute_direct(_doc(html), ctx)
        assert products[0].price == "19.99"

    def test_too_few_links(self, ctx, attribute_list_factory):
        """链接数不超过阈值时不启用"""
        assert strategies.attribute_direct(_doc(attribute_list_factory(5)), ctx) == []

    def test_respects_cap(self, attribute_list_factory):
        ctx = StrategyContext(base_url=BASE_URL, config=ExtractorConfig(max_items_per_strategy=7))
        assert len(strategies.attribute_direct(_doc(attribute_list_factory(12)), ctx)) == 7


class TestAnchorPattern:

    def test_ancestor_with_price(self, ctx, container_list_html):
        products = strategies.anchor_pattern(_doc(container_list_html), ctx)
        assert len(products) == 6
        assert products[0].url == "https://shop.example.com/goods/0"
        assert products[0].price == "19,900"
        assert products[0].image == "https://img.example.com/0.jpg"

    def test_too_few_links(self, ctx):
        html = "".join(f'<a href="/goods/{i}">Goods {i}</a>' for i in range(5))
        assert strategies.anchor_pattern(_doc(html), ctx) == []

    def test_without_priced_ancestor_keeps_link_text_and_image(self, ctx):
        """祖先中没有价格文本时仍记录链接文本和图片"""
        items = "".join(
            f'<li><a href="/goods/{i}"><img src="/img/{i}.jpg">Cotton Tee {i}</a></li>'
            for i in range(6)
        )
        products = strategies.anchor_pattern(_doc(f"<html><body><ul>{items}</ul></body></html>"), ctx)
        assert len(products) == 6
        first = products[0]
        assert first.name == "Cotton Tee 0"
        assert first.url == "https://shop.example.com/goods/0"
        assert first.image == "https://shop.example.com/img/0.jpg"
        assert first.price is None


class TestContainerPatterns:

    def test_product_card(self, ctx, container_list_html):
        products = strategies.container_patterns(_doc(container_list_html), ctx)
        assert len(products) == 6
        first = products[0]
        assert first.name == "Sample Jacket Model 0"
        assert first.brand == "브랜드0"
        assert first.price == "19,900"
        assert first.image == "https://img.example.com/0.jpg"
        assert first.url == "https://shop.example.com/goods/0"
        assert products[1].price == "29,900"

    def test_no_matching_container(self, ctx):
        assert strategies.container_patterns(_doc("<p>empty</p>"), ctx) == []


class TestJsonLdProducts:

    def test_item_list(self, ctx, json_ld_html_factory):
        data = {
            "@context": "https://schema.org",
            "@type": "ItemList",
            "itemListElement": [
                {"@type": "ListItem", "position": 1, "item": {
                    "@type": "Product", "name": "Alpha Boots", "url": "/p/1",
                    "image": "https://cdn.example.com/1.jpg", "offers": {"price": "129000"},
                }},
                {"@type": "ListItem", "position": 2, "name": "Beta Bag", "url": "https://shop.example.com/p/2"},
            ],
        }
        products = strategies.json_ld_products(_doc(json_ld_html_factory(data)), ctx)
        assert [p.name for p in products] == ["Alpha Boots", "Beta Bag"]
        assert products[0].price == "129,000"
        assert products[0].url == "https://shop.example.com/p/1"
        assert products[1].price is None

    def test_decimal_price(self, ctx, json_ld_html_factory):
        data = {"@type": "Product", "name": "Gadget", "offers": {"price": "19.99"}}
        products = strategies.json_ld_products(_doc(json_ld_html_factory(data)), ctx)
        assert products[0].price == "19.99"

    def test_currency_prefixed_decimal_price(self, ctx, json_ld_html_factory):
        data = {"@type": "Product", "name": "Gadget", "offers": {"price": "$19.99"}}
        products = strategies.json_ld_products(_doc(json_ld_html_factory(data)), ctx)
        assert products[0].price == "19.99"

    def test_no_json_ld(self, ctx, container_list_html):
        assert strategies.json_ld_products(_doc(container_list_html), ctx) == []


class TestTextAndImage:

    def test_price_element_parent(self, ctx):
        html = """
        <html><body>
        <div class="cell">
          <img src="/a.jpg">
          <strong>Linen Shirt Blue</strong>
          <em>39,000원</em>
        </div>
        <script>var p = "12,000원";</script>
        </body></html>
        """
        products = strategies.text_and_image(_doc(html), ctx)
        assert len(products) == 1
        assert products[0].name == "Linen Shirt Blue"
        assert products[0].price == "39,000"
        assert products[0].image == "https://shop.example.com/a.jpg"


def _rows_html(count: int) -> str:
    rows = "".join(
        f'<li class="goods-row"><span class="label">Wool Coat Model {i}</span> <b>{i + 1}5,000원</b></li>'
        for i in range(count)
    )
    return f"<html><body><ul>{rows}</ul></body></html>"


class TestRepeatingClass:

    def test_repeating_classes_frequency_window(self, ctx):
        assert strategies.repeating_classes(_doc(_rows_html(6)), ctx) == ["goods-row", "label"]
        assert strategies.repeating_classes(_doc(_rows_html(4)), ctx) == []

    def test_products_from_repeating_class(self, ctx):
        products = strategies.repeating_class(_doc(_rows_html(6)), ctx)
        assert len(products) == 6
        assert products[0].name == "Wool Coat Model 0"
        assert products[0].price == "15,000"
        assert products[1].price == "25,000"

    def test_class_without_prices_is_rejected(self, ctx):
        html = "".join(f'<div class="tile">Tile {i}</div>' for i in range(8))
        assert strategies.repeating_class(_doc(html), ctx) == []


def test_default_strategy_order():
    assert [name for name, _ in strategies.DEFAULT_STRATEGIES] == [
        "json-ld", "attribute", "anchor", "container", "text-image", "repeating-class",
    ]
