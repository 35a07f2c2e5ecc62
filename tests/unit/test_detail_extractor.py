"""ProductDetailExtractor 单元测试"""

import pytest

from autoparse.common.exceptions import ValidationError
from autoparse.document import HtmlDocument
from autoparse.extractor import ProductDetailExtractor, extract_detail
from autoparse.extractor.detail_extractor import parse_availability, parse_price

URL = "https://shop.example.com/p/1"


class TestAutoMode:
    """JSON-LD > meta > DOM"""

    def test_json_ld_is_authoritative(self, product_json_ld_html):
        detail = extract_detail(product_json_ld_html, URL)
        assert detail.source == "json-ld"
        assert detail.title == "Wireless Headphones"
        assert detail.price == "199.00"
        assert detail.currency == "USD"
        assert detail.availability == "InStock"
        assert detail.brand == "Acme"
        assert detail.to_dict()["reviewCount"] == "120"

    def test_meta_price_wins_over_dom(self, meta_detail_html):
        detail = extract_detail(meta_detail_html, URL)
        assert detail.source == "meta"
        assert detail.title == "Meta Sneakers"
        assert detail.price == "89000"
        assert detail.currency == "KRW"
        assert detail.availability == "OutOfStock"
        assert detail.image == "https://cdn.example.com/sneakers.jpg"

    def test_dom_only(self, dom_detail_html):
        detail = extract_detail(dom_detail_html, URL)
        assert detail.source == "dom"
        assert detail.title == "Classic Leather Wallet"
        assert detail.price == "45000"
        assert detail.currency == "KRW"
        assert detail.sku == "WL-01"
        assert detail.availability == "InStock"
        assert detail.image == "https://shop.example.com/images/wallet.jpg"

    def test_no_title_returns_none(self):
        assert extract_detail("<html><body><span class='price'>1,000원</span></body></html>", URL) is None


class TestExplicitModes:

    def test_json_ld_mode_without_json_ld(self, dom_detail_html):
        assert extract_detail(dom_detail_html, URL, mode="json-ld") is None

    def test_dom_mode_ignores_meta(self, meta_detail_html):
        detail = extract_detail(meta_detail_html, URL, mode="dom")
        assert detail.source == "dom"
        assert detail.title == "DOM Sneakers"
        assert detail.price == "79000"

    def test_invalid_mode(self, dom_detail_html):
        with pytest.raises(ValidationError):
            ProductDetailExtractor().extract(HtmlDocument(dom_detail_html, URL), URL, mode="xpath")


class TestParsers:

    @pytest.mark.parametrize("text, amount, currency", [
        ("$19.99", 19.99, "USD"),
        ("₩30,820", 30820.0, "KRW"),
        ("12,000원", 12000.0, "KRW"),
        ("€5", 5.0, "EUR"),
        ("가격 문의", 0.0, "KRW"),
    ])
    def test_parse_price(self, text, amount, currency):
        price = parse_price(text)
        assert price.amount == pytest.approx(amount)
        assert price.currency == currency

    def test_amount_text(self):
        assert parse_price("₩30,820").amount_text() == "30820"
        assert parse_price("$19.99").amount_text() == "19.99"

    @pytest.mark.parametrize("text, expected", [
        (None, "InStock"),
        ("Sold Out", "OutOfStock"),
        ("예약 판매", "PreOrder"),
        ("한정 수량", "LimitedAvailability"),
        ("재고 있음", "InStock"),
    ])
    def test_parse_availability(self, text, expected):
        assert parse_availability(text) == expected
