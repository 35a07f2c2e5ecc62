"""pytest 全局配置和 fixtures

提供测试所需的 HTML 样本页面和 Playwright Mock 对象。
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

# 添加项目路径
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


# ============================================================================
# HTML 样本
# ============================================================================


def build_attribute_list_html(count: int = 12) -> str:
    """链接上直接带 data-item-id / data-price 的列表页"""
    items = "\n".join(
        f'<a href="/products/{1000 + i}" data-item-id="{1000 + i}" data-price="{(i + 1) * 10000}" '
        f'data-original-price="{(i + 1) * 12000}" data-discount-rate="10">'
        f'<span class="Typography_text">테스트 상품 {i + 1}</span></a>'
        for i in range(count)
    )
    return f"<html><head><title>리스트</title></head><body><div class='list'>{items}</div></body></html>"


def build_container_list_html(count: int = 6) -> str:
    """通用 product-card 容器的列表页"""
    cards = "\n".join(
        f"""
        <div class="product-card">
            <a href="https://shop.example.com/goods/{i}">
                <img src="//img.example.com/{i}.jpg">
            </a>
            <p class="brand">브랜드{i}</p>
            <p class="product-name">Sample Jacket Model {i}</p>
            <span class="sale-price">{i + 1}9,900원</span>
        </div>
        """
        for i in range(count)
    )
    return f"<html><head><title>컨테이너</title></head><body>{cards}</body></html>"


def build_json_ld_html(data) -> str:
    return (
        "<html><head><title>JSON-LD</title>"
        f'<script type="application/ld+json">{json.dumps(data, ensure_ascii=False)}</script>'
        "</head><body><h1>Page</h1></body></html>"
    )


PRODUCT_JSON_LD = {
    "@context": "https://schema.org",
    "@type": "Product",
    "name": "Wireless Headphones",
    "description": "Noise cancelling over-ear headphones",
    "image": ["https://cdn.example.com/hp.jpg"],
    "sku": "HP-100",
    "brand": {"@type": "Brand", "name": "Acme"},
    "offers": {
        "@type": "Offer",
        "price": "199.00",
        "priceCurrency": "USD",
        "availability": "https://schema.org/InStock",
    },
    "aggregateRating": {"@type": "AggregateRating", "ratingValue": "4.5", "reviewCount": "120"},
}


@pytest.fixture
def attribute_list_html():
    return build_attribute_list_html()


@pytest.fixture
def container_list_html():
    return build_container_list_html()


@pytest.fixture
def product_json_ld_html():
    return build_json_ld_html(PRODUCT_JSON_LD)


@pytest.fixture
def product_json_ld():
    return json.loads(json.dumps(PRODUCT_JSON_LD))


@pytest.fixture
def json_ld_html_factory():
    return build_json_ld_html


@pytest.fixture
def attribute_list_factory():
    return build_attribute_list_html


@pytest.fixture
def meta_detail_html():
    """只有 og / product meta 的详情页"""
    return """
    <html><head>
        <title>Meta Page</title>
        <meta property="og:title" content="Meta Sneakers">
        <meta property="og:description" content="Lightweight running shoes">
        <meta property="og:image" content="https://cdn.example.com/sneakers.jpg">
        <meta property="product:price:amount" content="89000">
        <meta property="product:price:currency" content="KRW">
        <meta property="product:availability" content="품절">
    </head><body>
        <div class="product-title">DOM Sneakers</div>
        <div class="price">₩79,000</div>
    </body></html>
    """


@pytest.fixture
def dom_detail_html():
    """只有 DOM 结构的详情页"""
    return """
    <html><head><title>DOM Page</title></head><body>
        <h1 itemprop="name">Classic Leather Wallet</h1>
        <span class="price">₩45,000</span>
        <div class="product-description">Hand-made leather wallet with six card slots.</div>
        <div class="product-image"><img src="/images/wallet.jpg"></div>
        <span class="product-sku">WL-01</span>
    </body></html>
    """


# ============================================================================
# Playwright Mock
# ============================================================================


class FakePlaywrightManager:
    """模拟 async_playwright() 返回的异步上下文管理器"""

    def __init__(self, playwright):
        self.playwright = playwright
        self.entered = False
        self.exited = False

    async def __aenter__(self):
        self.entered = True
        return self.playwright

    async def __aexit__(self, exc_type, exc, tb):
        self.exited = True
        return False


@pytest.fixture
def mock_page():
    """模拟 Playwright Page 对象"""
    page = MagicMock()
    page.goto = AsyncMock()
    page.wait_for_selector = AsyncMock()
    page.evaluate = AsyncMock(return_value=None)
    page.content = AsyncMock(return_value="<html><body><p>rendered</p></body></html>")
    page.set_default_timeout = MagicMock()
    return page


@pytest.fixture
def mock_context(mock_page):
    context = MagicMock()
    context.add_init_script = AsyncMock()
    context.add_cookies = AsyncMock()
    context.new_page = AsyncMock(return_value=mock_page)
    return context


@pytest.fixture
def mock_browser(mock_context):
    browser = MagicMock()
    browser.new_context = AsyncMock(return_value=mock_context)
    browser.close = AsyncMock()
    return browser


@pytest.fixture
def mock_playwright(mock_browser):
    playwright = MagicMock()
    playwright.chromium.launch = AsyncMock(return_value=mock_browser)
    return playwright


@pytest.fixture
def playwright_factory(mock_playwright):
    """记录每次调用的 stealth 参数，返回 FakePlaywrightManager"""
    calls = []

    def factory(stealth: bool):
        manager = FakePlaywrightManager(mock_playwright)
        calls.append((stealth, manager))
        return manager

    factory.calls = calls
    return factory


@pytest.fixture
def no_delay(monkeypatch):
    """跳过渲染流程中的真实等待"""
    monkeypatch.setattr("autoparse.browser.engine.random_pause", AsyncMock(return_value=0))
    monkeypatch.setattr("autoparse.browser.engine.sleep_ms", AsyncMock())


# ============================================================================
# 抓取 / 渲染替身
# ============================================================================


class FakeFetcher:
    """按 URL 返回预置 HTML，未预置的 URL 抛出 FetchFailure(404)"""

    def __init__(self, pages: dict[str, str]):
        self.pages = pages
        self.requested: list[str] = []

    async def fetch(self, url: str, headers: dict[str, str] | None = None) -> str:
        from autoparse.common.exceptions import FetchFailure

        self.requested.append(url)
        if url not in self.pages:
            raise FetchFailure(url, status_code=404)
        return self.pages[url]


class FakeSession:
    """只实现 render 的 BrowserSession 替身"""

    def __init__(self, html: str = "", error: Exception | None = None):
        self.render = AsyncMock(return_value=html, side_effect=error)


@pytest.fixture
def fake_fetcher_factory():
    return FakeFetcher


@pytest.fixture
def fake_session_factory():
    return FakeSession
