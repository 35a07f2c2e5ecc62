"""
BrowserSession 渲染流程测试

使用 Mock 的 Playwright 对象，不启动真实浏览器：
1. 浏览器在成功和失败路径上都会被关闭
2. 启动重试
3. 等待选择器超时不致命
4. Cookie / 请求头 / 反检测脚本注入
"""

import asyncio

import pytest
from playwright.async_api import Error as PlaywrightError

from autoparse.browser.engine import AUTO_SCROLL_SCRIPT, BrowserSession
from autoparse.browser.profiles import SiteProfile, SiteProfileRegistry
from autoparse.browser.stealth import build_init_script
from autoparse.common.exceptions import RenderFailure, URLValidationError
from autoparse.common.types import CookieSpec, RenderOptions

URL = "https://shop.example.com/list"


def _session(playwright_factory, profiles=None, **kwargs) -> BrowserSession:
    return BrowserSession(
        headless=True,
        browser_type="chromium",
        profiles=profiles or SiteProfileRegistry(profiles=[]),
        playwright_factory=playwright_factory,
        **kwargs,
    )


@pytest.mark.usefixtures("no_delay")
class TestRender:
    """渲染主流程"""

    @pytest.mark.asyncio
    async def test_returns_html_and_closes_browser(self, playwright_factory, mock_browser, mock_page):
        html = await _session(playwright_factory).render(URL, RenderOptions(stealth=False))

        assert html == "<html><body><p>rendered</p></body></html>"
        mock_page.goto.assert_awaited_once()
        assert mock_page.goto.await_args.args[0] == URL
        assert mock_page.goto.await_args.kwargs["wait_until"] == "networkidle"
        mock_browser.close.assert_awaited_once()

        stealth, manager = playwright_factory.calls[0]
        assert stealth is False
        assert manager.entered and manager.exited

    @pytest.mark.asyncio
    async def test_auto_scroll(self, playwright_factory, mock_page):
        await _session(playwright_factory).render(URL, RenderOptions(stealth=False, scroll_count=2))
        script, args = mock_page.evaluate.await_args.args
        assert script == AUTO_SCROLL_SCRIPT
        assert args["maxScrolls"] == 2

    @pytest.mark.asyncio
    async def test_scroll_disabled(self, playwright_factory, mock_page):
        await _session(playwright_factory).render(URL, RenderOptions(stealth=False, scroll_to_load=False))
        mock_page.evaluate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_navigation_error_is_render_failure(self, playwright_factory, mock_browser, mock_page):
        """导航失败抛出 RenderFailure，浏览器仍被关闭"""
        mock_page.goto.side_effect = PlaywrightError("net::ERR_NAME_NOT_RESOLVED")

        with pytest.raises(RenderFailure) as exc_info:
            await _session(playwright_factory).render(URL, RenderOptions(stealth=False))

        assert exc_info.value.url == URL
        mock_browser.close.assert_awaited_once()
        mock_page.content.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_selector_timeout_is_not_fatal(self, playwright_factory, mock_page):
        mock_page.wait_for_selector.side_effect = PlaywrightError("Timeout 5000ms exceeded")

        html = await _session(playwright_factory).render(
            URL, RenderOptions(stealth=False, wait_for_selector=".item", scroll_to_load=False)
        )

        assert html
        assert mock_page.wait_for_selector.await_args.args[0] == ".item"

    @pytest.mark.asyncio
    async def test_profile_fallback_scroll(self, playwright_factory, mock_page):
        """站点配置的等待选择器超时后向下滚动"""
        registry = SiteProfileRegistry()
        mock_page.wait_for_selector.side_effect = PlaywrightError("Timeout")

        await _session(playwright_factory, profiles=registry).render(
            "https://www.musinsa.com/category/001", RenderOptions(stealth=False, scroll_to_load=False)
        )

        mock_page.evaluate.assert_awaited_once_with("window.scrollBy(0, 500)")

    @pytest.mark.asyncio
    async def test_invalid_url(self, playwright_factory):
        with pytest.raises(URLValidationError):
            await _session(playwright_factory).render("not a url")
        assert playwright_factory.calls == []


@pytest.mark.usefixtures("no_delay")
class TestLaunch:
    """浏览器启动与重试"""

    @pytest.mark.asyncio
    async def test_launch_retry_then_success(self, playwright_factory, mock_playwright, mock_browser):
        mock_playwright.chromium.launch.side_effect = [RuntimeError("boom"), mock_browser]

        html = await _session(playwright_factory, max_retries=2).render(URL, RenderOptions(stealth=False))

        assert html
        assert mock_playwright.chromium.launch.await_count == 2

    @pytest.mark.asyncio
    async def test_launch_gives_up(self, playwright_factory, mock_playwright):
        mock_playwright.chromium.launch.side_effect = RuntimeError("boom")

        with pytest.raises(RenderFailure):
            await _session(playwright_factory, max_retries=1).render(URL, RenderOptions(stealth=False))

        assert mock_playwright.chromium.launch.await_count == 2

    @pytest.mark.asyncio
    async def test_proxy_passed_to_launch(self, playwright_factory, mock_playwright):
        await _session(playwright_factory).render(
            URL, RenderOptions(stealth=False, proxy="http://127.0.0.1:8080", scroll_to_load=False)
        )
        kwargs = mock_playwright.chromium.launch.await_args.kwargs
        assert kwargs["proxy"] == {"server": "http://127.0.0.1:8080"}
        assert kwargs["headless"] is True


@pytest.mark.usefixtures("no_delay")
class TestContextSetup:
    """Cookie / 请求头 / 反检测注入"""

    @pytest.mark.asyncio
    async def test_cookies_and_headers(self, playwright_factory, mock_browser, mock_context):
        registry = SiteProfileRegistry(profiles=[
            SiteProfile(
                name="shop",
                domain="shop.example.com",
                headers={"X-Site": "1", "Accept-Language": "en-US"},
                cookies=(CookieSpec(name="site", value="1"),),
            ),
        ])
        options = RenderOptions(
            stealth=False,
            scroll_to_load=False,
            headers={"X-Request": "2"},
            cookies=[CookieSpec(name="session", value="abc", domain=".example.com")],
            user_agent="TestAgent/1.0",
        )

        await _session(playwright_factory, profiles=registry).render(URL, options)

        mock_context.add_cookies.assert_awaited_once_with([
            {"name": "site", "value": "1", "domain": "shop.example.com", "path": "/"},
            {"name": "session", "value": "abc", "domain": ".example.com", "path": "/"},
        ])
        context_kwargs = mock_browser.new_context.await_args.kwargs
        assert context_kwargs["user_agent"] == "TestAgent/1.0"
        headers = context_kwargs["extra_http_headers"]
        assert headers["X-Site"] == "1"
        assert headers["X-Request"] == "2"
        assert headers["Accept-Language"] == "en-US"
        mock_context.add_init_script.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_stealth_injects_init_script(self, playwright_factory, mock_context):
        await _session(playwright_factory).render(URL, RenderOptions(stealth=True, scroll_to_load=False))

        assert playwright_factory.calls[0][0] is True
        mock_context.add_init_script.assert_awaited_once_with(build_init_script())
        mock_context.add_cookies.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_timeout_applied_to_page(self, playwright_factory, mock_page):
        await _session(playwright_factory).render(URL, RenderOptions(stealth=False, timeout_ms=1234, scroll_to_load=False))
        mock_page.set_default_timeout.assert_called_once_with(1234)
        assert mock_page.goto.await_args.kwargs["timeout"] == 1234


def test_render_options_defaults():
    options = RenderOptions()
    assert options.scroll_to_load is True
    assert options.stealth is None
    assert options.cookies == []


def test_page_context_manager_closes_browser_on_error(playwright_factory, mock_browser):
    """page() 内部抛出的异常同样会关闭浏览器"""

    async def scenario():
        async with _session(playwright_factory).page(URL, RenderOptions(stealth=False)):
            raise ValueError("caller failure")

    with pytest.raises(ValueError):
        asyncio.run(scenario())
    mock_browser.close.assert_awaited_once()


def test_stealth_script_is_iife():
    script = build_init_script()
    assert script.startswith("(() =>")
    assert script.endswith(")();")
    assert "webdriver" in script
