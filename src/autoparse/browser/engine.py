"""
异步渲染引擎

每次 render 调用独立启动一个浏览器实例，渲染完成（或失败）后立即关闭。
渲染流程：启动 → 注入反检测脚本/Cookie/请求头 → 随机延迟 → 导航 →
等待选择器（超时不致命）→ 站点等待 → 自动滚动 → 返回 HTML。
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Callable, Dict, List, Literal, Optional
from urllib.parse import urlparse

from loguru import logger
from playwright.async_api import Browser, Error as PlaywrightError, Page, async_playwright
from playwright_stealth import Stealth

from ..common.config import config
from ..common.constants import DEFAULT_BROWSER_HEADERS, DEFAULT_LAUNCH_ARGS
from ..common.exceptions import RenderFailure
from ..common.types import CookieSpec, RenderOptions
from ..common.utils.delay import random_pause, sleep_ms
from ..common.validators import validate_url
from .profiles import SiteProfile, SiteProfileRegistry, get_profile_registry
from .stealth import build_init_script, pick_user_agent

# 分步滚动直到达到次数上限或滚到底部
AUTO_SCROLL_SCRIPT = """
async ({ step, interval, maxScrolls }) => {
    await new Promise((resolve) => {
        let totalHeight = 0;
        let scrolls = 0;
        const timer = setInterval(() => {
            const scrollHeight = document.body.scrollHeight;
            window.scrollBy(0, step);
            totalHeight += step;
            scrolls++;
            if (scrolls >= maxScrolls || totalHeight >= scrollHeight - window.innerHeight) {
                clearInterval(timer);
                resolve();
            }
        }, interval);
    });
}
"""


def _default_playwright_factory(stealth: bool):
    """返回 Playwright 异步上下文管理器，启用 stealth 时用 playwright_stealth 包装"""
    if stealth:
        return Stealth().use_async(async_playwright())
    return async_playwright()


class BrowserSession:
    """
    单次渲染会话：
    1. 每次 render 启动并关闭一个独立的 Browser，不跨请求共享状态。
    2. 站点参数来自 SiteProfileRegistry，调用方选项优先。
    3. 任何退出路径（成功、异常、取消）都保证释放浏览器资源。
    """

    def __init__(
        self,
        headless: Optional[bool] = None,
        browser_type: Optional[Literal["chromium", "firefox", "webkit"]] = None,
        max_retries: Optional[int] = None,
        launch_args: Optional[List[str]] = None,
        profiles: Optional[SiteProfileRegistry] = None,
        playwright_factory: Optional[Callable[[bool], Any]] = None,
    ):
        self.headless = headless if headless is not None else config.browser.headless
        self.browser_type = browser_type or config.browser.browser_type
        self.max_retries = max_retries if max_retries is not None else config.browser.max_launch_retries
        self.launch_args = list(launch_args or DEFAULT_LAUNCH_ARGS)
        self.profiles = profiles or get_profile_registry()
        self._playwright_factory = playwright_factory or _default_playwright_factory

    async def _launch(self, playwright: Any, url: str, proxy: Optional[str]) -> Browser:
        """带重试机制的浏览器启动"""
        launcher = getattr(playwright, self.browser_type)
        launch_options: Dict[str, Any] = {"headless": self.headless, "args": self.launch_args}
        if proxy:
            launch_options["proxy"] = {"server": proxy}

        for attempt in range(self.max_retries + 1):
            try:
                return await launcher.launch(**launch_options)
            except Exception as e:
                if attempt == self.max_retries:
                    raise RenderFailure(url, f"浏览器启动失败 ({e})") from e
                logger.warning(f"[Render] 浏览器启动失败，重试 {attempt + 1}/{self.max_retries}: {e}")
        raise RenderFailure(url, "浏览器启动失败")

    @staticmethod
    def _merge_headers(profile: SiteProfile, options: RenderOptions) -> Dict[str, str]:
        return {**DEFAULT_BROWSER_HEADERS, **profile.headers, **options.headers}

    @staticmethod
    def _build_cookies(url: str, profile: SiteProfile, options: RenderOptions) -> List[Dict[str, Any]]:
        host = urlparse(url).hostname or ""
        cookies: List[CookieSpec] = [*profile.cookies, *options.cookies]
        return [
            {"name": c.name, "value": c.value, "domain": c.domain or host, "path": "/"}
            for c in cookies
        ]

    @asynccontextmanager
    async def page(self, url: str, options: Optional[RenderOptions] = None) -> AsyncGenerator[Page, None]:
        """
        打开一个已完成注入配置的页面（尚未导航）。

        Args:
            url: 目标 URL，用于匹配站点配置与 Cookie 域名
            options: 渲染参数
        """
        options = options or RenderOptions()
        profile = self.profiles.lookup(url)
        use_stealth = options.stealth if options.stealth is not None else config.browser.stealth
        user_agent = options.user_agent or pick_user_agent()

        async with self._playwright_factory(use_stealth) as playwright:
            browser = await self._launch(playwright, url, options.proxy)
            try:
                context = await browser.new_context(
                    viewport={
                        "width": config.browser.viewport_width,
                        "height": config.browser.viewport_height,
                    },
                    user_agent=user_agent,
                    extra_http_headers=self._merge_headers(profile, options),
                    ignore_https_errors=True,
                )
                if use_stealth:
                    await context.add_init_script(build_init_script())

                cookies = self._build_cookies(url, profile, options)
                if cookies:
                    await context.add_cookies(cookies)
                    logger.debug(f"[Render] 注入 Cookie: {[c['name'] for c in cookies]}")

                page = await context.new_page()
                page.set_default_timeout(options.timeout_ms or config.browser.timeout_ms)
                yield page
            finally:
                await browser.close()
                logger.debug("[Render] 浏览器已关闭")

    async def _wait_for_selector(self, page: Page, profile: SiteProfile, options: RenderOptions) -> None:
        """等待关键元素出现，超时只记录日志"""
        selector = options.wait_for_selector or profile.wait_for_selector
        if not selector:
            return
        timeout = profile.selector_timeout_ms if not options.wait_for_selector else config.browser.selector_wait_ms
        try:
            await page.wait_for_selector(selector, timeout=timeout)
        except PlaywrightError as e:
            logger.warning(f"[Render] 等待选择器超时 {selector}: {e}")
            if profile.fallback_scroll_px:
                await page.evaluate(f"window.scrollBy(0, {profile.fallback_scroll_px})")
                await sleep_ms(profile.fallback_wait_ms)

    async def _auto_scroll(self, page: Page, scroll_count: int) -> None:
        await page.evaluate(
            AUTO_SCROLL_SCRIPT,
            {
                "step": config.browser.scroll_step_px,
                "interval": config.browser.scroll_interval_ms,
                "maxScrolls": scroll_count,
            },
        )
        await sleep_ms(config.browser.settle_after_scroll_ms)

    async def render(self, url: str, options: Optional[RenderOptions] = None) -> str:
        """
        渲染页面并返回 HTML。

        Args:
            url: 目标 URL
            options: 渲染参数（超时、等待选择器、代理、Cookie、请求头、stealth、UA）

        Returns:
            渲染后的 HTML

        Raises:
            URLValidationError: URL 格式无效
            RenderFailure: 浏览器启动或页面导航失败
        """
        url = validate_url(url)
        options = options or RenderOptions()
        profile = self.profiles.lookup(url)
        wait_ms = options.wait_ms if options.wait_ms is not None else profile.wait_ms
        scroll_count = options.scroll_count if options.scroll_count is not None else profile.scroll_count
        logger.info(f"[Render] {url} (profile={profile.name}, wait={wait_ms}ms, scrolls={scroll_count})")

        async with self.page(url, options) as page:
            await random_pause(config.browser.pre_nav_delay_min_ms, config.browser.pre_nav_delay_max_ms)
            try:
                await page.goto(
                    url,
                    wait_until="networkidle",
                    timeout=options.timeout_ms or config.browser.timeout_ms,
                )
            except PlaywrightError as e:
                raise RenderFailure(url, f"页面导航失败 ({e})") from e

            try:
                await self._wait_for_selector(page, profile, options)
                await sleep_ms(wait_ms)
                if options.scroll_to_load and scroll_count > 0:
                    await self._auto_scroll(page, scroll_count)
                html = await page.content()
            except PlaywrightError as e:
                raise RenderFailure(url, f"页面渲染中断 ({e})") from e

        logger.info(f"[Render] 完成 {url} ({len(html)} 字符)")
        return html


async def render_page(url: str, options: Optional[RenderOptions] = None, **session_kwargs) -> str:
    """使用新的 BrowserSession 渲染单个页面"""
    return await BrowserSession(**session_kwargs).render(url, options)
