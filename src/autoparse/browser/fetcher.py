"""普通 HTTP 抓取（不渲染）"""

from __future__ import annotations

import httpx

from ..common.config import config
from ..common.exceptions import FetchFailure
from ..common.logger import get_logger

logger = get_logger(__name__)


class HttpFetcher:
    """基于 httpx.AsyncClient 的 HTML 抓取器

    用于选择器聚合、推荐和样本解析等不需要 JS 渲染的场景。
    """

    def __init__(
        self,
        timeout_s: float | None = None,
        user_agent: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout_s = timeout_s if timeout_s is not None else config.selector.fetch_timeout_s
        self.user_agent = user_agent or config.selector.fetch_user_agent
        self._transport = transport

    def _get_headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "ko-KR,ko;q=0.9,en-US;q=0.8,en;q=0.7",
        }
        if extra:
            headers.update(extra)
        return headers

    async def fetch(self, url: str, headers: dict[str, str] | None = None) -> str:
        """抓取 URL 并返回响应文本

        Raises:
            FetchFailure: 非 2xx 响应或网络错误
        """
        logger.debug(f"[Fetcher] GET {url}")
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_s,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response = await client.get(url, headers=self._get_headers(headers))
        except httpx.HTTPError as e:
            raise FetchFailure(url, message=f"网络错误 ({e})") from e

        if not response.is_success:
            raise FetchFailure(url, status_code=response.status_code)

        logger.debug(f"[Fetcher] {url} -> {response.status_code} ({len(response.text)} 字符)")
        return response.text


async def fetch_html(url: str, headers: dict[str, str] | None = None, timeout_s: float | None = None) -> str:
    """使用默认配置抓取单个页面"""
    return await HttpFetcher(timeout_s=timeout_s).fetch(url, headers=headers)
