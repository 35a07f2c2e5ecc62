"""HttpFetcher 单元测试（httpx.MockTransport，不访问网络）"""

import httpx
import pytest

from autoparse.browser.fetcher import HttpFetcher
from autoparse.common.exceptions import FetchFailure

URL = "https://shop.example.com/p/1"


def _fetcher(handler) -> HttpFetcher:
    return HttpFetcher(timeout_s=5, user_agent="TestAgent/1.0", transport=httpx.MockTransport(handler))


class TestHttpFetcher:

    @pytest.mark.asyncio
    async def test_success_returns_text(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["ua"] = request.headers["User-Agent"]
            seen["extra"] = request.headers.get("X-Test")
            return httpx.Response(200, text="<html>ok</html>")

        html = await _fetcher(handler).fetch(URL, headers={"X-Test": "1"})

        assert html == "<html>ok</html>"
        assert seen == {"ua": "TestAgent/1.0", "extra": "1"}

    @pytest.mark.asyncio
    async def test_non_2xx_raises(self):
        with pytest.raises(FetchFailure) as exc_info:
            await _fetcher(lambda request: httpx.Response(404, text="missing")).fetch(URL)
        assert exc_info.value.status_code == 404
        assert exc_info.value.url == URL

    @pytest.mark.asyncio
    async def test_network_error_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(FetchFailure) as exc_info:
            await _fetcher(handler).fetch(URL)
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_follows_redirects(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/old":
                return httpx.Response(301, headers={"Location": URL})
            return httpx.Response(200, text="moved")

        assert await _fetcher(handler).fetch("https://shop.example.com/old") == "moved"
