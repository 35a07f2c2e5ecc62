"""请求级运行器

每个函数对应一个对外操作：接收调用方的 JSON 请求字段，返回可直接序列化的字典。
浏览器与 HTTP 客户端都在单次调用内创建并释放，调用之间不共享可变状态。
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Union

from ..browser.engine import BrowserSession
from ..browser.fetcher import HttpFetcher
from ..common.config import ExtractorConfig
from ..common.exceptions import AutoParseError, ValidationError
from ..common.logger import get_logger
from ..common.types import CookieSpec, RenderOptions
from ..common.validators import validate_positive_integer, validate_url
from ..document import HtmlDocument
from ..extractor import jsonld
from ..extractor.analysis import analyze_page, sample_fields
from ..extractor.detail_extractor import ProductDetailExtractor
from ..extractor.list_extractor import ProductListExtractor
from ..pattern import generalize, generalize_url
from ..selector.aggregator import SelectorAggregator
from ..selector.recommender import recommend_from_items

logger = get_logger(__name__)

DETAIL_NOT_FOUND_MESSAGE = "页面中没有找到商品信息"


def render_options_from_request(payload: Optional[Dict[str, Any]] = None) -> RenderOptions:
    """
    将调用方请求中的渲染参数转换为 RenderOptions。

    识别的键：timeoutMs, waitForSelector, scrollToLoad, botBypass, proxy,
    cookies, headers, userAgent, waitMs, scrollCount。
    """
    payload = payload or {}
    timeout_ms = payload.get("timeoutMs")
    if timeout_ms is not None:
        timeout_ms = validate_positive_integer(int(timeout_ms), "timeoutMs")

    cookies = [
        cookie if isinstance(cookie, CookieSpec) else CookieSpec(**cookie)
        for cookie in payload.get("cookies") or []
    ]
    return RenderOptions(
        timeout_ms=timeout_ms,
        wait_for_selector=payload.get("waitForSelector"),
        proxy=payload.get("proxy"),
        cookies=cookies,
        headers=dict(payload.get("headers") or {}),
        stealth=payload.get("botBypass"),
        user_agent=payload.get("userAgent"),
        scroll_to_load=payload.get("scrollToLoad", True),
        wait_ms=payload.get("waitMs"),
        scroll_count=payload.get("scrollCount"),
    )


# ============================================================================
# 渲染类操作
# ============================================================================


async def extract_list(
    url: str,
    options: Optional[Union[RenderOptions, Dict[str, Any]]] = None,
    session: Optional[BrowserSession] = None,
    extractor_config: Optional[ExtractorConfig] = None,
) -> Dict[str, Any]:
    """
    渲染列表页并抽取商品。

    Returns:
        {url, title, totalProducts?, products, pagination?, parsedAt}

    Raises:
        URLValidationError: URL 无效
        RenderFailure: 浏览器启动或导航失败
    """
    url = validate_url(url)
    if not isinstance(options, RenderOptions):
        options = render_options_from_request(options)

    html = await (session or BrowserSession()).render(url, options)
    result = ProductListExtractor(config=extractor_config).extract(HtmlDocument(html, url), url)
    logger.info(f"[Pipeline] 列表抽取完成: {url} ({len(result.products)} 个商品)")
    return result.to_dict()


async def extract_detail(
    url: str,
    mode: str = "auto",
    options: Optional[Union[RenderOptions, Dict[str, Any]]] = None,
    session: Optional[BrowserSession] = None,
) -> Dict[str, Any]:
    """
    渲染详情页并抽取商品字段。

    失败不抛出异常，而是返回 ``{"error": 信息}``。
    """
    try:
        url = validate_url(url)
        if not isinstance(options, RenderOptions):
            options = render_options_from_request(options)
        html = await (session or BrowserSession()).render(url, options)
        detail = ProductDetailExtractor().extract(HtmlDocument(html, url), url, mode)
    except AutoParseError as e:
        logger.warning(f"[Pipeline] 详情抽取失败: {e}")
        return {"error": str(e)}

    if detail is None:
        return {"error": DETAIL_NOT_FOUND_MESSAGE}
    return detail.to_dict()


async def analyze(
    url: str,
    is_product_page: bool = False,
    timeout_ms: Optional[int] = None,
    session: Optional[BrowserSession] = None,
) -> Dict[str, Any]:
    """渲染页面并返回结构概览"""
    url = validate_url(url)
    html = await (session or BrowserSession()).render(url, RenderOptions(timeout_ms=timeout_ms))
    return analyze_page(HtmlDocument(html, url), url, is_product_page=is_product_page)


# ============================================================================
# 抓取类操作（不渲染）
# ============================================================================


async def optimize_selectors(
    urls: Sequence[str],
    current_selectors: Optional[Dict[str, str]] = None,
    fetcher: Optional[HttpFetcher] = None,
) -> Dict[str, Any]:
    """
    多样本选择器优化。

    Returns:
        {analyzedUrls, optimizedSelectors, details, improvements, hasChanges}
    """
    current_selectors = current_selectors or {}
    result = await SelectorAggregator(fetcher=fetcher).aggregate(list(urls), current_selectors)
    return result.to_response(current_selectors)


async def recommend_selectors(
    url: str,
    parsed_items: Sequence[Dict[str, Any]],
    current_selectors: Optional[Dict[str, str]] = None,
    fetcher: Optional[HttpFetcher] = None,
) -> Dict[str, Any]:
    """按已解析条目的取值反查选择器"""
    return await recommend_from_items(url, parsed_items, current_selectors, fetcher=fetcher)


async def parse_sample(
    url: str,
    selectors: Optional[Dict[str, str]] = None,
    fetcher: Optional[HttpFetcher] = None,
) -> Dict[str, Any]:
    """
    抓取单个页面（不渲染），按选择器读取样本字段。

    Raises:
        URLValidationError: URL 无效
        FetchFailure: 抓取失败
    """
    url = validate_url(url)
    html = await (fetcher or HttpFetcher()).fetch(url)
    document = HtmlDocument(html, url)

    has_product = jsonld.find_by_type(jsonld.load_json_ld(document), "Product") is not None
    return {
        "url": url,
        "urlPattern": generalize_url(url),
        "dataSource": "json-ld" if has_product else "dom",
        "extracted": sample_fields(document, selectors),
    }


def url_pattern(sample: Union[str, List[str]]) -> str:
    """单个 sampleUrl 或 sampleUrls 列表的路径模板"""
    if isinstance(sample, str):
        validate_url(sample)
    else:
        if not sample:
            raise ValidationError("sampleUrls 不能为空")
        for item in sample:
            validate_url(item)
    return generalize(sample)
