"""
商品列表抽取器

按顺序运行抽取策略，每个策略的结果与已收集的商品去重后合并，
累计数量达到阈值即停止（后续策略不再调用）。
"""

from __future__ import annotations

import re
from typing import Optional, Sequence, Tuple

from ..common.config import ExtractorConfig, config as global_config
from ..common.logger import get_logger
from ..common.types import ExtractionResult, Pagination
from ..document import HtmlDocument
from .name_normalizer import NameNormalizer
from .patterns import find_total_count
from .strategies import DEFAULT_STRATEGIES, ProductCollector, Strategy, StrategyContext

logger = get_logger(__name__)

ACTIVE_PAGE_SELECTOR = '.pagination .active, .paging .on, [class*="page"][class*="current"]'
NEXT_PAGE_SELECTOR = 'a[class*="next"], button[class*="next"], .pagination a:last-child'
LAST_PAGE_SELECTOR = ".pagination a:last-child, .paging a:last-child"

_LEADING_INT_RE = re.compile(r"^\s*(\d+)")


def _parse_int(text: str) -> Optional[int]:
    match = _LEADING_INT_RE.match(text or "")
    return int(match.group(1)) if match else None


def extract_pagination(document: HtmlDocument) -> Pagination:
    """当前页、是否有下一页、总页数"""
    current_page = _parse_int(document.find(ACTIVE_PAGE_SELECTOR).text()) or 1
    has_next = bool(document.find(NEXT_PAGE_SELECTOR))
    total_pages = _parse_int(document.find(LAST_PAGE_SELECTOR).text())
    return Pagination(current_page=current_page, total_pages=total_pages, has_next=has_next)


class ProductListExtractor:
    """
    列表页商品抽取：
    1. 策略按顺序执行，累计达到 min_products 即短路返回。
    2. 每个策略产出的商品都与已收集的商品去重。
    3. 一个商品都没找到不是错误，返回空列表。
    """

    def __init__(
        self,
        strategies: Optional[Sequence[Tuple[str, Strategy]]] = None,
        config: Optional[ExtractorConfig] = None,
        normalizer: Optional[NameNormalizer] = None,
    ):
        self.strategies = tuple(strategies if strategies is not None else DEFAULT_STRATEGIES)
        self.config = config or global_config.extractor
        self.normalizer = normalizer or NameNormalizer(max_length=self.config.name_max_length)

    def extract_products(self, document: HtmlDocument, base_url: str) -> ProductCollector:
        ctx = StrategyContext(base_url=base_url, config=self.config, normalizer=self.normalizer)
        collector = ProductCollector()

        for name, strategy in self.strategies:
            found = strategy(document, ctx)
            added = sum(1 for product in found if collector.add(product))
            logger.debug(f"[ListExtractor] 策略 {name}: 命中 {len(found)}，新增 {added}，累计 {len(collector)}")
            if len(collector) >= self.config.min_products:
                logger.info(f"[ListExtractor] 策略 {name} 后达到阈值 ({len(collector)} 个商品)")
                break

        return collector

    def extract(self, document: HtmlDocument, url: str) -> ExtractionResult:
        """抽取列表页商品、总数与分页信息

        Args:
            document: 已渲染页面
            url: 页面 URL，用于补全相对链接

        Returns:
            ExtractionResult
        """
        collector = self.extract_products(document, url)
        if not collector.products:
            logger.info(f"[ListExtractor] 未找到商品: {url}")

        return ExtractionResult(
            url=url,
            title=document.title(),
            total_count=find_total_count(document.body_text()),
            products=collector.products,
            pagination=extract_pagination(document),
        )


def extract_list(html: str, url: str, config: Optional[ExtractorConfig] = None) -> ExtractionResult:
    """解析 HTML 并抽取商品列表"""
    return ProductListExtractor(config=config).extract(HtmlDocument(html, url), url)
