"""
多样本选择器聚合

对同一站点的多个样本页面逐个评分，按选择器累计总分与出现次数，
综合分 = 总分 × (出现次数 / 样本数)，取综合分最高者。
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from ..browser.fetcher import HttpFetcher
from ..common.config import config
from ..common.constants import MISSING_SELECTOR_LABEL
from ..common.exceptions import FetchError, FetchFailure
from ..common.logger import get_logger
from ..common.types import AggregatedSelector, AggregatedSelectorSet, SelectorCandidate
from ..common.validators import validate_sample_urls
from ..document import HtmlDocument
from .scorer import CANDIDATES, SelectorScorer

logger = get_logger(__name__)


@dataclass
class _Tally:
    total: float = 0
    count: int = 0
    sample: str = ""


def aggregate_candidates(
    per_sample: Sequence[Optional[SelectorCandidate]],
    sample_count: int,
    field_type: str,
) -> Optional[AggregatedSelector]:
    """
    聚合各样本的最佳候选。

    Args:
        per_sample: 每个样本的最佳候选（无候选为 None）
        sample_count: 成功分析的样本数
        field_type: 字段类型

    Returns:
        AggregatedSelector，没有任何候选时返回 None
    """
    if sample_count <= 0:
        return None

    tallies: Dict[str, _Tally] = {}
    for candidate in per_sample:
        if candidate is None:
            continue
        tally = tallies.setdefault(candidate.selector, _Tally(sample=candidate.sample))
        tally.total += candidate.score
        tally.count += 1

    best_selector = ""
    best_score = 0.0
    sample = ""
    for selector, tally in tallies.items():
        combined = tally.total * (tally.count / sample_count)
        if combined > best_score:
            best_score = combined
            best_selector = selector
            sample = tally.sample

    if not best_selector:
        return None
    return AggregatedSelector(
        field_type=field_type,
        selector=best_selector,
        confidence=min(100, math.floor(best_score + 0.5)),
        sample=sample,
    )


def describe_improvements(
    details: Dict[str, Optional[AggregatedSelector]],
    current: Dict[str, str],
) -> List[str]:
    """与当前配置不同的字段，生成 `field: "旧" → "新"` 描述"""
    improvements = []
    for field_type, best in details.items():
        if best is None or best.selector == current.get(field_type):
            continue
        previous = current.get(field_type) or MISSING_SELECTOR_LABEL
        improvements.append(f'{field_type}: "{previous}" → "{best.selector}"')
    return improvements


class SelectorAggregator:
    """
    选择器聚合器：
    1. 样本 URL 顺序抓取（不渲染），单个样本抓取失败只记录日志并跳过。
    2. 每个样本每个字段只取最佳候选参与聚合。
    """

    def __init__(
        self,
        fetcher: Optional[HttpFetcher] = None,
        scorer: Optional[SelectorScorer] = None,
        field_types: Sequence[str] = tuple(CANDIDATES),
        max_samples: Optional[int] = None,
    ):
        self.fetcher = fetcher or HttpFetcher()
        self.scorer = scorer or SelectorScorer()
        self.field_types = tuple(field_types)
        self.max_samples = max_samples or config.selector.max_sample_urls

    def aggregate_documents(
        self,
        documents: Sequence[HtmlDocument],
        current: Optional[Dict[str, str]] = None,
    ) -> AggregatedSelectorSet:
        """对已解析的样本文档聚合"""
        current = current or {}
        details = {
            field_type: aggregate_candidates(
                [self.scorer.best(doc, field_type) for doc in documents],
                len(documents),
                field_type,
            )
            for field_type in self.field_types
        }
        return AggregatedSelectorSet(
            analyzed_urls=len(documents),
            details=details,
            improvements=describe_improvements(details, current),
        )

    async def fetch_documents(self, urls: Sequence[str]) -> List[HtmlDocument]:
        documents: List[HtmlDocument] = []
        for url in urls:
            try:
                html = await self.fetcher.fetch(url)
            except FetchFailure as e:
                logger.warning(f"[Aggregator] 跳过样本: {e}")
                continue
            documents.append(HtmlDocument(html, url))
        return documents

    async def aggregate(
        self,
        urls: Sequence[str],
        current: Optional[Dict[str, str]] = None,
    ) -> AggregatedSelectorSet:
        """
        抓取样本 URL 并聚合最佳选择器。

        Args:
            urls: 样本 URL（超出上限的部分被截断）
            current: 当前配置的选择器，用于生成差异描述

        Raises:
            ValidationError: URL 列表为空或含无效 URL
            FetchError: 所有样本都抓取失败
        """
        sample_urls = validate_sample_urls(list(urls), self.max_samples)
        logger.info(f"[Aggregator] 分析 {len(sample_urls)} 个样本")

        documents = await self.fetch_documents(sample_urls)
        if not documents:
            raise FetchError("无法分析任何样本 URL")

        result = self.aggregate_documents(documents, current)
        logger.info(f"[Aggregator] 完成: {len(documents)}/{len(sample_urls)} 个样本，{len(result.improvements)} 项改进")
        return result
