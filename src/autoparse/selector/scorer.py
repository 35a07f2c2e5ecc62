"""
选择器评分

对给定文档和字段类型，按固定规则给候选选择器打分（基础分 50，各项加分可叠加）。
相同输入总是得到相同分数。
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Tuple

from ..common.constants import SAMPLE_MAX_LENGTH
from ..common.logger import get_logger
from ..common.types import SelectorCandidate
from ..document import HtmlDocument

logger = get_logger(__name__)

BASE_SCORE = 50

# 字段内容加分
IMAGE_WIDE_BONUS = 20
IMAGE_ABSOLUTE_BONUS = 10
TITLE_LENGTH_BONUS = 20
TITLE_NUMERIC_PENALTY = -30
PRICE_DIGIT_BONUS = 30
PRICE_CURRENCY_BONUS = 20
DESCRIPTION_LONG_BONUS = 20
DESCRIPTION_VERY_LONG_BONUS = 10

# 选择器形式加分
ITEMPROP_BONUS = 15
CLASS_BONUS = 10
ID_BONUS = 12

# h1 派生的动态标题候选
H1_ID_SCORE = 70
H1_CLASS_SCORE = 65

_CURRENCY_RE = re.compile(r"[₩$€¥원]")
_DIGIT_RE = re.compile(r"\d")
_NUMERIC_RE = re.compile(r"^\d+$")

TITLE_CANDIDATES: Tuple[str, ...] = (
    '[itemprop="name"]',
    "h1",
    ".product-title",
    ".product-name",
    ".title",
    "[data-product-name]",
    ".item-title",
    ".goods-name",
    ".prd-name",
)

PRICE_CANDIDATES: Tuple[str, ...] = (
    '[itemprop="price"]',
    ".price",
    ".product-price",
    "[data-price]",
    ".sale-price",
    ".current-price",
    ".selling-price",
    ".cost",
    ".prd-price",
)

IMAGE_CANDIDATES: Tuple[str, ...] = (
    '[itemprop="image"]',
    ".product-image img",
    ".main-image img",
    ".detail-image img",
    ".thumbnail img",
    "[data-image]",
    "img.product",
)

DESCRIPTION_CANDIDATES: Tuple[str, ...] = (
    '[itemprop="description"]',
    ".product-description",
    ".description",
    ".detail-description",
    "[data-description]",
    ".content",
)

CANDIDATES: Dict[str, Tuple[str, ...]] = {
    "title": TITLE_CANDIDATES,
    "price": PRICE_CANDIDATES,
    "image": IMAGE_CANDIDATES,
    "description": DESCRIPTION_CANDIDATES,
}


def _int_attr(value: Optional[str]) -> int:
    match = re.match(r"\s*(\d+)", value or "")
    return int(match.group(1)) if match else 0


def selector_bonus(selector: str) -> int:
    """选择器形式加分：itemprop / class / id"""
    bonus = 0
    if "[itemprop=" in selector:
        bonus += ITEMPROP_BONUS
    if selector.startswith("."):
        bonus += CLASS_BONUS
    if selector.startswith("#"):
        bonus += ID_BONUS
    return bonus


def content_score(value: str, field_type: str, width: int = 0) -> int:
    """字段内容加分（不含基础分）"""
    score = 0
    if field_type == "image":
        if width > 200:
            score += IMAGE_WIDE_BONUS
        if value.startswith("http"):
            score += IMAGE_ABSOLUTE_BONUS
    elif field_type == "title":
        if 5 <= len(value) <= 200:
            score += TITLE_LENGTH_BONUS
        if _NUMERIC_RE.match(value):
            score += TITLE_NUMERIC_PENALTY
    elif field_type == "price":
        if _DIGIT_RE.search(value):
            score += PRICE_DIGIT_BONUS
        if _CURRENCY_RE.search(value):
            score += PRICE_CURRENCY_BONUS
    elif field_type == "description":
        if len(value) > 50:
            score += DESCRIPTION_LONG_BONUS
        if len(value) > 200:
            score += DESCRIPTION_VERY_LONG_BONUS
    return score


class SelectorScorer:
    """候选选择器评分器"""

    def __init__(self, candidates: Optional[Dict[str, Tuple[str, ...]]] = None):
        self.candidates = candidates or CANDIDATES

    def score(self, document: HtmlDocument, selector: str, field_type: str) -> Optional[SelectorCandidate]:
        """
        给单个选择器打分。

        Args:
            document: 页面文档
            selector: CSS 选择器
            field_type: 字段类型（title / price / image / description ...）

        Returns:
            SelectorCandidate；选择器无匹配或内容为空时返回 None
        """
        element = document.find(selector).first()
        if element is None:
            return None

        width = 0
        if field_type == "image":
            value = element.attr("src") or element.attr("data-src") or ""
            width = _int_attr(element.attr("width"))
        else:
            value = element.text()
        if not value:
            return None

        total = BASE_SCORE + content_score(value, field_type, width) + selector_bonus(selector)
        return SelectorCandidate(
            field_type=field_type,
            selector=selector,
            score=max(total, 0),
            sample=value[:SAMPLE_MAX_LENGTH],
        )

    def dynamic_title_candidate(self, document: HtmlDocument) -> Optional[SelectorCandidate]:
        """由页面 h1 的 id / 首个 class 派生的标题候选"""
        h1 = document.find("h1").first()
        if h1 is None:
            return None
        sample = h1.text()[:SAMPLE_MAX_LENGTH]
        element_id = h1.attr("id")
        if element_id:
            return SelectorCandidate(field_type="title", selector=f"#{element_id}", score=H1_ID_SCORE, sample=sample)
        classes = h1.classes()
        if classes:
            return SelectorCandidate(field_type="title", selector=f".{classes[0]}", score=H1_CLASS_SCORE, sample=sample)
        return None

    def score_all(self, document: HtmlDocument, field_type: str) -> List[SelectorCandidate]:
        """对字段的全部候选打分，按分数降序"""
        results: List[SelectorCandidate] = []
        for selector in self.candidates.get(field_type, ()):
            candidate = self.score(document, selector, field_type)
            if candidate is not None and candidate.score > 0:
                results.append(candidate)
        if field_type == "title":
            dynamic = self.dynamic_title_candidate(document)
            if dynamic is not None:
                results.append(dynamic)
        results.sort(key=lambda c: c.score, reverse=True)
        return results

    def best(self, document: HtmlDocument, field_type: str) -> Optional[SelectorCandidate]:
        """字段在单个文档中的最佳选择器"""
        results = self.score_all(document, field_type)
        return results[0] if results else None
