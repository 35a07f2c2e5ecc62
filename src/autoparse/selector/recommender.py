"""
按已知取值反查选择器

给定页面上某个字段的真实取值（如已解析出的标题、价格、图片地址），
找出自身文本与之相似的元素，并为这些元素生成候选选择器。
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Literal, Optional, Sequence

from ..browser.fetcher import HttpFetcher
from ..common.constants import MISSING_SELECTOR_LABEL, SAMPLE_MAX_LENGTH
from ..common.exceptions import ValidationError
from ..common.logger import get_logger
from ..common.types import SelectorRecommendation
from ..common.validators import validate_url
from ..document import Element, HtmlDocument

logger = get_logger(__name__)

ValueKind = Literal["text", "price", "image"]

SIMILARITY_THRESHOLD = 0.5
PRICE_SELECTOR_BONUS = 0.2
EXACT_MATCH_SCORE = 0.9
IMPROVEMENT_SCORE = 0.8
TOP_N = 5

_NON_DIGIT_RE = re.compile(r"[^0-9]")


def text_similarity(a: str, b: str) -> float:
    """简单相似度：完全相同 1.0，包含 0.8，数字部分相同 0.9"""
    if not a or not b:
        return 0.0
    left = a.lower().strip()
    right = b.lower().strip()
    if left == right:
        return 1.0
    if left in right or right in left:
        return 0.8
    left_digits = _NON_DIGIT_RE.sub("", left)
    right_digits = _NON_DIGIT_RE.sub("", right)
    if left_digits and right_digits and left_digits == right_digits:
        return 0.9
    return 0.0


def generate_selectors(element: Element) -> List[str]:
    """id、各个 class、itemprop、data-* 属性、标签名、父元素首个 class + 标签名"""
    selectors: List[str] = []
    element_id = element.attr("id")
    if element_id:
        selectors.append(f"#{element_id}")
    selectors.extend(f".{cls}" for cls in element.classes())

    itemprop = element.attr("itemprop")
    if itemprop:
        selectors.append(f'[itemprop="{itemprop}"]')
    selectors.extend(f"[{name}]" for name in element.attrs() if name.startswith("data-"))

    tag = element.tag.lower()
    if tag:
        selectors.append(tag)
        parent = element.parent()
        parent_classes = parent.classes() if parent else []
        if parent_classes:
            selectors.append(f".{parent_classes[0]} {tag}")
    return selectors


class SelectorRecommender:
    """值匹配选择器推荐"""

    def __init__(self, top_n: int = TOP_N):
        self.top_n = top_n

    def recommend(self, document: HtmlDocument, target_value: str, kind: ValueKind = "text") -> List[SelectorRecommendation]:
        """
        Args:
            document: 页面文档
            target_value: 已知字段取值
            kind: text / price / image

        Returns:
            按分数降序的候选（最多 top_n 个）
        """
        candidates: Dict[str, SelectorRecommendation] = {}

        def offer(selector: str, score: float, sample: str) -> None:
            existing = candidates.get(selector)
            if existing is None or existing.score < score:
                candidates[selector] = SelectorRecommendation(
                    selector=selector,
                    score=round(score, 4),
                    match_count=1,
                    sample_value=sample[:SAMPLE_MAX_LENGTH],
                )

        if kind == "image":
            for img in document.find("img"):
                src = img.attr("src") or ""
                similarity = text_similarity(src, target_value)
                if similarity > SIMILARITY_THRESHOLD:
                    for selector in generate_selectors(img):
                        offer(selector, similarity, src)
        else:
            for element in document.all_elements():
                text = element.own_text()
                if not text:
                    continue
                similarity = text_similarity(text, target_value)
                if similarity <= SIMILARITY_THRESHOLD:
                    continue
                for selector in generate_selectors(element):
                    bonus = 0.0
                    if kind == "price" and ("price" in selector or "금액" in selector):
                        bonus = PRICE_SELECTOR_BONUS
                    offer(selector, similarity + bonus, text)

        ranked = sorted(candidates.values(), key=lambda c: c.score, reverse=True)
        return ranked[: self.top_n]


def pick_best_item(items: Sequence[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """字段最完整的已解析条目：title+price+image > title+price > 第一个"""
    if not items:
        return None
    for item in items:
        if item.get("title") and item.get("price") and item.get("image"):
            return item
    for item in items:
        if item.get("title") and item.get("price"):
            return item
    return items[0]


def describe_recommendation_improvements(
    recommendations: Dict[str, List[SelectorRecommendation]],
    current: Dict[str, str],
) -> Dict[str, Dict[str, str]]:
    improvements: Dict[str, Dict[str, str]] = {}
    for field, candidates in recommendations.items():
        if not candidates:
            continue
        best = candidates[0]
        existing = current.get(field)
        if existing and best.score <= IMPROVEMENT_SCORE:
            continue
        if existing == best.selector:
            continue
        improvements[field] = {
            "current": existing or MISSING_SELECTOR_LABEL,
            "recommended": best.selector,
            "reason": (
                "정확히 일치하는 값을 찾았습니다"
                if best.score >= EXACT_MATCH_SCORE
                else "유사한 값을 포함하는 요소를 찾았습니다"
            ),
        }
    return improvements


def recommend_for_item(
    document: HtmlDocument,
    item: Dict[str, Any],
    current: Optional[Dict[str, str]] = None,
    recommender: Optional[SelectorRecommender] = None,
) -> Dict[str, Any]:
    """对单个已解析条目所在页面生成各字段推荐"""
    current = current or {}
    recommender = recommender or SelectorRecommender()

    recommendations: Dict[str, List[SelectorRecommendation]] = {}
    for field, kind in (("title", "text"), ("price", "price"), ("image", "image")):
        value = item.get(field)
        if value:
            recommendations[field] = recommender.recommend(document, str(value), kind)

    suggested: Dict[str, str] = {}
    for field in ("title", "price", "image"):
        ranked = recommendations.get(field)
        suggested[field] = ranked[0].selector if ranked else current.get(field, "")
    return {
        "analyzedUrl": item.get("url"),
        "recommendations": {k: [r.to_dict() for r in v] for k, v in recommendations.items()},
        "improvements": describe_recommendation_improvements(recommendations, current),
        "suggestedSelectors": suggested,
    }


async def recommend_from_items(
    url: str,
    parsed_items: Sequence[Dict[str, Any]],
    current: Optional[Dict[str, str]] = None,
    fetcher: Optional[HttpFetcher] = None,
) -> Dict[str, Any]:
    """
    选取最完整的已解析条目，抓取其页面并推荐选择器。

    Raises:
        ValidationError: url 或 parsed_items 无效
        FetchFailure: 条目页面抓取失败
    """
    validate_url(url)
    if not parsed_items:
        raise ValidationError("parsedItems 不能为空")

    item = pick_best_item(parsed_items)
    item_url = validate_url(item.get("url") or url)
    logger.info(f"[Recommender] 分析条目页面: {item_url}")

    html = await (fetcher or HttpFetcher()).fetch(item_url)
    result = recommend_for_item(HtmlDocument(html, item_url), {**item, "url": item_url}, current)
    logger.info(f"[Recommender] {len(result['improvements'])} 项改进")
    return result
