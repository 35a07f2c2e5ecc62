"""选择器评分、聚合与推荐"""

from .aggregator import SelectorAggregator, aggregate_candidates
from .recommender import SelectorRecommender, recommend_from_items, text_similarity
from .scorer import CANDIDATES, SelectorScorer
from .suggest import suggest_selectors

__all__ = [
    "CANDIDATES",
    "SelectorAggregator",
    "SelectorRecommender",
    "SelectorScorer",
    "aggregate_candidates",
    "recommend_from_items",
    "suggest_selectors",
    "text_similarity",
]
