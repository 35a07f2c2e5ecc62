"""商品列表与详情抽取"""

from .detail_extractor import ProductDetailExtractor, extract_detail
from .list_extractor import ProductListExtractor, extract_list, extract_pagination
from .name_normalizer import NameNormalizer, NormalizedName
from .strategies import DEFAULT_STRATEGIES, ProductCollector, StrategyContext

__all__ = [
    "DEFAULT_STRATEGIES",
    "NameNormalizer",
    "NormalizedName",
    "ProductCollector",
    "ProductDetailExtractor",
    "ProductListExtractor",
    "StrategyContext",
    "extract_detail",
    "extract_list",
    "extract_pagination",
]
