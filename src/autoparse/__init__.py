"""AutoParse - 无需逐站点编写爬虫的电商商品抽取"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

__version__ = "0.1.0"

if TYPE_CHECKING:
    from .browser.engine import BrowserSession as BrowserSession
    from .document import HtmlDocument as HtmlDocument
    from .extractor.detail_extractor import ProductDetailExtractor as ProductDetailExtractor
    from .extractor.list_extractor import ProductListExtractor as ProductListExtractor
    from .pattern import generalize as generalize
    from .selector.aggregator import SelectorAggregator as SelectorAggregator
    from .selector.scorer import SelectorScorer as SelectorScorer

__all__ = [
    "__version__",
    "BrowserSession",
    "HtmlDocument",
    "ProductDetailExtractor",
    "ProductListExtractor",
    "SelectorAggregator",
    "SelectorScorer",
    "generalize",
]

_LAZY_EXPORTS = {
    "BrowserSession": ".browser.engine",
    "HtmlDocument": ".document",
    "ProductDetailExtractor": ".extractor.detail_extractor",
    "ProductListExtractor": ".extractor.list_extractor",
    "SelectorAggregator": ".selector.aggregator",
    "SelectorScorer": ".selector.scorer",
    "generalize": ".pattern",
}


def __getattr__(name: str) -> Any:
    """Lazy exports to avoid importing playwright at package import time."""
    module_name = _LAZY_EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module 'autoparse' has no attribute '{name}'")

    from importlib import import_module

    return getattr(import_module(module_name, __name__), name)
