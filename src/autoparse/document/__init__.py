"""HTML 文档抽象层"""

from .html_document import Element, ElementSet, HtmlDocument, collapse_whitespace

__all__ = [
    "Element",
    "ElementSet",
    "HtmlDocument",
    "collapse_whitespace",
]
