"""URL 模式"""

from .url_pattern import generalize, generalize_segment, generalize_url, generalize_urls

__all__ = [
    "generalize",
    "generalize_segment",
    "generalize_url",
    "generalize_urls",
]
