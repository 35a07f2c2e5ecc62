"""
URL 路径模板化

单个 URL：纯数字或长十六进制段 -> {id}，含百分号编码或非 ASCII 的段 -> {keyword}。
多个 URL：按位置对齐，取值不唯一的位置 -> {id}，唯一取值再按单段规则处理。
结果可重复应用而不再变化。
"""

from __future__ import annotations

import re
from typing import Iterable, List, Sequence, Union
from urllib.parse import urlparse

ID_PLACEHOLDER = "{id}"
KEYWORD_PLACEHOLDER = "{keyword}"

_NUMERIC_RE = re.compile(r"^\d+$")
_HEX_RE = re.compile(r"^[a-f0-9]{8,}$", re.IGNORECASE)
_PERCENT_ENCODED_RE = re.compile(r"%[0-9A-Fa-f]{2}")


def _path_segments(url: str) -> List[str]:
    path = urlparse(url.strip()).path if url else ""
    return [part for part in path.split("/") if part]


def generalize_segment(segment: str) -> str:
    """单个路径段的模板化"""
    if _NUMERIC_RE.match(segment) or _HEX_RE.match(segment):
        return ID_PLACEHOLDER
    if _PERCENT_ENCODED_RE.search(segment) or not segment.isascii():
        return KEYWORD_PLACEHOLDER
    return segment


def _join(segments: Iterable[str]) -> str:
    return "/" + "/".join(segments)


def generalize_url(url: str) -> str:
    """单个 URL（或已模板化的路径）

    Example:
        >>> generalize_url("https://shop.example.com/products/12345/review")
        '/products/{id}/review'
    """
    return _join(generalize_segment(part) for part in _path_segments(url))


def generalize_urls(urls: Sequence[str]) -> str:
    """多个 URL 按位置对齐求公共模板

    Example:
        >>> generalize_urls(["https://a.com/goods/123/abc", "https://a.com/goods/456/abc"])
        '/goods/{id}/abc'
    """
    urls = [u for u in urls if u]
    if not urls:
        return ""
    if len(urls) == 1:
        return generalize_url(urls[0])

    paths = [_path_segments(u) for u in urls]
    max_length = max(len(p) for p in paths)
    pattern: List[str] = []
    for index in range(max_length):
        values = {p[index] for p in paths if index < len(p)}
        if len(values) == 1:
            pattern.append(values.pop())
        else:
            pattern.append(ID_PLACEHOLDER)
    return _join(pattern)


def generalize(sample: Union[str, Sequence[str]]) -> str:
    """接受单个 URL 或 URL 列表"""
    if isinstance(sample, str):
        return generalize_url(sample)
    return generalize_urls(list(sample))
