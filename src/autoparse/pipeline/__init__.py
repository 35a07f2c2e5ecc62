"""请求级运行器"""

from .runner import (
    analyze,
    extract_detail,
    extract_list,
    optimize_selectors,
    parse_sample,
    recommend_selectors,
    render_options_from_request,
    url_pattern,
)

__all__ = [
    "analyze",
    "extract_detail",
    "extract_list",
    "optimize_selectors",
    "parse_sample",
    "recommend_selectors",
    "render_options_from_request",
    "url_pattern",
]
