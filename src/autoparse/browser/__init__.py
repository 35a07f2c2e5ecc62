"""浏览器渲染与页面抓取模块"""

from .engine import BrowserSession, render_page
from .fetcher import HttpFetcher, fetch_html
from .profiles import SiteProfile, SiteProfileRegistry, get_profile_registry, get_site_profile

__all__ = [
    "BrowserSession",
    "render_page",
    "HttpFetcher",
    "fetch_html",
    "SiteProfile",
    "SiteProfileRegistry",
    "get_profile_registry",
    "get_site_profile",
]
