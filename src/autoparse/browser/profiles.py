"""
站点渲染配置表

按域名子串匹配站点配置（等待时间、滚动次数、等待选择器、额外请求头与 Cookie）。
未命中任何站点时返回默认配置。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence, Tuple
from urllib.parse import urlparse

from ..common.constants import DEFAULT_SCROLL_COUNT, DEFAULT_WAIT_MS
from ..common.types import CookieSpec


@dataclass(frozen=True)
class SiteProfile:
    """单个站点的渲染参数"""

    name: str
    domain: str = ""
    wait_ms: int = DEFAULT_WAIT_MS
    scroll_count: int = DEFAULT_SCROLL_COUNT
    wait_for_selector: Optional[str] = None
    selector_timeout_ms: int = 10000
    headers: Dict[str, str] = field(default_factory=dict)
    cookies: Tuple[CookieSpec, ...] = ()
    # 等待选择器超时后的补救动作：向下滚动若干像素后再等待
    fallback_scroll_px: int = 0
    fallback_wait_ms: int = 0

    def matches(self, host: str) -> bool:
        return bool(self.domain) and self.domain in host


DEFAULT_PROFILE = SiteProfile(name="default")

_KOREAN_HEADERS = {"Accept-Language": "ko-KR,ko;q=0.9,en-US;q=0.8,en;q=0.7"}


BUILTIN_PROFILES: Tuple[SiteProfile, ...] = (
    SiteProfile(
        name="musinsa",
        domain="musinsa.com",
        wait_ms=4000,
        scroll_count=3,
        wait_for_selector="a[data-price], a[data-item-id]",
        selector_timeout_ms=15000,
        fallback_scroll_px=500,
        fallback_wait_ms=3000,
    ),
    SiteProfile(
        name="hiver",
        domain="hiver.co.kr",
        wait_ms=4000,
        scroll_count=3,
        wait_for_selector='a[href*="/products/"], a[href*="/goods/"], [class*="product"]',
    ),
    SiteProfile(
        name="wconcept",
        domain="wconcept.co.kr",
        wait_ms=4000,
        scroll_count=3,
        wait_for_selector='a[href*="/products/"], a[href*="/goods/"], [class*="product"]',
    ),
    SiteProfile(
        name="gmarket",
        domain="gmarket.co.kr",
        wait_ms=3000,
        headers=dict(_KOREAN_HEADERS),
        cookies=(CookieSpec(name="shipnation", value="KR", domain=".gmarket.co.kr"),),
    ),
    SiteProfile(
        name="auction",
        domain="auction.co.kr",
        wait_ms=3000,
        headers=dict(_KOREAN_HEADERS),
        cookies=(CookieSpec(name="shipnation", value="KR", domain=".auction.co.kr"),),
    ),
    SiteProfile(
        name="coupang",
        domain="coupang.com",
        wait_ms=4000,
        headers={
            "Accept-Language": "ko-KR,ko;q=0.9",
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
        },
    ),
    SiteProfile(
        name="11st",
        domain="11st.co.kr",
        wait_ms=2500,
        wait_for_selector='[class*="c-card"], [class*="product"], .l_product_cont',
    ),
)


class SiteProfileRegistry:
    """
    站点配置表（只读）。
    按配置顺序匹配，首个命中的配置生效。
    """

    def __init__(self, profiles: Optional[Sequence[SiteProfile]] = None, default: SiteProfile = DEFAULT_PROFILE):
        self._profiles: Tuple[SiteProfile, ...] = tuple(profiles if profiles is not None else BUILTIN_PROFILES)
        self.default = default

    def lookup(self, url: str) -> SiteProfile:
        """根据 URL 的域名查找站点配置"""
        host = (urlparse(url).hostname or "").lower()
        for profile in self._profiles:
            if profile.matches(host):
                return profile
        return self.default

    def __iter__(self):
        return iter(self._profiles)

    def __len__(self) -> int:
        return len(self._profiles)


_registry: Optional[SiteProfileRegistry] = None


def get_profile_registry() -> SiteProfileRegistry:
    """获取全局站点配置表"""
    global _registry
    if _registry is None:
        _registry = SiteProfileRegistry()
    return _registry


def get_site_profile(url: str) -> SiteProfile:
    return get_profile_registry().lookup(url)
