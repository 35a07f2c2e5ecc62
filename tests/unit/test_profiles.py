"""站点配置表单元测试"""

from autoparse.browser.profiles import (
    BUILTIN_PROFILES,
    DEFAULT_PROFILE,
    SiteProfile,
    SiteProfileRegistry,
    get_site_profile,
)
from autoparse.common.constants import DEFAULT_SCROLL_COUNT, DEFAULT_WAIT_MS


class TestSiteProfileRegistry:

    def test_lookup_by_domain_substring(self):
        registry = SiteProfileRegistry()
        profile = registry.lookup("https://www.musinsa.com/category/001")
        assert profile.name == "musinsa"
        assert profile.wait_ms == 4000
        assert profile.scroll_count == 3
        assert profile.fallback_scroll_px == 500

    def test_unknown_domain_gets_default(self):
        profile = SiteProfileRegistry().lookup("https://unknown.example.org/list")
        assert profile is DEFAULT_PROFILE
        assert profile.wait_ms == DEFAULT_WAIT_MS
        assert profile.scroll_count == DEFAULT_SCROLL_COUNT

    def test_custom_profiles_first_match_wins(self):
        """自定义配置表按顺序匹配"""
        profiles = (
            SiteProfile(name="shop-m", domain="m.shop.example.com", scroll_count=1),
            SiteProfile(name="shop", domain="shop.example.com", wait_ms=100),
        )
        registry = SiteProfileRegistry(profiles=profiles)
        assert len(registry) == 2
        assert registry.lookup("https://m.shop.example.com/list").name == "shop-m"
        assert registry.lookup("https://shop.example.com/list").wait_ms == 100

    def test_registry_has_no_runtime_registration(self):
        registry = SiteProfileRegistry()
        assert not hasattr(registry, "register")
        assert [p.name for p in registry] == [p.name for p in BUILTIN_PROFILES]

    def test_cookie_profiles(self):
        profile = get_site_profile("https://browse.gmarket.co.kr/list")
        assert profile.cookies[0].name == "shipnation"
        assert profile.headers["Accept-Language"].startswith("ko-KR")

    def test_empty_domain_never_matches(self):
        assert not SiteProfile(name="x").matches("anything.com")
