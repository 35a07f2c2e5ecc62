"""SelectorRecommender 单元测试"""

import pytest

from autoparse.common.exceptions import ValidationError
from autoparse.document import HtmlDocument
from autoparse.selector.recommender import (
    SelectorRecommender,
    describe_recommendation_improvements,
    pick_best_item,
    recommend_from_items,
    text_similarity,
)

ITEM_HTML = """
<html><body>
    <div class="info">
        <h2 class="goods-title" id="gt">Wool Coat</h2>
        <span class="price sale" data-price="1">59,000원</span>
        <img class="main" src="https://cdn.example.com/coat.jpg">
    </div>
</body></html>
"""
ITEM_URL = "https://shop.example.com/p/1"


class TestTextSimilarity:

    @pytest.mark.parametrize("a, b, expected", [
        ("Hello", " hello ", 1.0),
        ("Wireless", "Wireless Headphones", 0.8),
        ("₩199,000", "199000원", 0.9),
        ("abc", "xyz", 0.0),
        ("abc", "", 0.0),
    ])
    def test_similarity(self, a, b, expected):
        assert text_similarity(a, b) == expected


class TestSelectorRecommender:

    def setup_method(self):
        self.document = HtmlDocument(ITEM_HTML, ITEM_URL)
        self.recommender = SelectorRecommender()

    def test_text_value(self):
        results = self.recommender.recommend(self.document, "Wool Coat", "text")
        assert [r.selector for r in results] == ["#gt", ".goods-title", "h2", ".info h2"]
        assert all(r.score == 1.0 for r in results)

    def test_price_selectors_get_bonus(self):
        results = self.recommender.recommend(self.document, "59000", "price")
        assert results[0].selector == ".price"
        assert results[0].score == pytest.approx(1.1)
        assert results[1].selector == "[data-price]"
        assert results[2].score == pytest.approx(0.9)

    def test_image_value(self):
        results = self.recommender.recommend(self.document, "https://cdn.example.com/coat.jpg", "image")
        assert [r.selector for r in results] == [".main", "img", ".info img"]

    def test_no_similar_value(self):
        assert self.recommender.recommend(self.document, "Leather Boots", "text") == []


class TestImprovements:

    def test_pick_best_item(self):
        items = [{"title": "A"}, {"title": "B", "price": "1"}, {"title": "C", "price": "2", "image": "x"}]
        assert pick_best_item(items)["title"] == "C"
        assert pick_best_item(items[:2])["title"] == "B"
        assert pick_best_item([{"url": "u"}]) == {"url": "u"}
        assert pick_best_item([]) is None

    def test_improvement_descriptions(self):
        document = HtmlDocument(ITEM_HTML, ITEM_URL)
        recommendations = {"title": SelectorRecommender().recommend(document, "Wool Coat")}

        improvements = describe_recommendation_improvements(recommendations, {"title": ".old"})
        assert improvements["title"]["current"] == ".old"
        assert improvements["title"]["recommended"] == "#gt"
        assert improvements["title"]["reason"] == "정확히 일치하는 값을 찾았습니다"

        assert describe_recommendation_improvements(recommendations, {"title": "#gt"}) == {}

    def test_weak_match_does_not_replace_existing(self):
        document = HtmlDocument(ITEM_HTML, ITEM_URL)
        recommendations = {"title": SelectorRecommender().recommend(document, "Wool")}
        assert recommendations["title"][0].score == 0.8
        assert describe_recommendation_improvements(recommendations, {"title": ".old"}) == {}
        missing = describe_recommendation_improvements(recommendations, {})
        assert missing["title"]["current"] == "(없음)"
        assert missing["title"]["reason"] == "유사한 값을 포함하는 요소를 찾았습니다"


class TestRecommendFromItems:

    @pytest.mark.asyncio
    async def test_fetches_most_complete_item(self, fake_fetcher_factory):
        fetcher = fake_fetcher_factory({ITEM_URL: ITEM_HTML})
        items = [
            {"title": "Something else", "url": "https://shop.example.com/p/2"},
            {"title": "Wool Coat", "price": "59,000원", "url": ITEM_URL},
        ]

        result = await recommend_from_items("https://shop.example.com/list", items, {"image": "img.x"}, fetcher=fetcher)

        assert fetcher.requested == [ITEM_URL]
        assert result["analyzedUrl"] == ITEM_URL
        assert result["suggestedSelectors"] == {"title": "#gt", "price": ".price", "image": "img.x"}
        assert set(result["improvements"]) == {"title", "price"}
        assert result["recommendations"]["price"][0]["matchCount"] == 1

    @pytest.mark.asyncio
    async def test_empty_items(self, fake_fetcher_factory):
        with pytest.raises(ValidationError):
            await recommend_from_items("https://shop.example.com/list", [], fetcher=fake_fetcher_factory({}))

    @pytest.mark.asyncio
    async def test_invalid_url(self, fake_fetcher_factory):
        with pytest.raises(ValidationError):
            await recommend_from_items("not-a-url", [{"title": "x"}], fetcher=fake_fetcher_factory({}))
