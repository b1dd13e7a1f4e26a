"""
Tests for the news fan-out: dedup, ranking, truncation and per-adapter
failure isolation.
"""

import pytest

from conftest import FakeNewsProvider, make_article, utc
from src.market_insight.schemas.news import NewsProviderName, SourceTier
from src.market_insight.services.news_reconciliation import (
    DEDUP_PREFIX_LENGTH,
    NewsReconciliationService,
    deduplicate_articles,
    sort_articles,
)


# ============================================================================
# DEDUP
# ============================================================================

class TestDeduplicate:

    def test_same_prefix_keeps_first(self):
        prefix = "x" * DEDUP_PREFIX_LENGTH
        first = make_article(prefix + " from wire A", source="A")
        second = make_article(prefix.upper() + " from wire B", source="B")

        result = deduplicate_articles([first, second])

        assert result == [first]

    def test_different_within_prefix_kept(self):
        a = make_article("Apple reports record quarter")
        b = make_article("Apple reports weak quarter")

        assert len(deduplicate_articles([a, b])) == 2


# ============================================================================
# SORT
# ============================================================================

class TestSortArticles:

    def test_relevance_first(self):
        low = make_article("low", relevance=5, tier=SourceTier.TIER1)
        high = make_article("high", relevance=20, tier=SourceTier.TIER3)

        assert [a.headline for a in sort_articles([low, high])] == ["high", "low"]

    def test_tier_breaks_relevance_tie(self):
        tier3 = make_article("tier3", relevance=10, tier=SourceTier.TIER3)
        tier1 = make_article("tier1", relevance=10, tier=SourceTier.TIER1)
        tier2 = make_article("tier2", relevance=10, tier=SourceTier.TIER2)

        assert [a.headline for a in sort_articles([tier3, tier1, tier2])] == ["tier1", "tier2", "tier3"]

    def test_newest_breaks_tier_tie_and_undated_last(self):
        old = make_article("old", published_at=utc(2024, 1, 1))
        undated = make_article("undated")
        new = make_article("new", published_at=utc(2024, 3, 1))

        assert [a.headline for a in sort_articles([old, undated, new])] == ["new", "old", "undated"]


# ============================================================================
# FAN-OUT
# ============================================================================

class TestNewsReconciliationService:

    @pytest.mark.asyncio
    async def test_failed_adapter_does_not_affect_others(self, settings):
        good = FakeNewsProvider(
            "Finnhub", NewsProviderName.FINNHUB,
            articles=[make_article("AAPL earnings beat", relevance=15)],
        )
        broken = FakeNewsProvider("NewsAPI", NewsProviderName.NEWS_API, error="HTTP 500")
        service = NewsReconciliationService(settings, [broken, good])

        result = await service.gather("AAPL", "Apple Inc")

        assert [a.headline for a in result.articles] == ["AAPL earnings beat"]
        assert result.sources == ["Finnhub"]
        assert [t.success for t in result.tasks] == [False, True]
        assert result.tasks[0].error == "HTTP 500"

    @pytest.mark.asyncio
    async def test_three_of_four_adapters_failing(self, settings):
        alpha = FakeNewsProvider(
            "Alpha Vantage", NewsProviderName.ALPHA_VANTAGE,
            articles=[make_article(f"Apple headline number {i}", relevance=10 - i) for i in range(5)],
        )
        service = NewsReconciliationService(settings, [
            FakeNewsProvider("NewsAPI", NewsProviderName.NEWS_API, error="HTTP 429"),
            FakeNewsProvider("Finnhub", NewsProviderName.FINNHUB, error="ConnectError"),
            alpha,
            FakeNewsProvider("Polygon", NewsProviderName.POLYGON, error="HTTP 500"),
        ])

        result = await service.gather("AAPL", "Apple Inc")

        assert len(result.articles) == 5
        assert [a.headline for a in result.articles] == [f"Apple headline number {i}" for i in range(5)]
        assert result.sources == ["Alpha Vantage"]
        assert [t.success for t in result.tasks] == [False, False, True, False]

    @pytest.mark.asyncio
    async def test_merge_dedup_and_cap(self, settings):
        shared = "Apple unveils new product line at its annual event in California"
        first = FakeNewsProvider(
            "NewsAPI", NewsProviderName.NEWS_API,
            articles=[make_article(shared, relevance=10, source="first")]
            + [make_article(f"story {i}", relevance=i) for i in range(30)],
        )
        second = FakeNewsProvider(
            "Polygon", NewsProviderName.POLYGON,
            articles=[make_article(shared + " (updated)", relevance=10, source="second")],
        )
        service = NewsReconciliationService(settings, [first, second])

        result = await service.gather("AAPL", "Apple Inc")

        assert result.total_fetched == 32
        assert result.after_dedup == 31
        assert len(result.articles) == settings.NEWS_MAX_ARTICLES
        survivors = [a for a in result.articles if a.headline.startswith("Apple unveils")]
        assert [a.source for a in survivors] == ["first"]

    @pytest.mark.asyncio
    async def test_sources_filter_skips_other_adapters(self, settings):
        newsapi = FakeNewsProvider("NewsAPI", NewsProviderName.NEWS_API, articles=[make_article("a")])
        polygon = FakeNewsProvider("Polygon", NewsProviderName.POLYGON, articles=[make_article("b")])
        service = NewsReconciliationService(settings, [newsapi, polygon])

        result = await service.gather("AAPL", "Apple Inc", sources=[NewsProviderName.POLYGON])

        assert [a.headline for a in result.articles] == ["b"]
        assert newsapi.calls == 0
        assert polygon.calls == 1

    @pytest.mark.asyncio
    async def test_all_adapters_fail_gives_empty(self, settings):
        service = NewsReconciliationService(settings, [
            FakeNewsProvider("NewsAPI", NewsProviderName.NEWS_API, error="boom"),
        ])

        result = await service.gather("AAPL", "Apple Inc")

        assert result.articles == []
        assert result.sources == []
