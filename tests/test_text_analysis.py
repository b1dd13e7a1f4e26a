"""Unit tests for headline heuristics"""

import pytest

from src.market_insight.schemas.news import (
    ImpactLevel,
    NewsCategory,
    Sentiment,
    SourceTier,
)
from src.market_insight.services.text_analysis import (
    analyze_text_sentiment,
    bucket_provider_sentiment,
    calculate_relevance_score,
    categorize_news,
    get_impact_level,
    get_source_tier,
    tier_weight,
)


class TestRelevanceScore:

    def test_symbol_keywords_and_high_impact_terms(self):
        # symbol +10, "earnings" and "revenue" +5 each, "ceo" +3
        score = calculate_relevance_score(
            "AAPL earnings beat as revenue climbs",
            "CEO comments on the quarter",
            "AAPL",
        )
        assert score == 23

    def test_each_term_counts_once(self):
        assert calculate_relevance_score("earnings earnings earnings", None, "MSFT") == 5

    def test_no_matches(self):
        assert calculate_relevance_score("Markets open quietly", "", "TSLA") == 0

    def test_symbol_match_is_case_insensitive(self):
        assert calculate_relevance_score("tsla shares", None, "TSLA") == 10


class TestCategoryAndImpact:

    @pytest.mark.parametrize("headline,expected", [
        ("Quarterly revenue tops estimates", NewsCategory.EARNINGS),
        ("Analyst raises price target", NewsCategory.ANALYST),
        ("Company announces merger talks", NewsCategory.CORPORATE),
        ("Regulators open investigation", NewsCategory.LEGAL),
        ("Shares trade sideways", NewsCategory.GENERAL),
    ])
    def test_categorize(self, headline, expected):
        assert categorize_news(headline) == expected

    def test_first_matching_category_wins(self):
        # Both earnings and analyst words present; earnings is checked first
        assert categorize_news("Analyst previews earnings") == NewsCategory.EARNINGS

    def test_impact_levels(self):
        assert get_impact_level("FDA approves new drug") == ImpactLevel.HIGH
        assert get_impact_level("Broker issues downgrade") == ImpactLevel.MEDIUM
        assert get_impact_level("Weekly recap") == ImpactLevel.LOW


class TestSourceTier:

    def test_tiers(self):
        assert get_source_tier("Reuters") == SourceTier.TIER1
        assert get_source_tier("The Wall Street Journal") == SourceTier.TIER1
        assert get_source_tier("CNBC") == SourceTier.TIER2
        assert get_source_tier("Some Blog") == SourceTier.TIER3
        assert get_source_tier(None) == SourceTier.TIER3

    def test_weights_are_ordered(self):
        assert tier_weight(SourceTier.TIER1) > tier_weight(SourceTier.TIER2) > tier_weight(SourceTier.TIER3)


class TestSentiment:

    def test_positive(self):
        assert analyze_text_sentiment("Stock posts strong growth and a rally") == Sentiment.POSITIVE

    def test_negative(self):
        assert analyze_text_sentiment("Shares plunge after disappointing results") == Sentiment.NEGATIVE

    def test_tie_is_neutral(self):
        assert analyze_text_sentiment("Company beat estimates but shares crash") == Sentiment.NEUTRAL

    @pytest.mark.parametrize("score,expected", [
        (0.35, Sentiment.POSITIVE),
        (-0.2, Sentiment.NEGATIVE),
        (0.1, Sentiment.NEUTRAL),
        (None, Sentiment.NEUTRAL),
    ])
    def test_provider_score_buckets(self, score, expected):
        assert bucket_provider_sentiment(score) == expected
