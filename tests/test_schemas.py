"""Schema behaviour that the endpoints rely on"""

import pytest

from conftest import make_article, utc
from src.market_insight.schemas.news import NewsProviderName
from src.market_insight.schemas.quote import Quote
from src.market_insight.schemas.request import NewsQuery


class TestQuote:

    def test_change_derived(self):
        quote = Quote.from_prices(105.0, 100.0, symbol="X", name="X", source="test")

        assert quote.change == pytest.approx(5.0)
        assert quote.change_percent == pytest.approx(5.0)

    @pytest.mark.parametrize("previous_close", [None, 0.0, -50.0])
    def test_change_absent_without_positive_previous_close(self, previous_close):
        quote = Quote.from_prices(105.0, previous_close, symbol="X", name="X", source="test")

        assert quote.change is None
        assert quote.change_percent is None


class TestNewsQuery:

    def test_all_means_every_source(self):
        assert NewsQuery.from_params(limit=20, sources="all").sources is None
        assert NewsQuery.from_params(limit=20, sources="ALL").sources is None

    def test_comma_separated(self):
        query = NewsQuery.from_params(limit=5, sources="finnhub, Polygon")

        assert query.sources == [NewsProviderName.FINNHUB, NewsProviderName.POLYGON]
        assert query.limit == 5

    def test_unknown_source_rejected(self):
        with pytest.raises(ValueError):
            NewsQuery.from_params(limit=5, sources="reddit")


def test_article_timestamp_serialized_as_iso():
    article = make_article("headline", published_at=utc(2024, 1, 5, 10))

    assert article.model_dump()["published_at"] == "2024-01-05T10:00:00+00:00"
    assert make_article("undated").model_dump()["published_at"] is None
