"""
Shared fixtures: settings with every provider key set, an HTTP pool wired to
httpx.MockTransport, and small in-memory stand-ins for provider adapters.
"""

from datetime import datetime, timezone
from typing import Callable, List, Optional

import httpx
import pytest

from src.market_insight.providers.base_provider import FetchOutcome, NewsProvider
from src.market_insight.schemas.news import (
    Article,
    NewsProviderName,
    Sentiment,
    SourceTier,
)
from src.utils.config import Settings
from src.utils.http_client_pool import HTTPClientManager


# ============================================================================
# SETTINGS / HTTP
# ============================================================================

@pytest.fixture
def settings() -> Settings:
    """Settings with all credentials configured and short timeouts"""
    return Settings(
        FMP_KEY="fmp-test",
        NEWS_API_KEY="newsapi-test",
        FINNHUB_KEY="finnhub-test",
        ALPHA_VANTAGE_KEY="av-test",
        POLYGON_KEY="polygon-test",
        QUICK_ANALYZE_TIMEOUT=0.5,
        CRYPTO_METRICS_TIMEOUT=0.5,
        RATE_LIMIT_ENABLED=False,
    )


@pytest.fixture
def bare_settings() -> Settings:
    """Settings with no provider credentials"""
    return Settings(
        FMP_KEY=None,
        NEWS_API_KEY=None,
        FINNHUB_KEY=None,
        ALPHA_VANTAGE_KEY=None,
        POLYGON_KEY=None,
        IEX_KEY=None,
    )


def mock_http(settings: Settings, handler: Callable[[httpx.Request], httpx.Response]) -> HTTPClientManager:
    """HTTPClientManager whose requests are answered by ``handler``"""
    return HTTPClientManager(settings, transport=httpx.MockTransport(handler))


# ============================================================================
# ARTICLES / FAKE ADAPTERS
# ============================================================================

def make_article(
    headline: str,
    relevance: int = 0,
    tier: SourceTier = SourceTier.TIER3,
    published_at: Optional[datetime] = None,
    sentiment: Sentiment = Sentiment.NEUTRAL,
    provider: NewsProviderName = NewsProviderName.NEWS_API,
    source: str = "Test Wire",
) -> Article:
    return Article(
        headline=headline,
        source=source,
        source_tier=tier,
        published_at=published_at,
        sentiment=sentiment,
        relevance_score=relevance,
        provider=provider,
    )


def utc(year: int, month: int, day: int, hour: int = 0) -> datetime:
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


class FakeNewsProvider(NewsProvider):
    """News adapter returning a canned outcome and counting calls"""

    def __init__(
        self,
        name: str,
        source: NewsProviderName,
        articles: Optional[List[Article]] = None,
        error: Optional[str] = None,
    ):
        self.provider_name = name
        self._source = source
        self._articles = articles or []
        self._error = error
        self.calls = 0

    @property
    def news_source(self) -> NewsProviderName:
        return self._source

    async def fetch_news(self, symbol: str, company: str) -> FetchOutcome[List[Article]]:
        self.calls += 1
        if self._error:
            return FetchOutcome.failed(self.provider_name, self._error)
        return FetchOutcome.success(self.provider_name, list(self._articles))
