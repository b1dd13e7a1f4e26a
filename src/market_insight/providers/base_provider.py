# src/market_insight/providers/base_provider.py
"""
Provider adapter base classes.

Every adapter wraps exactly one upstream HTTP API and exposes one or more
capabilities (quote, chart, profile, news, earnings, crypto metrics). A
capability call never raises past the adapter: it returns a FetchOutcome
that is either ok (with a value), unavailable (credential missing) or
failed (upstream or payload error). Each call is a single attempt.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Generic, List, Optional, TypeVar

import httpx

from src.market_insight.schemas.earnings import EarningsReport
from src.market_insight.schemas.news import Article, NewsProviderName, Sentiment, SourceTier
from src.market_insight.schemas.quote import ChartPoint, CompanyProfile, CryptoMetrics, Quote
from src.market_insight.services.text_analysis import (
    analyze_text_sentiment,
    calculate_relevance_score,
    categorize_news,
    get_impact_level,
)
from src.utils.config import Settings
from src.utils.http_client_pool import HTTPClientManager
from src.utils.logger.custom_logging import LoggerMixin

T = TypeVar("T")


class EmptyResponseError(ValueError):
    """Upstream answered 2xx but the payload carries no usable data"""


# What an adapter absorbs. A body of the wrong JSON shape surfaces as
# AttributeError or LookupError while parsing. Anything else propagates.
UPSTREAM_ERRORS = (httpx.HTTPError, AttributeError, LookupError, TypeError, ValueError)


class FetchStatus(str, Enum):
    OK = "ok"
    UNAVAILABLE = "unavailable"
    FAILED = "failed"


@dataclass
class FetchOutcome(Generic[T]):
    """Result of one capability call on one adapter"""

    provider: str
    status: FetchStatus = FetchStatus.OK
    value: Optional[T] = None
    error: Optional[str] = None
    elapsed_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status == FetchStatus.OK

    @classmethod
    def success(cls, provider: str, value: T, elapsed_ms: float = 0.0) -> "FetchOutcome[T]":
        return cls(provider=provider, status=FetchStatus.OK, value=value, elapsed_ms=elapsed_ms)

    @classmethod
    def unavailable(cls, provider: str, reason: str) -> "FetchOutcome[T]":
        return cls(provider=provider, status=FetchStatus.UNAVAILABLE, error=reason)

    @classmethod
    def failed(cls, provider: str, reason: str, elapsed_ms: float = 0.0) -> "FetchOutcome[T]":
        return cls(provider=provider, status=FetchStatus.FAILED, error=reason, elapsed_ms=elapsed_ms)


def outcome_is_ok(result: Any) -> bool:
    """
    Result predicate for execute_with_degradation. A FetchOutcome counts
    only when ok; any other returned value counts as success.
    """
    if isinstance(result, FetchOutcome):
        return result.ok
    return True


def to_float(value: Any) -> Optional[float]:
    """Numeric field from a loosely typed payload; None when absent or not a number"""
    if value is None or value == "" or value == "None":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


# Alpha Vantage publishes compact timestamps, e.g. 20240105T133000
COMPACT_TIMESTAMP_FORMAT = "%Y%m%dT%H%M%S"


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Normalize provider publication times to aware UTC datetimes.
    Accepts epoch seconds, ISO 8601 strings (with or without "Z") and the
    compact Alpha Vantage form. Unparseable values yield None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)

    text = str(value).strip()
    try:
        parsed = datetime.strptime(text, COMPACT_TIMESTAMP_FORMAT)
    except ValueError:
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class BaseProvider(LoggerMixin):
    """
    Shared plumbing for adapters: settings, the pooled HTTP client and the
    outcome guard.
    """

    provider_name: str = "provider"

    def __init__(self, settings: Settings, http: HTTPClientManager):
        super().__init__()
        self.settings = settings
        self.http = http

    @property
    def api_key(self) -> Optional[str]:
        return None

    @property
    def requires_key(self) -> bool:
        return True

    @property
    def is_configured(self) -> bool:
        return not self.requires_key or bool(self.api_key)

    async def _get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        return await self.http.get_json(url, params=params, timeout=timeout)

    async def _guarded(
        self,
        operation: str,
        fetch: Callable[[], Awaitable[T]],
    ) -> FetchOutcome[T]:
        """
        Run one upstream operation and convert its result into a FetchOutcome.

        Args:
            operation: Label for logs, e.g. "quote AAPL"
            fetch: Zero-argument coroutine factory doing the request and parsing

        Returns:
            FetchOutcome, never raises for upstream or payload errors
        """
        if not self.is_configured:
            reason = f"{self.provider_name} API key not configured"
            self.logger.info(f"[{self.provider_name}] Skipping {operation}: {reason}")
            return FetchOutcome.unavailable(self.provider_name, reason)

        start_time = time.perf_counter()
        try:
            value = await fetch()
        except httpx.HTTPStatusError as e:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            reason = f"HTTP {e.response.status_code}"
            self.logger.error(f"[{self.provider_name}] {operation} failed: {reason}")
            return FetchOutcome.failed(self.provider_name, reason, elapsed_ms)
        except UPSTREAM_ERRORS as e:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            reason = f"{type(e).__name__}: {e}" if str(e) else type(e).__name__
            self.logger.warning(f"[{self.provider_name}] {operation} failed: {reason}")
            return FetchOutcome.failed(self.provider_name, reason, elapsed_ms)

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        self.logger.debug(f"[{self.provider_name}] {operation} ok in {elapsed_ms:.0f}ms")
        return FetchOutcome.success(self.provider_name, value, elapsed_ms)


# ============================================================================
# Capabilities
# ============================================================================

class QuoteProvider(ABC):
    @abstractmethod
    async def fetch_quote(self, symbol: str) -> FetchOutcome[Quote]:
        """Current price snapshot"""


class ChartProvider(ABC):
    @abstractmethod
    async def fetch_chart(self, symbol: str) -> FetchOutcome[List[ChartPoint]]:
        """Daily candles, oldest first, without indicators"""


class ProfileProvider(ABC):
    @abstractmethod
    async def fetch_profile(self, symbol: str) -> FetchOutcome[CompanyProfile]:
        """Company profile and headline ratios"""


class NewsProvider(ABC):
    @property
    @abstractmethod
    def news_source(self) -> NewsProviderName:
        """Identifier used by the sources filter"""

    @abstractmethod
    async def fetch_news(self, symbol: str, company: str) -> FetchOutcome[List[Article]]:
        """Recent articles for the symbol, already normalized"""

    def _build_article(
        self,
        symbol: str,
        headline: str,
        summary: Optional[str],
        source: str,
        source_tier: SourceTier,
        url: Optional[str],
        published_at: Any,
        full_article: Optional[str] = None,
        sentiment: Optional[Sentiment] = None,
        sentiment_score: Optional[float] = None,
    ) -> Article:
        """
        Normalize one upstream item. Sentiment defaults to the lexical
        classifier over headline + summary when the provider has no score.
        """
        if sentiment is None:
            sentiment = analyze_text_sentiment(f"{headline} {summary or ''}")

        return Article(
            headline=headline,
            summary=summary or "No summary available",
            source=source,
            source_tier=source_tier,
            url=url,
            published_at=parse_timestamp(published_at),
            sentiment=sentiment,
            sentiment_score=sentiment_score,
            impact=get_impact_level(headline),
            relevance_score=calculate_relevance_score(headline, summary, symbol),
            category=categorize_news(headline),
            full_article=full_article or (f"Read full article at: {url}" if url else None),
            provider=self.news_source,
        )


class EarningsProvider(ABC):
    @abstractmethod
    async def fetch_earnings(self, symbol: str) -> FetchOutcome[EarningsReport]:
        """Latest quarter plus history"""


class CryptoMetricsProvider(ABC):
    @abstractmethod
    async def fetch_crypto_metrics(self, symbol: str) -> FetchOutcome[CryptoMetrics]:
        """Supply, dominance and all-time extremes"""
