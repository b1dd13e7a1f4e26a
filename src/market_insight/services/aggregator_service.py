# src/market_insight/services/aggregator_service.py
"""
Market Insight Service
Main orchestration service that combines all providers and services

Analysis pipeline:
1. Classify the symbol
2. Batch 1 (concurrent): primary quote, fundamentals profile, earnings chain
   (crypto: quote only). A failed quote fails the request.
3. Batch 2 (concurrent): chart history, news reconciliation
   (crypto: plus the metrics lookup for fundamentals)
4. Synthesize fundamentals and sentiment, assemble the response
"""

import time
from typing import List, Optional

from src.market_insight.errors import PrimaryDataError
from src.market_insight.providers.alpha_vantage_provider import AlphaVantageProvider
from src.market_insight.providers.base_provider import FetchOutcome, QuoteProvider, outcome_is_ok
from src.market_insight.providers.coingecko_provider import CoinGeckoProvider
from src.market_insight.providers.finnhub_provider import FinnhubNewsProvider
from src.market_insight.providers.fmp_provider import FMPProvider
from src.market_insight.providers.newsapi_provider import NewsAPIProvider
from src.market_insight.providers.polygon_provider import PolygonProvider
from src.market_insight.providers.yahoo_provider import YahooFinanceProvider
from src.market_insight.schemas.earnings import EarningsReport
from src.market_insight.schemas.quote import AssetType, Quote
from src.market_insight.schemas.request import NewsQuery
from src.market_insight.schemas.response import (
    MOCK_FALLBACK_SOURCE,
    AnalysisMetadata,
    AnalysisResponse,
    DiagnosticsResponse,
    EarningsResponse,
    EnhancedFeatures,
    NewsResponse,
    ProviderCheck,
    ProviderTaskStatus,
    QuickAnalysisResponse,
)
from src.market_insight.services.asset_classifier import (
    company_name,
    detect_asset_type,
    normalize_symbol,
)
from src.market_insight.services.earnings_service import EarningsService
from src.market_insight.services.fundamentals_synthesizer import FundamentalsSynthesizer
from src.market_insight.services.news_reconciliation import NewsReconciliationService, ReconciledNews
from src.market_insight.services.sentiment_aggregator import summarize_sentiment
from src.market_insight.services.technical_indicators import add_technical_indicators
from src.utils.config import Settings
from src.utils.graceful_degradation import (
    DegradationConfig,
    DegradationResult,
    DegradationStrategy,
    TaskResult,
    execute_with_degradation,
)
from src.utils.http_client_pool import HTTPClientManager
from src.utils.logger.custom_logging import LoggerMixin

CRYPTO_SECTOR = "CRYPTOCURRENCY"
UNKNOWN_SECTOR = "Unknown"
CRYPTO_DATA_SOURCE = "CoinGecko + Yahoo Finance"
EQUITY_DATA_SOURCE = "Yahoo Finance + FMP + Multiple News Sources"


def _round2(value: Optional[float]) -> Optional[float]:
    return round(value, 2) if value is not None else None


def _task_statuses(tasks: List[TaskResult], prefix: str = "") -> List[ProviderTaskStatus]:
    return [
        ProviderTaskStatus(
            name=f"{prefix}{t.task_name}",
            success=t.success,
            error=t.error,
            timed_out=t.timed_out,
            elapsed_ms=round(t.elapsed_ms, 1),
        )
        for t in tasks
    ]


class MarketInsightService(LoggerMixin):
    """
    Per-process service. Holds one adapter per upstream API and the services
    built on top of them; keeps no state between requests.
    """

    def __init__(self, settings: Settings, http: HTTPClientManager):
        super().__init__()
        self.settings = settings
        self.http = http

        self.yahoo = YahooFinanceProvider(settings, http)
        self.coingecko = CoinGeckoProvider(settings, http)
        self.fmp = FMPProvider(settings, http)
        self.newsapi = NewsAPIProvider(settings, http)
        self.finnhub = FinnhubNewsProvider(settings, http)
        self.alpha_vantage = AlphaVantageProvider(settings, http)
        self.polygon = PolygonProvider(settings, http)

        # Order is the concatenation order before dedup, so earlier sources win ties
        self.news_service = NewsReconciliationService(
            settings, [self.newsapi, self.finnhub, self.alpha_vantage, self.polygon]
        )
        self.earnings_service = EarningsService(
            settings, [self.fmp, self.alpha_vantage, self.polygon]
        )
        self.fundamentals = FundamentalsSynthesizer(settings, self.coingecko)

        configured = [name for name, ok in settings.provider_status().items() if ok]
        self.logger.info(f"[MarketInsight] Service initialized, keys configured: {configured or 'none'}")

    def _quote_provider(self, asset_type: AssetType) -> QuoteProvider:
        return self.coingecko if asset_type == AssetType.CRYPTO else self.yahoo

    async def analyze(self, symbol: str) -> AnalysisResponse:
        """
        Full analysis for one symbol.

        Raises:
            ValueError: empty symbol
            PrimaryDataError: the primary quote could not be fetched
        """
        start_time = time.perf_counter()
        symbol = normalize_symbol(symbol)
        asset_type = detect_asset_type(symbol)
        is_crypto = asset_type == AssetType.CRYPTO
        settings = self.settings

        self.logger.info(f"[MarketInsight] Analysis {symbol} ({asset_type.value})")

        # Batch 1: primary data
        if is_crypto:
            batch1 = await execute_with_degradation(
                tasks=[self.coingecko.fetch_quote(symbol)],
                config=DegradationConfig(
                    strategy=DegradationStrategy.CRITICAL_ONLY,
                    critical_indices=[0],
                    task_timeout=settings.QUOTE_TIMEOUT,
                    result_predicate=outcome_is_ok,
                ),
                task_names=["quote"],
            )
        else:
            batch1 = await execute_with_degradation(
                tasks=[
                    self.yahoo.fetch_quote(symbol),
                    self.fmp.fetch_profile(symbol),
                    self.earnings_service.get_earnings(symbol, asset_type),
                ],
                config=DegradationConfig(
                    strategy=DegradationStrategy.CRITICAL_ONLY,
                    critical_indices=[0],
                    task_timeout=settings.QUOTE_TIMEOUT,
                    task_timeouts={
                        "profile": settings.PROFILE_TIMEOUT,
                        "earnings": settings.EARNINGS_TIMEOUT * len(self.earnings_service.providers),
                    },
                    result_predicate=outcome_is_ok,
                ),
                task_names=["quote", "profile", "earnings"],
            )

        quote_task = batch1.by_name("quote")
        if not batch1.should_proceed:
            self.logger.error(f"[MarketInsight] Primary data for {symbol} failed: {quote_task.error}")
            raise PrimaryDataError(symbol, quote_task.error or "unknown error")

        quote: Quote = quote_task.result.value
        profile_task = batch1.by_name("profile")
        profile: Optional[FetchOutcome] = profile_task.result if profile_task else None

        earnings = self._earnings_from(batch1, asset_type)

        # Batch 2: supplementary data
        tasks = [
            self.yahoo.fetch_chart(symbol),
            self.news_service.gather(symbol, company_name(symbol)),
        ]
        names = ["chart", "news"]
        if is_crypto:
            tasks.append(self.fundamentals.for_crypto(quote))
            names.append("fundamentals")

        batch2 = await execute_with_degradation(
            tasks=tasks,
            config=DegradationConfig(
                strategy=DegradationStrategy.BEST_EFFORT,
                task_timeout=settings.CHART_TIMEOUT,
                task_timeouts={
                    "news": max(settings.NEWS_API_TIMEOUT, settings.NEWS_TIMEOUT),
                },
                result_predicate=outcome_is_ok,
            ),
            task_names=names,
        )

        chart_task = batch2.by_name("chart")
        chart_data = add_technical_indicators(chart_task.result.value) if chart_task.success else []

        news_task = batch2.by_name("news")
        news: ReconciledNews = news_task.result if news_task.success else ReconciledNews()
        sentiment = summarize_sentiment(news.articles)

        if is_crypto:
            fundamentals_task = batch2.by_name("fundamentals")
            if fundamentals_task.success:
                fundamentals = fundamentals_task.result
            else:
                fundamentals = self.fundamentals.from_metrics(quote, None)
        else:
            fundamentals = self.fundamentals.for_stock(quote, profile, earnings)

        profile_ok = profile is not None and profile.ok
        company = (profile.value.company_name if profile_ok else None) or quote.name
        if profile_ok:
            sector = profile.value.sector
        else:
            sector = CRYPTO_SECTOR if is_crypto else UNKNOWN_SECTOR

        warnings = [m for m in (batch1.degradation_message, batch2.degradation_message) if m]
        metadata = AnalysisMetadata(
            tasks=(
                _task_statuses(batch1.all_results)
                + _task_statuses(batch2.all_results)
                + _task_statuses(news.tasks, prefix="news:")
            ),
            news_fetched=news.total_fetched,
            news_after_dedup=news.after_dedup,
            processing_time_ms=int((time.perf_counter() - start_time) * 1000),
            is_partial=batch1.is_partial or batch2.is_partial,
            warnings=warnings,
        )

        self.logger.info(
            f"[MarketInsight] Analysis {symbol} complete: price={quote.current_price}, "
            f"chart={len(chart_data)} points, news={len(news.articles)}, "
            f"earnings={earnings.source or 'n/a'}, {metadata.processing_time_ms}ms"
        )

        return AnalysisResponse(
            symbol=symbol,
            company=company,
            current_price=round(quote.current_price, 2),
            price_change=_round2(quote.change),
            price_change_percent=_round2(quote.change_percent),
            previous_close=quote.previous_close,
            asset_type=asset_type,
            sector=sector,
            quote=quote,
            chart_data=chart_data,
            fundamentals=fundamentals,
            sentiment=sentiment,
            earnings=earnings,
            data_source=CRYPTO_DATA_SOURCE if is_crypto else EQUITY_DATA_SOURCE,
            enhanced_features=EnhancedFeatures(quarterly_earnings=earnings.success),
            metadata=metadata,
        )

    def _earnings_from(self, batch: DegradationResult, asset_type: AssetType) -> EarningsReport:
        if asset_type == AssetType.CRYPTO:
            return EarningsReport(success=False, message="Earnings not applicable for cryptocurrency")

        earnings_task = batch.by_name("earnings")
        if earnings_task is not None and earnings_task.success:
            return earnings_task.result

        self.logger.warning(
            f"[MarketInsight] Earnings chain did not finish ({earnings_task.error if earnings_task else 'missing'}), "
            f"returning estimate"
        )
        return self.earnings_service.estimated()

    async def quick_analyze(self, symbol: str) -> QuickAnalysisResponse:
        """
        Degraded mode: quote only, short timeout. Never raises for upstream
        failures; answers with a mock-fallback placeholder instead.
        """
        symbol = normalize_symbol(symbol)
        asset_type = detect_asset_type(symbol)

        result = await execute_with_degradation(
            tasks=[self._quote_provider(asset_type).fetch_quote(symbol)],
            config=DegradationConfig(
                strategy=DegradationStrategy.BEST_EFFORT,
                task_timeout=self.settings.QUICK_ANALYZE_TIMEOUT,
                result_predicate=outcome_is_ok,
            ),
            task_names=["quote"],
        )
        task = result.all_results[0]

        if task.success:
            quote: Quote = task.result.value
            return QuickAnalysisResponse(
                symbol=symbol,
                company=quote.name,
                current_price=_round2(quote.current_price),
                previous_close=quote.previous_close,
                price_change_percent=_round2(quote.change_percent),
                market_cap=quote.market_cap,
                asset_type=asset_type,
                source=quote.source,
            )

        self.logger.warning(f"[MarketInsight] Quick analysis {symbol} serving placeholder: {task.error}")
        return QuickAnalysisResponse(
            symbol=symbol,
            company=company_name(symbol),
            asset_type=asset_type,
            source=MOCK_FALLBACK_SOURCE,
            is_estimated=True,
            error=task.error,
        )

    async def news(self, symbol: str, query: Optional[NewsQuery] = None) -> NewsResponse:
        symbol = normalize_symbol(symbol)
        query = query or NewsQuery(limit=self.settings.NEWS_DEFAULT_LIMIT)

        reconciled = await self.news_service.gather(
            symbol, company_name(symbol), sources=query.sources
        )
        returned = reconciled.articles[: query.limit]

        return NewsResponse(
            symbol=symbol,
            total_articles=len(reconciled.articles),
            returned_articles=len(returned),
            articles=returned,
            sources=reconciled.sources,
        )

    async def earnings(self, symbol: str) -> EarningsResponse:
        symbol = normalize_symbol(symbol)
        report = await self.earnings_service.get_earnings(symbol, detect_asset_type(symbol))
        return EarningsResponse(symbol=symbol, earnings=report)

    async def diagnostics(self, symbol: str) -> DiagnosticsResponse:
        """Probe each relevant provider once and report what answered."""
        symbol = normalize_symbol(symbol)
        asset_type = detect_asset_type(symbol)
        checks = {}

        if asset_type == AssetType.CRYPTO:
            quote = await self.coingecko.fetch_quote(symbol)
            checks["crypto"] = ProviderCheck(
                success=quote.ok,
                source=quote.provider,
                detail=f"{quote.value.name} @ {quote.value.current_price}" if quote.ok else None,
                error=quote.error,
            )
        else:
            quote = await self.yahoo.fetch_quote(symbol)
            checks["yahoo"] = ProviderCheck(
                success=quote.ok,
                source=quote.provider,
                detail=f"{quote.value.name} @ {quote.value.current_price}" if quote.ok else None,
                error=quote.error,
            )

            profile = await self.fmp.fetch_profile(symbol)
            checks["fmp"] = ProviderCheck(
                success=profile.ok,
                source=profile.provider,
                detail=f"{profile.value.company_name} - {profile.value.sector}" if profile.ok else None,
                error=profile.error,
            )

            report = await self.earnings_service.get_earnings(symbol, asset_type)
            latest_revenue = report.latest_quarter.revenue if report.latest_quarter else None
            checks["earnings"] = ProviderCheck(
                success=report.success and not report.is_estimated,
                source=report.source,
                detail=f"latest revenue: {latest_revenue}",
            )

        news = await self.news_service.gather(symbol, company_name(symbol))
        checks["news"] = ProviderCheck(
            success=bool(news.articles),
            source=", ".join(news.sources) or None,
            detail=f"{len(news.articles)} articles",
        )

        return DiagnosticsResponse(
            symbol=symbol,
            asset_type=asset_type,
            checks=checks,
            news_article_count=len(news.articles),
            news_sources=sorted({a.source for a in news.articles}),
            first_headline=news.articles[0].headline if news.articles else None,
        )

    async def close(self):
        await self.http.close()
