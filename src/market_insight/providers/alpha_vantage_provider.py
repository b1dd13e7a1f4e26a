# src/market_insight/providers/alpha_vantage_provider.py
"""
Alpha Vantage Provider
News with provider-scored sentiment, and reported vs estimated EPS.

Endpoint:
- /query?function=NEWS_SENTIMENT
- /query?function=EARNINGS
"""

from typing import Any, Dict, List, Optional

from src.market_insight.providers.base_provider import (
    BaseProvider,
    EarningsProvider,
    EmptyResponseError,
    FetchOutcome,
    NewsProvider,
    to_float,
)
from src.market_insight.schemas.earnings import (
    EarningsOutlook,
    EarningsReport,
    HistoricalQuarter,
    QuarterRecord,
)
from src.market_insight.schemas.news import Article, NewsProviderName, SourceTier
from src.market_insight.services.earnings_calendar import (
    estimate_next_earnings_date,
    quarter_of,
    year_of,
)
from src.market_insight.services.text_analysis import bucket_provider_sentiment


class AlphaVantageProvider(BaseProvider, NewsProvider, EarningsProvider):
    """
    Second in the earnings chain. News sentiment comes from the provider's
    overall_sentiment_score instead of the lexical classifier.
    """

    provider_name = "Alpha Vantage"

    @property
    def api_key(self) -> Optional[str]:
        return self.settings.ALPHA_VANTAGE_KEY

    @property
    def news_source(self) -> NewsProviderName:
        return NewsProviderName.ALPHA_VANTAGE

    @staticmethod
    def _raise_on_notice(data: Dict[str, Any]) -> None:
        # Throttling and bad keys come back as 200 with a single message field
        for field in ("Error Message", "Note", "Information"):
            if field in data:
                raise EmptyResponseError(f"Alpha Vantage: {data[field]}")

    async def fetch_news(self, symbol: str, company: str) -> FetchOutcome[List[Article]]:
        async def _fetch() -> List[Article]:
            data = await self._get_json(
                self.settings.ALPHA_VANTAGE_URL,
                params={
                    "function": "NEWS_SENTIMENT",
                    "tickers": symbol,
                    "apikey": self.api_key,
                    "limit": self.settings.ALPHA_VANTAGE_NEWS_LIMIT,
                },
                timeout=self.settings.NEWS_TIMEOUT,
            )
            self._raise_on_notice(data)

            articles = []
            for item in data.get("feed") or []:
                if not item.get("title"):
                    continue
                score = to_float(item.get("overall_sentiment_score"))
                articles.append(
                    self._build_article(
                        symbol=symbol,
                        headline=item["title"],
                        summary=item.get("summary"),
                        source=f"Alpha Vantage ({item.get('source') or 'Unknown'})",
                        source_tier=SourceTier.TIER2,
                        url=item.get("url"),
                        published_at=item.get("time_published"),
                        sentiment=bucket_provider_sentiment(score),
                        sentiment_score=score if score is not None else 0.0,
                    )
                )

            self.logger.info(f"[{self.provider_name}] {len(articles)} articles fetched for {symbol}")
            return articles

        return await self._guarded(f"news {symbol}", _fetch)

    async def fetch_earnings(self, symbol: str) -> FetchOutcome[EarningsReport]:
        async def _fetch() -> EarningsReport:
            data = await self._get_json(
                self.settings.ALPHA_VANTAGE_URL,
                params={"function": "EARNINGS", "symbol": symbol, "apikey": self.api_key},
                timeout=self.settings.EARNINGS_TIMEOUT,
            )
            self._raise_on_notice(data)

            quarters = data.get("quarterlyEarnings") or []
            if not quarters:
                raise EmptyResponseError("No Alpha Vantage quarterly earnings")
            return self._to_report(quarters[: self.settings.EARNINGS_HISTORY_QUARTERS])

        return await self._guarded(f"earnings {symbol}", _fetch)

    def _to_report(self, quarters: List[Dict[str, Any]]) -> EarningsReport:
        latest = quarters[0]
        fiscal_date = latest["fiscalDateEnding"]

        return EarningsReport(
            success=True,
            source=self.provider_name,
            latest_quarter=QuarterRecord(
                period=quarter_of(fiscal_date),
                year=year_of(fiscal_date),
                eps=to_float(latest.get("reportedEPS")),
                estimated_eps=to_float(latest.get("estimatedEPS")),
                surprise=to_float(latest.get("surprise")),
                surprise_percentage=to_float(latest.get("surprisePercentage")),
            ),
            outlook=EarningsOutlook(
                next_earnings_date=estimate_next_earnings_date(),
                analyst_expectations="Data from Alpha Vantage",
                guidance="Check company investor relations for guidance",
            ),
            historical_quarters=[
                HistoricalQuarter(
                    period=f"{quarter_of(q['fiscalDateEnding'])} {year_of(q['fiscalDateEnding'])}",
                    eps=to_float(q.get("reportedEPS")),
                    estimated_eps=to_float(q.get("estimatedEPS")),
                    surprise=to_float(q.get("surprise")),
                )
                for q in quarters
            ],
        )
