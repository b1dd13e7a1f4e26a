# src/market_insight/providers/polygon_provider.py
"""
Polygon Provider
Ticker news and reported financials.

Endpoints:
- /v2/reference/news
- /v2/reference/financials/{symbol}
"""

from datetime import date, timedelta
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
from src.market_insight.services.earnings_calendar import estimate_next_earnings_date, year_of


class PolygonProvider(BaseProvider, NewsProvider, EarningsProvider):
    """Last in the earnings chain; tier-1 news."""

    provider_name = "Polygon"

    @property
    def api_key(self) -> Optional[str]:
        return self.settings.POLYGON_KEY

    @property
    def news_source(self) -> NewsProviderName:
        return NewsProviderName.POLYGON

    async def fetch_news(self, symbol: str, company: str) -> FetchOutcome[List[Article]]:
        async def _fetch() -> List[Article]:
            since = date.today() - timedelta(days=self.settings.NEWS_LOOKBACK_DAYS)
            data = await self._get_json(
                f"{self.settings.POLYGON_URL}/v2/reference/news",
                params={
                    "ticker": symbol,
                    "published_utc.gte": since.isoformat(),
                    "order": "desc",
                    "limit": self.settings.POLYGON_NEWS_LIMIT,
                    "apiKey": self.api_key,
                },
                timeout=self.settings.NEWS_TIMEOUT,
            )

            articles = []
            for item in data.get("results") or []:
                if not item.get("title"):
                    continue
                publisher = (item.get("publisher") or {}).get("name") or "Unknown"
                articles.append(
                    self._build_article(
                        symbol=symbol,
                        headline=item["title"],
                        summary=item.get("description"),
                        source=f"Polygon ({publisher})",
                        source_tier=SourceTier.TIER1,
                        url=item.get("article_url"),
                        published_at=item.get("published_utc"),
                    )
                )

            self.logger.info(f"[{self.provider_name}] {len(articles)} articles fetched for {symbol}")
            return articles

        return await self._guarded(f"news {symbol}", _fetch)

    async def fetch_earnings(self, symbol: str) -> FetchOutcome[EarningsReport]:
        quarters = self.settings.EARNINGS_HISTORY_QUARTERS

        async def _fetch() -> EarningsReport:
            data = await self._get_json(
                f"{self.settings.POLYGON_URL}/v2/reference/financials/{symbol}",
                params={"apiKey": self.api_key, "limit": quarters},
                timeout=self.settings.EARNINGS_TIMEOUT,
            )
            results = data.get("results") or []
            if not results:
                raise EmptyResponseError("No Polygon financials")
            return self._to_report(results[:quarters])

        return await self._guarded(f"earnings {symbol}", _fetch)

    @staticmethod
    def _income_value(filing: Dict[str, Any], field: str) -> Optional[float]:
        income = (filing.get("financials") or {}).get("income_statement") or {}
        return to_float((income.get(field) or {}).get("value"))

    def _to_report(self, filings: List[Dict[str, Any]]) -> EarningsReport:
        latest = filings[0]
        year = year_of(latest["end_date"]) if latest.get("end_date") else date.today().year

        def _label(filing: Dict[str, Any]) -> str:
            period = filing.get("fiscal_period") or filing.get("period") or "Q4"
            if filing.get("end_date"):
                return f"{period} {year_of(filing['end_date'])}"
            return period

        return EarningsReport(
            success=True,
            source=self.provider_name,
            latest_quarter=QuarterRecord(
                period=latest.get("fiscal_period") or latest.get("period") or "Q4",
                year=year,
                revenue=self._income_value(latest, "revenues"),
                net_income=self._income_value(latest, "net_income_loss"),
                eps=self._income_value(latest, "basic_earnings_per_share"),
                gross_profit=self._income_value(latest, "gross_profit"),
                operating_income=self._income_value(latest, "operating_income_loss"),
            ),
            outlook=EarningsOutlook(
                next_earnings_date=estimate_next_earnings_date(),
                analyst_expectations="Data from Polygon API",
                guidance="Check company filings for guidance",
            ),
            historical_quarters=[
                HistoricalQuarter(
                    period=_label(filing),
                    revenue=self._income_value(filing, "revenues"),
                    net_income=self._income_value(filing, "net_income_loss"),
                    eps=self._income_value(filing, "basic_earnings_per_share"),
                )
                for filing in filings
            ],
        )
