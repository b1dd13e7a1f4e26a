# src/market_insight/providers/finnhub_provider.py
"""
Finnhub Provider
Company news for the last few days.

Endpoint:
- /api/v1/company-news
"""

from datetime import date, timedelta
from typing import List, Optional

from src.market_insight.providers.base_provider import (
    BaseProvider,
    FetchOutcome,
    NewsProvider,
)
from src.market_insight.schemas.news import Article, NewsProviderName, SourceTier


class FinnhubNewsProvider(BaseProvider, NewsProvider):

    provider_name = "Finnhub"
    SOURCE_LABEL = "Finnhub Financial News"

    @property
    def api_key(self) -> Optional[str]:
        return self.settings.FINNHUB_KEY

    @property
    def news_source(self) -> NewsProviderName:
        return NewsProviderName.FINNHUB

    async def fetch_news(self, symbol: str, company: str) -> FetchOutcome[List[Article]]:
        async def _fetch() -> List[Article]:
            today = date.today()
            data = await self._get_json(
                f"{self.settings.FINNHUB_URL}/company-news",
                params={
                    "symbol": symbol,
                    "from": (today - timedelta(days=self.settings.NEWS_LOOKBACK_DAYS)).isoformat(),
                    "to": today.isoformat(),
                    "token": self.api_key,
                },
                timeout=self.settings.NEWS_TIMEOUT,
            )
            if not isinstance(data, list):
                raise TypeError(f"Expected a list of articles, got {type(data).__name__}")

            articles = [
                self._build_article(
                    symbol=symbol,
                    headline=item["headline"],
                    summary=item.get("summary"),
                    source=self.SOURCE_LABEL,
                    source_tier=SourceTier.TIER1,
                    url=item.get("url"),
                    published_at=item.get("datetime"),
                )
                for item in data[: self.settings.FINNHUB_NEWS_LIMIT]
                if item.get("headline")
            ]

            self.logger.info(f"[{self.provider_name}] {len(articles)} articles fetched for {symbol}")
            return articles

        return await self._guarded(f"news {symbol}", _fetch)
