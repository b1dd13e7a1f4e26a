# src/market_insight/providers/newsapi_provider.py
"""
NewsAPI Provider
Free-text search over a fixed set of financial news domains.

Endpoint:
- /v2/everything
"""

from typing import List, Optional

from src.market_insight.providers.base_provider import (
    BaseProvider,
    EmptyResponseError,
    FetchOutcome,
    NewsProvider,
)
from src.market_insight.schemas.news import Article, NewsProviderName
from src.market_insight.services.text_analysis import get_source_tier

FINANCIAL_DOMAINS = ",".join([
    "reuters.com",
    "bloomberg.com",
    "wsj.com",
    "ft.com",
    "cnbc.com",
    "marketwatch.com",
    "yahoo.com",
    "finance.yahoo.com",
    "barrons.com",
    "investing.com",
])


class NewsAPIProvider(BaseProvider, NewsProvider):
    """The only news source queried by company name rather than ticker."""

    provider_name = "NewsAPI"

    @property
    def api_key(self) -> Optional[str]:
        return self.settings.NEWS_API_KEY

    @property
    def news_source(self) -> NewsProviderName:
        return NewsProviderName.NEWS_API

    @staticmethod
    def build_query(company: str, symbol: str) -> str:
        return (
            f'"{company}" OR "{symbol}" AND '
            f"(earnings OR financial OR stock OR shares OR revenue OR profit)"
        )

    async def fetch_news(self, symbol: str, company: str) -> FetchOutcome[List[Article]]:
        async def _fetch() -> List[Article]:
            data = await self._get_json(
                self.settings.NEWS_API_URL,
                params={
                    "q": self.build_query(company, symbol),
                    "language": "en",
                    "sortBy": "publishedAt",
                    "pageSize": self.settings.NEWS_API_PAGE_SIZE,
                    "domains": FINANCIAL_DOMAINS,
                    "apiKey": self.api_key,
                },
                timeout=self.settings.NEWS_API_TIMEOUT,
            )
            if data.get("status") != "ok":
                raise EmptyResponseError(f"NewsAPI error: {data.get('message')}")

            articles = []
            for item in data.get("articles") or []:
                if not item.get("title"):
                    continue
                source_name = (item.get("source") or {}).get("name") or self.provider_name
                articles.append(
                    self._build_article(
                        symbol=symbol,
                        headline=item["title"],
                        summary=item.get("description"),
                        source=source_name,
                        source_tier=get_source_tier(source_name),
                        url=item.get("url"),
                        published_at=item.get("publishedAt"),
                        full_article=item.get("content"),
                    )
                )

            self.logger.info(f"[{self.provider_name}] {len(articles)} articles fetched for {symbol}")
            return articles

        return await self._guarded(f"news {symbol}", _fetch)
