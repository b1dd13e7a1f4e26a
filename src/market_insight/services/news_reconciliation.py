# src/market_insight/services/news_reconciliation.py
"""
News Reconciliation Service
Fans out to every news adapter, then merges what came back:

    adapters (concurrent) -> concatenate -> dedupe -> sort -> truncate

A failing or unconfigured adapter contributes nothing; the others are
unaffected.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence

from src.market_insight.providers.base_provider import NewsProvider, outcome_is_ok
from src.market_insight.schemas.news import Article, NewsProviderName
from src.market_insight.services.text_analysis import tier_weight
from src.utils.config import Settings
from src.utils.graceful_degradation import (
    DegradationConfig,
    DegradationStrategy,
    TaskResult,
    execute_with_degradation,
)
from src.utils.logger.custom_logging import LoggerMixin

# Headlines sharing this many leading characters (lowercased) are one story
DEDUP_PREFIX_LENGTH = 50


@dataclass
class ReconciledNews:
    articles: List[Article] = field(default_factory=list)
    total_fetched: int = 0
    after_dedup: int = 0
    sources: List[str] = field(default_factory=list)
    tasks: List[TaskResult] = field(default_factory=list)


def deduplicate_articles(articles: Sequence[Article]) -> List[Article]:
    """First occurrence of each headline prefix wins; input order is kept."""
    seen = set()
    unique = []
    for article in articles:
        key = article.headline.lower()[:DEDUP_PREFIX_LENGTH]
        if key in seen:
            continue
        seen.add(key)
        unique.append(article)
    return unique


def _published_sort_value(article: Article) -> float:
    if article.published_at is None:
        return float("-inf")
    return article.published_at.timestamp()


def sort_articles(articles: Sequence[Article]) -> List[Article]:
    """Relevance desc, then source tier desc, then newest first. Undated articles sort last."""
    return sorted(
        articles,
        key=lambda a: (
            -a.relevance_score,
            -tier_weight(a.source_tier),
            -_published_sort_value(a),
        ),
    )


class NewsReconciliationService(LoggerMixin):

    def __init__(self, settings: Settings, providers: Sequence[NewsProvider]):
        super().__init__()
        self.settings = settings
        self.providers = list(providers)

    def select_providers(
        self,
        sources: Optional[Sequence[NewsProviderName]] = None,
    ) -> List[NewsProvider]:
        if not sources:
            return list(self.providers)
        wanted = set(sources)
        return [p for p in self.providers if p.news_source in wanted]

    async def gather(
        self,
        symbol: str,
        company: str,
        sources: Optional[Sequence[NewsProviderName]] = None,
        max_articles: Optional[int] = None,
    ) -> ReconciledNews:
        """
        Fetch, merge and rank news for one symbol.

        Args:
            symbol: Normalized ticker
            company: Display name used by free-text providers
            sources: Restrict to these providers; None queries all
            max_articles: Cap on the ranked list (defaults to NEWS_MAX_ARTICLES)
        """
        providers = self.select_providers(sources)
        cap = max_articles or self.settings.NEWS_MAX_ARTICLES

        if not providers:
            return ReconciledNews()

        started = datetime.now()
        fanout = await execute_with_degradation(
            tasks=[p.fetch_news(symbol, company) for p in providers],
            config=DegradationConfig(
                strategy=DegradationStrategy.BEST_EFFORT,
                task_timeout=max(self.settings.NEWS_API_TIMEOUT, self.settings.NEWS_TIMEOUT),
                result_predicate=outcome_is_ok,
            ),
            task_names=[p.provider_name for p in providers],
        )

        merged: List[Article] = []
        used_sources: List[str] = []
        for task in fanout.all_results:
            if task.success:
                merged.extend(task.result.value)
                used_sources.append(task.task_name)

        unique = deduplicate_articles(merged)
        ranked = sort_articles(unique)[:cap]

        elapsed_ms = int((datetime.now() - started).total_seconds() * 1000)
        self.logger.info(
            f"[News] {symbol}: {len(merged)} fetched, {len(unique)} unique, "
            f"{len(ranked)} kept from {len(used_sources)}/{len(providers)} sources in {elapsed_ms}ms"
        )

        return ReconciledNews(
            articles=ranked,
            total_fetched=len(merged),
            after_dedup=len(unique),
            sources=used_sources,
            tasks=fanout.all_results,
        )
