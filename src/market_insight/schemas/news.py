# src/market_insight/schemas/news.py
"""
Article Schema
Normalized format that all news providers convert to
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_serializer


class NewsProviderName(str, Enum):
    """News data providers"""
    NEWS_API = "newsapi"
    FINNHUB = "finnhub"
    ALPHA_VANTAGE = "alphavantage"
    POLYGON = "polygon"


class SourceTier(str, Enum):
    """Coarse trust bucket used to break ranking ties"""
    TIER1 = "tier1"  # wire-service grade
    TIER2 = "tier2"  # mainstream financial media
    TIER3 = "tier3"  # unclassified


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class ImpactLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class NewsCategory(str, Enum):
    """Mutually exclusive headline buckets, checked in declaration order"""
    EARNINGS = "earnings"
    ANALYST = "analyst"
    CORPORATE = "corporate"
    LEGAL = "legal"
    GENERAL = "general"


class Article(BaseModel):
    """
    Unified news article.
    Created per request from a provider response and discarded afterwards.
    """
    headline: str = Field(..., description="News headline")
    summary: str = Field("No summary available", description="Description/snippet")
    source: str = Field(..., description="Publisher or provider display name")
    source_tier: SourceTier = SourceTier.TIER3
    url: Optional[str] = None
    published_at: Optional[datetime] = Field(None, description="Publication datetime (UTC)")

    sentiment: Sentiment = Sentiment.NEUTRAL
    sentiment_score: Optional[float] = Field(None, description="Provider-native score, if any")
    impact: ImpactLevel = ImpactLevel.LOW
    relevance_score: int = Field(0, ge=0)
    category: NewsCategory = NewsCategory.GENERAL

    full_article: Optional[str] = Field(None, description="Raw content or a pointer to it")
    provider: NewsProviderName

    @field_serializer("published_at")
    def _serialize_published_at(self, value: Optional[datetime]) -> Optional[str]:
        return value.isoformat() if value else None
