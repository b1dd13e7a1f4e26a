# src/market_insight/schemas/response.py
"""
API Response Schemas for the market insight endpoints
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from src.market_insight.schemas.earnings import EarningsReport
from src.market_insight.schemas.fundamentals import Fundamentals
from src.market_insight.schemas.news import Article, Sentiment
from src.market_insight.schemas.quote import AssetType, ChartPoint, Quote

MOCK_FALLBACK_SOURCE = "mock-fallback"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class SentimentDistribution(BaseModel):
    positive: int = 0
    negative: int = 0
    neutral: int = 0


class SentimentSummary(BaseModel):
    """Roll-up of article sentiment plus the ranked articles it was computed from"""
    overall: Sentiment = Sentiment.NEUTRAL
    score: float = Field(0.0, ge=-100.0, le=100.0)
    distribution: SentimentDistribution = Field(default_factory=SentimentDistribution)
    articles: List[Article] = Field(default_factory=list)


class ProviderTaskStatus(BaseModel):
    """Outcome of one upstream operation in the fan-out"""
    name: str
    success: bool
    error: Optional[str] = None
    timed_out: bool = False
    elapsed_ms: float = 0.0


class AnalysisMetadata(BaseModel):
    """
    Metadata about the aggregation process.
    Useful for debugging and monitoring.
    """
    tasks: List[ProviderTaskStatus] = Field(default_factory=list)
    news_fetched: int = 0
    news_after_dedup: int = 0
    processing_time_ms: int = 0
    is_partial: bool = False
    warnings: List[str] = Field(default_factory=list)


class EnhancedFeatures(BaseModel):
    asset_specific_fundamentals: bool = True
    comprehensive_news: bool = True
    quarterly_earnings: bool = False
    multiple_sources: bool = True
    sentiment_analysis: bool = True


class AnalysisResponse(BaseModel):
    """Full dashboard payload for one symbol"""
    symbol: str
    company: str
    current_price: float
    price_change: Optional[float] = None
    price_change_percent: Optional[float] = None
    previous_close: Optional[float] = None
    asset_type: AssetType
    sector: str
    quote: Quote
    chart_data: List[ChartPoint] = Field(default_factory=list)
    fundamentals: Fundamentals
    sentiment: SentimentSummary
    earnings: EarningsReport
    timestamp: str = Field(default_factory=utc_now_iso)
    data_source: str
    enhanced_features: EnhancedFeatures = Field(default_factory=EnhancedFeatures)
    metadata: AnalysisMetadata = Field(default_factory=AnalysisMetadata)


class QuickAnalysisResponse(BaseModel):
    """
    Degraded, quote-only analysis. When the quote cannot be fetched the
    response is a placeholder with ``source == "mock-fallback"`` and no prices.
    """
    symbol: str
    company: str
    current_price: Optional[float] = None
    previous_close: Optional[float] = None
    price_change_percent: Optional[float] = None
    market_cap: Optional[float] = None
    asset_type: AssetType
    source: str
    is_estimated: bool = False
    error: Optional[str] = None
    timestamp: str = Field(default_factory=utc_now_iso)


class NewsResponse(BaseModel):
    symbol: str
    total_articles: int
    returned_articles: int
    articles: List[Article] = Field(default_factory=list)
    sources: List[str] = Field(default_factory=list)
    timestamp: str = Field(default_factory=utc_now_iso)


class EarningsResponse(BaseModel):
    symbol: str
    earnings: EarningsReport
    timestamp: str = Field(default_factory=utc_now_iso)


class ProviderCheck(BaseModel):
    """One provider probe in the diagnostics report"""
    success: bool
    source: Optional[str] = None
    detail: Optional[str] = None
    error: Optional[str] = None


class DiagnosticsResponse(BaseModel):
    symbol: str
    asset_type: AssetType
    checks: Dict[str, ProviderCheck] = Field(default_factory=dict)
    news_article_count: int = 0
    news_sources: List[str] = Field(default_factory=list)
    first_headline: Optional[str] = None
    timestamp: str = Field(default_factory=utc_now_iso)


class ServiceStatusResponse(BaseModel):
    message: str
    version: str
    timestamp: str = Field(default_factory=utc_now_iso)
    data_sources: List[str] = Field(default_factory=list)
    features: List[str] = Field(default_factory=list)
    api_status: Dict[str, bool] = Field(default_factory=dict)
