"""
Request -> Quote provider ───────────────┐
           Profile + Earnings chain ─────┼→ Chart + News fan-out → Dedupe → Rank
                                         └→ Fundamentals + Sentiment → Response
"""
from src.market_insight.schemas.request import AnalyzeRequest, NewsQuery
from src.market_insight.schemas.response import (
    AnalysisResponse,
    QuickAnalysisResponse,
    NewsResponse,
    EarningsResponse,
    DiagnosticsResponse,
)
from src.market_insight.schemas.quote import AssetType, Quote
from src.market_insight.schemas.news import Article, NewsProviderName
from src.market_insight.errors import PrimaryDataError

from src.market_insight.services.aggregator_service import MarketInsightService
from src.market_insight.services.news_reconciliation import NewsReconciliationService
from src.market_insight.services.earnings_service import EarningsService
from src.market_insight.services.fundamentals_synthesizer import FundamentalsSynthesizer

__version__ = "1.0.0"
__all__ = [
    # Schemas
    "AnalyzeRequest",
    "NewsQuery",
    "AnalysisResponse",
    "QuickAnalysisResponse",
    "NewsResponse",
    "EarningsResponse",
    "DiagnosticsResponse",
    "AssetType",
    "Quote",
    "Article",
    "NewsProviderName",
    "PrimaryDataError",
    # Services
    "MarketInsightService",
    "NewsReconciliationService",
    "EarningsService",
    "FundamentalsSynthesizer",
]
