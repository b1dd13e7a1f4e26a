# src/market_insight/schemas/request.py
"""
Request Schemas for the market insight endpoints
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from src.market_insight.schemas.news import NewsProviderName


class AnalyzeRequest(BaseModel):
    """
    Body of POST /api/analyze.

    The symbol is optional at the schema level so that a missing or blank
    symbol is answered with a 400 by the router rather than a 422.
    """
    symbol: Optional[str] = Field(None, description="Ticker or crypto code, e.g. AAPL, BTC")


class NewsQuery(BaseModel):
    """Parsed query parameters of GET /api/news/{symbol}"""
    limit: int = Field(20, ge=1, le=100)
    sources: Optional[List[NewsProviderName]] = Field(
        None, description="Providers to query; None means all"
    )

    @classmethod
    def from_params(cls, limit: int, sources: str) -> "NewsQuery":
        """
        Build from raw query values.

        ``sources`` is ``"all"`` or a comma separated list of provider names
        (newsapi, finnhub, alphavantage, polygon). Unknown names raise
        ValueError.
        """
        selected = None
        if sources and sources.strip().lower() != "all":
            selected = [
                NewsProviderName(name.strip().lower())
                for name in sources.split(",")
                if name.strip()
            ]
        return cls(limit=limit, sources=selected or None)
