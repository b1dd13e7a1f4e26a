# src/market_insight/schemas/quote.py
"""
Quote and chart models
Normalized price data that the quote/chart adapters convert to
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class AssetType(str, Enum):
    """Asset classes that select the provider set and fundamentals variant"""
    STOCK = "stock"
    CRYPTO = "crypto"
    ETF = "etf"
    INDEX = "index"


class Quote(BaseModel):
    """
    Current price snapshot for one asset.

    change and change_percent are None whenever previous_close is missing or
    not positive; they are never reported as 0 in that case.
    """
    symbol: str
    name: str
    current_price: float
    previous_close: Optional[float] = None
    change: Optional[float] = None
    change_percent: Optional[float] = None
    volume: Optional[float] = None
    market_cap: Optional[float] = None
    currency: str = "USD"
    exchange: Optional[str] = None
    source: str = Field(..., description="Provider that produced the quote")

    @classmethod
    def from_prices(
        cls,
        current_price: float,
        previous_close: Optional[float],
        **fields,
    ) -> "Quote":
        """Build a quote, deriving change fields from the two prices."""
        change = None
        change_percent = None
        if previous_close is not None and previous_close > 0:
            change = current_price - previous_close
            change_percent = change / previous_close * 100
        return cls(
            current_price=current_price,
            previous_close=previous_close,
            change=change,
            change_percent=change_percent,
            **fields,
        )


class ChartPoint(BaseModel):
    """One daily candle with moving averages attached"""
    time: str = Field(..., description="YYYY-MM-DD")
    open: float
    high: float
    low: float
    close: float
    volume: int = 0
    display_date: str = Field(..., description="Short label, e.g. 'Jan 5'")
    index: int = 0
    sma20: Optional[float] = None
    sma50: Optional[float] = None
    ema12: Optional[float] = None


class CompanyProfile(BaseModel):
    """Company profile fields from the fundamentals provider"""
    symbol: str
    company_name: Optional[str] = None
    sector: str = "Unknown"
    industry: str = "Unknown"
    description: str = ""
    market_cap: Optional[float] = None
    pe_ratio: Optional[float] = None
    eps: Optional[float] = None
    beta: Optional[float] = None
    website: str = ""
    source: str = "FMP"


class CryptoMetrics(BaseModel):
    """Supply and market structure figures from the crypto metrics provider"""
    circulating_supply: Optional[float] = None
    max_supply: Optional[float] = None
    total_supply: Optional[float] = None
    market_dominance: Optional[float] = None
    ath: Optional[float] = None
    atl: Optional[float] = None
    ath_distance: Optional[float] = None
    price_change_7d: Optional[float] = None
    price_change_30d: Optional[float] = None
    hash_rate: Optional[float] = None
    source: str = "CoinGecko"
