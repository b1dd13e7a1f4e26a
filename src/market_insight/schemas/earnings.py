# src/market_insight/schemas/earnings.py
"""
Earnings Schemas

``source`` names the provider that answered. A synthesized record always has
``source == "Estimated"`` and ``is_estimated == True``.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

ESTIMATED_SOURCE = "Estimated"


class QuarterRecord(BaseModel):
    """Latest reported quarter"""
    period: str = Field(..., description="Q1..Q4")
    year: int
    revenue: Optional[float] = None
    net_income: Optional[float] = None
    eps: Optional[float] = None
    gross_profit: Optional[float] = None
    operating_income: Optional[float] = None
    revenue_growth_yoy: Optional[float] = None
    earnings_growth_yoy: Optional[float] = None
    estimated_eps: Optional[float] = None
    surprise: Optional[float] = None
    surprise_percentage: Optional[float] = None


class HistoricalQuarter(BaseModel):
    period: str = Field(..., description="e.g. 'Q3 2024'")
    revenue: Optional[float] = None
    net_income: Optional[float] = None
    eps: Optional[float] = None
    estimated_eps: Optional[float] = None
    surprise: Optional[float] = None


class EarningsOutlook(BaseModel):
    next_earnings_date: str = Field(..., description="YYYY-MM-DD, projected")
    analyst_expectations: str
    guidance: str


class EarningsReport(BaseModel):
    success: bool
    source: Optional[str] = None
    message: Optional[str] = None
    latest_quarter: Optional[QuarterRecord] = None
    outlook: Optional[EarningsOutlook] = None
    historical_quarters: List[HistoricalQuarter] = Field(default_factory=list)
    is_estimated: bool = False
