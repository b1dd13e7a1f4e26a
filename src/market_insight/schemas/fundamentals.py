# src/market_insight/schemas/fundamentals.py
"""
Fundamentals Schemas

Tagged union over the asset class: exactly one variant is built per response
and the ``type`` field tells the consumer which one it got.

Metrics that no integrated provider reports stay None and are listed in
``estimated_fields`` together with any value taken from a static default
table or derived from another figure.
"""

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class StockFundamentals(BaseModel):
    type: Literal["stock"] = "stock"

    market_cap: Optional[float] = Field(None, description="Market capitalization, billions")
    pe_ratio: Optional[float] = None
    eps: Optional[float] = None
    beta: Optional[float] = None

    dividend_yield: Optional[float] = None
    debt_to_equity: Optional[float] = None
    revenue_growth_yoy: Optional[float] = None
    revenue_growth_qoq: Optional[float] = None
    earnings_growth_yoy: Optional[float] = None
    earnings_growth_qoq: Optional[float] = None
    book_value: Optional[float] = None
    roe: Optional[float] = None
    gross_margin: Optional[float] = None
    operating_margin: Optional[float] = None

    source: str = Field(..., description="FMP, Yahoo Finance or none")
    is_estimated: bool = False
    estimated_fields: List[str] = Field(default_factory=list)


class ExchangeFlow(BaseModel):
    inflow: Optional[float] = None
    outflow: Optional[float] = None
    net_flow: Optional[float] = None
    trend: Optional[str] = None


class WhaleActivity(BaseModel):
    large_transactions: Optional[int] = None
    whale_net_flow: Optional[float] = None
    top_holders_percent: Optional[float] = None
    activity: Optional[str] = None


class NetworkHealth(BaseModel):
    hash_rate: Optional[float] = None
    network_growth: Optional[float] = None
    active_addresses: Optional[int] = None
    transaction_count: Optional[int] = None


class CryptoFundamentals(BaseModel):
    type: Literal["crypto"] = "crypto"

    market_cap: Optional[float] = Field(None, description="Market capitalization, billions")
    volume_24h: Optional[float] = Field(None, description="24h volume, millions")
    circulating_supply: Optional[float] = None
    max_supply: Optional[float] = None
    total_supply: Optional[float] = None
    market_dominance: Optional[float] = None
    price_change_7d: Optional[float] = None
    price_change_30d: Optional[float] = None
    all_time_high: Optional[float] = None
    all_time_low: Optional[float] = None
    ath_distance: Optional[float] = None

    volatility: Optional[float] = None
    liquidity_score: Optional[float] = None
    hodler_ratio: Optional[float] = None
    exchange_flow: ExchangeFlow = Field(default_factory=ExchangeFlow)
    whale_activity: WhaleActivity = Field(default_factory=WhaleActivity)
    network_health: NetworkHealth = Field(default_factory=NetworkHealth)

    source: str = Field(..., description="CoinGecko or Default table")
    is_estimated: bool = False
    estimated_fields: List[str] = Field(default_factory=list)


Fundamentals = Annotated[
    Union[StockFundamentals, CryptoFundamentals],
    Field(discriminator="type"),
]
