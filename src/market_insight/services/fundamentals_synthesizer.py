# src/market_insight/services/fundamentals_synthesizer.py
"""
Fundamentals Synthesizer
Builds the asset-specific fundamentals block from whatever the providers
returned. It never fails the request: missing inputs degrade to None values
or to the static supply table, and every such field is named in
``estimated_fields``.
"""

import asyncio
from typing import Dict, List, Optional

from src.market_insight.providers.base_provider import CryptoMetricsProvider, FetchOutcome
from src.market_insight.schemas.earnings import EarningsReport
from src.market_insight.schemas.fundamentals import CryptoFundamentals, StockFundamentals
from src.market_insight.schemas.quote import CompanyProfile, CryptoMetrics, Quote
from src.utils.config import Settings
from src.utils.logger.custom_logging import LoggerMixin

BILLION = 1_000_000_000
MILLION = 1_000_000

STOCK_METRIC_FIELDS = [
    "market_cap", "pe_ratio", "eps", "beta", "dividend_yield", "debt_to_equity",
    "revenue_growth_yoy", "revenue_growth_qoq", "earnings_growth_yoy",
    "earnings_growth_qoq", "book_value", "roe", "gross_margin", "operating_margin",
]

CRYPTO_METRIC_FIELDS = [
    "market_cap", "volume_24h", "circulating_supply", "max_supply", "total_supply",
    "market_dominance", "price_change_7d", "price_change_30d", "all_time_high",
    "all_time_low", "ath_distance", "volatility", "liquidity_score", "hodler_ratio",
]

# No integrated provider reports these
CRYPTO_UNSOURCED_NESTED = [
    "exchange_flow",
    "whale_activity",
    "network_health.network_growth",
    "network_health.active_addresses",
    "network_health.transaction_count",
]

DEFAULT_SUPPLY: Dict[str, Dict[str, Optional[float]]] = {
    "BTC": {"circulating": 19_800_000, "max": 21_000_000, "dominance": 45},
    "ETH": {"circulating": 120_000_000, "max": None, "dominance": 20},
    "ADA": {"circulating": 35_000_000_000, "max": 45_000_000_000, "dominance": 1.5},
    "SOL": {"circulating": 460_000_000, "max": None, "dominance": 2.5},
}
GENERIC_SUPPLY: Dict[str, Optional[float]] = {"circulating": 1_000_000, "max": None, "dominance": 0.1}

# The table has no total supply; it is approximated from circulating supply
TOTAL_SUPPLY_FACTOR = 1.1

DEFAULT_SOURCE = "Default table"

DEFAULTED_CRYPTO_FIELDS = ["circulating_supply", "max_supply", "total_supply", "market_dominance"]


def _scaled(value: Optional[float], unit: int) -> Optional[float]:
    return value / unit if value is not None else None


def _missing(model, names: List[str]) -> List[str]:
    return [name for name in names if getattr(model, name) is None]


class FundamentalsSynthesizer(LoggerMixin):

    def __init__(self, settings: Settings, metrics_provider: CryptoMetricsProvider):
        super().__init__()
        self.settings = settings
        self.metrics_provider = metrics_provider

    def for_stock(
        self,
        quote: Optional[Quote],
        profile: Optional[FetchOutcome[CompanyProfile]] = None,
        earnings: Optional[EarningsReport] = None,
    ) -> StockFundamentals:
        """
        Profile first, then the primary quote's overlapping fields, else all None.
        Year-over-year growth comes from a provider-reported earnings record
        when one exists.
        """
        if profile is not None and profile.ok:
            p = profile.value
            fundamentals = StockFundamentals(
                market_cap=_scaled(p.market_cap, BILLION),
                pe_ratio=p.pe_ratio,
                eps=p.eps,
                beta=p.beta,
                source=p.source,
            )
        elif quote is not None:
            fundamentals = StockFundamentals(
                market_cap=_scaled(quote.market_cap, BILLION),
                source=quote.source,
                is_estimated=True,
            )
        else:
            fundamentals = StockFundamentals(source="none", is_estimated=True)

        if (
            earnings is not None
            and earnings.success
            and not earnings.is_estimated
            and earnings.latest_quarter is not None
        ):
            fundamentals.revenue_growth_yoy = earnings.latest_quarter.revenue_growth_yoy
            fundamentals.earnings_growth_yoy = earnings.latest_quarter.earnings_growth_yoy

        fundamentals.estimated_fields = _missing(fundamentals, STOCK_METRIC_FIELDS)
        return fundamentals

    async def for_crypto(self, quote: Quote) -> CryptoFundamentals:
        """Provider metrics when reachable within the metrics timeout, else the default table."""
        metrics = await self._lookup_metrics(quote.symbol)
        return self.from_metrics(quote, metrics)

    def from_metrics(self, quote: Quote, metrics: Optional[CryptoMetrics]) -> CryptoFundamentals:
        """Crypto fundamentals from a metrics lookup result; None selects the default table."""
        market_cap = _scaled(quote.market_cap, BILLION)
        volume_24h = _scaled(quote.volume, MILLION)

        if metrics is not None:
            fundamentals = CryptoFundamentals(
                market_cap=market_cap,
                volume_24h=volume_24h,
                circulating_supply=metrics.circulating_supply,
                max_supply=metrics.max_supply,
                total_supply=metrics.total_supply,
                market_dominance=metrics.market_dominance,
                price_change_7d=metrics.price_change_7d,
                price_change_30d=metrics.price_change_30d,
                all_time_high=metrics.ath,
                all_time_low=metrics.atl,
                ath_distance=metrics.ath_distance,
                source=metrics.source,
            )
            fundamentals.network_health.hash_rate = metrics.hash_rate
            defaulted: List[str] = []
        else:
            supply = DEFAULT_SUPPLY.get(quote.symbol.upper(), GENERIC_SUPPLY)
            fundamentals = CryptoFundamentals(
                market_cap=market_cap,
                volume_24h=volume_24h,
                circulating_supply=supply["circulating"],
                max_supply=supply["max"],
                total_supply=supply["circulating"] * TOTAL_SUPPLY_FACTOR,
                market_dominance=supply["dominance"],
                source=DEFAULT_SOURCE,
                is_estimated=True,
            )
            defaulted = list(DEFAULTED_CRYPTO_FIELDS)

        estimated = defaulted + [
            name for name in _missing(fundamentals, CRYPTO_METRIC_FIELDS)
            if name not in defaulted
        ]
        if fundamentals.network_health.hash_rate is None:
            estimated.append("network_health.hash_rate")
        estimated.extend(CRYPTO_UNSOURCED_NESTED)

        fundamentals.estimated_fields = estimated
        return fundamentals

    async def _lookup_metrics(self, symbol: str) -> Optional[CryptoMetrics]:
        try:
            outcome = await asyncio.wait_for(
                self.metrics_provider.fetch_crypto_metrics(symbol),
                timeout=self.settings.CRYPTO_METRICS_TIMEOUT,
            )
        except asyncio.TimeoutError:
            self.logger.warning(
                f"[Fundamentals] Crypto metrics for {symbol} timed out, using default supply table"
            )
            return None

        if not outcome.ok:
            self.logger.info(
                f"[Fundamentals] Crypto metrics for {symbol} unavailable ({outcome.error}), "
                f"using default supply table"
            )
            return None
        return outcome.value
