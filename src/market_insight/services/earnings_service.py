# src/market_insight/services/earnings_service.py
"""
Earnings Service
Walks the earnings providers in order and returns the first report that
succeeds. When every provider fails the result is a clearly labelled
estimated record with unknown figures.
"""

from datetime import date
from typing import List, Optional, Sequence

from src.market_insight.providers.base_provider import EarningsProvider
from src.market_insight.schemas.earnings import (
    ESTIMATED_SOURCE,
    EarningsOutlook,
    EarningsReport,
    HistoricalQuarter,
    QuarterRecord,
)
from src.market_insight.schemas.quote import AssetType
from src.market_insight.services.earnings_calendar import estimate_next_earnings_date
from src.utils.config import Settings
from src.utils.logger.custom_logging import LoggerMixin

CRYPTO_NOT_APPLICABLE = "Earnings not applicable for cryptocurrency"


def recent_quarters(count: int, today: Optional[date] = None) -> List[tuple]:
    """The last ``count`` completed calendar quarters, newest first, as (label, year)."""
    today = today or date.today()
    quarter = (today.month - 1) // 3 + 1
    year = today.year

    result = []
    for _ in range(count):
        quarter -= 1
        if quarter == 0:
            quarter = 4
            year -= 1
        result.append((f"Q{quarter}", year))
    return result


def estimated_report(quarters: int, today: Optional[date] = None) -> EarningsReport:
    """Placeholder report: labelled quarters, every figure unknown."""
    labels = recent_quarters(quarters, today)
    latest_period, latest_year = labels[0]

    return EarningsReport(
        success=True,
        source=ESTIMATED_SOURCE,
        is_estimated=True,
        latest_quarter=QuarterRecord(period=latest_period, year=latest_year),
        outlook=EarningsOutlook(
            next_earnings_date=estimate_next_earnings_date(today),
            analyst_expectations="Configure API keys for real earnings data",
            guidance="No guidance available without an earnings provider",
        ),
        historical_quarters=[
            HistoricalQuarter(period=f"{period} {year}") for period, year in labels
        ],
    )


class EarningsService(LoggerMixin):

    def __init__(self, settings: Settings, providers: Sequence[EarningsProvider]):
        super().__init__()
        self.settings = settings
        self.providers = list(providers)

    def estimated(self) -> EarningsReport:
        return estimated_report(self.settings.EARNINGS_HISTORY_QUARTERS)

    async def get_earnings(self, symbol: str, asset_type: AssetType) -> EarningsReport:
        if asset_type == AssetType.CRYPTO:
            return EarningsReport(success=False, message=CRYPTO_NOT_APPLICABLE)

        # A later provider is only called after every earlier one failed
        for provider in self.providers:
            outcome = await provider.fetch_earnings(symbol)
            if outcome.ok:
                self.logger.info(f"[Earnings] {symbol}: data from {outcome.provider}")
                return outcome.value
            self.logger.info(f"[Earnings] {symbol}: {outcome.provider} gave nothing ({outcome.error})")

        self.logger.info(f"[Earnings] {symbol}: no provider answered, returning estimate")
        return self.estimated()
