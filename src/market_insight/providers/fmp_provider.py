# src/market_insight/providers/fmp_provider.py
"""
FMP Provider
Company profile and income statements from Financial Modeling Prep.

Endpoints:
- /api/v3/profile/{symbol}
- /api/v3/income-statement/{symbol}
"""

from datetime import date
from typing import Any, Dict, List, Optional

from src.market_insight.providers.base_provider import (
    BaseProvider,
    EarningsProvider,
    EmptyResponseError,
    FetchOutcome,
    ProfileProvider,
    to_float,
)
from src.market_insight.schemas.earnings import (
    EarningsOutlook,
    EarningsReport,
    HistoricalQuarter,
    QuarterRecord,
)
from src.market_insight.schemas.quote import CompanyProfile
from src.market_insight.services.earnings_calendar import (
    calculate_growth,
    estimate_next_earnings_date,
)


class FMPProvider(BaseProvider, ProfileProvider, EarningsProvider):
    """
    Financial Modeling Prep implementation.
    First choice for both the fundamentals profile and earnings.
    """

    provider_name = "FMP"

    @property
    def api_key(self) -> Optional[str]:
        return self.settings.FMP_KEY

    async def fetch_profile(self, symbol: str) -> FetchOutcome[CompanyProfile]:
        async def _fetch() -> CompanyProfile:
            data = await self._get_json(
                f"{self.settings.BASE_FMP_URL}/profile/{symbol}",
                params={"apikey": self.api_key},
                timeout=self.settings.PROFILE_TIMEOUT,
            )
            if not isinstance(data, list) or not data:
                raise EmptyResponseError("No FMP profile data")

            profile = data[0]
            self.logger.info(
                f"[{self.provider_name}] Profile: {profile.get('companyName')} - {profile.get('sector')}"
            )
            return CompanyProfile(
                symbol=symbol,
                company_name=profile.get("companyName"),
                sector=profile.get("sector") or "Unknown",
                industry=profile.get("industry") or "Unknown",
                description=profile.get("description") or "",
                market_cap=to_float(profile.get("mktCap")),
                pe_ratio=to_float(profile.get("pe")),
                eps=to_float(profile.get("eps")),
                beta=to_float(profile.get("beta")),
                website=profile.get("website") or "",
                source=self.provider_name,
            )

        return await self._guarded(f"profile {symbol}", _fetch)

    async def fetch_earnings(self, symbol: str) -> FetchOutcome[EarningsReport]:
        quarters = self.settings.EARNINGS_HISTORY_QUARTERS

        async def _fetch() -> EarningsReport:
            data = await self._get_json(
                f"{self.settings.BASE_FMP_URL}/income-statement/{symbol}",
                params={"apikey": self.api_key, "limit": quarters},
                timeout=self.settings.EARNINGS_TIMEOUT,
            )
            if not isinstance(data, list) or not data:
                raise EmptyResponseError("No FMP income statements")
            return self._to_report(data[:quarters])

        return await self._guarded(f"earnings {symbol}", _fetch)

    def _to_report(self, statements: List[Dict[str, Any]]) -> EarningsReport:
        latest = statements[0]
        previous = statements[1] if len(statements) > 1 else {}

        revenue = to_float(latest.get("revenue"))
        net_income = to_float(latest.get("netIncome"))

        latest_quarter = QuarterRecord(
            period=latest.get("period") or "Q4",
            year=int(latest.get("calendarYear") or date.today().year),
            revenue=revenue,
            net_income=net_income,
            eps=to_float(latest.get("eps")),
            gross_profit=to_float(latest.get("grossProfit")),
            operating_income=to_float(latest.get("operatingIncome")),
            revenue_growth_yoy=calculate_growth(revenue, to_float(previous.get("revenue"))),
            earnings_growth_yoy=calculate_growth(net_income, to_float(previous.get("netIncome"))),
        )

        return EarningsReport(
            success=True,
            source=self.provider_name,
            latest_quarter=latest_quarter,
            outlook=EarningsOutlook(
                next_earnings_date=estimate_next_earnings_date(),
                analyst_expectations="Data from FMP API",
                guidance=latest.get("guidance") or "No guidance provided",
            ),
            historical_quarters=[
                HistoricalQuarter(
                    period=f"{statement.get('period')} {statement.get('calendarYear')}",
                    revenue=to_float(statement.get("revenue")),
                    net_income=to_float(statement.get("netIncome")),
                    eps=to_float(statement.get("eps")),
                )
                for statement in statements
            ],
        )
