"""Tests for the earnings fallback chain and calendar helpers"""

from datetime import date

import httpx
import pytest

from conftest import mock_http
from src.market_insight.providers.alpha_vantage_provider import AlphaVantageProvider
from src.market_insight.providers.base_provider import FetchOutcome
from src.market_insight.providers.fmp_provider import FMPProvider
from src.market_insight.providers.polygon_provider import PolygonProvider
from src.market_insight.schemas.earnings import ESTIMATED_SOURCE, EarningsReport
from src.market_insight.schemas.quote import AssetType
from src.market_insight.services.earnings_calendar import (
    calculate_growth,
    estimate_next_earnings_date,
    quarter_of,
    year_of,
)
from src.market_insight.services.earnings_service import (
    CRYPTO_NOT_APPLICABLE,
    EarningsService,
    estimated_report,
    recent_quarters,
)


class StubEarningsProvider:
    def __init__(self, name, outcome_factory, log):
        self.name = name
        self._factory = outcome_factory
        self._log = log

    async def fetch_earnings(self, symbol):
        self._log.append(self.name)
        return self._factory(self.name)


def _fails(name):
    return FetchOutcome.failed(name, "HTTP 500")


def _unavailable(name):
    return FetchOutcome.unavailable(name, f"{name} API key not configured")


def _succeeds(name):
    return FetchOutcome.success(name, EarningsReport(success=True, source=name))


# ============================================================================
# FALLBACK CHAIN
# ============================================================================

class TestEarningsService:

    @pytest.mark.asyncio
    async def test_first_success_wins_and_later_providers_not_called(self, settings):
        calls = []
        service = EarningsService(settings, [
            StubEarningsProvider("FMP", _fails, calls),
            StubEarningsProvider("Alpha Vantage", _succeeds, calls),
            StubEarningsProvider("Polygon", _succeeds, calls),
        ])

        report = await service.get_earnings("AAPL", AssetType.STOCK)

        assert report.source == "Alpha Vantage"
        assert calls == ["FMP", "Alpha Vantage"]

    @pytest.mark.asyncio
    async def test_all_fail_gives_estimate(self, settings):
        calls = []
        service = EarningsService(settings, [
            StubEarningsProvider("FMP", _unavailable, calls),
            StubEarningsProvider("Alpha Vantage", _fails, calls),
            StubEarningsProvider("Polygon", _fails, calls),
        ])

        report = await service.get_earnings("AAPL", AssetType.STOCK)

        assert calls == ["FMP", "Alpha Vantage", "Polygon"]
        assert report.success is True
        assert report.is_estimated is True
        assert report.source == ESTIMATED_SOURCE
        assert len(report.historical_quarters) == settings.EARNINGS_HISTORY_QUARTERS

    @pytest.mark.asyncio
    async def test_crypto_not_applicable(self, settings):
        calls = []
        service = EarningsService(settings, [StubEarningsProvider("FMP", _succeeds, calls)])

        report = await service.get_earnings("BTC", AssetType.CRYPTO)

        assert report.success is False
        assert report.message == CRYPTO_NOT_APPLICABLE
        assert calls == []


class TestEarningsChainOverHTTP:

    @staticmethod
    def _service(settings, polygon_body):
        hosts = []

        def handler(request: httpx.Request) -> httpx.Response:
            hosts.append(request.url.host)
            if "financialmodelingprep" in request.url.host:
                return httpx.Response(500)
            if "alphavantage" in request.url.host:
                return httpx.Response(200, json=["unexpected"])
            return httpx.Response(200, json=polygon_body)

        http = mock_http(settings, handler)
        service = EarningsService(settings, [
            FMPProvider(settings, http),
            AlphaVantageProvider(settings, http),
            PolygonProvider(settings, http),
        ])
        return service, hosts

    @pytest.mark.asyncio
    async def test_wrong_shaped_body_falls_through_to_next_provider(self, settings):
        service, hosts = self._service(settings, {"results": [{
            "fiscal_period": "Q3", "end_date": "2024-09-28",
            "financials": {"income_statement": {"revenues": {"value": 94.9}}},
        }]})

        report = await service.get_earnings("AAPL", AssetType.STOCK)

        assert report.source == "Polygon"
        assert report.latest_quarter.revenue == 94.9
        assert hosts == ["financialmodelingprep.com", "www.alphavantage.co", "api.polygon.io"]

    @pytest.mark.asyncio
    async def test_wrong_shaped_bodies_end_in_estimate(self, settings):
        service, _ = self._service(settings, [{"results": []}])

        report = await service.get_earnings("AAPL", AssetType.STOCK)

        assert report.source == ESTIMATED_SOURCE
        assert report.is_estimated is True


# ============================================================================
# ESTIMATE / CALENDAR
# ============================================================================

class TestEstimatedReport:

    def test_recent_quarters_cross_year(self):
        assert recent_quarters(4, date(2024, 2, 10)) == [
            ("Q4", 2023), ("Q3", 2023), ("Q2", 2023), ("Q1", 2023),
        ]

    def test_report_shape(self):
        report = estimated_report(4, date(2024, 8, 1))

        assert report.latest_quarter.period == "Q2"
        assert report.latest_quarter.year == 2024
        assert report.latest_quarter.revenue is None
        assert [q.period for q in report.historical_quarters] == [
            "Q2 2024", "Q1 2024", "Q4 2023", "Q3 2023",
        ]
        assert all(q.revenue is None for q in report.historical_quarters)
        assert report.outlook.next_earnings_date == "2024-10-15"


class TestCalendarHelpers:

    @pytest.mark.parametrize("today,expected", [
        (date(2024, 1, 20), "2024-04-15"),
        (date(2024, 6, 30), "2024-07-15"),
        (date(2024, 11, 2), "2025-01-15"),
    ])
    def test_next_earnings_date(self, today, expected):
        assert estimate_next_earnings_date(today) == expected

    def test_quarter_and_year(self):
        assert quarter_of("2024-09-28") == "Q3"
        assert year_of("2024-09-28") == 2024

    def test_growth(self):
        assert calculate_growth(110.0, 100.0) == pytest.approx(10.0)
        assert calculate_growth(-50.0, -100.0) == pytest.approx(50.0)

    @pytest.mark.parametrize("current,previous", [(100.0, None), (100.0, 0.0), (None, 100.0)])
    def test_growth_unknown(self, current, previous):
        assert calculate_growth(current, previous) is None
