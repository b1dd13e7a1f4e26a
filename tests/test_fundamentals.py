"""Tests for the fundamentals synthesizer"""

import asyncio

import pytest

from src.market_insight.providers.base_provider import FetchOutcome
from src.market_insight.schemas.earnings import EarningsReport, QuarterRecord
from src.market_insight.schemas.quote import CompanyProfile, CryptoMetrics, Quote
from src.market_insight.services.earnings_service import estimated_report
from src.market_insight.services.fundamentals_synthesizer import (
    CRYPTO_UNSOURCED_NESTED,
    DEFAULT_SOURCE,
    FundamentalsSynthesizer,
)


class StubMetricsProvider:
    def __init__(self, outcome=None, delay: float = 0.0):
        self.outcome = outcome
        self.delay = delay

    async def fetch_crypto_metrics(self, symbol):
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.outcome


def _quote(symbol="AAPL", market_cap=3_000_000_000_000.0, volume=None):
    return Quote.from_prices(
        190.0, 185.0,
        symbol=symbol, name=symbol, market_cap=market_cap, volume=volume, source="Yahoo Finance",
    )


@pytest.fixture
def synthesizer(settings):
    return FundamentalsSynthesizer(settings, StubMetricsProvider())


# ============================================================================
# STOCK
# ============================================================================

class TestStockFundamentals:

    def test_profile_preferred(self, synthesizer):
        profile = FetchOutcome.success("FMP", CompanyProfile(
            symbol="AAPL", market_cap=2_500_000_000_000, pe_ratio=29.5, eps=6.4, beta=1.2,
        ))

        result = synthesizer.for_stock(_quote(), profile)

        assert result.source == "FMP"
        assert result.is_estimated is False
        assert result.market_cap == 2500.0
        assert result.pe_ratio == 29.5
        assert "pe_ratio" not in result.estimated_fields
        assert "dividend_yield" in result.estimated_fields

    def test_quote_fallback_when_profile_unavailable(self, synthesizer):
        profile = FetchOutcome.unavailable("FMP", "FMP API key not configured")

        result = synthesizer.for_stock(_quote(), profile)

        assert result.source == "Yahoo Finance"
        assert result.is_estimated is True
        assert result.market_cap == 3000.0
        assert result.pe_ratio is None
        assert "pe_ratio" in result.estimated_fields
        assert "market_cap" not in result.estimated_fields

    def test_nothing_available(self, synthesizer):
        result = synthesizer.for_stock(None, None)

        assert result.source == "none"
        assert result.is_estimated is True
        assert "market_cap" in result.estimated_fields

    def test_growth_from_reported_earnings(self, synthesizer):
        earnings = EarningsReport(
            success=True,
            source="FMP",
            latest_quarter=QuarterRecord(
                period="Q3", year=2024, revenue_growth_yoy=12.5, earnings_growth_yoy=-3.0,
            ),
        )

        result = synthesizer.for_stock(_quote(), None, earnings)

        assert result.revenue_growth_yoy == 12.5
        assert result.earnings_growth_yoy == -3.0

    def test_estimated_earnings_not_used_for_growth(self, synthesizer):
        result = synthesizer.for_stock(_quote(), None, estimated_report(4))

        assert result.revenue_growth_yoy is None
        assert "revenue_growth_yoy" in result.estimated_fields


# ============================================================================
# CRYPTO
# ============================================================================

class TestCryptoFundamentals:

    @pytest.mark.asyncio
    async def test_provider_metrics(self, settings):
        metrics = CryptoMetrics(
            circulating_supply=19_700_000, max_supply=21_000_000, total_supply=19_700_000,
            market_dominance=52.1, ath=73_000, atl=67.8, ath_distance=8.5,
            price_change_7d=2.0, price_change_30d=10.0,
        )
        synthesizer = FundamentalsSynthesizer(
            settings, StubMetricsProvider(FetchOutcome.success("CoinGecko", metrics))
        )

        result = await synthesizer.for_crypto(
            _quote("BTC", market_cap=1_300_000_000_000, volume=25_000_000_000)
        )

        assert result.source == "CoinGecko"
        assert result.is_estimated is False
        assert result.market_cap == 1300.0
        assert result.volume_24h == 25000.0
        assert result.market_dominance == 52.1
        assert "circulating_supply" not in result.estimated_fields
        assert "volatility" in result.estimated_fields
        assert "network_health.hash_rate" in result.estimated_fields

    @pytest.mark.asyncio
    async def test_defaults_when_provider_fails(self, settings):
        synthesizer = FundamentalsSynthesizer(
            settings, StubMetricsProvider(FetchOutcome.failed("CoinGecko", "HTTP 429"))
        )

        result = await synthesizer.for_crypto(_quote("BTC"))

        assert result.source == DEFAULT_SOURCE
        assert result.is_estimated is True
        assert result.circulating_supply == 19_800_000
        assert result.max_supply == 21_000_000
        assert result.market_dominance == 45
        assert result.total_supply == pytest.approx(19_800_000 * 1.1)
        for name in ("circulating_supply", "max_supply", "total_supply", "market_dominance"):
            assert name in result.estimated_fields
        for name in CRYPTO_UNSOURCED_NESTED:
            assert name in result.estimated_fields

    @pytest.mark.asyncio
    async def test_defaults_when_provider_times_out(self, settings):
        synthesizer = FundamentalsSynthesizer(
            settings, StubMetricsProvider(FetchOutcome.success("CoinGecko", CryptoMetrics()), delay=5.0)
        )

        result = await synthesizer.for_crypto(_quote("SOL"))

        assert result.source == DEFAULT_SOURCE
        assert result.circulating_supply == 460_000_000

    def test_unknown_coin_uses_generic_row(self, synthesizer):
        result = synthesizer.from_metrics(_quote("LINK"), None)

        assert result.circulating_supply == 1_000_000
        assert result.max_supply is None
        assert result.market_dominance == 0.1
