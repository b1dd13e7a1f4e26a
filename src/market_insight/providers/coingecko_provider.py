# src/market_insight/providers/coingecko_provider.py
"""
CoinGecko Provider
Primary quote source for crypto assets, plus supply and dominance metrics.

Endpoints:
- /simple/price
- /coins/{id}
- /global
"""

import asyncio
from typing import Any, Dict

from src.market_insight.providers.base_provider import (
    BaseProvider,
    CryptoMetricsProvider,
    EmptyResponseError,
    FetchOutcome,
    QuoteProvider,
    to_float,
)
from src.market_insight.schemas.quote import CryptoMetrics, Quote
from src.market_insight.services.asset_classifier import coingecko_id, company_name


class CoinGeckoProvider(BaseProvider, QuoteProvider, CryptoMetricsProvider):
    """Public API, no key required."""

    provider_name = "CoinGecko"

    @property
    def requires_key(self) -> bool:
        return False

    async def fetch_quote(self, symbol: str) -> FetchOutcome[Quote]:
        coin_id = coingecko_id(symbol)

        async def _fetch() -> Quote:
            data = await self._get_json(
                f"{self.settings.COINGECKO_URL}/simple/price",
                params={
                    "ids": coin_id,
                    "vs_currencies": "usd",
                    "include_market_cap": "true",
                    "include_24hr_vol": "true",
                    "include_24hr_change": "true",
                },
                timeout=self.settings.QUOTE_TIMEOUT,
            )
            coin = data.get(coin_id)
            if not coin or to_float(coin.get("usd")) is None:
                raise EmptyResponseError(f"No crypto data available for {symbol}")
            return self._to_quote(symbol, coin)

        return await self._guarded(f"quote {symbol}", _fetch)

    def _to_quote(self, symbol: str, coin: Dict[str, Any]) -> Quote:
        price = float(coin["usd"])
        change_percent = to_float(coin.get("usd_24h_change"))

        # CoinGecko reports the 24h move, not a close; derive the reference price from it
        previous_close = None
        change = None
        if change_percent is not None and change_percent > -100:
            previous_close = price / (1 + change_percent / 100)
            change = price - previous_close

        return Quote(
            symbol=symbol,
            name=company_name(symbol),
            current_price=price,
            previous_close=previous_close,
            change=change,
            change_percent=change_percent if previous_close else None,
            volume=to_float(coin.get("usd_24h_vol")),
            market_cap=to_float(coin.get("usd_market_cap")),
            currency="USD",
            source=self.provider_name,
        )

    async def fetch_crypto_metrics(self, symbol: str) -> FetchOutcome[CryptoMetrics]:
        coin_id = coingecko_id(symbol)
        timeout = self.settings.CRYPTO_METRICS_TIMEOUT

        async def _fetch() -> CryptoMetrics:
            coin_data, global_data = await asyncio.gather(
                self._get_json(
                    f"{self.settings.COINGECKO_URL}/coins/{coin_id}",
                    params={
                        "localization": "false",
                        "tickers": "false",
                        "developer_data": "false",
                        "sparkline": "false",
                    },
                    timeout=timeout,
                ),
                self._get_json(f"{self.settings.COINGECKO_URL}/global", timeout=timeout),
            )

            market = coin_data.get("market_data")
            if not market:
                raise EmptyResponseError(f"No market data for {coin_id}")

            dominance = (global_data.get("data") or {}).get("market_cap_percentage") or {}
            ath_change = to_float((market.get("ath_change_percentage") or {}).get("usd"))

            return CryptoMetrics(
                circulating_supply=to_float(market.get("circulating_supply")),
                max_supply=to_float(market.get("max_supply")),
                total_supply=to_float(market.get("total_supply")),
                market_dominance=to_float(dominance.get(symbol.lower())),
                ath=to_float((market.get("ath") or {}).get("usd")),
                atl=to_float((market.get("atl") or {}).get("usd")),
                ath_distance=abs(ath_change) if ath_change is not None else None,
                price_change_7d=to_float(market.get("price_change_percentage_7d")),
                price_change_30d=to_float(market.get("price_change_percentage_30d")),
                hash_rate=to_float((coin_data.get("additional_data") or {}).get("hash_rate")),
                source=self.provider_name,
            )

        return await self._guarded(f"crypto metrics {symbol}", _fetch)
