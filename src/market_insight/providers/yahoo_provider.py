# src/market_insight/providers/yahoo_provider.py
"""
Yahoo Finance Provider
Primary quote source for equities, ETFs and indices, and daily chart history
for every asset type.

Endpoint:
- /v8/finance/chart/{symbol}
"""

import time
from datetime import datetime, timezone
from typing import Any, Dict, List

from src.market_insight.providers.base_provider import (
    BaseProvider,
    ChartProvider,
    EmptyResponseError,
    FetchOutcome,
    QuoteProvider,
    to_float,
)
from src.market_insight.schemas.quote import ChartPoint, Quote
from src.market_insight.services.asset_classifier import to_chart_symbol


class YahooFinanceProvider(BaseProvider, QuoteProvider, ChartProvider):
    """Keyless provider; always configured."""

    provider_name = "Yahoo Finance"

    # Short window is enough for the meta block of the quote
    QUOTE_LOOKBACK_SECONDS = 2 * 24 * 60 * 60

    @property
    def requires_key(self) -> bool:
        return False

    def _chart_url(self, symbol: str) -> str:
        return f"{self.settings.YAHOO_CHART_URL}/{to_chart_symbol(symbol)}"

    @staticmethod
    def _first_result(data: Dict[str, Any]) -> Dict[str, Any]:
        chart = data.get("chart") or {}
        results = chart.get("result") or []
        if not results:
            error = chart.get("error") or {}
            raise EmptyResponseError(error.get("description") or "Invalid Yahoo Finance response")
        return results[0]

    async def fetch_quote(self, symbol: str) -> FetchOutcome[Quote]:
        async def _fetch() -> Quote:
            now = int(time.time())
            data = await self._get_json(
                self._chart_url(symbol),
                params={
                    "period1": now - self.QUOTE_LOOKBACK_SECONDS,
                    "period2": now,
                    "interval": "1d",
                },
                timeout=self.settings.QUOTE_TIMEOUT,
            )
            meta = self._first_result(data)["meta"]

            current_price = to_float(meta.get("regularMarketPrice"))
            if current_price is None:
                raise EmptyResponseError(f"No market price for {symbol}")

            return Quote.from_prices(
                current_price,
                to_float(meta.get("previousClose")),
                symbol=symbol,
                name=meta.get("longName") or meta.get("shortName") or symbol,
                volume=to_float(meta.get("regularMarketVolume")),
                market_cap=to_float(meta.get("marketCap")),
                currency=meta.get("currency") or "USD",
                exchange=meta.get("exchangeName"),
                source=self.provider_name,
            )

        return await self._guarded(f"quote {symbol}", _fetch)

    async def fetch_chart(self, symbol: str) -> FetchOutcome[List[ChartPoint]]:
        async def _fetch() -> List[ChartPoint]:
            now = int(time.time())
            data = await self._get_json(
                self._chart_url(symbol),
                params={
                    "period1": now - self.settings.CHART_LOOKBACK_DAYS * 24 * 60 * 60,
                    "period2": now,
                    "interval": "1d",
                },
                timeout=self.settings.CHART_TIMEOUT,
            )
            result = self._first_result(data)
            timestamps = result.get("timestamp") or []
            quote = (result.get("indicators", {}).get("quote") or [{}])[0]
            return self._build_points(timestamps, quote)

        return await self._guarded(f"chart {symbol}", _fetch)

    @staticmethod
    def _build_points(timestamps: List[int], quote: Dict[str, List[Any]]) -> List[ChartPoint]:
        """Zip the parallel OHLCV arrays, dropping candles without a positive close."""
        opens = quote.get("open") or []
        highs = quote.get("high") or []
        lows = quote.get("low") or []
        closes = quote.get("close") or []
        volumes = quote.get("volume") or []

        def _at(values: List[Any], i: int) -> Any:
            return values[i] if i < len(values) else None

        points: List[ChartPoint] = []
        for i, ts in enumerate(timestamps):
            close = to_float(_at(closes, i))
            if close is None or close <= 0:
                continue

            day = datetime.fromtimestamp(ts, tz=timezone.utc)
            points.append(
                ChartPoint(
                    time=day.strftime("%Y-%m-%d"),
                    open=round(to_float(_at(opens, i)) or close, 2),
                    high=round(to_float(_at(highs, i)) or close, 2),
                    low=round(to_float(_at(lows, i)) or close, 2),
                    close=round(close, 2),
                    volume=int(_at(volumes, i) or 0),
                    display_date=f"{day:%b} {day.day}",
                    index=len(points),
                )
            )
        return points
