# src/market_insight/services/technical_indicators.py
"""
Moving averages attached to chart history.

Indicators are None until enough points exist: SMA20 from the 20th point,
SMA50 from the 50th, EMA12 from the 12th (seeded with the 12-point SMA).
"""

from typing import List, Optional, Sequence

import numpy as np

from src.market_insight.schemas.quote import ChartPoint

SMA_SHORT_WINDOW = 20
SMA_LONG_WINDOW = 50
EMA_WINDOW = 12


def simple_moving_average(values: Sequence[float], window: int) -> List[Optional[float]]:
    closes = np.asarray(values, dtype=float)
    if len(closes) < window:
        return [None] * len(closes)

    sma = np.convolve(closes, np.ones(window) / window, mode="valid")
    return [None] * (window - 1) + [float(v) for v in sma]


def exponential_moving_average(values: Sequence[float], window: int) -> List[Optional[float]]:
    closes = np.asarray(values, dtype=float)
    if len(closes) < window:
        return [None] * len(closes)

    alpha = 2 / (window + 1)
    ema = np.full(len(closes), np.nan)
    ema[window - 1] = closes[:window].mean()
    for i in range(window, len(closes)):
        ema[i] = alpha * closes[i] + (1 - alpha) * ema[i - 1]

    return [None if np.isnan(v) else float(v) for v in ema]


def _round(value: Optional[float]) -> Optional[float]:
    return round(value, 2) if value is not None else None


def add_technical_indicators(points: List[ChartPoint]) -> List[ChartPoint]:
    """Return copies of the points with index, sma20, sma50 and ema12 filled in."""
    closes = [p.close for p in points]
    sma20 = simple_moving_average(closes, SMA_SHORT_WINDOW)
    sma50 = simple_moving_average(closes, SMA_LONG_WINDOW)
    ema12 = exponential_moving_average(closes, EMA_WINDOW)

    return [
        point.model_copy(update={
            "index": i,
            "sma20": _round(sma20[i]),
            "sma50": _round(sma50[i]),
            "ema12": _round(ema12[i]),
        })
        for i, point in enumerate(points)
    ]
