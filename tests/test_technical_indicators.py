"""Tests for moving averages on chart history"""

import pytest

from src.market_insight.schemas.quote import ChartPoint
from src.market_insight.services.technical_indicators import (
    add_technical_indicators,
    exponential_moving_average,
    simple_moving_average,
)


def _points(closes):
    return [
        ChartPoint(
            time=f"2024-01-{i + 1:02d}", open=c, high=c, low=c, close=c,
            display_date=f"Jan {i + 1}", index=99,
        )
        for i, c in enumerate(closes)
    ]


def test_sma_warmup_and_values():
    result = simple_moving_average([1, 2, 3, 4], 2)

    assert result == [None, 1.5, 2.5, 3.5]


def test_ema_seeded_with_sma():
    values = [2.0, 4.0, 6.0, 8.0]
    result = exponential_moving_average(values, 3)

    k = 2 / 4
    assert result[:2] == [None, None]
    assert result[2] == pytest.approx(4.0)
    assert result[3] == pytest.approx(8.0 * k + 4.0 * (1 - k))


def test_ema_short_series_all_none():
    assert exponential_moving_average([1.0, 2.0], 12) == [None, None]


def test_indicators_attached_and_index_reset():
    points = add_technical_indicators(_points([float(i) for i in range(1, 61)]))

    assert [p.index for p in points[:3]] == [0, 1, 2]
    assert points[18].sma20 is None
    assert points[19].sma20 == 10.5
    assert points[48].sma50 is None
    assert points[49].sma50 == 25.5
    assert points[10].ema12 is None
    assert points[11].ema12 == 6.5


def test_input_not_mutated():
    original = _points([10.0] * 25)
    add_technical_indicators(original)

    assert original[0].index == 99
    assert original[24].sma20 is None
