"""Shared fixtures: synthetic daily bars."""

import math
from datetime import date, timedelta

import pytest

from backtester.core.types import PriceBar


def bars_from_closes(closes, start=date(2023, 1, 2)):
    """Daily bars (calendar days) with open == close and a 1-unit high/low range."""
    return [
        PriceBar(
            date=start + timedelta(days=i),
            open=float(c),
            high=float(c) + 1.0,
            low=float(c) - 1.0,
            close=float(c),
            adj_close=float(c),
            volume=1000.0,
        )
        for i, c in enumerate(closes)
    ]


@pytest.fixture
def make_bars():
    return bars_from_closes


@pytest.fixture
def wave_bars():
    """200 bars oscillating around a slow uptrend; exercises every strategy."""
    closes = [100 + 12 * math.sin(i / 7) + 0.05 * i for i in range(200)]
    return bars_from_closes(closes)


@pytest.fixture
def golden_cross_closes():
    """
    20 flat bars at 100, a linear rise to 200, then a fall of 2 per bar to 80.
    With SMA(5)/SMA(20) the golden cross lands on bar 20 and the dead cross on bar 125.
    The flat prefix puts the two SMAs level at bar 19; a rise from bar 0 would have
    SMA5 above SMA20 as soon as both exist, and no cross would ever fire.
    """
    flat = [100.0] * 20
    rise = [100.0 + k for k in range(1, 101)]   # bars 20..119 -> 101..200
    fall = [198.0 - 2 * k for k in range(60)]   # bars 120..179 -> 198..80
    return flat + rise + fall
