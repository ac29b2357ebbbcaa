"""
Technical indicators over daily closes (ATR also uses high/low).

Every function returns a list aligned 1:1 with its input. Positions inside the
warm-up period hold None, never 0 or NaN.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from backtester.core.types import PriceBar, StrategyParams

Series = List[Optional[float]]


def _optional(values: pd.Series) -> Series:
    """NaN -> None, numpy floats -> float."""
    return [None if pd.isna(v) else float(v) for v in values]


def _closes(closes: Sequence[float]) -> pd.Series:
    return pd.Series(np.asarray(closes, dtype=float))


def sma(closes: Sequence[float], period: int) -> Series:
    """Simple moving average; undefined for the first period-1 bars."""
    return _optional(_closes(closes).rolling(period, min_periods=period).mean())


def ema(closes: Sequence[float], period: int) -> Series:
    """
    Exponential moving average with multiplier 2/(period+1).
    Until `period` bars have accumulated the value is the running simple
    average of all closes so far; the recursion starts at index `period`.
    """
    prices = _closes(closes)
    seed = prices.expanding().mean()
    k = 2.0 / (period + 1)
    out: Series = []
    for i, price in enumerate(prices):
        if i < period:
            out.append(float(seed.iloc[i]))
        else:
            prev = out[-1]
            out.append((float(price) - prev) * k + prev)
    return out


def rsi(closes: Sequence[float], period: int = 14) -> Series:
    """Wilder RSI. First value at index `period`; 100 when the average loss is 0."""
    prices = [float(c) for c in closes]
    out: Series = [None] * len(prices)
    if len(prices) <= period:
        return out
    deltas = np.diff(prices)
    gains = np.clip(deltas, 0, None)
    losses = np.clip(-deltas, 0, None)
    avg_gain = float(gains[:period].mean())
    avg_loss = float(losses[:period].mean())
    out[period] = _rsi_value(avg_gain, avg_loss)
    for i in range(period + 1, len(prices)):
        # deltas[i-1] is the change into bar i
        avg_gain = (avg_gain * (period - 1) + float(gains[i - 1])) / period
        avg_loss = (avg_loss * (period - 1) + float(losses[i - 1])) / period
        out[i] = _rsi_value(avg_gain, avg_loss)
    return out


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + rs)


class MACDSeries(NamedTuple):
    macd: Series
    signal: Series
    histogram: Series


def macd(
    closes: Sequence[float],
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> MACDSeries:
    """
    MACD line = EMA(fast) - EMA(slow). The signal line is an EMA of the MACD
    line taken from index slow-1 onwards and left-padded with None.
    """
    fast_ema = ema(closes, fast)
    slow_ema = ema(closes, slow)
    line: Series = [
        None if f is None or s is None else f - s
        for f, s in zip(fast_ema, slow_ema)
    ]
    start = min(slow - 1, len(line))
    tail = line[start:]
    signal_line: Series = [None] * start
    if tail and all(v is not None for v in tail):
        signal_line += ema(tail, signal)
    else:
        signal_line += [None] * len(tail)
    histogram: Series = [
        None if m is None or s is None else m - s
        for m, s in zip(line, signal_line)
    ]
    return MACDSeries(line, signal_line, histogram)


class BollingerSeries(NamedTuple):
    upper: Series
    middle: Series
    lower: Series


def bollinger_bands(closes: Sequence[float], period: int = 20, num_std: float = 2.0) -> BollingerSeries:
    """Middle = SMA(period); bands at +/- num_std population standard deviations."""
    prices = _closes(closes)
    middle = prices.rolling(period, min_periods=period).mean()
    std = prices.rolling(period, min_periods=period).std(ddof=0)
    return BollingerSeries(
        upper=_optional(middle + num_std * std),
        middle=_optional(middle),
        lower=_optional(middle - num_std * std),
    )


def true_range(highs: Sequence[float], lows: Sequence[float], closes: Sequence[float]) -> List[float]:
    """True range per bar; bar 0 has no previous close so it is just high - low."""
    high = pd.Series(np.asarray(highs, dtype=float))
    low = pd.Series(np.asarray(lows, dtype=float))
    prev_close = _closes(closes).shift()
    high_low = high - low
    high_close = (high - prev_close).abs()
    low_close = (low - prev_close).abs()
    tr = pd.concat([high_low, high_close, low_close], axis=1).max(axis=1)
    return [float(v) for v in tr]


def atr(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 14,
) -> Series:
    """
    Average true range. The first ATR (index `period`) is the mean of the true
    ranges of bars 1..period; bar 0's high-low range is not part of it.
    Later values use Wilder smoothing.
    """
    tr = true_range(highs, lows, closes)
    out: Series = [None] * len(tr)
    if len(tr) <= period:
        return out
    current = sum(tr[1:period + 1]) / period
    out[period] = current
    for i in range(period + 1, len(tr)):
        current = (current * (period - 1) + tr[i]) / period
        out[i] = current
    return out


@dataclass(frozen=True)
class IndicatorSet:
    """All indicators for one run, aligned with the bars. Computed once, never mutated."""
    closes: Tuple[float, ...] = ()
    sma_short: Tuple[Optional[float], ...] = ()
    sma_long: Tuple[Optional[float], ...] = ()
    rsi: Tuple[Optional[float], ...] = ()
    macd: Tuple[Optional[float], ...] = ()
    macd_signal: Tuple[Optional[float], ...] = ()
    macd_histogram: Tuple[Optional[float], ...] = ()
    bb_upper: Tuple[Optional[float], ...] = ()
    bb_middle: Tuple[Optional[float], ...] = ()
    bb_lower: Tuple[Optional[float], ...] = ()
    atr: Tuple[Optional[float], ...] = ()


def compute_indicators(bars: Sequence[PriceBar], params: StrategyParams) -> IndicatorSet:
    """Compute every indicator a strategy may read, using the run's parameters."""
    closes = [b.close for b in bars]
    macd_series = macd(closes, params.macd_fast, params.macd_slow, params.macd_signal)
    bands = bollinger_bands(closes, params.bb_period, params.bb_std_dev)
    return IndicatorSet(
        closes=tuple(closes),
        sma_short=tuple(sma(closes, params.sma_short_period)),
        sma_long=tuple(sma(closes, params.sma_long_period)),
        rsi=tuple(rsi(closes, params.rsi_period)),
        macd=tuple(macd_series.macd),
        macd_signal=tuple(macd_series.signal),
        macd_histogram=tuple(macd_series.histogram),
        bb_upper=tuple(bands.upper),
        bb_middle=tuple(bands.middle),
        bb_lower=tuple(bands.lower),
        atr=tuple(atr([b.high for b in bars], [b.low for b in bars], closes, params.atr_period)),
    )
