"""Indicator library: pure functions over price series."""

from backtester.indicators.technical import (
    BollingerSeries,
    IndicatorSet,
    MACDSeries,
    atr,
    bollinger_bands,
    compute_indicators,
    ema,
    macd,
    rsi,
    sma,
    true_range,
)

__all__ = [
    "BollingerSeries",
    "IndicatorSet",
    "MACDSeries",
    "atr",
    "bollinger_bands",
    "compute_indicators",
    "ema",
    "macd",
    "rsi",
    "sma",
    "true_range",
]
