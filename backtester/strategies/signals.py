"""
Signal generation: one rule per StrategyId, dispatched through a table.
Rules read the precomputed IndicatorSet and never look past the bar they are asked about.
"""

from __future__ import annotations
from typing import Callable, Dict, List, Optional

from backtester.core.types import Signal, SignalAction, StrategyId, StrategyParams
from backtester.indicators.technical import IndicatorSet

Rule = Callable[[IndicatorSet, StrategyParams, int], Signal]


def _defined(*values: Optional[float]) -> bool:
    return all(v is not None for v in values)


def _crossover(
    fast: tuple, slow: tuple, index: int
) -> Optional[SignalAction]:
    """BUY on an upward cross of fast through slow, SELL on a downward cross, else None."""
    if index < 1:
        return None
    prev_fast, prev_slow = fast[index - 1], slow[index - 1]
    cur_fast, cur_slow = fast[index], slow[index]
    if not _defined(prev_fast, prev_slow, cur_fast, cur_slow):
        return None
    if prev_fast <= prev_slow and cur_fast > cur_slow:
        return SignalAction.BUY
    if prev_fast >= prev_slow and cur_fast < cur_slow:
        return SignalAction.SELL
    return None


def sma_crossover(ind: IndicatorSet, params: StrategyParams, index: int) -> Signal:
    action = _crossover(ind.sma_short, ind.sma_long, index)
    if action is None:
        return Signal.hold()
    label = f"SMA{params.sma_short_period}/{params.sma_long_period}"
    kind = "golden cross" if action == SignalAction.BUY else "dead cross"
    return Signal(action, f"{label} {kind}")


def rsi_threshold(ind: IndicatorSet, params: StrategyParams, index: int) -> Signal:
    value = ind.rsi[index]
    if value is None:
        return Signal.hold()
    if value < params.oversold_threshold:
        return Signal(SignalAction.BUY, f"RSI {value:.2f} below {params.oversold_threshold:g}")
    if value > params.overbought_threshold:
        return Signal(SignalAction.SELL, f"RSI {value:.2f} above {params.overbought_threshold:g}")
    return Signal.hold()


def bollinger_breakout(ind: IndicatorSet, params: StrategyParams, index: int) -> Signal:
    close, lower, upper = ind.closes[index], ind.bb_lower[index], ind.bb_upper[index]
    if not _defined(lower, upper):
        return Signal.hold()
    if close < lower:
        return Signal(SignalAction.BUY, "Close below lower Bollinger Band")
    if close > upper:
        return Signal(SignalAction.SELL, "Close above upper Bollinger Band")
    return Signal.hold()


def macd_crossover(ind: IndicatorSet, params: StrategyParams, index: int) -> Signal:
    action = _crossover(ind.macd, ind.macd_signal, index)
    if action is None:
        return Signal.hold()
    direction = "up" if action == SignalAction.BUY else "down"
    return Signal(action, f"MACD crossed {direction} through signal")


def multi_indicator(ind: IndicatorSet, params: StrategyParams, index: int) -> Signal:
    """Trend, momentum and MACD each cast a vote; two matching votes fire a signal."""
    short, long_ = ind.sma_short[index], ind.sma_long[index]
    rsi_value = ind.rsi[index]
    macd_value, signal_value = ind.macd[index], ind.macd_signal[index]
    if not _defined(short, long_, rsi_value, macd_value, signal_value):
        return Signal.hold()
    buy_votes = sum((
        short > long_,
        rsi_value < params.consensus_rsi_buy,
        macd_value > signal_value,
    ))
    sell_votes = sum((
        short < long_,
        rsi_value > params.consensus_rsi_sell,
        macd_value < signal_value,
    ))
    if buy_votes >= 2:
        return Signal(SignalAction.BUY, f"Multi-indicator consensus ({buy_votes}/3 buy)")
    if sell_votes >= 2:
        return Signal(SignalAction.SELL, f"Multi-indicator consensus ({sell_votes}/3 sell)")
    return Signal.hold()


RULES: Dict[StrategyId, Rule] = {
    StrategyId.SMA_CROSSOVER: sma_crossover,
    StrategyId.RSI_THRESHOLD: rsi_threshold,
    StrategyId.BOLLINGER_BREAKOUT: bollinger_breakout,
    StrategyId.MACD_CROSSOVER: macd_crossover,
    StrategyId.MULTI_INDICATOR: multi_indicator,
}


def generate_signal(strategy, indicators: IndicatorSet, params: StrategyParams, index: int) -> Signal:
    """Signal for one bar. Raises StrategyNotFoundError for unknown strategies."""
    return RULES[StrategyId.parse(strategy)](indicators, params, index)


def generate_signals(strategy, indicators: IndicatorSet, params: StrategyParams) -> List[Signal]:
    """Signals for bars 1..N-1 (bar 0 is never traded); element k belongs to bar k+1."""
    rule = RULES[StrategyId.parse(strategy)]
    return [rule(indicators, params, i) for i in range(1, len(indicators.closes))]
