"""
Backtest engine: indicators once, signals once, then one pass over the bars.
Signals for bar i only use indicator values up to bar i. Runs are all-or-nothing.
"""

from __future__ import annotations
import logging
import math
import time
from typing import Any, Mapping, Optional, Sequence, Union

from backtester.core.errors import ConfigError, DataIntegrityError, InsufficientDataError
from backtester.core.types import PriceBar, SimulationResult, StrategyId, StrategyParams
from backtester.backtesting.ledger import Ledger
from backtester.indicators.technical import compute_indicators
from backtester.strategies.signals import generate_signals

logger = logging.getLogger("backtester.engine")

DEFAULT_INITIAL_CAPITAL = 1_000_000.0


def validate_bars(bars: Sequence[PriceBar]) -> None:
    """Reject non-finite or non-positive prices, high/low inconsistencies and non-ascending dates."""
    prev_date = None
    for i, bar in enumerate(bars):
        if not all(math.isfinite(p) for p in (bar.open, bar.high, bar.low, bar.close)):
            raise DataIntegrityError(f"bar {i} ({bar.date}): prices must be finite", index=i)
        if min(bar.open, bar.high, bar.low, bar.close) <= 0:
            raise DataIntegrityError(f"bar {i} ({bar.date}): prices must be positive", index=i)
        if bar.low > min(bar.open, bar.close) or bar.high < max(bar.open, bar.close):
            raise DataIntegrityError(
                f"bar {i} ({bar.date}): open/close outside low..high "
                f"(o={bar.open} h={bar.high} l={bar.low} c={bar.close})",
                index=i,
            )
        if prev_date is not None and bar.date <= prev_date:
            raise DataIntegrityError(f"bar {i} ({bar.date}): dates must be strictly ascending", index=i)
        prev_date = bar.date


class BacktestEngine:
    """
    Runs one strategy over a daily price series for a single security.
    A fresh Ledger is created per run, so one engine may be reused.
    """

    def __init__(
        self,
        strategy: Union[StrategyId, str],
        params: Optional[StrategyParams] = None,
        initial_capital: float = DEFAULT_INITIAL_CAPITAL,
    ):
        if not initial_capital > 0:
            raise ConfigError(f"initial_capital must be positive, got {initial_capital}")
        self.strategy = StrategyId.parse(strategy)
        self.params = params or StrategyParams()
        self.initial_capital = initial_capital

    def run(self, bars: Sequence[PriceBar]) -> SimulationResult:
        bars = tuple(bars)
        validate_bars(bars)
        required = self.params.warmup_bars()
        if len(bars) < required:
            raise InsufficientDataError(required, len(bars))

        logger.info("Running %s over %d bars (%s .. %s)", self.strategy.value, len(bars), bars[0].date, bars[-1].date)
        started = time.perf_counter()

        indicators = compute_indicators(bars, self.params)
        signals = generate_signals(self.strategy, indicators, self.params)
        ledger = Ledger(
            self.initial_capital,
            position_size=self.params.position_size,
            commission_rate=self.params.commission_rate,
            slippage_rate=self.params.slippage_rate,
        )
        for i in range(1, len(bars)):
            ledger.execute(bars[i], signals[i - 1])
            ledger.mark_to_market(bars[i])
        ledger.close_out(bars[-1])

        elapsed_ms = (time.perf_counter() - started) * 1000.0
        final_capital = ledger.cash
        result = SimulationResult(
            strategy=self.strategy,
            params=self.params,
            initial_capital=self.initial_capital,
            final_capital=final_capital,
            total_return_pct=(final_capital - self.initial_capital) / self.initial_capital * 100.0,
            trade_count=len(ledger.trades),
            max_drawdown_pct=ledger.max_drawdown * 100.0,
            execution_time_ms=elapsed_ms,
            trades=tuple(ledger.trades),
            equity_curve=tuple(ledger.equity_curve),
            final_quantity=ledger.quantity,
        )
        logger.info(
            "Backtest completed in %.1fms: %d trades, final capital %.2f, return %.2f%%",
            elapsed_ms, result.trade_count, final_capital, result.total_return_pct,
        )
        return result


def run_backtest(
    bars: Sequence[PriceBar],
    strategy: Union[StrategyId, str],
    params: Optional[Union[StrategyParams, Mapping[str, Any]]] = None,
    initial_capital: float = DEFAULT_INITIAL_CAPITAL,
) -> SimulationResult:
    """Functional shortcut. params may be StrategyParams or a mapping of overrides."""
    if params is not None and not isinstance(params, StrategyParams):
        params = StrategyParams.from_mapping(params)
    return BacktestEngine(strategy, params, initial_capital).run(bars)
