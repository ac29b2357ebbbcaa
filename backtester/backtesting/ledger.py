"""
Cash/position ledger for one run: long-only, whole shares, slippage and commission.
"""

from __future__ import annotations
import logging
import math
from typing import List, Optional

from backtester.core.types import EquitySnapshot, PriceBar, Signal, SignalAction, Trade, TradeSide

logger = logging.getLogger("backtester.ledger")

CLOSE_AT_END_REASON = "Close position at end"


class Ledger:
    """
    Flat (quantity == 0) or long. Buys invest position_size of current cash at
    close * (1 + slippage); sells liquidate everything at close * (1 - slippage).
    Commission is charged on trade value. Mismatched signals are no-ops.
    """

    def __init__(
        self,
        initial_capital: float,
        position_size: float = 0.2,
        commission_rate: float = 0.001,
        slippage_rate: float = 0.001,
    ):
        self.initial_capital = initial_capital
        self.position_size = position_size
        self.commission_rate = commission_rate
        self.slippage_rate = slippage_rate
        self.cash = initial_capital
        self.quantity = 0
        self.entry_price = 0.0
        self.trades: List[Trade] = []
        self.equity_curve: List[EquitySnapshot] = []
        self.peak_value = initial_capital
        self.max_drawdown = 0.0

    @property
    def is_long(self) -> bool:
        return self.quantity > 0

    def execute(self, bar: PriceBar, signal: Signal) -> Optional[Trade]:
        """Apply the bar's signal. Returns the trade, or None when nothing was done."""
        if signal.action == SignalAction.BUY and not self.is_long:
            return self._buy(bar, signal.reason)
        if signal.action == SignalAction.SELL and self.is_long:
            return self._sell(bar, signal.reason)
        return None

    def _buy(self, bar: PriceBar, reason: str) -> Optional[Trade]:
        price = bar.close * (1 + self.slippage_rate)
        quantity = math.floor(self.cash * self.position_size / price)
        if quantity <= 0:
            logger.debug("Skip buy on %s: %.2f cash buys 0 shares at %.4f", bar.date, self.cash, price)
            return None
        cost = quantity * price
        commission = cost * self.commission_rate
        self.cash -= cost + commission
        self.quantity = quantity
        self.entry_price = price
        trade = Trade(bar.date, TradeSide.BUY, price, quantity, commission, reason)
        self.trades.append(trade)
        logger.debug("BUY: %d shares at %.4f on %s (%s)", quantity, price, bar.date, reason)
        return trade

    def _sell(self, bar: PriceBar, reason: str) -> Trade:
        price = bar.close * (1 - self.slippage_rate)
        quantity = self.quantity
        revenue = quantity * price
        commission = revenue * self.commission_rate
        self.cash += revenue - commission
        self.quantity = 0
        self.entry_price = 0.0
        trade = Trade(bar.date, TradeSide.SELL, price, quantity, commission, reason)
        self.trades.append(trade)
        logger.debug("SELL: %d shares at %.4f on %s (%s)", quantity, price, bar.date, reason)
        return trade

    def mark_to_market(self, bar: PriceBar) -> EquitySnapshot:
        """Record portfolio value at the bar's close and update peak/max drawdown."""
        position_value = self.quantity * bar.close
        value = self.cash + position_value
        snapshot = EquitySnapshot(bar.date, value, self.cash, position_value, self.quantity)
        self.equity_curve.append(snapshot)
        if value > self.peak_value:
            self.peak_value = value
        drawdown = (self.peak_value - value) / self.peak_value
        if drawdown > self.max_drawdown:
            self.max_drawdown = drawdown
        return snapshot

    def close_out(self, bar: PriceBar) -> Optional[Trade]:
        """Liquidate any open position at the final bar."""
        if not self.is_long:
            return None
        return self._sell(bar, CLOSE_AT_END_REASON)
