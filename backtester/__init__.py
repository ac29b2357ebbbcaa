"""Single-security strategy backtester: indicators, signals, ledger, analytics."""

__version__ = "0.1.0"
