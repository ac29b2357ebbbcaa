"""
Load daily OHLCV history from CSV (Yahoo Finance download format or normalized
column names), drop malformed rows, and convert to PriceBar records.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import List, Optional, Union

import pandas as pd

from backtester.core.errors import DataSourceError
from backtester.core.types import PriceBar

logger = logging.getLogger("backtester.data")

COLUMNS = ["date", "open", "high", "low", "close", "adj_close", "volume"]
_ALIASES = {
    "date": "date",
    "trading_date": "date",
    "open": "open",
    "open_price": "open",
    "high": "high",
    "high_price": "high",
    "low": "low",
    "low_price": "low",
    "close": "close",
    "close_price": "close",
    "adj close": "adj_close",
    "adj_close": "adj_close",
    "adjusted_close": "adj_close",
    "volume": "volume",
}
_REQUIRED = ["date", "open", "high", "low", "close"]


def load_price_csv(
    path: Union[str, Path],
    start: Optional[str] = None,
    end: Optional[str] = None,
) -> pd.DataFrame:
    """
    Read a price CSV into a DataFrame with columns COLUMNS, sorted by date.
    Rows without open/close (Yahoo writes "null") are dropped; start/end are inclusive.
    """
    path = Path(path)
    if not path.exists():
        raise DataSourceError(f"Price file not found: {path}")
    try:
        raw = pd.read_csv(path, na_values=["null", "NULL", ""])
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise DataSourceError(f"Could not read {path}: {e}") from e

    df = raw.rename(columns=lambda c: _ALIASES.get(str(c).strip().lower(), str(c).strip().lower()))
    missing = [c for c in _REQUIRED if c not in df.columns]
    if missing:
        raise DataSourceError(f"{path} is missing columns: {', '.join(missing)}")
    if "adj_close" not in df.columns:
        df["adj_close"] = df["close"]
    if "volume" not in df.columns:
        df["volume"] = 0.0
    df = df[COLUMNS].copy()

    df["date"] = pd.to_datetime(df["date"], errors="coerce")
    for col in COLUMNS[1:]:
        df[col] = pd.to_numeric(df[col], errors="coerce")
    df = df.dropna(subset=["date", "open", "close"]).copy()
    df["volume"] = df["volume"].fillna(0)
    if start:
        df = df[df["date"] >= pd.Timestamp(start)]
    if end:
        df = df[df["date"] <= pd.Timestamp(end)]
    df = df.sort_values("date", kind="mergesort").reset_index(drop=True)
    logger.info("Loaded %d price rows from %s", len(df), path)
    return df


def clean_prices(df: pd.DataFrame) -> pd.DataFrame:
    """Drop rows with non-positive prices, open/close outside high..low, or duplicate dates."""
    total = len(df)
    valid = (
        (df["open"] > 0)
        & (df["close"] > 0)
        & (df["low"] > 0)
        & (df["high"] >= df["low"])
        & (df["high"] >= df[["open", "close"]].max(axis=1))
        & (df["low"] <= df[["open", "close"]].min(axis=1))
    )
    cleaned = df[valid].drop_duplicates(subset="date", keep="last").reset_index(drop=True)
    logger.info(
        "Data validation: %d total, %d valid, %d filtered out",
        total, len(cleaned), total - len(cleaned),
    )
    return cleaned


def frame_to_bars(df: pd.DataFrame) -> List[PriceBar]:
    bars = []
    for row in df.itertuples(index=False):
        adj = row.adj_close
        bars.append(PriceBar(
            date=pd.Timestamp(row.date).date(),
            open=float(row.open),
            high=float(row.high),
            low=float(row.low),
            close=float(row.close),
            adj_close=None if pd.isna(adj) else float(adj),
            volume=float(row.volume),
        ))
    return bars
