"""Price data: CSV loading and cleaning."""

from backtester.data.loader import clean_prices, frame_to_bars, load_price_csv

__all__ = ["clean_prices", "frame_to_bars", "load_price_csv"]
