"""
Offline candle loader.

Loads candle series from CSV files (one file per symbol, <SYMBOL>.csv) with
support for:
- Date range filtering
- Tail limiting (the last N candles, like the klines endpoint)
- Listing the symbols available in a directory
"""
import logging
import pandas as pd
from pathlib import Path
from typing import List, Optional, Union
from datetime import datetime

from .preparation import DataPreparationError, prepare_candles


logger = logging.getLogger(__name__)


class DataLoader:
    """
    Loads candles from one CSV file.

    The first column is the candle open time; the remaining columns hold
    Open/High/Low/Close[/Volume] in any letter case.
    """

    def __init__(self, data_path: Union[str, Path]):
        """
        Initialize the data loader.

        Args:
            data_path: Path to the CSV file containing the candles
        """
        self.data_path = Path(data_path)
        if not self.data_path.exists():
            raise FileNotFoundError(f"Data file not found: {self.data_path}")

    def load(
        self,
        start_date: Optional[Union[str, datetime, pd.Timestamp]] = None,
        end_date: Optional[Union[str, datetime, pd.Timestamp]] = None,
        limit: Optional[int] = None,
    ) -> pd.DataFrame:
        """
        Load candles from the CSV file with optional filtering.

        Args:
            start_date: Start date for filtering (inclusive). If None, no start filter.
            end_date: End date for filtering (inclusive). If None, no end filter.
            limit: If specified, keep only the last `limit` candles.

        Returns:
            Candle frame sorted oldest first (not yet length-validated)

        Raises:
            DataPreparationError: If the file is empty, unparseable or lacks OHLC columns
        """
        try:
            df = pd.read_csv(
                self.data_path,
                index_col=0,
                parse_dates=True,
            )
            if not isinstance(df.index, pd.DatetimeIndex):
                df.index = pd.to_datetime(df.index)
        except (pd.errors.EmptyDataError, pd.errors.ParserError, ValueError, TypeError) as e:
            raise DataPreparationError(f"Unreadable candle file {self.data_path}: {e}") from e

        # No minimum here; callers validate history length
        df = prepare_candles(df, min_candles=0)

        if start_date is not None:
            df = df[df.index >= pd.to_datetime(start_date)]
        if end_date is not None:
            df = df[df.index <= pd.to_datetime(end_date)]
        if limit is not None:
            df = df.tail(limit)
        return df


class CsvCandleProvider:
    """
    Candle provider backed by a directory of <SYMBOL>.csv files.

    Used for offline scans and tests; implements the same interface as
    BinanceFuturesClient. The interval argument is ignored: each file holds
    a single timeframe.
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)
        if not self.directory.is_dir():
            raise FileNotFoundError(f"Candle directory not found: {self.directory}")

    def list_symbols(self, limit: Optional[int] = None) -> List[str]:
        """Return sorted CSV stems, optionally capped at `limit`."""
        symbols = sorted(p.stem for p in self.directory.glob("*.csv"))
        return symbols[:limit] if limit is not None else symbols

    def fetch_candles(self, symbol: str, interval: str = "1h", limit: Optional[int] = None) -> pd.DataFrame:
        """
        Load the last `limit` candles of a symbol.

        Raises:
            FileNotFoundError: If <symbol>.csv does not exist
            DataPreparationError: If the file is unreadable or lacks OHLC columns
        """
        path = self.directory / f"{symbol}.csv"
        if not path.exists():
            raise FileNotFoundError(f"Data file not found for symbol '{symbol}': {path}")
        logger.debug("Loading %s from %s", symbol, path)
        try:
            return DataLoader(path).load(limit=limit)
        except DataPreparationError as e:
            raise DataPreparationError(f"{symbol}: {e}") from e
