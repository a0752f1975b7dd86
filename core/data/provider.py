"""Candle provider interface shared by the Binance and CSV providers."""
from typing import List, Optional, Protocol, runtime_checkable

import pandas as pd


@runtime_checkable
class CandleProvider(Protocol):
    """Source of symbols and candle frames for a scan."""

    def list_symbols(self, limit: Optional[int] = None) -> List[str]:
        ...

    def fetch_candles(self, symbol: str, interval: str, limit: int) -> pd.DataFrame:
        ...
