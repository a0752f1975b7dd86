"""
Candle data preparation and validation.

Normalises raw candle data (Binance kline payloads, CSV frames, Candle lists)
into the frame the simulator expects: DatetimeIndex named open_time, float
Open/High/Low/Close/Volume columns, oldest first.
Fail-fast approach: raises on validation errors.
"""
from __future__ import annotations

from typing import Iterable, List, Sequence

import pandas as pd

from ..shared.defaults import MIN_CANDLES
from ..shared.types import Candle


OHLC_COLUMNS = ["Open", "High", "Low", "Close"]
CANDLE_COLUMNS = OHLC_COLUMNS + ["Volume"]

# Positions inside one Binance kline row:
# [open_time, open, high, low, close, volume, close_time, quote_volume, ...]
KLINE_OPEN_TIME = 0
KLINE_OHLCV = slice(1, 6)


class DataPreparationError(Exception):
    """Raised when candle data is malformed."""
    pass


class InsufficientHistoryError(DataPreparationError):
    """Raised when an instrument has fewer candles than the strategy warm-up needs."""

    def __init__(self, available: int, required: int):
        super().__init__(f"insufficient history ({available} < {required} candles)")
        self.available = available
        self.required = required


def klines_to_frame(klines: Sequence[Sequence]) -> pd.DataFrame:
    """
    Convert a Binance kline payload to a candle frame.

    Args:
        klines: List of kline rows as returned by the klines endpoint
                (numeric fields arrive as strings)

    Returns:
        DataFrame indexed by open_time with float OHLCV columns
    """
    if not klines:
        return pd.DataFrame(columns=CANDLE_COLUMNS, index=pd.DatetimeIndex([], name="open_time"), dtype=float)

    try:
        index = pd.to_datetime([int(row[KLINE_OPEN_TIME]) for row in klines], unit="ms")
        values = [[float(v) for v in row[KLINE_OHLCV]] for row in klines]
    except (TypeError, ValueError, IndexError) as e:
        raise DataPreparationError(f"Malformed kline payload: {e}") from e

    df = pd.DataFrame(values, columns=CANDLE_COLUMNS, index=index)
    df.index.name = "open_time"
    return df


def candles_to_frame(candles: Iterable[Candle]) -> pd.DataFrame:
    """Convert Candle records to a candle frame (order preserved)."""
    candles = list(candles)
    df = pd.DataFrame(
        [[c.open, c.high, c.low, c.close, c.volume] for c in candles],
        columns=CANDLE_COLUMNS,
        index=pd.DatetimeIndex([pd.Timestamp(c.open_time) for c in candles], name="open_time"),
        dtype=float,
    )
    return df


def frame_to_candles(frame: pd.DataFrame) -> List[Candle]:
    """Convert a candle frame back to Candle records."""
    volumes = frame["Volume"] if "Volume" in frame.columns else pd.Series(0.0, index=frame.index)
    return [
        Candle(
            open_time=ts.to_pydatetime(),
            open=float(o),
            high=float(h),
            low=float(l),
            close=float(c),
            volume=float(v),
        )
        for ts, o, h, l, c, v in zip(
            frame.index, frame["Open"], frame["High"], frame["Low"], frame["Close"], volumes
        )
    ]


def prepare_candles(frame: pd.DataFrame, min_candles: int = MIN_CANDLES) -> pd.DataFrame:
    """
    Validate and normalise a candle frame for simulation.

    Column names are matched case-insensitively; a missing Volume column is
    filled with zeros. OHLC values are not cross-checked (high >= low etc.);
    malformed values degrade through NaN propagation.

    Args:
        frame: Raw candle frame
        min_candles: Minimum number of candles required (default: 200)

    Returns:
        New DataFrame sorted oldest first with float OHLCV columns

    Raises:
        DataPreparationError: If OHLC columns are missing
        InsufficientHistoryError: If fewer than min_candles rows remain
    """
    if frame is None:
        raise DataPreparationError("No candle data")

    by_lower = {str(col).lower(): col for col in frame.columns}
    missing = [col for col in OHLC_COLUMNS if col.lower() not in by_lower]
    if missing:
        raise DataPreparationError(f"Missing candle columns: {missing}. Available: {list(frame.columns)}")

    df = pd.DataFrame(index=frame.index)
    for col in CANDLE_COLUMNS:
        source = by_lower.get(col.lower())
        if source is None:
            df[col] = 0.0
        else:
            df[col] = pd.to_numeric(frame[source], errors="coerce").astype(float).to_numpy()

    if isinstance(df.index, pd.DatetimeIndex):
        df = df.sort_index()
    df.index.name = "open_time"

    if len(df) < min_candles:
        raise InsufficientHistoryError(len(df), min_candles)
    return df
