"""
Tests for candle data preparation.
"""
import pytest
import pandas as pd
import numpy as np
from dataclasses import FrozenInstanceError
from datetime import datetime

from core.data.preparation import (
    DataPreparationError,
    InsufficientHistoryError,
    candles_to_frame,
    frame_to_candles,
    klines_to_frame,
    prepare_candles,
)
from core.shared.types import Candle


def _synthetic_candles(n: int = 250, start: str = "2024-01-01"):
    """Synthetic hourly candle frame for testing."""
    dates = pd.date_range(start, periods=n, freq="h")
    rng = np.random.RandomState(42)
    closes = 100 + np.cumsum(rng.randn(n) * 0.5)
    return pd.DataFrame({
        "open": closes - 0.1,
        "high": closes + 1.0,
        "low": closes - 1.0,
        "close": closes,
        "volume": rng.randint(100, 1000, n),
    }, index=dates)


def test_prepare_candles_normalises_columns():
    """Lower-case columns become Open/High/Low/Close/Volume floats."""
    df = prepare_candles(_synthetic_candles())
    assert list(df.columns) == ["Open", "High", "Low", "Close", "Volume"]
    assert all(df[col].dtype == float for col in df.columns)
    assert df.index.name == "open_time"


def test_prepare_candles_sorts_oldest_first():
    raw = _synthetic_candles().iloc[::-1]
    df = prepare_candles(raw)
    assert df.index.is_monotonic_increasing


def test_prepare_candles_does_not_modify_input():
    raw = _synthetic_candles()
    before = raw.copy()
    prepare_candles(raw)
    pd.testing.assert_frame_equal(raw, before)


def test_prepare_candles_missing_volume_is_zero():
    raw = _synthetic_candles().drop(columns=["volume"])
    df = prepare_candles(raw)
    assert (df["Volume"] == 0.0).all()


def test_prepare_candles_missing_ohlc():
    raw = _synthetic_candles().drop(columns=["high"])
    with pytest.raises(DataPreparationError, match="High"):
        prepare_candles(raw)


def test_prepare_candles_insufficient_history():
    with pytest.raises(InsufficientHistoryError) as exc_info:
        prepare_candles(_synthetic_candles(199))
    assert exc_info.value.available == 199
    assert exc_info.value.required == 200
    assert isinstance(exc_info.value, DataPreparationError)


def test_prepare_candles_exactly_minimum():
    assert len(prepare_candles(_synthetic_candles(200))) == 200


def test_prepare_candles_non_numeric_becomes_nan():
    raw = _synthetic_candles()
    raw["close"] = raw["close"].astype(object)
    raw.iloc[5, raw.columns.get_loc("close")] = "n/a"
    df = prepare_candles(raw)
    assert np.isnan(df["Close"].iloc[5])


class TestKlines:
    """Test Binance kline conversion."""

    def test_klines_to_frame(self):
        klines = [
            [1704067200000, "100.0", "101.5", "99.5", "101.0", "1234.5", 1704070799999, "0", 10, "0", "0", "0"],
            [1704070800000, "101.0", "102.0", "100.0", "100.5", "987.0", 1704074399999, "0", 8, "0", "0", "0"],
        ]
        df = klines_to_frame(klines)
        assert list(df.columns) == ["Open", "High", "Low", "Close", "Volume"]
        assert df.index[0] == pd.Timestamp("2024-01-01 00:00:00")
        assert df.index[1] == pd.Timestamp("2024-01-01 01:00:00")
        assert df["Close"].tolist() == [101.0, 100.5]
        assert df["Volume"].iloc[0] == pytest.approx(1234.5)

    def test_empty_klines(self):
        df = klines_to_frame([])
        assert df.empty
        assert list(df.columns) == ["Open", "High", "Low", "Close", "Volume"]

    def test_malformed_row(self):
        with pytest.raises(DataPreparationError):
            klines_to_frame([[1704067200000, "abc", "1", "1", "1", "1"]])


class TestCandleRecords:
    """Test Candle <-> frame conversion."""

    def test_round_trip(self):
        candles = [
            Candle(datetime(2024, 1, 1, h), 10.0 + h, 11.0 + h, 9.0 + h, 10.5 + h, 5.0)
            for h in range(3)
        ]
        frame = candles_to_frame(candles)
        assert frame["Close"].tolist() == [10.5, 11.5, 12.5]
        back = frame_to_candles(frame)
        assert [c.close for c in back] == [c.close for c in candles]
        assert back[0].open_time == datetime(2024, 1, 1, 0)

    def test_candle_is_immutable(self):
        candle = Candle(datetime(2024, 1, 1), 1.0, 2.0, 0.5, 1.5)
        with pytest.raises(FrozenInstanceError):
            candle.close = 3.0
