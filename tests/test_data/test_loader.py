"""
Tests for the offline CSV candle provider.
"""
import pytest
import pandas as pd
import numpy as np

from core.data.loader import CsvCandleProvider, DataLoader
from core.data.preparation import DataPreparationError


def _write_candles(path, n=300):
    dates = pd.date_range("2024-01-01", periods=n, freq="h")
    closes = 100 + np.arange(n) * 0.1
    pd.DataFrame({
        "Open": closes,
        "High": closes + 1,
        "Low": closes - 1,
        "Close": closes,
        "Volume": 1.0,
    }, index=pd.Index(dates, name="open_time")).to_csv(path)


@pytest.fixture
def candle_dir(tmp_path):
    _write_candles(tmp_path / "BTCUSDT.csv")
    _write_candles(tmp_path / "ETHUSDT.csv", n=150)
    pd.DataFrame({"foo": [1, 2]}).to_csv(tmp_path / "BROKEN.csv")
    return tmp_path


def test_list_symbols_sorted(candle_dir):
    provider = CsvCandleProvider(candle_dir)
    assert provider.list_symbols() == ["BROKEN", "BTCUSDT", "ETHUSDT"]
    assert provider.list_symbols(2) == ["BROKEN", "BTCUSDT"]


def test_fetch_candles_tail(candle_dir):
    df = CsvCandleProvider(candle_dir).fetch_candles("BTCUSDT", "1h", 250)
    assert len(df) == 250
    assert df["Close"].iloc[-1] == pytest.approx(100 + 299 * 0.1)
    assert isinstance(df.index, pd.DatetimeIndex)


def test_fetch_short_history_is_not_rejected_here(candle_dir):
    df = CsvCandleProvider(candle_dir).fetch_candles("ETHUSDT", "1h", 500)
    assert len(df) == 150


def test_missing_symbol(candle_dir):
    with pytest.raises(FileNotFoundError):
        CsvCandleProvider(candle_dir).fetch_candles("DOGEUSDT", "1h", 500)


def test_malformed_file(candle_dir):
    with pytest.raises(DataPreparationError, match="BROKEN"):
        CsvCandleProvider(candle_dir).fetch_candles("BROKEN", "1h", 500)


def test_missing_directory(tmp_path):
    with pytest.raises(FileNotFoundError):
        CsvCandleProvider(tmp_path / "nope")


def test_data_loader_date_filter(candle_dir):
    df = DataLoader(candle_dir / "BTCUSDT.csv").load(start_date="2024-01-02", end_date="2024-01-02 23:00")
    assert len(df) == 24
    assert df.index.min() == pd.Timestamp("2024-01-02")


def test_empty_file_is_preparation_error(tmp_path):
    (tmp_path / "EMPTYUSDT.csv").write_text("")
    with pytest.raises(DataPreparationError, match="EMPTYUSDT"):
        CsvCandleProvider(tmp_path).fetch_candles("EMPTYUSDT", "1h", 500)


def test_unparseable_dates_are_preparation_error(tmp_path):
    (tmp_path / "JUNKUSDT.csv").write_text(
        "open_time,Open,High,Low,Close,Volume\nnot-a-date,1,1,1,1,1\n"
    )
    with pytest.raises(DataPreparationError, match="Unreadable"):
        DataLoader(tmp_path / "JUNKUSDT.csv").load()
