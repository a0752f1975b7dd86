"""
Technical indicators for the trend-following strategy.

Provides simple moving averages, Wilder-smoothed RSI, trailing volatility and
momentum. Every series function returns a pandas Series aligned
index-for-index with its input; warm-up entries are NaN, never zero.
"""
from dataclasses import dataclass
from typing import Sequence, Union

import numpy as np
import pandas as pd

from ..shared.defaults import (
    SMA_FAST_PERIOD, SMA_MID_PERIOD, SMA_SLOW_PERIOD, SMA_TREND_PERIOD,
    RSI_PERIOD, VOLATILITY_WINDOW, MOMENTUM_PERIOD,
)

PriceInput = Union[pd.Series, np.ndarray, Sequence[float]]


def _as_series(prices: PriceInput) -> pd.Series:
    if isinstance(prices, pd.Series):
        return prices.astype(float)
    return pd.Series(np.asarray(prices, dtype=float))


def moving_average(prices: PriceInput, period: int) -> pd.Series:
    """
    Simple moving average over a trailing window of `period` values.

    Entries before index `period - 1` are NaN. Uses pandas' rolling mean,
    which keeps a running window sum (add new, subtract dropped), so the cost
    is O(1) per step regardless of the period.
    """
    if period < 1:
        raise ValueError(f"period must be >= 1, got {period}")
    series = _as_series(prices)
    return series.rolling(window=period, min_periods=period).mean()


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    return 100.0 - (100.0 / (1.0 + avg_gain / avg_loss))


def rsi(prices: PriceInput, period: int = RSI_PERIOD) -> pd.Series:
    """
    Calculate Relative Strength Index with Wilder's smoothing.

    RSI = 100 - (100 / (1 + RS))
    RS = Average Gain / Average Loss

    The averages are seeded with the simple mean of the first `period`
    differences, then updated recursively:
    avg = (avg * (period - 1) + current) / period.
    Entries before index `period` are NaN.
    """
    if period < 1:
        raise ValueError(f"period must be >= 1, got {period}")
    series = _as_series(prices)
    values = series.to_numpy(dtype=float)
    out = np.full(len(values), np.nan)
    if len(values) < period + 1:
        return pd.Series(out, index=series.index)

    gain_sum = 0.0
    loss_sum = 0.0
    for i in range(1, period + 1):
        diff = values[i] - values[i - 1]
        if diff >= 0:
            gain_sum += diff
        else:
            loss_sum -= diff

    avg_gain = gain_sum / period
    avg_loss = loss_sum / period
    out[period] = _rsi_value(avg_gain, avg_loss)

    for i in range(period + 1, len(values)):
        diff = values[i] - values[i - 1]
        gain = diff if diff > 0 else 0.0
        loss = -diff if diff < 0 else 0.0
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period
        out[i] = _rsi_value(avg_gain, avg_loss)

    return pd.Series(out, index=series.index)


def volatility(prices: PriceInput, window: int = VOLATILITY_WINDOW) -> float:
    """
    Trailing volatility as a percentage of price.

    Population standard deviation of the last `window` closes divided by their
    mean, times 100. A zero mean (or no data) gives 0.0 instead of a division
    fault.
    """
    values = _as_series(prices).to_numpy(dtype=float)[-window:]
    if len(values) == 0:
        return 0.0
    mean = values.mean()
    if mean == 0:
        return 0.0
    return float(values.std() / mean * 100)


def momentum(prices: PriceInput, period: int = MOMENTUM_PERIOD) -> float:
    """Percentage change between the last close and the close `period` candles earlier."""
    values = _as_series(prices).to_numpy(dtype=float)
    if len(values) <= period:
        return 0.0
    base = values[-1 - period]
    if base == 0:
        return 0.0
    return float((values[-1] - base) / base * 100)


@dataclass(frozen=True)
class IndicatorSeries:
    """SMA and RSI series aligned index-for-index with the candles."""
    sma_fast: np.ndarray  # SMA 30
    sma_mid: np.ndarray  # SMA 50
    sma_slow: np.ndarray  # SMA 100
    sma_trend: np.ndarray  # SMA 200
    rsi: np.ndarray  # RSI 14

    def __len__(self) -> int:
        return len(self.sma_trend)


class TechnicalIndicators:
    """Calculates the indicator bundle the simulator walks over."""

    def __init__(
        self,
        sma_fast_period: int = SMA_FAST_PERIOD,
        sma_mid_period: int = SMA_MID_PERIOD,
        sma_slow_period: int = SMA_SLOW_PERIOD,
        sma_trend_period: int = SMA_TREND_PERIOD,
        rsi_period: int = RSI_PERIOD,
    ):
        """
        Initialize indicator calculator.

        Args:
            sma_fast_period: Fastest SMA of the alignment check (default: 30)
            sma_mid_period: Middle SMA of the alignment check (default: 50)
            sma_slow_period: Slowest SMA of the alignment check (default: 100)
            sma_trend_period: SMA the price is compared against (default: 200)
            rsi_period: Period for RSI calculation (default: 14)
        """
        self.sma_fast_period = sma_fast_period
        self.sma_mid_period = sma_mid_period
        self.sma_slow_period = sma_slow_period
        self.sma_trend_period = sma_trend_period
        self.rsi_period = rsi_period

    def calculate_all(self, closes: PriceInput) -> IndicatorSeries:
        """
        Calculate all indicators from scratch for one close series.

        Returns fresh numpy buffers; nothing is shared between calls.
        """
        series = _as_series(closes)
        return IndicatorSeries(
            sma_fast=moving_average(series, self.sma_fast_period).to_numpy(),
            sma_mid=moving_average(series, self.sma_mid_period).to_numpy(),
            sma_slow=moving_average(series, self.sma_slow_period).to_numpy(),
            sma_trend=moving_average(series, self.sma_trend_period).to_numpy(),
            rsi=rsi(series, self.rsi_period).to_numpy(),
        )


def compute_indicator_series(closes: PriceInput) -> IndicatorSeries:
    """Indicator bundle with the default periods (SMA 30/50/100/200, RSI 14)."""
    return TechnicalIndicators().calculate_all(closes)
