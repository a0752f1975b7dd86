"""
Tests for technical indicators (SMA, RSI, volatility, momentum).
"""
import pytest
import pandas as pd
import numpy as np
from core.indicators.technical import (
    TechnicalIndicators,
    IndicatorSeries,
    compute_indicator_series,
    moving_average,
    rsi,
    volatility,
    momentum,
)


@pytest.fixture
def sample_prices():
    """Create sample price data for testing."""
    dates = pd.date_range('2020-01-01', periods=300, freq='h')
    rng = np.random.RandomState(7)
    prices = pd.Series(
        100 + np.arange(300) * 0.2 + rng.randn(300) * 2,
        index=dates
    )
    return prices


class TestMovingAverage:
    """Test simple moving average."""

    def test_known_values(self):
        """SMA(3) of 1..5 is [NaN, NaN, 2, 3, 4]."""
        result = moving_average([1, 2, 3, 4, 5], 3)
        assert result.isna().tolist() == [True, True, False, False, False]
        assert result.iloc[2:].tolist() == pytest.approx([2.0, 3.0, 4.0])

    def test_length_matches_input(self, sample_prices):
        result = moving_average(sample_prices, 30)
        assert len(result) == len(sample_prices)
        assert result.index.equals(sample_prices.index)

    def test_warmup_is_nan_not_zero(self, sample_prices):
        result = moving_average(sample_prices, 50)
        assert result.iloc[:49].isna().all()
        assert result.iloc[49:].notna().all()

    def test_matches_window_mean(self, sample_prices):
        """Every defined value equals the mean of its trailing window."""
        result = moving_average(sample_prices, 20)
        for i in (19, 100, 299):
            assert result.iloc[i] == pytest.approx(sample_prices.iloc[i - 19:i + 1].mean())

    def test_shorter_than_period_is_all_nan(self):
        result = moving_average([1.0, 2.0, 3.0], 5)
        assert len(result) == 3
        assert result.isna().all()

    def test_invalid_period(self):
        with pytest.raises(ValueError, match="period"):
            moving_average([1.0, 2.0], 0)


class TestRSI:
    """Test RSI calculation."""

    def test_known_values(self):
        """RSI(2) of [1,2,3,2,1] is [NaN, NaN, 100, 50, 25]."""
        result = rsi([1, 2, 3, 2, 1], 2)
        assert result.iloc[:2].isna().all()
        assert result.iloc[2:].tolist() == pytest.approx([100.0, 50.0, 25.0])

    def test_rsi_range(self, sample_prices):
        """RSI should be between 0 and 100."""
        result = rsi(sample_prices)
        valid = result.dropna()
        assert valid.min() >= 0
        assert valid.max() <= 100

    def test_rsi_length(self, sample_prices):
        """RSI should have same length as input, NaN before index `period`."""
        result = rsi(sample_prices, 14)
        assert len(result) == len(sample_prices)
        assert result.iloc[:14].isna().all()
        assert result.iloc[14:].notna().all()

    def test_too_short_is_all_nan(self):
        result = rsi([1.0, 2.0, 3.0], 14)
        assert result.isna().all()

    def test_only_gains_is_100(self):
        result = rsi(np.arange(1, 40, dtype=float), 14)
        assert (result.dropna() == 100.0).all()

    def test_only_losses_is_0(self):
        result = rsi(np.arange(40, 1, -1, dtype=float), 14)
        assert result.dropna().tolist() == pytest.approx([0.0] * len(result.dropna()))


class TestVolatilityAndMomentum:
    """Test trailing volatility and momentum."""

    def test_constant_prices_zero_volatility(self):
        assert volatility([5.0] * 30) == 0.0

    def test_zero_mean_gives_zero(self):
        assert volatility([0.0] * 25) == 0.0

    def test_empty_gives_zero(self):
        assert volatility([]) == 0.0

    def test_population_std_over_window(self):
        """Only the last 20 closes count, population std / mean * 100."""
        prices = [1000.0] * 10 + [10.0, 12.0] * 10
        expected = np.std([10.0, 12.0] * 10) / 11.0 * 100
        assert volatility(prices, 20) == pytest.approx(expected)

    def test_momentum_percentage(self):
        prices = [100.0] + [0.0] * 9 + [110.0]
        assert momentum(prices, 10) == pytest.approx(10.0)

    def test_momentum_insufficient_history(self):
        assert momentum([1.0] * 10, 10) == 0.0

    def test_momentum_zero_base(self):
        prices = [0.0] + [1.0] * 10
        assert momentum(prices, 10) == 0.0


class TestTechnicalIndicators:
    """Test the indicator bundle used by the simulator."""

    def test_calculate_all_aligned(self, sample_prices):
        bundle = TechnicalIndicators().calculate_all(sample_prices)
        assert isinstance(bundle, IndicatorSeries)
        assert len(bundle) == len(sample_prices)
        for arr in (bundle.sma_fast, bundle.sma_mid, bundle.sma_slow, bundle.sma_trend, bundle.rsi):
            assert len(arr) == len(sample_prices)

    def test_default_periods(self, sample_prices):
        bundle = compute_indicator_series(sample_prices.to_numpy())
        assert np.isnan(bundle.sma_fast[28]) and not np.isnan(bundle.sma_fast[29])
        assert np.isnan(bundle.sma_mid[48]) and not np.isnan(bundle.sma_mid[49])
        assert np.isnan(bundle.sma_slow[98]) and not np.isnan(bundle.sma_slow[99])
        assert np.isnan(bundle.sma_trend[198]) and not np.isnan(bundle.sma_trend[199])
        assert np.isnan(bundle.rsi[13]) and not np.isnan(bundle.rsi[14])

    def test_deterministic(self, sample_prices):
        a = compute_indicator_series(sample_prices)
        b = compute_indicator_series(sample_prices)
        np.testing.assert_array_equal(a.sma_trend, b.sma_trend)
        np.testing.assert_array_equal(a.rsi, b.rsi)
