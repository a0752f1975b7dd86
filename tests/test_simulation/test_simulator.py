"""
Tests for the per-instrument trade simulator.
"""
import pytest
import numpy as np
import pandas as pd

from core.patterns.catalogue import PatternId, PatternRegistry
from core.patterns.scorer import PatternScorer
from core.shared.types import PatternMode, PositionType, SignalType, Trend
from core.simulation.simulator import TradeSimulator, entry_signal, simulate
from core.simulation.types import StrategyParams, TradeOutcome


def _frame(closes, high_mult=1.05, low_mult=0.99):
    """Candle frame whose highs/lows are fixed multiples of the close."""
    closes = np.asarray(closes, dtype=float)
    index = pd.date_range('2024-01-01', periods=len(closes), freq='h')
    return pd.DataFrame({
        'Open': closes,
        'High': closes * high_mult,
        'Low': closes * low_mult,
        'Close': closes,
        'Volume': 1.0,
    }, index=index)


@pytest.fixture
def params():
    return StrategyParams(capital=1000.0, leverage=10.0, take_profit_pct=0.03)


@pytest.fixture
def uptrend():
    """260 candles rising 0.1 per candle; every candle reaches +5% intrabar."""
    return _frame(100 + np.arange(260) * 0.1)


@pytest.fixture
def downtrend():
    """260 candles falling 0.1 per candle; every candle reaches -5% intrabar."""
    return _frame(200 - np.arange(260) * 0.1, high_mult=1.01, low_mult=0.95)


class TestEntrySignal:
    """Test the entry decision for one candle."""

    def test_long_alignment(self):
        assert entry_signal(110, 105, 104, 103, 100, 0, PatternMode.OFF) is PositionType.LONG

    def test_short_alignment(self):
        assert entry_signal(90, 95, 96, 97, 100, 0, PatternMode.OFF) is PositionType.SHORT

    def test_misaligned_is_none(self):
        assert entry_signal(110, 103, 104, 105, 100, 0, PatternMode.OFF) is None

    def test_nan_indicators_never_signal(self):
        assert entry_signal(110, np.nan, 104, 103, 100, 0, PatternMode.OFF) is None
        assert entry_signal(110, 105, 104, 103, np.nan, 5, PatternMode.EXPAND) is None

    def test_confirm_requires_same_direction_score(self):
        assert entry_signal(110, 105, 104, 103, 100, 0, PatternMode.CONFIRM) is None
        assert entry_signal(110, 105, 104, 103, 100, -2, PatternMode.CONFIRM) is None
        assert entry_signal(110, 105, 104, 103, 100, 1, PatternMode.CONFIRM) is PositionType.LONG
        assert entry_signal(90, 95, 96, 97, 100, -1, PatternMode.CONFIRM) is PositionType.SHORT

    def test_expand_trades_strong_patterns_without_trend(self):
        # Misaligned SMAs, close above SMA 200
        assert entry_signal(110, 103, 104, 105, 100, 3, PatternMode.EXPAND) is PositionType.LONG
        assert entry_signal(110, 103, 104, 105, 100, 2, PatternMode.EXPAND) is None
        assert entry_signal(110, 103, 104, 105, 100, -3, PatternMode.EXPAND) is None
        assert entry_signal(90, 97, 96, 95, 100, -4, PatternMode.EXPAND) is PositionType.SHORT

    def test_expand_keeps_trend_signal(self):
        assert entry_signal(110, 105, 104, 103, 100, -5, PatternMode.EXPAND) is PositionType.LONG


class TestTakeProfit:
    """Test trades that reach their target."""

    def test_long_take_profit_compounds(self, params, uptrend):
        result = TradeSimulator(params).run(uptrend, symbol="UPUSDT")
        # Entries at 200, 211, ..., 255; each hits the target on the next candle
        assert result.trades == 6
        assert result.losing_trades == 0
        assert result.wins == 6
        assert result.liquidations == 0
        growth = 1 + 0.03 * 10 - 10 * 0.0004 * 2
        assert result.final_capital == pytest.approx(1000 * growth ** 6)
        assert result.win_rate == pytest.approx(100.0)
        assert result.max_drawdown == 0.0
        assert result.symbol == "UPUSDT"

    def test_short_take_profit(self, params, downtrend):
        result = TradeSimulator(params).run(downtrend)
        assert result.trades == 6
        assert all(t.position.position_type is PositionType.SHORT for t in result.trade_log)
        assert all(t.outcome is TradeOutcome.TAKE_PROFIT for t in result.trade_log)
        assert result.roi > 0

    def test_targets_and_liquidation_prices(self, params, uptrend, downtrend):
        long_trade = TradeSimulator(params).run(uptrend).trade_log[0]
        entry = uptrend['Close'].iloc[200]
        assert long_trade.position.entry_price == pytest.approx(entry)
        assert long_trade.position.target_price == pytest.approx(entry * 1.03)
        assert long_trade.position.liquidation_price == pytest.approx(entry * (1 - 0.1 + 0.004))
        assert long_trade.exit_price == pytest.approx(entry * 1.03)

        short_trade = TradeSimulator(params).run(downtrend).trade_log[0]
        entry = downtrend['Close'].iloc[200]
        assert short_trade.position.target_price == pytest.approx(entry * 0.97)
        assert short_trade.position.liquidation_price == pytest.approx(entry * (1 + 0.1 - 0.004))


class TestLiquidation:
    """Test liquidation handling and the capital floor."""

    @pytest.fixture
    def crash(self, uptrend):
        """Candle 201 touches both the target and the liquidation price."""
        frame = uptrend.copy()
        frame.iloc[201, frame.columns.get_loc('High')] = 1000.0
        frame.iloc[201, frame.columns.get_loc('Low')] = 1.0
        return frame

    def test_liquidation_wins_tie(self, params, crash):
        result = TradeSimulator(params).run(crash)
        first = result.trade_log[0]
        assert first.outcome is TradeOutcome.LIQUIDATED
        assert first.exit_index == 201
        assert first.capital_after == 0.0
        assert first.fees == 0.0

    def test_capital_never_negative(self, params, crash):
        result = TradeSimulator(params).run(crash)
        assert result.final_capital == 0.0
        assert all(t.capital_after >= 0 for t in result.trade_log)
        assert result.roi == pytest.approx(-100.0)
        assert result.max_drawdown == pytest.approx(100.0)
        assert result.liquidations == 1

    def test_short_liquidation(self, params, downtrend):
        frame = downtrend.copy()
        frame.iloc[201, frame.columns.get_loc('High')] = 1000.0
        result = TradeSimulator(params).run(frame)
        assert result.trade_log[0].outcome is TradeOutcome.LIQUIDATED


class TestUnresolved:
    """Test trades that reach neither target nor liquidation."""

    @pytest.fixture
    def drift(self):
        """Slow drift: +0.49% over 49 candles, intrabar range 0.1%."""
        return _frame(100 + np.arange(260) * 0.01, high_mult=1.001, low_mult=0.999)

    def test_closes_at_last_scanned_candle(self, params, drift):
        result = TradeSimulator(params).run(drift)
        first = result.trade_log[0]
        assert first.outcome is TradeOutcome.UNRESOLVED
        assert first.exit_index == 249
        assert first.exit_price == pytest.approx(drift['Close'].iloc[249])
        assert first.exit_price != pytest.approx(first.position.entry_price)

        entry = drift['Close'].iloc[200]
        pnl_pct = (drift['Close'].iloc[249] - entry) / entry
        expected = 1000 + 1000 * pnl_pct * 10 - 1000 * 10 * 0.0004 * 2
        assert first.capital_after == pytest.approx(expected)
        assert first.fees == pytest.approx(8.0)

    def test_window_truncated_at_end_of_data(self, params, drift):
        result = TradeSimulator(params).run(drift)
        last = result.trade_log[-1]
        assert last.exit_index == len(drift) - 1
        assert result.unresolved_trades == result.trades
        assert result.losing_trades == result.trades


class TestWalk:
    """Test walk-level properties."""

    def test_entries_respect_cooldown(self, params, uptrend):
        result = TradeSimulator(params).run(uptrend)
        entries = [t.position.entry_index for t in result.trade_log]
        assert entries[0] == 200
        assert all(b - a == 11 for a, b in zip(entries, entries[1:]))
        assert all(b - a >= params.cooldown for a, b in zip(entries, entries[1:]))

    def test_custom_cooldown(self, uptrend):
        params = StrategyParams(capital=1000.0, leverage=10.0, take_profit_pct=0.03, cooldown=0)
        result = TradeSimulator(params).run(uptrend)
        entries = [t.position.entry_index for t in result.trade_log]
        assert entries == list(range(200, 259))

    def test_roi_matches_capital_trajectory(self, params, uptrend):
        result = TradeSimulator(params).run(uptrend)
        capital = params.capital
        for trade in result.trade_log:
            assert trade.capital_before == pytest.approx(capital)
            capital = trade.capital_after
        assert result.final_capital == pytest.approx(capital)
        assert result.roi == pytest.approx((capital - 1000) / 1000 * 100)

    def test_deterministic(self, params, uptrend):
        assert TradeSimulator(params).run(uptrend) == TradeSimulator(params).run(uptrend)

    def test_exactly_warmup_candles_has_no_trades(self, params):
        frame = _frame(100 + np.arange(200) * 0.1)
        result = simulate(frame, params)
        assert result.trades == 0
        assert result.roi == 0.0
        assert result.win_rate == 0.0
        # SMA 200 is defined on the last candle, so the live signal still exists
        assert result.live_signal is SignalType.BUY

    def test_empty_frame_raises(self, params):
        with pytest.raises(ValueError):
            TradeSimulator(params).run(_frame([]))


class TestLiveState:
    """Test the live signal and current-state metrics."""

    def test_uptrend_live_state(self, params, uptrend):
        result = TradeSimulator(params).run(uptrend)
        assert result.live_signal is SignalType.BUY
        assert result.current_trend is Trend.UPTREND
        assert result.current_rsi == pytest.approx(100.0)
        assert result.momentum > 0
        assert result.volatility > 0

    def test_downtrend_live_state(self, params, downtrend):
        result = TradeSimulator(params).run(downtrend)
        assert result.live_signal is SignalType.SELL
        assert result.current_trend is Trend.DOWNTREND

    def test_patterns_skipped_when_off(self, params, uptrend):
        calls = []

        def record(w):
            calls.append(len(w))
            return True

        scorer = PatternScorer(PatternRegistry({PatternId.HAMMER: record}))
        result = TradeSimulator(params, scorer=scorer).run(uptrend)
        assert calls == []
        assert not result.live_patterns


class TestPatternModes:
    """Test confirm and expand modes end to end."""

    def test_confirm_without_patterns_never_trades(self, uptrend):
        params = StrategyParams(capital=1000.0, leverage=10.0, take_profit_pct=0.03, pattern_mode="confirm")
        result = TradeSimulator(params, scorer=PatternScorer(PatternRegistry())).run(uptrend)
        assert result.trades == 0
        assert result.live_signal is None

    def test_confirm_with_bullish_patterns_trades(self, params, uptrend):
        confirm = StrategyParams(capital=1000.0, leverage=10.0, take_profit_pct=0.03, pattern_mode="confirm")
        scorer = PatternScorer(PatternRegistry({PatternId.HAMMER: lambda w: True}))
        result = TradeSimulator(confirm, scorer=scorer).run(uptrend)
        baseline = TradeSimulator(params).run(uptrend)
        assert result.trades == baseline.trades
        assert result.live_patterns.score == 1

    def test_expand_trades_on_patterns_alone(self, params):
        # Rally to 224.5, then a slow fade: SMA 30 drops below SMA 50 while
        # the close stays above SMA 200, so the trend rule goes silent
        closes = np.concatenate([100 + np.arange(250) * 0.5, 224.5 - np.arange(1, 71) * 0.1])
        candles = _frame(closes)
        registry = PatternRegistry({
            PatternId.BULLISH_ENGULFING: lambda w: True,
            PatternId.MORNING_STAR: lambda w: True,
        })
        expand = StrategyParams(capital=1000.0, leverage=10.0, take_profit_pct=0.03, pattern_mode="expand")

        trend_only = TradeSimulator(params).run(candles)
        expanded = TradeSimulator(expand, scorer=PatternScorer(registry)).run(candles)

        assert trend_only.live_signal is None
        assert expanded.live_signal is SignalType.BUY
        assert expanded.live_patterns.score == 4
        assert expanded.trades > trend_only.trades

        trend_entries = {t.position.entry_index for t in trend_only.trade_log}
        extra = [t for t in expanded.trade_log if t.position.entry_index not in trend_entries]
        assert extra
        assert min(t.position.entry_index for t in extra) > max(trend_entries)
        assert all(t.position.position_type is PositionType.LONG for t in extra)

    def test_invalid_mode(self):
        with pytest.raises(ValueError, match="pattern_mode"):
            StrategyParams(capital=1000.0, leverage=10.0, take_profit_pct=0.03, pattern_mode="sometimes")


class TestStrategyParams:
    """Test parameter validation."""

    @pytest.mark.parametrize("kwargs", [
        {"capital": 0},
        {"leverage": -1},
        {"take_profit_pct": 0},
        {"take_profit_pct": 1.5},
        {"cooldown": -1},
        {"max_trade_duration": 0},
    ])
    def test_invalid_values(self, kwargs):
        values = {"capital": 1000.0, "leverage": 10.0, "take_profit_pct": 0.03}
        values.update(kwargs)
        with pytest.raises(ValueError):
            StrategyParams(**values)
