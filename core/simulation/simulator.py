"""
Per-instrument trade simulator for the SMA trend strategy.

Walks one instrument's candles forward:
- Evaluates the entry signal (SMA alignment, optionally candlestick patterns)
- Opens a leveraged position and resolves it with a bounded forward scan
  (liquidation is checked before the target on every candle)
- Compounds a single running balance across all trades of the instrument
- Enforces a cooldown between entries

The simulator is a pure function of (candles, parameters): no randomness,
no clock, no state shared between instruments.
"""
import logging
from typing import List, Optional

import numpy as np
import pandas as pd

from ..indicators.technical import TechnicalIndicators, IndicatorSeries, volatility, momentum
from ..patterns.scorer import EMPTY_DETECTION, PatternDetection, PatternScorer
from ..shared.defaults import RSI_NEUTRAL, VOLATILITY_WINDOW, MOMENTUM_PERIOD
from ..shared.types import PatternMode, PositionType, Trend
from .types import AnalysisResult, Position, StrategyParams, TradeOutcome, TradeRecord


logger = logging.getLogger(__name__)


def entry_signal(
    close: float,
    sma_fast: float,
    sma_mid: float,
    sma_slow: float,
    sma_trend: float,
    pattern_score: int,
    pattern_mode: PatternMode,
    expand_threshold: int = 3,
) -> Optional[PositionType]:
    """
    Decide the position to open at one candle, if any.

    Long trend: close > SMA200 and SMA30 > SMA50 > SMA100; short is mirrored.
    Undefined (NaN) indicator values never satisfy a comparison, so warm-up
    candles produce no signal.
    """
    trend_long = close > sma_trend and sma_fast > sma_mid and sma_mid > sma_slow
    trend_short = close < sma_trend and sma_fast < sma_mid and sma_mid < sma_slow

    if pattern_mode is PatternMode.CONFIRM:
        if trend_long and pattern_score > 0:
            return PositionType.LONG
        if trend_short and pattern_score < 0:
            return PositionType.SHORT
        return None

    if trend_long:
        return PositionType.LONG
    if trend_short:
        return PositionType.SHORT

    if pattern_mode is PatternMode.EXPAND:
        if pattern_score >= expand_threshold and close > sma_trend:
            return PositionType.LONG
        if pattern_score <= -expand_threshold and close < sma_trend:
            return PositionType.SHORT
    return None


class TradeSimulator:
    """Simulates the strategy on one instrument and reports an AnalysisResult."""

    def __init__(
        self,
        params: StrategyParams,
        scorer: Optional[PatternScorer] = None,
        indicators: Optional[TechnicalIndicators] = None,
    ):
        """
        Args:
            params: Strategy parameters (capital, leverage, take-profit, pattern mode, ...)
            scorer: Pattern scorer (default: scorer over the default predicate registry)
            indicators: Indicator calculator (default: SMA 30/50/100/200, RSI 14)
        """
        self.params = params
        self.scorer = scorer if scorer is not None else PatternScorer()
        self.indicators = indicators if indicators is not None else TechnicalIndicators()

    def open_position(self, position_type: PositionType, index: int, price: float) -> Position:
        """Position with take-profit target and simplified futures liquidation price."""
        p = self.params
        if position_type is PositionType.LONG:
            target = price * (1 + p.take_profit_pct)
            liquidation = price * (1 - (1 / p.leverage) + p.maint_margin_rate)
        else:
            target = price * (1 - p.take_profit_pct)
            liquidation = price * (1 + (1 / p.leverage) - p.maint_margin_rate)
        return Position(
            position_type=position_type,
            entry_index=index,
            entry_price=price,
            target_price=target,
            liquidation_price=liquidation,
        )

    def resolve_position(
        self,
        position: Position,
        highs: np.ndarray,
        lows: np.ndarray,
        closes: np.ndarray,
        capital: float,
    ) -> TradeRecord:
        """
        Resolve a position by scanning at most max_trade_duration - 1 candles forward.

        On every candle the liquidation check runs before the target check, so a
        candle touching both resolves as a liquidation.
        """
        p = self.params
        end = min(position.entry_index + p.max_trade_duration, len(closes))
        exit_index = end - 1
        outcome = TradeOutcome.UNRESOLVED
        is_long = position.position_type is PositionType.LONG

        for j in range(position.entry_index + 1, end):
            if is_long:
                if lows[j] <= position.liquidation_price:
                    outcome, exit_index = TradeOutcome.LIQUIDATED, j
                    break
                if highs[j] >= position.target_price:
                    outcome, exit_index = TradeOutcome.TAKE_PROFIT, j
                    break
            else:
                if highs[j] >= position.liquidation_price:
                    outcome, exit_index = TradeOutcome.LIQUIDATED, j
                    break
                if lows[j] <= position.target_price:
                    outcome, exit_index = TradeOutcome.TAKE_PROFIT, j
                    break

        # Entry + exit fees on the leveraged notional of the running balance
        fees = capital * p.leverage * p.fee_rate * 2

        if outcome is TradeOutcome.TAKE_PROFIT:
            exit_price = position.target_price
            capital_after = capital + capital * p.take_profit_pct * p.leverage - fees
        elif outcome is TradeOutcome.LIQUIDATED:
            exit_price = position.liquidation_price
            capital_after = 0.0
            fees = 0.0
        else:
            exit_price = float(closes[exit_index])
            if is_long:
                pnl_pct = (exit_price - position.entry_price) / position.entry_price
            else:
                pnl_pct = (position.entry_price - exit_price) / position.entry_price
            capital_after = capital + capital * pnl_pct * p.leverage - fees

        return TradeRecord(
            position=position,
            outcome=outcome,
            exit_index=exit_index,
            exit_price=exit_price,
            capital_before=capital,
            capital_after=max(capital_after, 0.0),
            fees=fees,
        )

    def _signal_at(
        self,
        index: int,
        closes: np.ndarray,
        ind: IndicatorSeries,
        detection: PatternDetection,
    ) -> Optional[PositionType]:
        return entry_signal(
            closes[index],
            ind.sma_fast[index],
            ind.sma_mid[index],
            ind.sma_slow[index],
            ind.sma_trend[index],
            detection.score,
            self.params.pattern_mode,
            self.params.expand_threshold,
        )

    def _detect(self, opens, highs, lows, closes, index: int) -> PatternDetection:
        if self.params.pattern_mode is PatternMode.OFF:
            return EMPTY_DETECTION
        return self.scorer.detect(opens, highs, lows, closes, index)

    def run(self, candles: pd.DataFrame, symbol: str = "") -> AnalysisResult:
        """
        Simulate the strategy over a candle frame.

        Args:
            candles: DataFrame with Open/High/Low/Close columns, oldest first
                     (callers skip instruments with fewer than `warmup` candles)
            symbol: Instrument symbol recorded on the result

        Returns:
            AnalysisResult for the instrument
        """
        opens = candles["Open"].to_numpy(dtype=float)
        highs = candles["High"].to_numpy(dtype=float)
        lows = candles["Low"].to_numpy(dtype=float)
        closes = candles["Close"].to_numpy(dtype=float)
        n = len(closes)
        if n == 0:
            raise ValueError("Cannot simulate an empty candle series")

        p = self.params
        ind = self.indicators.calculate_all(closes)

        capital = p.capital
        peak_capital = capital
        max_drawdown = 0.0
        trade_log: List[TradeRecord] = []

        i = p.warmup
        while i < n - 1:
            detection = self._detect(opens, highs, lows, closes, i)
            position_type = self._signal_at(i, closes, ind, detection)
            if position_type is None:
                i += 1
                continue

            position = self.open_position(position_type, i, float(closes[i]))
            trade = self.resolve_position(position, highs, lows, closes, capital)
            trade_log.append(trade)
            capital = trade.capital_after

            peak_capital = max(peak_capital, capital)
            drawdown = ((peak_capital - capital) / peak_capital) * 100 if peak_capital > 0 else 0.0
            max_drawdown = max(max_drawdown, drawdown)

            # Next candidate entry is cooldown candles past this one
            i += p.cooldown + 1

        last = n - 1
        live_patterns = self._detect(opens, highs, lows, closes, last)
        live_type = self._signal_at(last, closes, ind, live_patterns)
        current_rsi = ind.rsi[last]

        result = AnalysisResult(
            initial_capital=p.capital,
            final_capital=capital,
            roi=(capital - p.capital) / p.capital * 100,
            trades=len(trade_log),
            wins=sum(1 for t in trade_log if t.outcome is TradeOutcome.TAKE_PROFIT),
            liquidations=sum(1 for t in trade_log if t.outcome is TradeOutcome.LIQUIDATED),
            unresolved_trades=sum(1 for t in trade_log if t.outcome is TradeOutcome.UNRESOLVED),
            max_drawdown=max_drawdown,
            live_signal=live_type.to_signal() if live_type is not None else None,
            current_trend=Trend.UPTREND if closes[last] > ind.sma_trend[last] else Trend.DOWNTREND,
            current_rsi=RSI_NEUTRAL if np.isnan(current_rsi) else float(current_rsi),
            volatility=volatility(closes, VOLATILITY_WINDOW),
            momentum=momentum(closes, MOMENTUM_PERIOD),
            live_patterns=live_patterns,
            trade_log=tuple(trade_log),
            symbol=symbol,
        )
        logger.debug(
            "%s: %d trades, %d wins, %d liquidations, ROI %.2f%%",
            symbol or "<instrument>", result.trades, result.wins, result.liquidations, result.roi,
        )
        return result


def simulate(
    candles: pd.DataFrame,
    params: StrategyParams,
    scorer: Optional[PatternScorer] = None,
    symbol: str = "",
) -> AnalysisResult:
    """Convenience wrapper: TradeSimulator(params, scorer).run(candles, symbol)."""
    return TradeSimulator(params, scorer=scorer).run(candles, symbol=symbol)
