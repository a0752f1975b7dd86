"""
Simulation types: strategy parameters, positions, trade records, results.

Extracted so the scan driver, the sentiment aggregator and the report layer
can import these types without pulling in TradeSimulator.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from ..patterns.scorer import EMPTY_DETECTION, PatternDetection
from ..shared.defaults import (
    FEE_RATE, MAINT_MARGIN_RATE, TRADE_COOLDOWN, MAX_TRADE_DURATION, MIN_CANDLES,
    PATTERN_EXPAND_THRESHOLD,
)
from ..shared.types import PatternMode, PositionType, SignalType, Trend


def _validate_params(
    *,
    capital: float,
    leverage: float,
    take_profit_pct: float,
    fee_rate: float,
    maint_margin_rate: float,
    cooldown: int,
    max_trade_duration: int,
    warmup: int,
) -> None:
    """Validate strategy parameters. Raises ValueError with clear message on failure."""
    if capital <= 0:
        raise ValueError(f"capital must be > 0, got {capital}")
    if leverage <= 0:
        raise ValueError(f"leverage must be > 0, got {leverage}")
    if not (0 < take_profit_pct < 1):
        raise ValueError(f"take_profit_pct must be a fraction in (0, 1), got {take_profit_pct}")
    if fee_rate < 0:
        raise ValueError(f"fee_rate must be >= 0, got {fee_rate}")
    if not (0 <= maint_margin_rate < 1):
        raise ValueError(f"maint_margin_rate must be in [0, 1), got {maint_margin_rate}")
    if cooldown < 0:
        raise ValueError(f"cooldown must be >= 0, got {cooldown}")
    if max_trade_duration < 1:
        raise ValueError(f"max_trade_duration must be >= 1, got {max_trade_duration}")
    if warmup < 1:
        raise ValueError(f"warmup must be >= 1, got {warmup}")


@dataclass(frozen=True)
class StrategyParams:
    """Parameters of one simulation run. Frozen, so workers can share it safely."""
    capital: float
    leverage: float
    take_profit_pct: float  # Fraction, e.g. 0.03 for 3%
    pattern_mode: PatternMode = PatternMode.OFF

    fee_rate: float = FEE_RATE  # Per side, charged on notional
    maint_margin_rate: float = MAINT_MARGIN_RATE
    cooldown: int = TRADE_COOLDOWN  # Candles skipped after an entry
    max_trade_duration: int = MAX_TRADE_DURATION  # Candles scanned to resolve a trade
    warmup: int = MIN_CANDLES  # First index the walk evaluates
    expand_threshold: int = PATTERN_EXPAND_THRESHOLD

    def __post_init__(self) -> None:
        object.__setattr__(self, "pattern_mode", PatternMode.parse(self.pattern_mode))
        _validate_params(
            capital=self.capital,
            leverage=self.leverage,
            take_profit_pct=self.take_profit_pct,
            fee_rate=self.fee_rate,
            maint_margin_rate=self.maint_margin_rate,
            cooldown=self.cooldown,
            max_trade_duration=self.max_trade_duration,
            warmup=self.warmup,
        )


class TradeOutcome(Enum):
    """How a simulated trade was resolved."""
    TAKE_PROFIT = "take_profit"  # Target reached before liquidation
    LIQUIDATED = "liquidated"  # Liquidation price reached (checked first on every candle)
    UNRESOLVED = "unresolved"  # Neither within max_trade_duration; closed at last scanned close


@dataclass(frozen=True)
class Position:
    """An open simulated position; only lives during the forward scan."""
    position_type: PositionType
    entry_index: int
    entry_price: float
    target_price: float
    liquidation_price: float


@dataclass(frozen=True)
class TradeRecord:
    """A resolved trade and its effect on the instrument's running balance."""
    position: Position
    outcome: TradeOutcome
    exit_index: int
    exit_price: float
    capital_before: float
    capital_after: float
    fees: float  # Round-trip fees charged (0 when liquidated)

    @property
    def pnl(self) -> float:
        return self.capital_after - self.capital_before

    @property
    def candles_held(self) -> int:
        return self.exit_index - self.position.entry_index


@dataclass(frozen=True)
class AnalysisResult:
    """Outcome of simulating one instrument, plus its live state."""
    initial_capital: float
    final_capital: float
    roi: float  # (final - initial) / initial * 100
    trades: int
    wins: int
    liquidations: int
    unresolved_trades: int
    max_drawdown: float  # Percent
    live_signal: Optional[SignalType]
    current_trend: Trend
    current_rsi: float
    volatility: float  # Percent
    momentum: float  # Percent
    live_patterns: PatternDetection = EMPTY_DETECTION
    trade_log: Tuple[TradeRecord, ...] = field(default_factory=tuple)
    symbol: str = ""

    @property
    def win_rate(self) -> float:
        """Percentage of trades that hit the take-profit target."""
        return (self.wins / self.trades) * 100 if self.trades > 0 else 0.0

    @property
    def losing_trades(self) -> int:
        """Trades that missed the take-profit (liquidated or closed unresolved)."""
        return self.trades - self.wins
