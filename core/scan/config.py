"""
Scan configuration.

ScanConfig holds everything a market scan needs: strategy parameters
(capital, leverage, take-profit, pattern mode), data parameters (timeframe,
candle count, universe size) and scan execution settings.
"""
from dataclasses import dataclass
from typing import Optional

from ..shared.defaults import (
    INITIAL_CAPITAL,
    LEVERAGE,
    TAKE_PROFIT_PCT,
    TIMEFRAME,
    KLINE_LIMIT,
    TOP_PAIRS,
    PATTERN_MODE,
    REFERENCE_SYMBOL,
    QUOTE_ASSET,
    REQUEST_PAUSE,
    MAX_WORKERS,
    MIN_CANDLES,
)
from ..shared.types import PatternMode
from ..simulation.types import StrategyParams


# Kline intervals accepted by the Binance futures API
VALID_TIMEFRAMES = (
    "1m", "3m", "5m", "15m", "30m",
    "1h", "2h", "4h", "6h", "8h", "12h",
    "1d", "3d", "1w", "1M",
)


def _validate_config(
    *,
    capital: float,
    leverage: float,
    take_profit_pct: float,
    timeframe: str,
    kline_limit: int,
    top_pairs: int,
    request_pause: float,
    max_workers: int,
) -> None:
    """Validate scan config values. Raises ValueError with clear message on failure."""
    if capital <= 0:
        raise ValueError(f"capital must be > 0, got {capital}")
    if leverage <= 0:
        raise ValueError(f"leverage must be > 0, got {leverage}")
    if not (0 < take_profit_pct < 1):
        raise ValueError(f"take_profit_pct must be a fraction in (0, 1), got {take_profit_pct}")
    if timeframe not in VALID_TIMEFRAMES:
        raise ValueError(f"timeframe must be one of {', '.join(VALID_TIMEFRAMES)}, got {timeframe!r}")
    if kline_limit < MIN_CANDLES:
        raise ValueError(f"kline_limit must be >= {MIN_CANDLES}, got {kline_limit}")
    if top_pairs < 1:
        raise ValueError(f"top_pairs must be >= 1, got {top_pairs}")
    if request_pause < 0:
        raise ValueError(f"request_pause must be >= 0, got {request_pause}")
    if max_workers < 1:
        raise ValueError(f"max_workers must be >= 1, got {max_workers}")


@dataclass
class ScanConfig:
    """Configuration for one market scan."""

    # Strategy
    capital: float = INITIAL_CAPITAL
    leverage: float = LEVERAGE
    take_profit_pct: float = TAKE_PROFIT_PCT  # Fraction, e.g. 0.03 for 3%
    pattern_mode: PatternMode = PatternMode(PATTERN_MODE)

    # Data
    timeframe: str = TIMEFRAME
    kline_limit: int = KLINE_LIMIT  # Candles fetched per symbol
    top_pairs: int = TOP_PAIRS  # Universe size when no symbols are given
    quote_asset: str = QUOTE_ASSET
    reference_symbol: str = REFERENCE_SYMBOL  # Market leader used by the sentiment score

    # Scan execution
    request_pause: float = REQUEST_PAUSE  # Seconds between candle requests
    max_workers: int = MAX_WORKERS  # 1 = simulate sequentially

    name: Optional[str] = None

    def __post_init__(self) -> None:
        self.pattern_mode = PatternMode.parse(self.pattern_mode)
        _validate_config(
            capital=self.capital,
            leverage=self.leverage,
            take_profit_pct=self.take_profit_pct,
            timeframe=self.timeframe,
            kline_limit=self.kline_limit,
            top_pairs=self.top_pairs,
            request_pause=self.request_pause,
            max_workers=self.max_workers,
        )

    def strategy_params(self) -> StrategyParams:
        """Build the simulator's StrategyParams from this config."""
        return StrategyParams(
            capital=float(self.capital),
            leverage=float(self.leverage),
            take_profit_pct=float(self.take_profit_pct),
            pattern_mode=self.pattern_mode,
        )
