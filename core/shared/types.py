"""
Shared types for the scanner modules.

This module consolidates the small enums and the Candle record that are used
across indicators, patterns, simulation and sentiment to avoid duplicated
string constants and inconsistent comparisons.
"""
from dataclasses import dataclass
from enum import Enum

import pandas as pd


class SignalType(Enum):
    """Live signal emitted for an instrument."""
    BUY = "BUY"
    SELL = "SELL"


class PositionType(Enum):
    """Direction of a simulated position."""
    LONG = "long"
    SHORT = "short"

    def to_signal(self) -> SignalType:
        return SignalType.BUY if self is PositionType.LONG else SignalType.SELL


class Trend(Enum):
    """Current trend classification (close vs SMA 200). Always binary."""
    UPTREND = "uptrend"
    DOWNTREND = "downtrend"


class PatternDirection(Enum):
    """Direction a candlestick pattern points to."""
    BULLISH = "bullish"
    BEARISH = "bearish"


class PatternMode(Enum):
    """How candlestick patterns interact with the trend signal."""
    OFF = "off"  # Trend condition alone
    CONFIRM = "confirm"  # Trend condition AND same-direction pattern score
    EXPAND = "expand"  # Trend condition, or a strong pattern score on the right side of SMA 200

    @classmethod
    def parse(cls, value) -> "PatternMode":
        if value is False or value is None:
            return cls.OFF  # YAML reads an unquoted off as False
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            valid = ", ".join(m.value for m in cls)
            raise ValueError(f"pattern_mode must be one of {valid}, got {value!r}") from None


@dataclass(frozen=True)
class Candle:
    """One OHLCV candle, immutable once fetched."""
    open_time: pd.Timestamp
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0
