"""
Shared types and defaults for the scanner.

This module provides:
- Signal, position, trend and pattern enums plus the Candle record
- Centralized default values for strategy and scan parameters
"""
from .types import SignalType, PositionType, Trend, PatternDirection, PatternMode, Candle
from .defaults import (
    MIN_CANDLES,
    SMA_FAST_PERIOD, SMA_MID_PERIOD, SMA_SLOW_PERIOD, SMA_TREND_PERIOD,
    RSI_PERIOD, VOLATILITY_WINDOW, MOMENTUM_PERIOD,
    TRADE_COOLDOWN, MAX_TRADE_DURATION, MAINT_MARGIN_RATE, FEE_RATE,
    PATTERN_WINDOW,
)

__all__ = [
    'SignalType',
    'PositionType',
    'Trend',
    'PatternDirection',
    'PatternMode',
    'Candle',
    'MIN_CANDLES',
    'SMA_FAST_PERIOD', 'SMA_MID_PERIOD', 'SMA_SLOW_PERIOD', 'SMA_TREND_PERIOD',
    'RSI_PERIOD', 'VOLATILITY_WINDOW', 'MOMENTUM_PERIOD',
    'TRADE_COOLDOWN', 'MAX_TRADE_DURATION', 'MAINT_MARGIN_RATE', 'FEE_RATE',
    'PATTERN_WINDOW',
]
