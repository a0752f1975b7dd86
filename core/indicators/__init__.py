"""
Indicator calculation module.

Provides the trading indicators used by the simulator:
- Simple moving averages (running window sum)
- Wilder-smoothed RSI
- Trailing volatility and momentum
"""
from .technical import (
    TechnicalIndicators,
    IndicatorSeries,
    moving_average,
    rsi,
    volatility,
    momentum,
    compute_indicator_series,
)

__all__ = [
    'TechnicalIndicators',
    'IndicatorSeries',
    'moving_average',
    'rsi',
    'volatility',
    'momentum',
    'compute_indicator_series',
]
