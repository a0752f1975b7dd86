"""
Data loading and management module.

Provides the candle providers (Binance futures REST, offline CSV directory)
and the preparation step that validates candle frames before simulation.
"""
from .provider import CandleProvider
from .loader import DataLoader, CsvCandleProvider
from .binance import BinanceFuturesClient, CandleProviderError
from .preparation import (
    prepare_candles,
    klines_to_frame,
    candles_to_frame,
    frame_to_candles,
    DataPreparationError,
    InsufficientHistoryError,
)

__all__ = [
    'CandleProvider',
    'DataLoader',
    'CsvCandleProvider',
    'BinanceFuturesClient',
    'CandleProviderError',
    'prepare_candles',
    'klines_to_frame',
    'candles_to_frame',
    'frame_to_candles',
    'DataPreparationError',
    'InsufficientHistoryError',
]
