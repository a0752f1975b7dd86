"""
Candlestick pattern module.

Provides the fixed pattern catalogue, the predicate registry the scorer is
built with, the default predicates, and the scorer itself.
"""
from .catalogue import (
    PatternId,
    CandlePattern,
    CandleWindow,
    PatternRegistry,
    BULLISH_PATTERNS,
    BEARISH_PATTERNS,
    CANDLE_PATTERNS,
    get_pattern,
)
from .predicates import default_registry, DEFAULT_PREDICATES
from .scorer import PatternScorer, PatternDetection, EMPTY_DETECTION

__all__ = [
    'PatternId',
    'CandlePattern',
    'CandleWindow',
    'PatternRegistry',
    'BULLISH_PATTERNS',
    'BEARISH_PATTERNS',
    'CANDLE_PATTERNS',
    'get_pattern',
    'default_registry',
    'DEFAULT_PREDICATES',
    'PatternScorer',
    'PatternDetection',
    'EMPTY_DETECTION',
]
