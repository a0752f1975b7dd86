"""
Candlestick pattern catalogue and predicate registry.

The catalogue is fixed: every pattern the scorer knows is listed here with
its display name, icon, weight and direction. Which patterns can actually be
detected is decided by the PatternRegistry handed to the scorer; identifiers
without a bound predicate are simply absent.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterator, Mapping, Optional, Tuple, Union

import numpy as np

from ..shared.types import PatternDirection


class PatternId(Enum):
    """Identifiers of the catalogued candlestick patterns."""
    BULLISH_ENGULFING = "bullish_engulfing"
    BULLISH_HARAMI = "bullish_harami"
    MORNING_STAR = "morning_star"
    MORNING_DOJI_STAR = "morning_doji_star"
    HAMMER = "hammer"
    PIERCING_LINE = "piercing_line"
    THREE_WHITE_SOLDIERS = "three_white_soldiers"
    TWEEZER_BOTTOM = "tweezer_bottom"
    BEARISH_ENGULFING = "bearish_engulfing"
    BEARISH_HARAMI = "bearish_harami"
    EVENING_STAR = "evening_star"
    EVENING_DOJI_STAR = "evening_doji_star"
    SHOOTING_STAR = "shooting_star"
    DARK_CLOUD_COVER = "dark_cloud_cover"
    THREE_BLACK_CROWS = "three_black_crows"
    TWEEZER_TOP = "tweezer_top"


@dataclass(frozen=True)
class CandlePattern:
    """Catalogue entry; also what a detection reports as a match."""
    pattern_id: PatternId
    name: str
    icon: str
    weight: int
    direction: PatternDirection

    @property
    def signed_weight(self) -> int:
        return self.weight if self.direction is PatternDirection.BULLISH else -self.weight


_BULL = PatternDirection.BULLISH
_BEAR = PatternDirection.BEARISH

BULLISH_PATTERNS: Tuple[CandlePattern, ...] = (
    CandlePattern(PatternId.BULLISH_ENGULFING, "Bullish Engulfing", "🟢", 2, _BULL),
    CandlePattern(PatternId.BULLISH_HARAMI, "Bullish Harami", "🟢", 1, _BULL),
    CandlePattern(PatternId.MORNING_STAR, "Morning Star", "⭐", 2, _BULL),
    CandlePattern(PatternId.MORNING_DOJI_STAR, "Morning Doji Star", "⭐", 2, _BULL),
    CandlePattern(PatternId.HAMMER, "Hammer", "🔨", 1, _BULL),
    CandlePattern(PatternId.PIERCING_LINE, "Piercing Line", "📈", 1, _BULL),
    CandlePattern(PatternId.THREE_WHITE_SOLDIERS, "Three White Soldiers", "🪖", 2, _BULL),
    CandlePattern(PatternId.TWEEZER_BOTTOM, "Tweezer Bottom", "📈", 1, _BULL),
)

BEARISH_PATTERNS: Tuple[CandlePattern, ...] = (
    CandlePattern(PatternId.BEARISH_ENGULFING, "Bearish Engulfing", "🔴", 2, _BEAR),
    CandlePattern(PatternId.BEARISH_HARAMI, "Bearish Harami", "🔴", 1, _BEAR),
    CandlePattern(PatternId.EVENING_STAR, "Evening Star", "🌙", 2, _BEAR),
    CandlePattern(PatternId.EVENING_DOJI_STAR, "Evening Doji Star", "🌙", 2, _BEAR),
    CandlePattern(PatternId.SHOOTING_STAR, "Shooting Star", "💫", 1, _BEAR),
    CandlePattern(PatternId.DARK_CLOUD_COVER, "Dark Cloud Cover", "☁️", 1, _BEAR),
    CandlePattern(PatternId.THREE_BLACK_CROWS, "Three Black Crows", "🐦", 2, _BEAR),
    CandlePattern(PatternId.TWEEZER_TOP, "Tweezer Top", "📉", 1, _BEAR),
)

CANDLE_PATTERNS: Tuple[CandlePattern, ...] = BULLISH_PATTERNS + BEARISH_PATTERNS


def get_pattern(pattern_id: PatternId) -> CandlePattern:
    for pattern in CANDLE_PATTERNS:
        if pattern.pattern_id is pattern_id:
            return pattern
    raise KeyError(pattern_id)


@dataclass(frozen=True)
class CandleWindow:
    """Trailing OHLC window handed to a pattern predicate (oldest first)."""
    open: np.ndarray
    high: np.ndarray
    low: np.ndarray
    close: np.ndarray

    def __len__(self) -> int:
        return len(self.close)


PatternPredicate = Callable[[CandleWindow], bool]


class PatternRegistry:
    """
    Explicit mapping from PatternId to predicate.

    Any subset of the catalogue may be bound; lookups of unbound identifiers
    return None rather than raising.
    """

    def __init__(self, predicates: Optional[Mapping[Union[PatternId, str], PatternPredicate]] = None):
        self._predicates: Dict[PatternId, PatternPredicate] = {}
        for pattern_id, predicate in (predicates or {}).items():
            self.register(pattern_id, predicate)

    def register(self, pattern_id: Union[PatternId, str], predicate: PatternPredicate) -> None:
        """Bind (or rebind) a predicate. String identifiers must be PatternId values."""
        pattern_id = PatternId(pattern_id)
        if not callable(predicate):
            raise TypeError(f"Predicate for {pattern_id.value} is not callable")
        self._predicates[pattern_id] = predicate

    def unregister(self, pattern_id: PatternId) -> None:
        self._predicates.pop(pattern_id, None)

    def get(self, pattern_id: PatternId) -> Optional[PatternPredicate]:
        return self._predicates.get(pattern_id)

    def __contains__(self, pattern_id: object) -> bool:
        return pattern_id in self._predicates

    def __len__(self) -> int:
        return len(self._predicates)

    def __iter__(self) -> Iterator[PatternId]:
        return iter(self._predicates)
