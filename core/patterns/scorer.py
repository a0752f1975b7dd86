"""
Candlestick pattern scorer.

Evaluates the pattern catalogue over the trailing window that ends at a given
index and returns the matches with a signed, weighted score.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from ..shared.defaults import PATTERN_WINDOW
from ..shared.types import PatternDirection
from .catalogue import CANDLE_PATTERNS, CandlePattern, CandleWindow, PatternRegistry
from .predicates import default_registry


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PatternDetection:
    """Patterns matched over one window and their signed score."""
    bullish: Tuple[CandlePattern, ...] = ()
    bearish: Tuple[CandlePattern, ...] = ()
    score: int = 0  # sum(bullish weights) - sum(bearish weights)

    @property
    def matches(self) -> Tuple[CandlePattern, ...]:
        return self.bullish + self.bearish

    def __bool__(self) -> bool:
        return bool(self.bullish or self.bearish)


EMPTY_DETECTION = PatternDetection()


class PatternScorer:
    """
    Scores candlestick patterns with an injected predicate registry.

    A pattern whose predicate is absent, or raises, counts as not matched;
    the scorer never propagates predicate failures.
    """

    def __init__(
        self,
        registry: Optional[PatternRegistry] = None,
        window: int = PATTERN_WINDOW,
        catalogue: Sequence[CandlePattern] = CANDLE_PATTERNS,
    ):
        """
        Args:
            registry: Predicate registry (default: every catalogued pattern bound)
            window: Trailing candles handed to each predicate (default: 5)
            catalogue: Patterns to evaluate, in reporting order
        """
        if window < 1:
            raise ValueError(f"window must be >= 1, got {window}")
        self.registry = registry if registry is not None else default_registry()
        self.window = window
        self.catalogue = tuple(catalogue)

    def _matches(self, pattern: CandlePattern, window: CandleWindow) -> bool:
        predicate = self.registry.get(pattern.pattern_id)
        if predicate is None:
            return False
        try:
            return bool(predicate(window))
        except Exception as e:
            logger.debug("Pattern %s unavailable for window: %s", pattern.pattern_id.value, e)
            return False

    def detect(
        self,
        opens: Sequence[float],
        highs: Sequence[float],
        lows: Sequence[float],
        closes: Sequence[float],
        index: int,
    ) -> PatternDetection:
        """
        Detect patterns on the window of up to `window` candles ending at `index`.

        Args:
            opens, highs, lows, closes: Full OHLC sequences (oldest first)
            index: Last candle of the window (inclusive)

        Returns:
            PatternDetection with bullish/bearish matches in catalogue order
        """
        start = max(0, index - self.window + 1)
        end = index + 1
        window = CandleWindow(
            open=np.asarray(opens[start:end], dtype=float),
            high=np.asarray(highs[start:end], dtype=float),
            low=np.asarray(lows[start:end], dtype=float),
            close=np.asarray(closes[start:end], dtype=float),
        )
        if len(window) == 0:
            return EMPTY_DETECTION

        bullish = []
        bearish = []
        score = 0
        for pattern in self.catalogue:
            if not self._matches(pattern, window):
                continue
            if pattern.direction is PatternDirection.BULLISH:
                bullish.append(pattern)
            else:
                bearish.append(pattern)
            score += pattern.signed_weight

        return PatternDetection(bullish=tuple(bullish), bearish=tuple(bearish), score=score)
