"""
Market sentiment aggregation.

Consumes the complete set of per-instrument AnalysisResults of one scan and
combines trend breadth, average RSI, average momentum, the reference
instrument (BTC by default) and the live candlestick-pattern tally into one
composite score and category.
"""
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from ..shared.defaults import (
    REFERENCE_SYMBOL,
    RSI_NEUTRAL,
    SENTIMENT_BULLISH,
    SENTIMENT_SLIGHTLY_BULLISH,
    SENTIMENT_SLIGHTLY_BEARISH,
    SENTIMENT_BEARISH,
)
from ..shared.types import Trend
from ..simulation.types import AnalysisResult


logger = logging.getLogger(__name__)

# Score component weights
BREADTH_WEIGHT = 50.0
RSI_WEIGHT = 0.4
MOMENTUM_WEIGHT = 3.0
MOMENTUM_CAP = 15.0
REFERENCE_TREND_WEIGHT = 10.0
REFERENCE_RSI_WEIGHT = 0.1
PATTERN_WEIGHT = 10.0


class SentimentCategory(Enum):
    """Sentiment buckets with their display icon and title."""
    BULLISH = ("bullish", "🟢", "BULLISH MARKET")
    SLIGHTLY_BULLISH = ("slightly_bullish", "🟡🟢", "SLIGHTLY BULLISH MARKET")
    NEUTRAL = ("neutral", "🟡", "UNDECIDED MARKET")
    SLIGHTLY_BEARISH = ("slightly_bearish", "🟡🔴", "SLIGHTLY BEARISH MARKET")
    BEARISH = ("bearish", "🔴", "BEARISH MARKET")

    def __init__(self, label: str, icon: str, title: str):
        self.label = label
        self.icon = icon
        self.title = title

    @classmethod
    def from_score(cls, score: float) -> "SentimentCategory":
        """Thresholds are strict: a score of exactly 20 is slightly bullish."""
        if score > SENTIMENT_BULLISH:
            return cls.BULLISH
        if score > SENTIMENT_SLIGHTLY_BULLISH:
            return cls.SLIGHTLY_BULLISH
        if score < SENTIMENT_BEARISH:
            return cls.BEARISH
        if score < SENTIMENT_SLIGHTLY_BEARISH:
            return cls.SLIGHTLY_BEARISH
        return cls.NEUTRAL


@dataclass(frozen=True)
class MarketSentimentSnapshot:
    """Aggregate market state of one scan."""
    total: int
    bullish: int
    bearish: int
    neutral: int  # Always 0 with the binary trend classification
    avg_rsi: float
    avg_volatility: float
    avg_momentum: float
    reference_symbol: str
    reference_trend: Optional[Trend]
    reference_rsi: Optional[float]
    pattern_bullish: int
    pattern_bearish: int
    score: float
    category: SentimentCategory

    @property
    def bullish_pct(self) -> float:
        return self.bullish / self.total * 100

    @property
    def bearish_pct(self) -> float:
        return self.bearish / self.total * 100

    @property
    def neutral_pct(self) -> float:
        return self.neutral / self.total * 100

    @property
    def has_reference(self) -> bool:
        return self.reference_trend is not None

    @property
    def description(self) -> str:
        """Category description filled in from the live counts."""
        momentum = f"{self.avg_momentum:+.2f}%"
        if self.category is SentimentCategory.BULLISH:
            return (f"The market shows buying strength. {self.bullish} of {self.total} pairs "
                    f"are in an uptrend. Average momentum: {momentum}.")
        if self.category is SentimentCategory.SLIGHTLY_BULLISH:
            return (f"Moderate positive trend. {self.bullish} bullish pairs vs "
                    f"{self.bearish} bearish. Caution advised.")
        if self.category is SentimentCategory.BEARISH:
            return (f"The market shows selling pressure. {self.bearish} of {self.total} pairs "
                    f"are in a downtrend. Average momentum: {momentum}.")
        if self.category is SentimentCategory.SLIGHTLY_BEARISH:
            return (f"Moderate negative trend. {self.bearish} bearish pairs vs "
                    f"{self.bullish} bullish. Caution advised.")
        return (f"No clear direction. {self.bullish} bullish, {self.bearish} bearish. "
                f"Wait for confirmation before trading.")


def _finite_or(value: Optional[float], fallback: float) -> float:
    if value is None or not math.isfinite(value):
        return fallback
    return value


class SentimentAggregator:
    """Combines one scan's AnalysisResults into a MarketSentimentSnapshot."""

    def __init__(self, reference_symbol: str = REFERENCE_SYMBOL):
        self.reference_symbol = reference_symbol

    def aggregate(self, results: Iterable[AnalysisResult]) -> Optional[MarketSentimentSnapshot]:
        """
        Aggregate a complete scan.

        Args:
            results: Every successful AnalysisResult of the scan

        Returns:
            MarketSentimentSnapshot, or None when there are no results
        """
        results = list(results)
        total = len(results)
        if total == 0:
            logger.info("No results to aggregate, skipping sentiment")
            return None

        bullish = sum(1 for r in results if r.current_trend is Trend.UPTREND)
        bearish = sum(1 for r in results if r.current_trend is Trend.DOWNTREND)
        neutral = total - bullish - bearish

        avg_rsi = sum(_finite_or(r.current_rsi, RSI_NEUTRAL) for r in results) / total
        avg_volatility = sum(_finite_or(r.volatility, 0.0) for r in results) / total
        avg_momentum = sum(_finite_or(r.momentum, 0.0) for r in results) / total

        reference = next((r for r in results if r.symbol == self.reference_symbol), None)

        pattern_bullish = sum(len(r.live_patterns.bullish) for r in results)
        pattern_bearish = sum(len(r.live_patterns.bearish) for r in results)
        pattern_total = pattern_bullish + pattern_bearish

        score = ((bullish - bearish) / total) * BREADTH_WEIGHT
        score += (avg_rsi - RSI_NEUTRAL) * RSI_WEIGHT
        score += max(-MOMENTUM_CAP, min(MOMENTUM_CAP, avg_momentum * MOMENTUM_WEIGHT))

        reference_rsi = None
        if reference is not None:
            reference_rsi = _finite_or(reference.current_rsi, RSI_NEUTRAL)
            score += REFERENCE_TREND_WEIGHT if reference.current_trend is Trend.UPTREND else -REFERENCE_TREND_WEIGHT
            score += (reference_rsi - RSI_NEUTRAL) * REFERENCE_RSI_WEIGHT

        if pattern_total > 0:
            score += ((pattern_bullish - pattern_bearish) / pattern_total) * PATTERN_WEIGHT

        category = SentimentCategory.from_score(score)
        logger.debug("Sentiment score %.2f over %d instruments -> %s", score, total, category.label)

        return MarketSentimentSnapshot(
            total=total,
            bullish=bullish,
            bearish=bearish,
            neutral=neutral,
            avg_rsi=avg_rsi,
            avg_volatility=avg_volatility,
            avg_momentum=avg_momentum,
            reference_symbol=self.reference_symbol,
            reference_trend=reference.current_trend if reference is not None else None,
            reference_rsi=reference_rsi,
            pattern_bullish=pattern_bullish,
            pattern_bearish=pattern_bearish,
            score=score,
            category=category,
        )
