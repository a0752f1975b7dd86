"""
Default candlestick pattern predicates.

Each predicate looks at the most recent candles of a CandleWindow and returns
True when the pattern completes on the last candle. Windows too short for a
pattern return False. Bound to the catalogue by default_registry().
"""
from typing import Dict

from .catalogue import CandleWindow, PatternId, PatternPredicate, PatternRegistry

DOJI_BODY_RATIO = 0.10  # Body / range below this is a doji
STAR_BODY_RATIO = 0.30  # Body / range below this is a star's small body
SHADOW_BODY_RATIO = 0.35  # Hammer / shooting star: body / range ceiling
TWEEZER_TOLERANCE = 0.002  # Relative difference allowed between tweezer extremes


def _body(w: CandleWindow, i: int) -> float:
    return abs(w.close[i] - w.open[i])


def _range(w: CandleWindow, i: int) -> float:
    return w.high[i] - w.low[i]


def _is_bull(w: CandleWindow, i: int) -> bool:
    return w.close[i] > w.open[i]


def _is_bear(w: CandleWindow, i: int) -> bool:
    return w.close[i] < w.open[i]


def _midpoint(w: CandleWindow, i: int) -> float:
    return (w.open[i] + w.close[i]) / 2


def _upper_shadow(w: CandleWindow, i: int) -> float:
    return w.high[i] - max(w.open[i], w.close[i])


def _lower_shadow(w: CandleWindow, i: int) -> float:
    return min(w.open[i], w.close[i]) - w.low[i]


def _nearly_equal(a: float, b: float) -> bool:
    scale = max(abs(a), abs(b))
    if scale == 0:
        return False
    return abs(a - b) / scale < TWEEZER_TOLERANCE


# Two-candle patterns

def bullish_engulfing(w: CandleWindow) -> bool:
    if len(w) < 2:
        return False
    return (
        _is_bear(w, -2) and _is_bull(w, -1)
        and w.open[-1] <= w.close[-2] and w.close[-1] >= w.open[-2]
        and _body(w, -1) > _body(w, -2)
    )


def bearish_engulfing(w: CandleWindow) -> bool:
    if len(w) < 2:
        return False
    return (
        _is_bull(w, -2) and _is_bear(w, -1)
        and w.open[-1] >= w.close[-2] and w.close[-1] <= w.open[-2]
        and _body(w, -1) > _body(w, -2)
    )


def bullish_harami(w: CandleWindow) -> bool:
    if len(w) < 2:
        return False
    return (
        _is_bear(w, -2) and _is_bull(w, -1)
        and w.close[-1] < w.open[-2] and w.open[-1] > w.close[-2]
        and _body(w, -1) < _body(w, -2) * 0.5
    )


def bearish_harami(w: CandleWindow) -> bool:
    if len(w) < 2:
        return False
    return (
        _is_bull(w, -2) and _is_bear(w, -1)
        and w.close[-1] > w.open[-2] and w.open[-1] < w.close[-2]
        and _body(w, -1) < _body(w, -2) * 0.5
    )


def piercing_line(w: CandleWindow) -> bool:
    if len(w) < 2:
        return False
    return (
        _is_bear(w, -2) and _is_bull(w, -1)
        and w.open[-1] < w.close[-2]
        and _midpoint(w, -2) < w.close[-1] < w.open[-2]
    )


def dark_cloud_cover(w: CandleWindow) -> bool:
    if len(w) < 2:
        return False
    return (
        _is_bull(w, -2) and _is_bear(w, -1)
        and w.open[-1] > w.close[-2]
        and w.open[-2] < w.close[-1] < _midpoint(w, -2)
    )


def tweezer_bottom(w: CandleWindow) -> bool:
    if len(w) < 2:
        return False
    return _is_bear(w, -2) and _is_bull(w, -1) and _nearly_equal(w.low[-1], w.low[-2])


def tweezer_top(w: CandleWindow) -> bool:
    if len(w) < 2:
        return False
    return _is_bull(w, -2) and _is_bear(w, -1) and _nearly_equal(w.high[-1], w.high[-2])


# Single-candle patterns (need the preceding move for context)

def hammer(w: CandleWindow) -> bool:
    if len(w) < 3:
        return False
    rng = _range(w, -1)
    if rng <= 0:
        return False
    body = _body(w, -1)
    return (
        w.close[-2] < w.close[0]  # decline into the candle
        and body / rng < SHADOW_BODY_RATIO
        and _lower_shadow(w, -1) > 2 * body
        and _upper_shadow(w, -1) <= body
    )


def shooting_star(w: CandleWindow) -> bool:
    if len(w) < 3:
        return False
    rng = _range(w, -1)
    if rng <= 0:
        return False
    body = _body(w, -1)
    return (
        w.close[-2] > w.close[0]  # rally into the candle
        and body / rng < SHADOW_BODY_RATIO
        and _upper_shadow(w, -1) > 2 * body
        and _lower_shadow(w, -1) <= body
    )


# Three-candle patterns

def _small_middle(w: CandleWindow, ratio: float) -> bool:
    rng = _range(w, -2)
    return rng > 0 and _body(w, -2) / rng < ratio


def _morning_star(w: CandleWindow, ratio: float) -> bool:
    if len(w) < 3:
        return False
    return (
        _is_bear(w, -3)
        and _small_middle(w, ratio)
        and max(w.open[-2], w.close[-2]) < w.close[-3]
        and _is_bull(w, -1)
        and w.close[-1] > _midpoint(w, -3)
    )


def _evening_star(w: CandleWindow, ratio: float) -> bool:
    if len(w) < 3:
        return False
    return (
        _is_bull(w, -3)
        and _small_middle(w, ratio)
        and min(w.open[-2], w.close[-2]) > w.close[-3]
        and _is_bear(w, -1)
        and w.close[-1] < _midpoint(w, -3)
    )


def morning_star(w: CandleWindow) -> bool:
    return _morning_star(w, STAR_BODY_RATIO)


def morning_doji_star(w: CandleWindow) -> bool:
    return _morning_star(w, DOJI_BODY_RATIO)


def evening_star(w: CandleWindow) -> bool:
    return _evening_star(w, STAR_BODY_RATIO)


def evening_doji_star(w: CandleWindow) -> bool:
    return _evening_star(w, DOJI_BODY_RATIO)


def three_white_soldiers(w: CandleWindow) -> bool:
    if len(w) < 3:
        return False
    return (
        all(_is_bull(w, i) for i in (-3, -2, -1))
        and w.close[-3] < w.close[-2] < w.close[-1]
        and w.open[-3] < w.open[-2] < w.open[-1]
    )


def three_black_crows(w: CandleWindow) -> bool:
    if len(w) < 3:
        return False
    return (
        all(_is_bear(w, i) for i in (-3, -2, -1))
        and w.close[-3] > w.close[-2] > w.close[-1]
        and w.open[-3] > w.open[-2] > w.open[-1]
    )


DEFAULT_PREDICATES: Dict[PatternId, PatternPredicate] = {
    PatternId.BULLISH_ENGULFING: bullish_engulfing,
    PatternId.BULLISH_HARAMI: bullish_harami,
    PatternId.MORNING_STAR: morning_star,
    PatternId.MORNING_DOJI_STAR: morning_doji_star,
    PatternId.HAMMER: hammer,
    PatternId.PIERCING_LINE: piercing_line,
    PatternId.THREE_WHITE_SOLDIERS: three_white_soldiers,
    PatternId.TWEEZER_BOTTOM: tweezer_bottom,
    PatternId.BEARISH_ENGULFING: bearish_engulfing,
    PatternId.BEARISH_HARAMI: bearish_harami,
    PatternId.EVENING_STAR: evening_star,
    PatternId.EVENING_DOJI_STAR: evening_doji_star,
    PatternId.SHOOTING_STAR: shooting_star,
    PatternId.DARK_CLOUD_COVER: dark_cloud_cover,
    PatternId.THREE_BLACK_CROWS: three_black_crows,
    PatternId.TWEEZER_TOP: tweezer_top,
}


def default_registry() -> PatternRegistry:
    """Registry binding every catalogued pattern to its default predicate."""
    return PatternRegistry(DEFAULT_PREDICATES)
