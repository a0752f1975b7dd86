"""
Plain-text rendering of scan reports.

Builds the results table (via a pandas DataFrame), the scan summary and the
market sentiment panel for terminal output.
"""
from typing import List, Optional, Sequence

import pandas as pd

from ..sentiment.aggregator import MarketSentimentSnapshot
from ..shared.types import SignalType, Trend
from ..simulation.types import AnalysisResult, TradeRecord
from .session import ScanReport


# Chip bias thresholds for the sentiment panel
RSI_BULL_ABOVE = 60.0
RSI_BEAR_BELOW = 40.0
VOLATILITY_BEAR_ABOVE = 3.0
VOLATILITY_BULL_BELOW = 1.0
MOMENTUM_BULL_ABOVE = 1.0
MOMENTUM_BEAR_BELOW = -1.0

BIAS_MARKERS = {'bull': '▲', 'bear': '▼', 'neutral': '•'}

SIGNAL_LABELS = {
    SignalType.BUY: '🟢 BUY',
    SignalType.SELL: '🔴 SELL',
}


def _signal_label(result: AnalysisResult) -> str:
    if result.live_signal is None:
        return f"⏳ {result.current_trend.value}"
    return SIGNAL_LABELS[result.live_signal]


def _pattern_label(result: AnalysisResult) -> str:
    detection = result.live_patterns
    if not detection:
        return '-'
    names = ', '.join(f"{p.icon} {p.name}" for p in detection.matches)
    return f"{names} ({detection.score:+d})"


def results_to_frame(results: Sequence[AnalysisResult]) -> pd.DataFrame:
    """One row per instrument, in the given order."""
    rows = []
    for r in results:
        rows.append({
            'symbol': r.symbol,
            'signal': r.live_signal.value if r.live_signal is not None else '',
            'trend': r.current_trend.value,
            'roi_pct': r.roi,
            'win_rate_pct': r.win_rate,
            'trades': r.trades,
            'wins': r.wins,
            'losses': r.losing_trades,
            'liquidations': r.liquidations,
            'unresolved': r.unresolved_trades,
            'max_drawdown_pct': r.max_drawdown,
            'final_capital': r.final_capital,
            'rsi': r.current_rsi,
            'volatility_pct': r.volatility,
            'momentum_pct': r.momentum,
            'pattern_score': r.live_patterns.score,
            'patterns': ', '.join(p.name for p in r.live_patterns.matches),
        })
    return pd.DataFrame(rows)


def trades_to_frame(trades: Sequence[TradeRecord], index: Optional[pd.Index] = None) -> pd.DataFrame:
    """
    One row per resolved trade.

    Args:
        trades: Trade log of one instrument
        index: Candle index (open times) used to label entry/exit candles
    """
    rows = []
    for t in trades:
        pos = t.position
        rows.append({
            'type': pos.position_type.value,
            'entry': index[pos.entry_index] if index is not None else pos.entry_index,
            'exit': index[t.exit_index] if index is not None else t.exit_index,
            'entry_price': pos.entry_price,
            'exit_price': t.exit_price,
            'target_price': pos.target_price,
            'liquidation_price': pos.liquidation_price,
            'outcome': t.outcome.value,
            'candles_held': t.candles_held,
            'fees': t.fees,
            'capital_before': t.capital_before,
            'capital_after': t.capital_after,
            'pnl': t.pnl,
        })
    return pd.DataFrame(rows)


def format_results_table(results: Sequence[AnalysisResult]) -> str:
    """Fixed-width results table, numbered from 1."""
    if not results:
        return "No results."
    lines = [
        f"{'#':>3}  {'Symbol':<14}{'Signal':<16}{'ROI %':>10}{'Win %':>8}{'Trades':>8}"
        f"{'Liq':>5}{'MaxDD %':>9}{'RSI':>7}{'Vol %':>7}{'Mom %':>8}  Patterns",
    ]
    lines.append('-' * len(lines[0]))
    for n, r in enumerate(results, start=1):
        lines.append(
            f"{n:>3}  {r.symbol:<14}{_signal_label(r):<16}{r.roi:>10.2f}{r.win_rate:>8.1f}{r.trades:>8d}"
            f"{r.liquidations:>5d}{r.max_drawdown:>9.2f}{r.current_rsi:>7.1f}{r.volatility:>7.2f}"
            f"{r.momentum:>+8.2f}  {_pattern_label(r)}"
        )
    return '\n'.join(lines)


def format_summary(report: ScanReport) -> str:
    """Scan totals, live signal counts and the best ROI."""
    lines = [
        f"Pairs analysed: {len(report.results)}",
        f"Buy signals:    {len(report.buy_signals)}",
        f"Sell signals:   {len(report.sell_signals)}",
    ]
    best = report.best_result
    if best is not None:
        if best.roi >= 0:
            lines.append(f"Best ROI:       {best.symbol} ({best.roi:.2f}%)")
        else:
            lines.append(f"Least negative: {best.symbol} ({best.roi:.2f}%) ⚠️ every pair had a negative ROI")
    if report.skipped:
        lines.append(f"Skipped:        {len(report.skipped)} ({', '.join(sorted(report.skipped))})")
    if report.duration is not None:
        lines.append(f"Duration:       {report.duration:.1f}s")
    return '\n'.join(lines)


def _bias(value: float, bull_if, bear_if) -> str:
    if bull_if(value):
        return 'bull'
    if bear_if(value):
        return 'bear'
    return 'neutral'


def sentiment_chips(snapshot: MarketSentimentSnapshot) -> List[str]:
    """Indicator chips with their bias marker."""
    chips = []
    if snapshot.has_reference:
        ref_bias = 'bull' if snapshot.reference_trend is Trend.UPTREND else 'bear'
        chips.append(
            f"{BIAS_MARKERS[ref_bias]} {snapshot.reference_symbol}: {snapshot.reference_trend.value} "
            f"(RSI {snapshot.reference_rsi:.1f})"
        )
    else:
        chips.append(f"{BIAS_MARKERS['neutral']} {snapshot.reference_symbol}: -")

    rsi_bias = _bias(snapshot.avg_rsi, lambda v: v > RSI_BULL_ABOVE, lambda v: v < RSI_BEAR_BELOW)
    chips.append(f"{BIAS_MARKERS[rsi_bias]} Avg RSI: {snapshot.avg_rsi:.1f}")

    # High volatility reads as bearish, low volatility as bullish
    vol_bias = _bias(snapshot.avg_volatility, lambda v: v < VOLATILITY_BULL_BELOW, lambda v: v > VOLATILITY_BEAR_ABOVE)
    chips.append(f"{BIAS_MARKERS[vol_bias]} Volatility: {snapshot.avg_volatility:.2f}%")

    mom_bias = _bias(snapshot.avg_momentum, lambda v: v > MOMENTUM_BULL_ABOVE, lambda v: v < MOMENTUM_BEAR_BELOW)
    chips.append(f"{BIAS_MARKERS[mom_bias]} Momentum: {snapshot.avg_momentum:+.2f}%")

    pat_bias = _bias(snapshot.pattern_bullish - snapshot.pattern_bearish, lambda v: v > 0, lambda v: v < 0)
    chips.append(f"{BIAS_MARKERS[pat_bias]} Patterns: 🟢{snapshot.pattern_bullish} / 🔴{snapshot.pattern_bearish}")
    return chips


def format_sentiment(snapshot: Optional[MarketSentimentSnapshot]) -> str:
    """Sentiment panel: category, description, meter and chips."""
    if snapshot is None:
        return "Market sentiment: no results to aggregate."
    category = snapshot.category
    lines = [
        f"{category.icon} {category.title} (score {snapshot.score:+.1f})",
        snapshot.description,
        f"  Bullish: {snapshot.bullish_pct:5.1f}% ({snapshot.bullish})",
        f"  Bearish: {snapshot.bearish_pct:5.1f}% ({snapshot.bearish})",
        f"  Neutral: {snapshot.neutral_pct:5.1f}% ({snapshot.neutral})",
        "  " + " | ".join(sentiment_chips(snapshot)),
    ]
    return '\n'.join(lines)
