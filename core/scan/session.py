"""
Market scan session.

A ScanSession owns all state of one scan: it resolves the symbol universe,
fetches candles sequentially through a provider (pausing between requests),
simulates every instrument (optionally on a thread pool), waits for every
simulation, then runs the sentiment aggregator once over the successful
results. Failures stay local to their instrument: insufficient history, a
failed request or a faulting simulation only moves that symbol to `skipped`.

A session is single-use: create one per scan and discard it afterwards.
"""
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import pandas as pd

from ..data.binance import CandleProviderError
from ..data.preparation import DataPreparationError, prepare_candles
from ..data.provider import CandleProvider
from ..patterns.catalogue import PatternRegistry
from ..patterns.scorer import PatternScorer
from ..sentiment.aggregator import MarketSentimentSnapshot, SentimentAggregator
from ..shared.types import SignalType
from ..simulation.simulator import TradeSimulator
from ..simulation.types import AnalysisResult
from .config import ScanConfig


logger = logging.getLogger(__name__)

# Progress callback: (instruments done, total instruments, symbol)
ProgressCallback = Callable[[int, int, str], None]

SORT_KEYS: Dict[str, Callable[[AnalysisResult], float]] = {
    'roi': lambda r: r.roi,
    'win_rate': lambda r: r.win_rate,
    'trades': lambda r: r.trades,
    'max_drawdown': lambda r: r.max_drawdown,
    'volatility': lambda r: r.volatility,
    'momentum': lambda r: r.momentum,
    'rsi': lambda r: r.current_rsi,
}


class ScanSessionError(Exception):
    """Raised when a scan session is misused or has nothing to scan."""
    pass


@dataclass
class ScanReport:
    """Everything one scan produced."""
    results: List[AnalysisResult]
    skipped: Dict[str, str] = field(default_factory=dict)  # symbol -> reason
    sentiment: Optional[MarketSentimentSnapshot] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def buy_signals(self) -> List[AnalysisResult]:
        return [r for r in self.results if r.live_signal is SignalType.BUY]

    @property
    def sell_signals(self) -> List[AnalysisResult]:
        return [r for r in self.results if r.live_signal is SignalType.SELL]

    @property
    def best_result(self) -> Optional[AnalysisResult]:
        """Result with the highest ROI (first one on ties), None when empty."""
        if not self.results:
            return None
        return max(self.results, key=lambda r: r.roi)

    @property
    def duration(self) -> Optional[float]:
        if self.started_at is None or self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds()

    def sorted_results(self, key: str = 'roi', ascending: bool = False) -> List[AnalysisResult]:
        """
        Results ordered by a metric.

        Args:
            key: One of roi, win_rate, trades, max_drawdown, volatility, momentum, rsi
            ascending: Sort ascending instead of descending

        Raises:
            ValueError: On an unknown key
        """
        if key not in SORT_KEYS:
            raise ValueError(f"Unknown sort key: {key}. Available: {', '.join(SORT_KEYS)}")
        return sorted(self.results, key=SORT_KEYS[key], reverse=not ascending)


class ScanSession:
    """
    Drives one market scan.

    Example:
        session = ScanSession(ScanConfig(), BinanceFuturesClient())
        report = session.run()
        print(report.sentiment.category.title)
    """

    def __init__(
        self,
        config: ScanConfig,
        provider: CandleProvider,
        registry: Optional[PatternRegistry] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            config: Scan configuration
            provider: Candle provider (Binance client or CSV directory)
            registry: Pattern predicate registry (default: shipped predicates)
            sleep: Pause function between candle requests (tests pass a no-op)
        """
        self.config = config
        self.provider = provider
        self.registry = registry
        self._sleep = sleep
        self._used = False

    def _resolve_universe(self, symbols: Optional[Sequence[str]]) -> List[str]:
        if symbols:
            universe = list(dict.fromkeys(s.upper() for s in symbols))
        else:
            try:
                universe = self.provider.list_symbols(self.config.top_pairs)
            except CandleProviderError as e:
                raise ScanSessionError(f"Could not list symbols: {e}") from e
        if not universe:
            raise ScanSessionError(f"No {self.config.quote_asset} pairs to scan")
        return universe

    def _fetch(self, symbol: str) -> pd.DataFrame:
        candles = self.provider.fetch_candles(symbol, self.config.timeframe, self.config.kline_limit)
        return prepare_candles(candles)

    def _fetch_all(
        self,
        universe: List[str],
        skipped: Dict[str, str],
        progress: Optional[ProgressCallback],
    ) -> List[Tuple[str, pd.DataFrame]]:
        """Fetch candles sequentially; failures are recorded in `skipped`."""
        frames = []
        total = len(universe)
        for n, symbol in enumerate(universe, start=1):
            try:
                frames.append((symbol, self._fetch(symbol)))
            except (CandleProviderError, DataPreparationError, FileNotFoundError) as e:
                logger.warning("Skipping %s: %s", symbol, e)
                skipped[symbol] = str(e)
            except Exception as e:
                # Unexpected provider faults only cost this instrument
                logger.warning("Skipping %s: unexpected %s: %s", symbol, type(e).__name__, e, exc_info=True)
                skipped[symbol] = f"{type(e).__name__}: {e}"
            if progress is not None:
                progress(n, total, symbol)
            if n < total and self.config.request_pause > 0:
                self._sleep(self.config.request_pause)
        return frames

    def _simulate_all(
        self,
        frames: List[Tuple[str, pd.DataFrame]],
        skipped: Dict[str, str],
    ) -> List[AnalysisResult]:
        """Simulate every instrument; each gets its own parameter copy and scorer."""
        params = self.config.strategy_params()

        def task(item: Tuple[str, pd.DataFrame]) -> Tuple[str, Optional[AnalysisResult], Optional[Exception]]:
            symbol, candles = item
            try:
                simulator = TradeSimulator(replace(params), scorer=PatternScorer(self.registry))
                return symbol, simulator.run(candles, symbol=symbol), None
            except Exception as e:
                return symbol, None, e

        if self.config.max_workers <= 1:
            outcomes = [task(item) for item in frames]
        else:
            # map() keeps universe order and only returns after every task finished
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
                outcomes = list(executor.map(task, frames))

        results = []
        for symbol, result, error in outcomes:
            if error is not None:
                logger.warning("Skipping %s: simulation failed: %s: %s", symbol, type(error).__name__, error,
                               exc_info=error)
                skipped[symbol] = f"simulation failed: {type(error).__name__}: {error}"
            else:
                results.append(result)
        return results

    def run(
        self,
        symbols: Optional[Sequence[str]] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> ScanReport:
        """
        Run the scan.

        Args:
            symbols: Explicit symbols to scan (default: the provider's top pairs)
            progress: Optional callback invoked after each candle request

        Returns:
            ScanReport with results in universe order, skipped symbols and sentiment

        Raises:
            ScanSessionError: If the session was already run, or the universe is empty
        """
        if self._used:
            raise ScanSessionError("ScanSession is single-use; create a new session per scan")
        self._used = True

        started_at = datetime.now()
        universe = self._resolve_universe(symbols)
        logger.info("Scanning %d symbols (%s, %d candles)", len(universe), self.config.timeframe,
                    self.config.kline_limit)

        skipped: Dict[str, str] = {}
        frames = self._fetch_all(universe, skipped, progress)
        results = self._simulate_all(frames, skipped)

        sentiment = SentimentAggregator(self.config.reference_symbol).aggregate(results)
        finished_at = datetime.now()
        logger.info("Scan finished: %d analysed, %d skipped", len(results), len(skipped))

        return ScanReport(
            results=results,
            skipped=skipped,
            sentiment=sentiment,
            started_at=started_at,
            finished_at=finished_at,
        )
