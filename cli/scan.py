#!/usr/bin/env python3
"""
Market scan CLI.

Backtests the SMA trend strategy on the most-traded futures pairs (or an
explicit symbol list / an offline CSV directory), prints the results table,
the scan summary and the market sentiment.
"""
import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

from core.data.binance import BinanceFuturesClient
from core.data.loader import CsvCandleProvider
from core.scan.config import ScanConfig, VALID_TIMEFRAMES
from core.scan.config_loader import load_config_from_yaml, save_config_to_yaml
from core.scan.report import format_results_table, format_sentiment, format_summary, results_to_frame
from core.scan.session import SORT_KEYS, ScanSession, ScanSessionError
from core.shared.types import PatternMode


DEFAULT_CONFIG_PATH = Path("configs/scanner.yaml")

logger = logging.getLogger(__name__)


def setup_logging(log_path: Optional[Path] = None, verbose: bool = False):
    """
    Setup logging to stderr and optionally to file.

    Args:
        log_path: Path to log file (None = console only)
        verbose: If True, use DEBUG level, otherwise WARNING
    """
    level = logging.DEBUG if verbose else logging.WARNING

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    # Console handler on stderr so tables on stdout stay clean
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_path:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def add_strategy_arguments(parser: argparse.ArgumentParser):
    """Config override flags shared by the scan and backtest CLIs (None = keep config value)."""
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help=f"YAML scan config (default: {DEFAULT_CONFIG_PATH} when present)"
    )
    parser.add_argument("--capital", type=float, help="Initial capital per pair (default: 1000)")
    parser.add_argument("--leverage", type=float, help="Leverage (default: 10)")
    parser.add_argument(
        "--take-profit",
        type=float,
        help="Take-profit in percent, e.g. 3 for 3%% (default: 3)"
    )
    parser.add_argument("--timeframe", "-t", choices=VALID_TIMEFRAMES, help="Candle interval (default: 1h)")
    parser.add_argument("--limit", type=int, help="Candles per pair, >= 200 (default: 500)")
    parser.add_argument(
        "--pattern-mode",
        choices=[m.value for m in PatternMode],
        help="Candlestick patterns: off, confirm (trend + pattern) or expand (trend or strong pattern)"
    )
    parser.add_argument("--data-dir", type=Path, help="Offline mode: read <SYMBOL>.csv files from this directory")
    parser.add_argument("--log-file", type=Path, help="Also write logs to this file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")


def resolve_config(args: argparse.Namespace) -> ScanConfig:
    """
    Load the config file (explicit, else the default path when present) and apply CLI overrides.

    An explicit --config that cannot be loaded is an error; a broken default
    config file only triggers a warning and the built-in defaults.
    """
    config = ScanConfig()
    if args.config is not None:
        config = load_config_from_yaml(args.config)
        print(f"Loaded configuration from: {args.config}")
    elif DEFAULT_CONFIG_PATH.exists():
        try:
            config = load_config_from_yaml(DEFAULT_CONFIG_PATH)
        except (ValueError, OSError) as e:
            logger.warning("Ignoring unreadable config %s: %s", DEFAULT_CONFIG_PATH, e)

    overrides = {
        'capital': args.capital,
        'leverage': args.leverage,
        'take_profit_pct': args.take_profit / 100 if args.take_profit is not None else None,
        'timeframe': args.timeframe,
        'kline_limit': args.limit,
        'pattern_mode': args.pattern_mode,
        'top_pairs': getattr(args, 'top', None),
        'max_workers': getattr(args, 'workers', None),
        'request_pause': getattr(args, 'pause', None),
    }
    return replace(config, **{k: v for k, v in overrides.items() if v is not None})


def build_provider(args: argparse.Namespace, config: ScanConfig):
    if args.data_dir is not None:
        return CsvCandleProvider(args.data_dir)
    return BinanceFuturesClient(quote_asset=config.quote_asset)


def _print_progress(done: int, total: int, symbol: str):
    print(f"\r  Analysing {symbol:<14} ({done}/{total})", end="", file=sys.stderr, flush=True)
    if done == total:
        print(file=sys.stderr)


def main():
    parser = argparse.ArgumentParser(
        description="Backtest the SMA trend strategy on the top futures pairs and show market sentiment",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Scan the 20 most-traded USDT pairs with defaults (1h, 500 candles, 10x, TP 3%)
    python -m cli.scan

    # 4h candles, 5x leverage, patterns as confirmation, sorted by win rate
    python -m cli.scan --timeframe 4h --leverage 5 --pattern-mode confirm --sort win_rate

    # Specific symbols
    python -m cli.scan --symbols BTCUSDT ETHUSDT SOLUSDT

    # Offline scan over CSV files and persist the settings
    python -m cli.scan --data-dir data/candles --save-config configs/scanner.yaml
        """
    )
    add_strategy_arguments(parser)
    parser.add_argument("--top", type=int, help="Number of top-volume pairs to scan (default: 20)")
    parser.add_argument("--symbols", "-s", nargs="+", help="Scan these symbols instead of the top pairs")
    parser.add_argument("--workers", type=int, help="Simulation threads (default: 1 = sequential)")
    parser.add_argument("--pause", type=float, help="Seconds between candle requests (default: 0.12)")
    parser.add_argument(
        "--sort",
        choices=list(SORT_KEYS),
        default="roi",
        help="Sort results by this metric (default: roi)"
    )
    parser.add_argument("--ascending", action="store_true", help="Sort ascending (default: descending)")
    parser.add_argument("--save-config", type=Path, help="Save the effective configuration to this YAML file")
    parser.add_argument("--csv", type=Path, help="Write the results table to this CSV file")

    args = parser.parse_args()
    setup_logging(args.log_file, args.verbose)

    try:
        config = resolve_config(args)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading configuration: {e}")
        return 1

    if args.save_config:
        save_config_to_yaml(config, args.save_config)
        print(f"Config YAML saved: {args.save_config}")

    try:
        provider = build_provider(args, config)
    except FileNotFoundError as e:
        print(f"Error: {e}")
        return 1

    print(f"Scanning {'/'.join(args.symbols) if args.symbols else f'top {config.top_pairs} pairs'} "
          f"({config.timeframe}, {config.kline_limit} candles, {config.leverage:g}x, "
          f"TP {config.take_profit_pct * 100:g}%, patterns {config.pattern_mode.value})")

    session = ScanSession(config, provider)
    try:
        report = session.run(symbols=args.symbols, progress=_print_progress)
    except ScanSessionError as e:
        print(f"Error: {e}")
        return 1

    print()
    print(format_sentiment(report.sentiment))
    print()
    print(format_results_table(report.sorted_results(args.sort, ascending=args.ascending)))
    print()
    print(format_summary(report))

    if args.csv:
        args.csv.parent.mkdir(parents=True, exist_ok=True)
        results_to_frame(report.sorted_results(args.sort, ascending=args.ascending)).to_csv(args.csv, index=False)
        print(f"\nResults CSV saved: {args.csv}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
