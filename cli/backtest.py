#!/usr/bin/env python3
"""
Single-instrument backtest CLI.

Runs the SMA trend strategy on one symbol and prints the result together
with the full trade log.
"""
import argparse
import sys
from pathlib import Path

import pandas as pd

from core.data.binance import CandleProviderError
from core.data.preparation import DataPreparationError, prepare_candles
from core.scan.report import format_results_table, trades_to_frame
from core.simulation.simulator import TradeSimulator
from cli.scan import add_strategy_arguments, build_provider, resolve_config, setup_logging


def main():
    parser = argparse.ArgumentParser(
        description="Backtest the SMA trend strategy on a single futures pair",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Backtest BTCUSDT with defaults (1h, 500 candles, 10x, TP 3%)
    python -m cli.backtest BTCUSDT

    # 15m candles, 1000 candles, patterns may open trades on their own
    python -m cli.backtest ETHUSDT --timeframe 15m --limit 1000 --pattern-mode expand

    # Offline, writing the trade log to CSV
    python -m cli.backtest SOLUSDT --data-dir data/candles --trades-csv output/sol_trades.csv
        """
    )
    parser.add_argument("symbol", help="Futures symbol, e.g. BTCUSDT")
    add_strategy_arguments(parser)
    parser.add_argument("--trades-csv", type=Path, help="Write the trade log to this CSV file")

    args = parser.parse_args()
    setup_logging(args.log_file, args.verbose)
    symbol = args.symbol.upper()

    try:
        config = resolve_config(args)
        provider = build_provider(args, config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    try:
        candles = prepare_candles(provider.fetch_candles(symbol, config.timeframe, config.kline_limit))
    except (CandleProviderError, DataPreparationError, FileNotFoundError) as e:
        print(f"Error loading {symbol}: {e}")
        return 1

    print(f"Loaded {len(candles)} candles for {symbol} from {candles.index.min()} to {candles.index.max()}")
    result = TradeSimulator(config.strategy_params()).run(candles, symbol=symbol)

    print()
    print(format_results_table([result]))
    print()
    print(f"Final capital: {result.final_capital:.2f} (initial {result.initial_capital:.2f})")
    print(f"Trades: {result.trades}  Wins: {result.wins}  Liquidations: {result.liquidations}  "
          f"Unresolved: {result.unresolved_trades}")

    trades = trades_to_frame(result.trade_log, candles.index)
    if trades.empty:
        print("\nNo trades.")
    else:
        print("\nTrade log:")
        with pd.option_context('display.max_rows', None, 'display.width', 200):
            print(trades.to_string(index=False, float_format=lambda v: f"{v:.4f}"))

    if args.trades_csv:
        args.trades_csv.parent.mkdir(parents=True, exist_ok=True)
        trades.to_csv(args.trades_csv, index=False)
        print(f"\nTrades CSV saved: {args.trades_csv}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
