"""
Unified CLI entry points for the scanner.

Provides command-line interfaces for:
- Full market scan with sentiment (cli.scan)
- Single-instrument backtest with trade log (cli.backtest)
"""
