"""
Core scanner modules.

Provides unified interfaces for:
- Candle data (Binance futures REST, offline CSV) and preparation
- Indicator calculations (SMA, Wilder RSI, volatility, momentum)
- Candlestick pattern scoring
- Per-instrument leveraged trade simulation
- Market sentiment aggregation
- Scan sessions, configuration and reporting
"""
