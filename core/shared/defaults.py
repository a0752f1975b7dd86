"""
Centralized default values for the scanner.

This is the SINGLE SOURCE OF TRUTH for strategy constants and scan defaults.
All modules should import from here to ensure consistency.

Margin and fee constants follow Binance USDT-margined futures (simplified):
- Maintenance margin 0.4% of notional
- Taker fee 0.04%, maker fee 0.02% per side
"""

# Candle history
MIN_CANDLES = 200  # Warm-up required for SMA 200; also the first index the walk evaluates

# Moving averages used by the trend condition
SMA_FAST_PERIOD = 30
SMA_MID_PERIOD = 50
SMA_SLOW_PERIOD = 100
SMA_TREND_PERIOD = 200

# RSI (Relative Strength Index) defaults
RSI_PERIOD = 14
RSI_NEUTRAL = 50.0  # Used when RSI is undefined

# Volatility / momentum windows (in candles)
VOLATILITY_WINDOW = 20
MOMENTUM_PERIOD = 10

# Trade management
TRADE_COOLDOWN = 10  # Candles skipped after an entry
MAX_TRADE_DURATION = 50  # Candles scanned forward to resolve a trade
MAINT_MARGIN_RATE = 0.004  # 0.4% maintenance margin
TAKER_FEE = 0.0004  # 0.04% (market orders)
FEE_RATE = TAKER_FEE  # Per side; entries and exits fill as market orders

# Candlestick patterns
PATTERN_WINDOW = 5  # Trailing candles handed to each pattern predicate
PATTERN_EXPAND_THRESHOLD = 3  # |score| needed to trade on patterns alone in "expand" mode

# Scan configuration defaults
INITIAL_CAPITAL = 1000.0
LEVERAGE = 10.0
TAKE_PROFIT_PCT = 0.03
TIMEFRAME = "1h"
KLINE_LIMIT = 500
TOP_PAIRS = 20
PATTERN_MODE = "off"
REFERENCE_SYMBOL = "BTCUSDT"  # Market leader used by the sentiment score
QUOTE_ASSET = "USDT"
REQUEST_PAUSE = 0.12  # Seconds between candle requests
MAX_WORKERS = 1  # Simulation workers (1 = sequential)

# Market data provider
BINANCE_FUTURES_API = "https://fapi.binance.com/fapi/v1"
HTTP_RETRIES = 3
HTTP_BACKOFF_FACTOR = 1.0
HTTP_TIMEOUT = 20

# Sentiment score thresholds (summed score)
SENTIMENT_BULLISH = 20.0
SENTIMENT_SLIGHTLY_BULLISH = 5.0
SENTIMENT_SLIGHTLY_BEARISH = -5.0
SENTIMENT_BEARISH = -20.0
