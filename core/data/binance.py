"""
Binance USDT-margined futures candle provider.

Public REST endpoints only (no API key):
- ticker/24hr for the most-traded symbols
- klines for candle history

Rate limiting (HTTP 429) and transient server errors are retried with
exponential backoff by the session's HTTPAdapter.
"""
import logging
from typing import Any, List, Optional

import pandas as pd
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..shared.defaults import (
    BINANCE_FUTURES_API,
    HTTP_BACKOFF_FACTOR,
    HTTP_RETRIES,
    HTTP_TIMEOUT,
    KLINE_LIMIT,
    QUOTE_ASSET,
    TIMEFRAME,
)
from .preparation import DataPreparationError, klines_to_frame


logger = logging.getLogger(__name__)

RETRY_STATUS_CODES = [429, 500, 502, 503, 504]


class CandleProviderError(Exception):
    """Raised when a provider cannot deliver symbols or candles."""
    pass


def _create_session(retries: int, backoff_factor: float) -> requests.Session:
    session = requests.Session()
    retry = Retry(
        total=retries,
        backoff_factor=backoff_factor,
        status_forcelist=RETRY_STATUS_CODES,
        allowed_methods=frozenset(["GET"]),
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


class BinanceFuturesClient:
    """
    Candle provider for Binance futures.

    Example:
        client = BinanceFuturesClient()
        symbols = client.list_symbols(20)
        candles = client.fetch_candles("BTCUSDT", "1h", 500)
    """

    def __init__(
        self,
        base_url: str = BINANCE_FUTURES_API,
        retries: int = HTTP_RETRIES,
        backoff_factor: float = HTTP_BACKOFF_FACTOR,
        timeout: float = HTTP_TIMEOUT,
        quote_asset: str = QUOTE_ASSET,
        session: Optional[requests.Session] = None,
    ):
        """
        Args:
            base_url: REST base URL (default: https://fapi.binance.com/fapi/v1)
            retries: Total retries on 429/5xx and connection errors
            backoff_factor: Exponential backoff factor between retries (seconds)
            timeout: Per-request timeout in seconds
            quote_asset: Symbols listed by list_symbols must end with this asset
            session: Pre-built session (tests inject a mock here)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.quote_asset = quote_asset
        self.session = session if session is not None else _create_session(retries, backoff_factor)

    def _get(self, endpoint: str, params: Optional[dict] = None) -> Any:
        url = f"{self.base_url}/{endpoint}"
        logger.debug("GET %s %s", url, params or "")
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            raise CandleProviderError(f"Request to {endpoint} failed: {e}") from e
        except ValueError as e:
            raise CandleProviderError(f"Invalid JSON from {endpoint}: {e}") from e

    def list_symbols(self, limit: Optional[int] = None) -> List[str]:
        """
        Most-traded symbols by 24h quote volume, descending.

        Args:
            limit: Maximum number of symbols (None: all)

        Returns:
            Symbols ending in the quote asset
        """
        tickers = self._get("ticker/24hr")
        if not isinstance(tickers, list):
            raise CandleProviderError(f"Unexpected ticker/24hr payload: {type(tickers).__name__}")

        pairs = [t for t in tickers if str(t.get("symbol", "")).endswith(self.quote_asset)]
        pairs.sort(key=lambda t: float(t.get("quoteVolume", 0) or 0), reverse=True)
        symbols = [t["symbol"] for t in pairs]
        if limit is not None:
            symbols = symbols[:limit]
        logger.info("Selected %d %s pairs by 24h quote volume", len(symbols), self.quote_asset)
        return symbols

    def fetch_candles(self, symbol: str, interval: str = TIMEFRAME, limit: int = KLINE_LIMIT) -> pd.DataFrame:
        """
        Fetch the most recent candles of a symbol.

        Args:
            symbol: Futures symbol (e.g. BTCUSDT)
            interval: Kline interval (e.g. 15m, 1h, 4h, 1d)
            limit: Number of candles

        Returns:
            Candle frame indexed by open_time, oldest first

        Raises:
            CandleProviderError: On request failure or a non-list payload
        """
        klines = self._get("klines", params={"symbol": symbol, "interval": interval, "limit": limit})
        if not isinstance(klines, list):
            raise CandleProviderError(f"Invalid klines response for {symbol}: {klines!r}")
        try:
            return klines_to_frame(klines)
        except DataPreparationError as e:
            raise CandleProviderError(f"{symbol}: {e}") from e
