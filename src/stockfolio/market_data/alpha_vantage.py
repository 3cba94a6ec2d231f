"""AlphaVantage daily quote provider with CSV cache fallback.

Fetches the full TIME_SERIES_DAILY history as CSV over HTTP, writes it to
the local CSV cache, and falls back to that cache when the network is
unavailable.

Implementation notes:
- AlphaVantage answers HTTP 200 with a JSON body for errors and for rate
  limiting. "Error Message" means the symbol is unknown; "Note" and
  "Information" mean the quota is exhausted and are handled like a
  network failure (cache fallback).
- The CSV is newest-first; order does not matter to PriceSeries.
"""

import json
import time
from collections.abc import Callable

import httpx

from stockfolio.config import QuoteSettings
from stockfolio.exceptions import QuoteFetchError, UnknownStockError
from stockfolio.logging import get_logger
from stockfolio.market_data.csv_cache import CsvPriceCache, parse_quote_csv
from stockfolio.market_data.provider import QuoteProvider
from stockfolio.models import PricePoint

logger = get_logger(__name__)


class _QuotaExhausted(Exception):
    """AlphaVantage served a rate-limit notice instead of data."""


class AlphaVantageQuoteProvider(QuoteProvider):
    """Fetches daily OHLCV history from AlphaVantage and caches it on disk.

    Usage:
        with AlphaVantageQuoteProvider(settings, CsvPriceCache(settings.cache_dir)) as provider:
            points = provider.fetch("AAPL")

    Args:
        settings: Quote provider settings (API key, URL, retry policy).
        cache: CSV cache used for writes after a fetch and for fallback reads.
        client: Optional pre-built httpx.Client (tests inject a mock transport).
        sleep: Delay function used between retries.
    """

    def __init__(
        self,
        settings: QuoteSettings,
        cache: CsvPriceCache,
        client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._settings = settings
        self._cache = cache
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=settings.timeout_seconds)
        self._sleep = sleep

    # ──────────────────────────────────────────────
    # Public methods
    # ──────────────────────────────────────────────

    def fetch(self, symbol: str) -> list[PricePoint]:
        """Fetch the full daily history for a symbol.

        Raises:
            UnknownStockError: If AlphaVantage rejects the symbol or returns no rows.
            QuoteFetchError: If the network fails and no cached copy exists.
        """
        symbol = symbol.upper()
        try:
            body = self._download_with_retry(symbol)
        except (httpx.HTTPError, _QuotaExhausted) as exc:
            return self._fallback_to_cache(symbol, exc)

        points = parse_quote_csv(body, symbol)
        if not points:
            raise UnknownStockError(f"No price data available for {symbol}")

        try:
            self._cache.write(symbol, points)
        except QuoteFetchError:
            logger.warning("quote_cache_write_failed", symbol=symbol, exc_info=True)

        logger.info("quotes_fetched", symbol=symbol, points=len(points), source="remote")
        return points

    def close(self) -> None:
        """Close the HTTP client if this provider created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "AlphaVantageQuoteProvider":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore[no-untyped-def]
        self.close()

    # ──────────────────────────────────────────────
    # Internal fetch orchestration
    # ──────────────────────────────────────────────

    def _request_params(self, symbol: str) -> dict[str, str]:
        return {
            "function": "TIME_SERIES_DAILY",
            "outputsize": "full",
            "symbol": symbol,
            "apikey": self._settings.api_key.get_secret_value(),
            "datatype": "csv",
        }

    def _download(self, symbol: str) -> str:
        """Perform one request and return the CSV body.

        Raises:
            UnknownStockError: On an AlphaVantage "Error Message" payload.
            _QuotaExhausted: On a rate-limit notice.
            httpx.HTTPError: On transport errors or non-2xx status.
        """
        response = self._client.get(self._settings.base_url, params=self._request_params(symbol))
        response.raise_for_status()
        body = response.text

        if body.lstrip().startswith("{"):
            try:
                payload = json.loads(body)
            except json.JSONDecodeError:
                payload = {}
            if "Error Message" in payload:
                raise UnknownStockError(f"Unknown stock {symbol}: {payload['Error Message']}")
            notice = payload.get("Note") or payload.get("Information") or body.strip()
            raise _QuotaExhausted(str(notice))

        return body

    def _download_with_retry(self, symbol: str) -> str:
        """Execute _download with exponential backoff retry.

        Retries up to max_retries times with delays base, 2*base, 4*base, ...
        UnknownStockError is never retried. Re-raises on final failure.
        """
        max_retries = max(1, self._settings.max_retries)
        base_delay = self._settings.retry_base_delay

        for attempt in range(max_retries):
            try:
                return self._download(symbol)
            except (httpx.HTTPError, _QuotaExhausted) as e:
                if attempt == max_retries - 1:
                    logger.error(
                        "quote_fetch_failed_permanently",
                        symbol=symbol,
                        error=str(e),
                        attempts=max_retries,
                    )
                    raise

                delay = base_delay * (2**attempt)
                logger.warning(
                    "quote_fetch_retry",
                    symbol=symbol,
                    attempt=attempt + 1,
                    max_retries=max_retries,
                    delay=delay,
                    error=str(e),
                )
                self._sleep(delay)

        raise AssertionError("unreachable")

    def _fallback_to_cache(self, symbol: str, error: Exception) -> list[PricePoint]:
        """Serve cached quotes after a failed download, or raise QuoteFetchError."""
        if not self._cache.exists(symbol):
            raise QuoteFetchError(
                f"Unable to fetch quotes for {symbol} and no cached copy exists: {error}"
            ) from error

        points = self._cache.read(symbol)
        if not points:
            raise UnknownStockError(f"No price data available for {symbol}")

        logger.warning(
            "quotes_served_from_cache",
            symbol=symbol,
            points=len(points),
            path=self._cache.path_for(symbol),
            error=str(error),
        )
        return points
