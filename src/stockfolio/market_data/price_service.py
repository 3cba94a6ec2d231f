"""Process-lifetime cache of price series, one per symbol.

The first request for a symbol fetches its full history from the quote
provider; later requests are served from memory. Refreshing fetches into a
staging series first and then merges, so a series already handed to a
caller is extended in place and never cleared.
"""

from datetime import date
from decimal import Decimal

from stockfolio.exceptions import UnknownStockError
from stockfolio.logging import get_logger
from stockfolio.market_data.price_series import PriceSeries
from stockfolio.market_data.provider import QuoteProvider

logger = get_logger(__name__)


class PriceService:
    """Symbol -> PriceSeries cache backed by a QuoteProvider.

    Args:
        provider: Source of daily quotes. Injected so tests can use a stub.
    """

    def __init__(self, provider: QuoteProvider) -> None:
        self._provider = provider
        self._series: dict[str, PriceSeries] = {}

    def series(self, symbol: str) -> PriceSeries:
        """Return the cached series for a symbol, fetching it on first use.

        Raises:
            UnknownStockError: If the provider has no data at all for the symbol.
            IOFailureError: If the provider cannot reach its data.
        """
        symbol = symbol.upper()
        cached = self._series.get(symbol)
        if cached is not None:
            return cached

        staged = self._fetch(symbol)
        self._series[symbol] = staged
        logger.info("price_series_loaded", symbol=symbol, points=len(staged))
        return staged

    def refresh(self, symbol: str) -> PriceSeries:
        """Re-fetch a symbol and merge the new points into the cached series."""
        symbol = symbol.upper()
        staged = self._fetch(symbol)
        current = self._series.get(symbol)
        if current is None:
            self._series[symbol] = staged
            return staged

        merged = current.merge(staged)
        logger.info("price_series_refreshed", symbol=symbol, merged=merged, points=len(current))
        return current

    def close_price(self, symbol: str, day: date) -> Decimal | None:
        """Return the close for a symbol on an exact date, or None."""
        return self.series(symbol).close_on(day)

    def is_loaded(self, symbol: str) -> bool:
        return symbol.upper() in self._series

    def loaded_symbols(self) -> list[str]:
        return sorted(self._series)

    def _fetch(self, symbol: str) -> PriceSeries:
        points = self._provider.fetch(symbol)
        if not points:
            raise UnknownStockError(f"No price data available for {symbol}")
        return PriceSeries(symbol, points)
