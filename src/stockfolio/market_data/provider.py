"""Abstract quote provider interface.

The price service depends only on this contract, keeping the HTTP and CSV
details isolated in the concrete implementation. Tests substitute a stub.
"""

from abc import ABC, abstractmethod

from stockfolio.models import PricePoint


class QuoteProvider(ABC):
    """Abstract base class for daily quote sources."""

    @abstractmethod
    def fetch(self, symbol: str) -> list[PricePoint]:
        """Fetch the full daily history for a symbol.

        Returns:
            Price points in any order. An empty list means the provider
            knows nothing about the symbol.

        Raises:
            UnknownStockError: If the provider rejects the symbol.
            IOFailureError: If the data cannot be fetched or read.
        """
        ...

    def close(self) -> None:
        """Release any held resources. Default is a no-op."""
