"""Per-symbol historical daily price table.

A PriceSeries only grows: points are inserted or replaced by date, never
removed. Lookups are by exact date; a date without trading data simply
returns None and callers decide whether to skip it or treat it as zero.
"""

from collections.abc import Iterable, Iterator
from datetime import date
from decimal import Decimal

from stockfolio.models import PricePoint


class PriceSeries:
    """Date -> PricePoint mapping for one ticker symbol."""

    def __init__(self, symbol: str, points: Iterable[PricePoint] = ()) -> None:
        self._symbol = symbol
        self._prices: dict[date, PricePoint] = {}
        for point in points:
            self._prices[point.date] = point

    @property
    def symbol(self) -> str:
        return self._symbol

    def get_price(self, day: date) -> PricePoint | None:
        """Return the price point for an exact date, or None if not a trading day."""
        return self._prices.get(day)

    def close_on(self, day: date) -> Decimal | None:
        """Return the closing price for an exact date, or None."""
        point = self._prices.get(day)
        return point.close if point is not None else None

    def add_price(
        self,
        day: date,
        open: Decimal,
        high: Decimal,
        low: Decimal,
        close: Decimal,
        volume: int,
    ) -> None:
        """Insert or overwrite the price point for a date.

        Values are not range-checked; the feed is trusted for values.
        """
        self._prices[day] = PricePoint(
            date=day, open=open, high=high, low=low, close=close, volume=volume
        )

    def merge(self, other: "PriceSeries") -> int:
        """Copy every point of ``other`` into this series (last write wins).

        Returns:
            Number of points merged.
        """
        count = 0
        for point in other:
            self._prices[point.date] = point
            count += 1
        return count

    def dates(self) -> list[date]:
        """Return all dates with data, ascending."""
        return sorted(self._prices)

    def __iter__(self) -> Iterator[PricePoint]:
        return (self._prices[d] for d in sorted(self._prices))

    def __len__(self) -> int:
        return len(self._prices)

    def __contains__(self, day: object) -> bool:
        return day in self._prices
