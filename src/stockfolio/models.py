"""Shared data models for the stock portfolio tracker.

CRITICAL: All prices, share counts and weights use Decimal. Never use float
for money or quantities; convert external floats with to_decimal().
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum

from stockfolio.exceptions import InvalidQuantityError

ZERO = Decimal("0")


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Convert a number to Decimal, going through str() for floats.

    Raises:
        InvalidQuantityError: If the value is not a finite number.
    """
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise InvalidQuantityError(f"Not a number: {value!r}") from exc
    if not result.is_finite():
        raise InvalidQuantityError(f"Not a finite number: {value!r}")
    return result


class TransactionType(str, Enum):
    """Ledger entry direction."""

    BUY = "BUY"
    SELL = "SELL"


@dataclass(frozen=True)
class PricePoint:
    """One trading day of OHLCV data for a symbol."""

    date: date
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: int


@dataclass(frozen=True)
class Transaction:
    """A single ledger entry.

    ``shares`` is always the positive magnitude; the direction lives in
    ``kind``. Use ``signed_shares`` when summing a position.
    """

    symbol: str
    shares: Decimal
    date: date
    kind: TransactionType

    @property
    def signed_shares(self) -> Decimal:
        """+shares for BUY, -shares for SELL."""
        return self.shares if self.kind == TransactionType.BUY else -self.shares
