"""Append-only transaction ledger, one list of entries per symbol.

The ledger is the source of truth for holdings. A position at a date is the
signed sum of every entry for that symbol dated on or before it, so entry
order never changes a computed quantity; insertion order is kept only for
the persisted file layout.
"""

from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from stockfolio.models import ZERO, Transaction, TransactionType


class TransactionLedger:
    """Per-portfolio record of BUY/SELL events keyed by symbol.

    Entries are never removed. Selling appends a SELL entry; the guard that
    keeps positions non-negative lives in the Portfolio engine.
    """

    def __init__(self) -> None:
        self._entries: dict[str, list[Transaction]] = {}

    @classmethod
    def from_transactions(cls, transactions: Iterable[Transaction]) -> "TransactionLedger":
        """Build a fresh ledger by replaying transactions in order."""
        ledger = cls()
        ledger.replay(transactions)
        return ledger

    def record_buy(self, symbol: str, shares: Decimal, day: date) -> Transaction:
        return self._append(Transaction(symbol, shares, day, TransactionType.BUY))

    def record_sell(self, symbol: str, shares: Decimal, day: date) -> Transaction:
        return self._append(Transaction(symbol, shares, day, TransactionType.SELL))

    def replay(self, transactions: Iterable[Transaction]) -> None:
        for transaction in transactions:
            self._append(transaction)

    def composition_as_of(self, day: date) -> dict[str, Decimal]:
        """Return symbol -> shares held at the end of ``day``.

        Only strictly positive positions are included.
        """
        composition: dict[str, Decimal] = {}
        for symbol, entries in self._entries.items():
            total = sum(
                (t.signed_shares for t in entries if t.date <= day),
                ZERO,
            )
            if total > ZERO:
                composition[symbol] = total
        return composition

    def shares_as_of(self, symbol: str, day: date) -> Decimal:
        return self.composition_as_of(day).get(symbol, ZERO)

    def transactions(self, symbol: str | None = None) -> list[Transaction]:
        """Return a copy of the entries for one symbol, or all entries grouped by symbol."""
        if symbol is not None:
            return list(self._entries.get(symbol, []))
        return [t for entries in self._entries.values() for t in entries]

    def symbols(self) -> list[str]:
        """Symbols ever traded, in first-trade order."""
        return list(self._entries)

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._entries.values())

    def _append(self, transaction: Transaction) -> Transaction:
        self._entries.setdefault(transaction.symbol, []).append(transaction)
        return transaction
