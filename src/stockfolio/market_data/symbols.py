"""Ticker symbol validation against a reference list file.

The reference list is a CSV with the ticker symbol in the first column.
Matching is case-insensitive and ignores surrounding whitespace.
"""

import csv

from stockfolio.logging import get_logger

logger = get_logger(__name__)


class SymbolValidator:
    """Answers whether a ticker appears in the reference list.

    The file is read once, on first use. A missing or unreadable file makes
    every symbol invalid.
    """

    def __init__(self, path: str) -> None:
        self._path = path
        self._symbols: frozenset[str] | None = None

    def is_valid_symbol(self, symbol: str) -> bool:
        if not symbol or not symbol.strip():
            return False
        return symbol.strip().upper() in self._load()

    def _load(self) -> frozenset[str]:
        if self._symbols is not None:
            return self._symbols

        symbols: set[str] = set()
        try:
            with open(self._path, encoding="utf-8", newline="") as handle:
                for row in csv.reader(handle):
                    if row and row[0].strip():
                        symbols.add(row[0].strip().upper())
        except OSError as exc:
            logger.warning("ticker_list_unreadable", path=self._path, error=str(exc))

        self._symbols = frozenset(symbols)
        logger.debug("ticker_list_loaded", path=self._path, symbols=len(symbols))
        return self._symbols
