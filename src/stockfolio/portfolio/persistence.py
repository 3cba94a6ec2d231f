"""Plain-text save/load of a portfolio's ledger.

File layout (line-oriented):

    Portfolio Name: <name>
    Number of Stocks: <N>
    Stock: <symbol>
    Transactions: <M>
    <BUY|SELL>,<shares>,<ISO-date>     (M lines)
    ... Stock block repeated N times ...

Any structural deviation raises MalformedFileError naming the offending
line. The name declared in the file is the loaded portfolio's identity.
"""

import os
from collections.abc import Iterator
from datetime import date
from decimal import Decimal, InvalidOperation

from stockfolio.exceptions import IOFailureError, MalformedFileError, PortfolioFileNotFoundError
from stockfolio.logging import get_logger
from stockfolio.market_data.price_service import PriceService
from stockfolio.models import ZERO, Transaction, TransactionType
from stockfolio.portfolio.ledger import TransactionLedger
from stockfolio.portfolio.portfolio import DEFAULT_WEIGHT_TOLERANCE, Portfolio

logger = get_logger(__name__)

NAME_PREFIX = "Portfolio Name: "
COUNT_PREFIX = "Number of Stocks: "
STOCK_PREFIX = "Stock: "
TRANSACTIONS_PREFIX = "Transactions: "


def dumps_portfolio(portfolio: Portfolio) -> str:
    """Render a portfolio in the persisted text layout."""
    lines = [
        f"{NAME_PREFIX}{portfolio.name}",
        f"{COUNT_PREFIX}{len(portfolio.symbols())}",
    ]
    for symbol in portfolio.symbols():
        entries = portfolio.transactions(symbol)
        lines.append(f"{STOCK_PREFIX}{symbol}")
        lines.append(f"{TRANSACTIONS_PREFIX}{len(entries)}")
        for t in entries:
            lines.append(f"{t.kind.value},{t.shares},{t.date.isoformat()}")
    return "\n".join(lines) + "\n"


def save_portfolio(portfolio: Portfolio, path: str) -> None:
    """Write a portfolio file, creating the parent directory if needed.

    Raises:
        IOFailureError: If the file cannot be written.
    """
    try:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, "w", encoding="utf-8") as handle:
            handle.write(dumps_portfolio(portfolio))
    except OSError as exc:
        raise IOFailureError(f"Error saving portfolio to {path}: {exc}") from exc

    logger.info("portfolio_saved", portfolio=portfolio.name, path=path)


class _LineReader:
    """Iterates file lines while tracking the 1-based line number."""

    def __init__(self, text: str) -> None:
        self._lines: Iterator[str] = iter(text.splitlines())
        self.line_number = 0

    def next_line(self, expecting: str) -> str:
        try:
            line = next(self._lines)
        except StopIteration:
            raise MalformedFileError(
                f"unexpected end of file, expected {expecting}", self.line_number + 1
            ) from None
        self.line_number += 1
        return line

    def expect_end(self) -> None:
        """Require that only blank lines remain."""
        for line in self._lines:
            self.line_number += 1
            if line.strip():
                raise MalformedFileError("unexpected content after last stock block", self.line_number)

    def prefixed(self, prefix: str) -> str:
        line = self.next_line(repr(prefix.strip()))
        if not line.startswith(prefix):
            raise MalformedFileError(f"expected {prefix.strip()!r}", self.line_number)
        return line[len(prefix):]

    def count(self, prefix: str) -> int:
        raw = self.prefixed(prefix).strip()
        try:
            value = int(raw)
        except ValueError:
            raise MalformedFileError(
                f"{prefix.strip()} must be an integer, got {raw!r}", self.line_number
            ) from None
        if value < 0:
            raise MalformedFileError(f"{prefix.strip()} must not be negative", self.line_number)
        return value


def _parse_transaction(line: str, symbol: str, line_number: int) -> Transaction:
    parts = line.split(",")
    if len(parts) != 3:
        raise MalformedFileError(
            f"expected 3 comma-separated fields, got {len(parts)}", line_number
        )
    kind_raw, shares_raw, date_raw = (p.strip() for p in parts)

    try:
        kind = TransactionType(kind_raw)
    except ValueError:
        raise MalformedFileError(f"unknown transaction type {kind_raw!r}", line_number) from None

    try:
        shares = Decimal(shares_raw)
    except InvalidOperation:
        raise MalformedFileError(f"invalid share count {shares_raw!r}", line_number) from None
    if not shares.is_finite() or shares <= ZERO:
        raise MalformedFileError(f"share count must be positive, got {shares_raw!r}", line_number)

    try:
        day = date.fromisoformat(date_raw)
    except ValueError:
        raise MalformedFileError(f"invalid date {date_raw!r}", line_number) from None

    return Transaction(symbol, shares, day, kind)


def loads_portfolio(
    text: str,
    price_service: PriceService,
    weight_tolerance: Decimal = DEFAULT_WEIGHT_TOLERANCE,
) -> Portfolio:
    """Parse the persisted layout into a new Portfolio.

    Raises:
        MalformedFileError: On any structural deviation.
    """
    reader = _LineReader(text)
    name = reader.prefixed(NAME_PREFIX).strip()
    if not name:
        raise MalformedFileError("portfolio name is empty", reader.line_number)

    stock_count = reader.count(COUNT_PREFIX)
    ledger = TransactionLedger()
    for _ in range(stock_count):
        symbol = reader.prefixed(STOCK_PREFIX).strip().upper()
        if not symbol:
            raise MalformedFileError("stock symbol is empty", reader.line_number)
        transaction_count = reader.count(TRANSACTIONS_PREFIX)
        for _ in range(transaction_count):
            line = reader.next_line("a transaction line")
            ledger.replay([_parse_transaction(line, symbol, reader.line_number)])

    reader.expect_end()

    return Portfolio(name, price_service, ledger=ledger, weight_tolerance=weight_tolerance)


def load_portfolio(
    path: str,
    price_service: PriceService,
    weight_tolerance: Decimal = DEFAULT_WEIGHT_TOLERANCE,
) -> Portfolio:
    """Read and parse a portfolio file.

    Raises:
        PortfolioFileNotFoundError: If the file does not exist.
        IOFailureError: If the file cannot be read.
        MalformedFileError: If the content is malformed.
    """
    try:
        with open(path, encoding="utf-8") as handle:
            text = handle.read()
    except FileNotFoundError as exc:
        raise PortfolioFileNotFoundError(f"Portfolio file not found: {path}") from exc
    except OSError as exc:
        raise IOFailureError(f"Failed to read portfolio file {path}: {exc}") from exc

    portfolio = loads_portfolio(text, price_service, weight_tolerance)
    logger.info(
        "portfolio_loaded",
        portfolio=portfolio.name,
        path=path,
        symbols=len(portfolio.symbols()),
        transactions=len(portfolio.transactions()),
    )
    return portfolio
