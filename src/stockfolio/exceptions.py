"""Custom exceptions for the stock portfolio tracker.

Every domain failure raised by the engine, the registry and the quote
provider lives here. Each class carries a short ``kind`` so front ends can
report the error category without matching on class names.
"""


class StockfolioError(Exception):
    """Base exception for all stockfolio errors."""

    kind = "error"


class UnknownStockError(StockfolioError):
    """Raised when a symbol has no price data at all, or is not a listed ticker."""

    kind = "unknown_stock"


class InvalidPortfolioError(StockfolioError):
    """Raised on a portfolio name collision or a lookup miss."""

    kind = "invalid_portfolio"


class UnknownPortfolioError(InvalidPortfolioError):
    """Raised when no portfolio is registered under the requested name."""


class CannotSellError(StockfolioError):
    """Raised when a sell would remove at least as many shares as are held."""

    kind = "cannot_sell"


class InvalidWeightError(StockfolioError):
    """Raised when rebalance target weights do not sum to 1."""

    kind = "invalid_weight"


class InvalidQuantityError(StockfolioError):
    """Raised for a non-positive share count or moving-average window."""

    kind = "invalid_quantity"


class InvalidDateError(StockfolioError):
    """Raised when a date cannot be parsed or has no price data where one is required."""

    kind = "invalid_date"


class InsufficientDataError(StockfolioError):
    """Raised when a moving-average window contains no trading days."""

    kind = "insufficient_data"


class MalformedFileError(StockfolioError):
    """Raised when a persisted portfolio file does not follow the expected layout."""

    kind = "malformed_file"

    def __init__(self, message: str, line_number: int | None = None) -> None:
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class IOFailureError(StockfolioError):
    """Raised when the network or the disk fails underneath an operation."""

    kind = "io_failure"


class QuoteFetchError(IOFailureError):
    """Raised when quotes cannot be fetched and no cached copy is available."""


class PortfolioFileNotFoundError(IOFailureError):
    """Raised when a portfolio file to load does not exist."""
