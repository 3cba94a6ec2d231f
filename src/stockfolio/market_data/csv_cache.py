"""On-disk CSV cache for daily quotes.

One file per symbol, ``<cache_dir>/<SYMBOL>.csv``, in the same layout the
quote provider serves: a ``timestamp,open,high,low,close,volume`` header
followed by one row per trading day. The cache is the fallback when the
network is unavailable.
"""

import csv
import io
import os
from datetime import date
from decimal import Decimal, InvalidOperation

from stockfolio.exceptions import QuoteFetchError
from stockfolio.logging import get_logger
from stockfolio.models import PricePoint

logger = get_logger(__name__)

CSV_HEADER = ["timestamp", "open", "high", "low", "close", "volume"]


def parse_quote_csv(text: str, symbol: str) -> list[PricePoint]:
    """Parse quote CSV text into price points.

    The first row is treated as the header and skipped. Blank rows are
    ignored. Volume may be written as an integer or as a float with a zero
    fraction.

    Raises:
        QuoteFetchError: If a data row does not have six valid fields.
    """
    points: list[PricePoint] = []
    reader = csv.reader(io.StringIO(text))
    for row_number, row in enumerate(reader, 1):
        if row_number == 1 or not row or not "".join(row).strip():
            continue
        if len(row) != len(CSV_HEADER):
            raise QuoteFetchError(
                f"Malformed quote row {row_number} for {symbol}: expected "
                f"{len(CSV_HEADER)} fields, got {len(row)}"
            )
        try:
            points.append(
                PricePoint(
                    date=date.fromisoformat(row[0].strip()),
                    open=Decimal(row[1].strip()),
                    high=Decimal(row[2].strip()),
                    low=Decimal(row[3].strip()),
                    close=Decimal(row[4].strip()),
                    volume=int(Decimal(row[5].strip())),
                )
            )
        except (ValueError, InvalidOperation) as exc:
            raise QuoteFetchError(
                f"Malformed quote row {row_number} for {symbol}: {exc}"
            ) from exc
    return points


def format_quote_csv(points: list[PricePoint]) -> str:
    """Render price points as quote CSV text, newest first."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for point in sorted(points, key=lambda p: p.date, reverse=True):
        writer.writerow(
            [
                point.date.isoformat(),
                str(point.open),
                str(point.high),
                str(point.low),
                str(point.close),
                str(point.volume),
            ]
        )
    return buffer.getvalue()


class CsvPriceCache:
    """Reads and writes per-symbol quote CSV files under a cache directory.

    Usage:
        cache = CsvPriceCache("data/quotes")
        cache.write("AAPL", points)
        if cache.exists("AAPL"):
            points = cache.read("AAPL")
    """

    def __init__(self, cache_dir: str) -> None:
        self._cache_dir = cache_dir

    def path_for(self, symbol: str) -> str:
        return os.path.join(self._cache_dir, f"{symbol.upper()}.csv")

    def exists(self, symbol: str) -> bool:
        return os.path.isfile(self.path_for(symbol))

    def read(self, symbol: str) -> list[PricePoint]:
        """Load cached price points for a symbol.

        Raises:
            QuoteFetchError: If the file cannot be read or is malformed.
        """
        path = self.path_for(symbol)
        try:
            with open(path, encoding="utf-8") as handle:
                text = handle.read()
        except OSError as exc:
            raise QuoteFetchError(f"Couldn't read quote cache {path}: {exc}") from exc

        points = parse_quote_csv(text, symbol)
        logger.debug("quote_cache_read", symbol=symbol, path=path, points=len(points))
        return points

    def write(self, symbol: str, points: list[PricePoint]) -> None:
        """Replace the cached file for a symbol.

        The file is written to a temporary name first and renamed into
        place, so a reader never sees a half-written cache.

        Raises:
            QuoteFetchError: If the file cannot be written.
        """
        path = self.path_for(symbol)
        tmp_path = f"{path}.tmp"
        try:
            os.makedirs(self._cache_dir, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8", newline="") as handle:
                handle.write(format_quote_csv(points))
            os.replace(tmp_path, path)
        except OSError as exc:
            raise QuoteFetchError(
                f"Unable to write quote cache for {symbol}: {exc}"
            ) from exc

        logger.debug("quote_cache_written", symbol=symbol, path=path, points=len(points))
