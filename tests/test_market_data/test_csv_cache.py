"""Tests for the quote CSV format and the on-disk cache."""

import os
from datetime import date
from decimal import Decimal

import pytest

from stockfolio.exceptions import QuoteFetchError
from stockfolio.market_data.csv_cache import CsvPriceCache, format_quote_csv, parse_quote_csv

SAMPLE_CSV = (
    "timestamp,open,high,low,close,volume\n"
    "2023-01-04,126.89,128.66,125.08,126.36,89113633\n"
    "\n"
    "2023-01-03,130.28,130.90,124.17,125.07,112117471.0\n"
)


class TestParseQuoteCsv:
    def test_parses_rows_and_skips_header_and_blanks(self) -> None:
        points = parse_quote_csv(SAMPLE_CSV, "AAPL")

        assert [p.date for p in points] == [date(2023, 1, 4), date(2023, 1, 3)]
        assert points[0].close == Decimal("126.36")
        assert points[0].high == Decimal("128.66")
        assert points[1].volume == 112117471

    def test_header_only_is_empty(self) -> None:
        assert parse_quote_csv("timestamp,open,high,low,close,volume\n", "AAPL") == []

    def test_short_row_raises(self) -> None:
        text = "timestamp,open,high,low,close,volume\n2023-01-03,1,2,3\n"
        with pytest.raises(QuoteFetchError, match="expected 6 fields"):
            parse_quote_csv(text, "AAPL")

    def test_bad_number_raises(self) -> None:
        text = "timestamp,open,high,low,close,volume\n2023-01-03,1,2,3,abc,5\n"
        with pytest.raises(QuoteFetchError, match="row 2"):
            parse_quote_csv(text, "AAPL")


class TestCsvPriceCache:
    def test_write_then_read(self, tmp_path, point) -> None:
        cache = CsvPriceCache(str(tmp_path / "quotes"))
        points = [point(date(2023, 1, 3), "125.07"), point(date(2023, 1, 4), "126.36")]

        cache.write("aapl", points)

        assert cache.exists("AAPL")
        assert cache.path_for("aapl").endswith(os.path.join("quotes", "AAPL.csv"))
        assert sorted(cache.read("AAPL"), key=lambda p: p.date) == points

    def test_file_is_newest_first(self, point) -> None:
        text = format_quote_csv([point(date(2023, 1, 3), "1"), point(date(2023, 1, 4), "2")])
        lines = text.splitlines()
        assert lines[0] == "timestamp,open,high,low,close,volume"
        assert lines[1].startswith("2023-01-04,")
        assert lines[2].startswith("2023-01-03,")

    def test_read_missing_file_raises(self, tmp_path) -> None:
        cache = CsvPriceCache(str(tmp_path))
        assert not cache.exists("MSFT")
        with pytest.raises(QuoteFetchError):
            cache.read("MSFT")
