"""Tests for PriceSeries: exact-date lookup, merge, ordering."""

from datetime import date
from decimal import Decimal

from stockfolio.market_data.price_series import PriceSeries


class TestLookup:
    def test_close_on_exact_date(self, point) -> None:
        series = PriceSeries("AAPL", [point(date(2023, 1, 3), "125.07")])
        assert series.close_on(date(2023, 1, 3)) == Decimal("125.07")

    def test_missing_date_returns_none(self, point) -> None:
        """No nearest-date fallback: a weekend has no price."""
        series = PriceSeries("AAPL", [point(date(2023, 1, 6), "129.62")])
        assert series.close_on(date(2023, 1, 7)) is None
        assert series.get_price(date(2023, 1, 7)) is None

    def test_add_price_overwrites(self) -> None:
        series = PriceSeries("AAPL")
        day = date(2023, 1, 3)
        series.add_price(day, Decimal("1"), Decimal("2"), Decimal("0.5"), Decimal("1.5"), 10)
        series.add_price(day, Decimal("1"), Decimal("2"), Decimal("0.5"), Decimal("1.8"), 12)

        assert len(series) == 1
        assert series.close_on(day) == Decimal("1.8")
        assert series.get_price(day).volume == 12


class TestMergeAndIteration:
    def test_merge_last_write_wins(self, point) -> None:
        current = PriceSeries("AAPL", [point(date(2023, 1, 3), "10"), point(date(2023, 1, 4), "11")])
        staged = PriceSeries("AAPL", [point(date(2023, 1, 4), "12"), point(date(2023, 1, 5), "13")])

        merged = current.merge(staged)

        assert merged == 2
        assert len(current) == 3
        assert current.close_on(date(2023, 1, 4)) == Decimal("12")

    def test_iteration_is_date_ascending(self, point) -> None:
        days = [date(2023, 1, 5), date(2023, 1, 3), date(2023, 1, 4)]
        series = PriceSeries("AAPL", [point(d, "1") for d in days])

        assert [p.date for p in series] == sorted(days)
        assert series.dates() == sorted(days)
        assert date(2023, 1, 4) in series
        assert date(2023, 1, 6) not in series
