"""Tests for the Portfolio engine: trading, valuation, rebalancing.

All prices come from the stub provider in conftest:
  2023-01-01  AAPL 150, GOOG 100, GOOGL 90, AMZN 80
  2023-02-01  AAPL 160, GOOG 110, GOOGL 95, AMZN 85
"""

from datetime import date
from decimal import Decimal

import pytest

from stockfolio.exceptions import (
    CannotSellError,
    InvalidQuantityError,
    InvalidWeightError,
    UnknownStockError,
)
from stockfolio.models import TransactionType
from stockfolio.portfolio.portfolio import Portfolio

JAN_1 = date(2023, 1, 1)
JAN_15 = date(2023, 1, 15)
FEB_1 = date(2023, 2, 1)
MAR_1 = date(2023, 3, 1)


@pytest.fixture
def portfolio(price_service) -> Portfolio:
    return Portfolio("Retirement", price_service)


class TestTrading:
    def test_buy_then_sell_composition(self, portfolio: Portfolio) -> None:
        portfolio.buy("AAPL", 10, JAN_1)
        portfolio.buy("GOOG", 5, JAN_1)
        assert portfolio.composition_as_of(JAN_1) == {"AAPL": Decimal("10"), "GOOG": Decimal("5")}

        portfolio.sell("AAPL", 5, FEB_1)
        assert portfolio.composition_as_of(FEB_1) == {"AAPL": Decimal("5"), "GOOG": Decimal("5")}

    def test_symbol_is_normalized(self, portfolio: Portfolio) -> None:
        transaction = portfolio.buy(" aapl ", "2.5", JAN_1)
        assert transaction.symbol == "AAPL"
        assert transaction.shares == Decimal("2.5")
        assert portfolio.symbols() == ["AAPL"]

    @pytest.mark.parametrize("shares", [0, -1, "-0.5"])
    def test_non_positive_buy_rejected(self, portfolio: Portfolio, shares) -> None:
        with pytest.raises(InvalidQuantityError):
            portfolio.buy("AAPL", shares, JAN_1)
        assert portfolio.transactions() == []

    def test_non_numeric_buy_rejected(self, portfolio: Portfolio) -> None:
        with pytest.raises(InvalidQuantityError):
            portfolio.buy("AAPL", "ten", JAN_1)


class TestSellGuard:
    @pytest.mark.parametrize("shares", [10, 11, 100])
    def test_selling_all_or_more_is_rejected(self, portfolio: Portfolio, shares: int) -> None:
        portfolio.buy("AAPL", 10, JAN_1)
        with pytest.raises(CannotSellError):
            portfolio.sell("AAPL", shares, FEB_1)
        assert portfolio.composition_as_of(FEB_1) == {"AAPL": Decimal("10")}

    def test_selling_before_purchase_date_is_rejected(self, portfolio: Portfolio) -> None:
        portfolio.buy("AAPL", 10, FEB_1)
        with pytest.raises(CannotSellError):
            portfolio.sell("AAPL", 1, JAN_1)

    def test_selling_unheld_symbol_is_rejected(self, portfolio: Portfolio) -> None:
        with pytest.raises(CannotSellError):
            portfolio.sell("GOOG", 1, JAN_1)

    def test_back_dated_sell_cannot_overdraw_later_position(self, portfolio: Portfolio) -> None:
        portfolio.buy("AAPL", 10, JAN_1)
        portfolio.sell("AAPL", 8, MAR_1)

        with pytest.raises(CannotSellError, match="only 2 held on 2023-03-01"):
            portfolio.sell("AAPL", 8, FEB_1)

        assert len(portfolio.transactions("AAPL")) == 2
        assert portfolio.composition_as_of(MAR_1) == {"AAPL": Decimal("2")}

    def test_back_dated_sell_within_later_position_allowed(self, portfolio: Portfolio) -> None:
        portfolio.buy("AAPL", 10, JAN_1)
        portfolio.sell("AAPL", 5, MAR_1)

        portfolio.sell("AAPL", 3, FEB_1)

        assert portfolio.composition_as_of(FEB_1) == {"AAPL": Decimal("7")}
        assert portfolio.composition_as_of(MAR_1) == {"AAPL": Decimal("2")}

    def test_partial_sell_allowed(self, portfolio: Portfolio) -> None:
        portfolio.buy("AAPL", 10, JAN_1)
        transaction = portfolio.sell("AAPL", "9.5", FEB_1)
        assert transaction.kind == TransactionType.SELL
        assert portfolio.composition_as_of(FEB_1) == {"AAPL": Decimal("0.5")}


class TestValuation:
    def test_value_and_distribution(self, portfolio: Portfolio) -> None:
        portfolio.buy("AAPL", 10, JAN_1)
        portfolio.buy("GOOG", 5, JAN_1)

        assert portfolio.distribution_as_of(JAN_1) == {
            "AAPL": Decimal("1500"),
            "GOOG": Decimal("500"),
        }
        assert portfolio.value_as_of(JAN_1) == Decimal("2000")
        assert portfolio.value_as_of(FEB_1) == Decimal("2150")

    def test_missing_price_contributes_zero(self, portfolio: Portfolio) -> None:
        portfolio.buy("AAPL", 10, JAN_1)
        assert portfolio.distribution_as_of(JAN_15) == {"AAPL": Decimal("0")}
        assert portfolio.value_as_of(JAN_15) == Decimal("0")

    def test_empty_portfolio_is_worth_zero(self, portfolio: Portfolio) -> None:
        assert portfolio.value_as_of(JAN_1) == Decimal("0")
        assert portfolio.distribution_as_of(JAN_1) == {}


class TestRebalance:
    @pytest.fixture
    def held(self, portfolio: Portfolio) -> Portfolio:
        portfolio.buy("AAPL", 10, JAN_1)
        portfolio.buy("GOOGL", 5, JAN_1)
        portfolio.buy("AMZN", 15, JAN_1)
        return portfolio

    def test_back_dated_rebalance_cannot_overdraw_later_position(self, held: Portfolio) -> None:
        """AAPL target 8.4 means selling 1.6 on 01-01, but only 1 is left after 02-01."""
        held.sell("AAPL", 9, FEB_1)

        with pytest.raises(CannotSellError):
            held.rebalance(JAN_1, {"AAPL": "0.4", "GOOGL": "0.3", "AMZN": "0.3"})

        assert len(held.transactions()) == 4

    def test_quantities_match_target_weights(self, held: Portfolio) -> None:
        """Total 1500 + 450 + 1200 = 3150."""
        weights = {"AAPL": "0.4", "GOOGL": "0.3", "AMZN": "0.3"}
        total = held.value_as_of(JAN_1)

        held.rebalance(JAN_1, weights)

        composition = held.composition_as_of(JAN_1)
        closes = {"AAPL": Decimal("150"), "GOOGL": Decimal("90"), "AMZN": Decimal("80")}
        for symbol, weight in weights.items():
            expected = total * Decimal(weight) / closes[symbol]
            assert abs(composition[symbol] - expected) < Decimal("0.001")
        assert composition["AAPL"] == Decimal("8.4")
        assert composition["GOOGL"] == Decimal("10.5")
        assert composition["AMZN"] == Decimal("11.8125")

    def test_distribution_matches_weights_after_rebalance(self, held: Portfolio) -> None:
        weights = {"AAPL": Decimal("0.5"), "GOOGL": Decimal("0.25"), "AMZN": Decimal("0.25")}
        held.rebalance(JAN_1, weights)

        total = held.value_as_of(JAN_1)
        distribution = held.distribution_as_of(JAN_1)
        for symbol, weight in weights.items():
            assert abs(distribution[symbol] / total - weight) < Decimal("0.001")

    def test_returns_emitted_transactions(self, held: Portfolio) -> None:
        emitted = held.rebalance(JAN_1, {"AAPL": "0.4", "GOOGL": "0.3", "AMZN": "0.3"})

        assert [(t.symbol, t.kind) for t in emitted] == [
            ("AAPL", TransactionType.SELL),
            ("GOOGL", TransactionType.BUY),
            ("AMZN", TransactionType.SELL),
        ]
        assert emitted[0].shares == Decimal("1.6")
        assert all(t.date == JAN_1 for t in emitted)

    def test_weights_not_summing_to_one_leave_ledger_unchanged(self, held: Portfolio) -> None:
        before = held.composition_as_of(JAN_1)
        count = len(held.transactions())

        with pytest.raises(InvalidWeightError):
            held.rebalance(JAN_1, {"AAPL": "0.4", "GOOGL": "0.2", "AMZN": "0.2"})

        assert held.composition_as_of(JAN_1) == before
        assert len(held.transactions()) == count

    def test_negative_weight_rejected(self, held: Portfolio) -> None:
        with pytest.raises(InvalidWeightError):
            held.rebalance(JAN_1, {"AAPL": "1.2", "GOOGL": "-0.2"})

    def test_missing_price_leaves_ledger_unchanged(self, held: Portfolio) -> None:
        count = len(held.transactions())
        with pytest.raises(UnknownStockError):
            held.rebalance(JAN_15, {"AAPL": "0.5", "AMZN": "0.5"})
        assert len(held.transactions()) == count

    def test_unnamed_holdings_are_untouched(self, held: Portfolio) -> None:
        held.rebalance(JAN_1, {"AAPL": "0.5", "GOOGL": "0.5"})
        assert held.composition_as_of(JAN_1)["AMZN"] == Decimal("15")
