"""Portfolio valuation and rebalancing engine.

Reconstructs composition, value and distribution at any date from the
transaction ledger and the price service, and rebalances toward target
weights by appending synthetic transactions.

Every mutating operation validates first and only then touches the ledger,
so a failed call leaves the portfolio exactly as it was.
"""

from collections.abc import Mapping
from datetime import date
from decimal import Decimal

from stockfolio.exceptions import (
    CannotSellError,
    InvalidQuantityError,
    InvalidWeightError,
    UnknownStockError,
)
from stockfolio.logging import get_logger
from stockfolio.market_data.price_service import PriceService
from stockfolio.models import ZERO, Transaction, to_decimal
from stockfolio.portfolio.ledger import TransactionLedger

logger = get_logger(__name__)

DEFAULT_WEIGHT_TOLERANCE = Decimal("1e-9")


def normalize_symbol(symbol: str) -> str:
    return symbol.strip().upper()


class Portfolio:
    """A named collection of holdings backed by an append-only ledger.

    Args:
        name: Portfolio name (unique within a registry).
        price_service: Source of closing prices for valuation.
        ledger: Existing ledger to adopt; a fresh one is created if omitted.
        weight_tolerance: Max allowed |sum(weights) - 1| for rebalance.
    """

    def __init__(
        self,
        name: str,
        price_service: PriceService,
        ledger: TransactionLedger | None = None,
        weight_tolerance: Decimal = DEFAULT_WEIGHT_TOLERANCE,
    ) -> None:
        self._name = name
        self._price_service = price_service
        self._ledger = ledger if ledger is not None else TransactionLedger()
        self._weight_tolerance = weight_tolerance

    @property
    def name(self) -> str:
        return self._name

    def transactions(self, symbol: str | None = None) -> list[Transaction]:
        """Copy of the ledger entries, optionally for one symbol."""
        if symbol is not None:
            symbol = normalize_symbol(symbol)
        return self._ledger.transactions(symbol)

    def symbols(self) -> list[str]:
        return self._ledger.symbols()

    # ──────────────────────────────────────────────
    # Trading
    # ──────────────────────────────────────────────

    def buy(self, symbol: str, shares: Decimal | int | float | str, day: date) -> Transaction:
        """Record a purchase.

        Raises:
            InvalidQuantityError: If shares is not positive.
        """
        symbol = normalize_symbol(symbol)
        quantity = self._positive_quantity(shares)

        transaction = self._ledger.record_buy(symbol, quantity, day)
        logger.info(
            "portfolio_bought",
            portfolio=self._name,
            symbol=symbol,
            shares=str(quantity),
            date=day.isoformat(),
        )
        return transaction

    def sell(self, symbol: str, shares: Decimal | int | float | str, day: date) -> Transaction:
        """Record a sale.

        Selling the exact number of shares held is rejected as well as
        selling more: the position must stay strictly positive.

        Raises:
            InvalidQuantityError: If shares is not positive.
            CannotSellError: If shares >= the quantity held on ``day``, or if
                the sale would leave a later-dated position below zero.
        """
        symbol = normalize_symbol(symbol)
        quantity = self._positive_quantity(shares)

        held = self._ledger.shares_as_of(symbol, day)
        if held <= quantity:
            self._reject_sell(symbol, quantity, held, day)
            raise CannotSellError(
                f"Cannot sell {quantity} shares of {symbol} on {day}: "
                f"only {held} held. Buy stocks first."
            )

        self._check_later_positions(symbol, quantity, day)

        transaction = self._ledger.record_sell(symbol, quantity, day)
        logger.info(
            "portfolio_sold",
            portfolio=self._name,
            symbol=symbol,
            shares=str(quantity),
            date=day.isoformat(),
        )
        return transaction

    # ──────────────────────────────────────────────
    # Valuation
    # ──────────────────────────────────────────────

    def composition_as_of(self, day: date) -> dict[str, Decimal]:
        """Return symbol -> shares held on ``day`` (positive positions only)."""
        return self._ledger.composition_as_of(day)

    def value_as_of(self, day: date) -> Decimal:
        """Total market value on ``day``.

        A held symbol without a close on that exact date contributes 0.
        """
        return sum(self.distribution_as_of(day).values(), ZERO)

    def distribution_as_of(self, day: date) -> dict[str, Decimal]:
        """Return symbol -> market value (shares * close) on ``day``.

        Uses the same missing-price policy as value_as_of: no close means 0.
        """
        distribution: dict[str, Decimal] = {}
        for symbol, quantity in self._ledger.composition_as_of(day).items():
            close = self._price_service.close_price(symbol, day)
            if close is None:
                logger.debug(
                    "price_missing_valued_at_zero",
                    portfolio=self._name,
                    symbol=symbol,
                    date=day.isoformat(),
                )
                distribution[symbol] = ZERO
                continue
            distribution[symbol] = quantity * close
        return distribution

    # ──────────────────────────────────────────────
    # Rebalancing
    # ──────────────────────────────────────────────

    def rebalance(
        self,
        day: date,
        target_weights: Mapping[str, Decimal | int | float | str],
    ) -> list[Transaction]:
        """Move holdings toward target weights on ``day``.

        For every symbol named in ``target_weights`` the target quantity is
        ``total_value * weight / close``; the difference to the current
        holding is recorded as a BUY or SELL dated ``day``. Symbols held but
        not named are left alone. Synthetic sells bypass the strict same-day
        guard but may not overdraw a later-dated position.

        Returns:
            The transactions appended, in weight order.

        Raises:
            InvalidWeightError: If weights are negative or do not sum to 1.
            UnknownStockError: If a named symbol has no close on ``day``.
            CannotSellError: If a synthetic sell would overdraw a later position.
        """
        weights = self._validate_weights(target_weights)
        total_value = self.value_as_of(day)

        # Compute every target before the first append so a missing price
        # cannot leave a half-rebalanced ledger.
        targets: dict[str, Decimal] = {}
        for symbol, weight in weights.items():
            close = self._price_service.close_price(symbol, day)
            if close is None or close == ZERO:
                raise UnknownStockError(
                    f"Price for stock {symbol} is not available on {day}"
                )
            targets[symbol] = total_value * weight / close

        current = self._ledger.composition_as_of(day)
        orders: list[tuple[str, Decimal]] = []
        for symbol, target in targets.items():
            delta = target - current.get(symbol, ZERO)
            if delta < ZERO:
                self._check_later_positions(symbol, -delta, day)
            if delta != ZERO:
                orders.append((symbol, delta))

        emitted: list[Transaction] = []
        for symbol, delta in orders:
            if delta > ZERO:
                emitted.append(self._ledger.record_buy(symbol, delta, day))
            else:
                emitted.append(self._ledger.record_sell(symbol, -delta, day))

        logger.info(
            "portfolio_rebalanced",
            portfolio=self._name,
            date=day.isoformat(),
            total_value=str(total_value),
            symbols=len(weights),
            transactions=len(emitted),
        )
        return emitted

    def _validate_weights(
        self, target_weights: Mapping[str, Decimal | int | float | str]
    ) -> dict[str, Decimal]:
        weights: dict[str, Decimal] = {}
        for symbol, raw in target_weights.items():
            try:
                weight = to_decimal(raw)
            except InvalidQuantityError as exc:
                raise InvalidWeightError(f"Weight for {symbol} is not a number") from exc
            if weight < ZERO:
                raise InvalidWeightError(f"Weight for {symbol} is negative: {weight}")
            symbol = normalize_symbol(symbol)
            weights[symbol] = weights.get(symbol, ZERO) + weight

        total = sum(weights.values(), ZERO)
        if abs(total - 1) > self._weight_tolerance:
            raise InvalidWeightError(f"Weights must sum to 1 (100%), got {total}")
        return weights

    def _check_later_positions(self, symbol: str, quantity: Decimal, day: date) -> None:
        """A sale on ``day`` also reduces every later position; none may go negative."""
        for later in sorted({t.date for t in self._ledger.transactions(symbol) if t.date > day}):
            held_later = self._ledger.shares_as_of(symbol, later)
            if held_later - quantity < ZERO:
                self._reject_sell(symbol, quantity, held_later, later)
                raise CannotSellError(
                    f"Cannot sell {quantity} shares of {symbol} on {day}: "
                    f"only {held_later} held on {later}."
                )

    def _reject_sell(self, symbol: str, quantity: Decimal, held: Decimal, day: date) -> None:
        logger.warning(
            "portfolio_sell_rejected",
            portfolio=self._name,
            symbol=symbol,
            requested=str(quantity),
            held=str(held),
            date=day.isoformat(),
        )

    @staticmethod
    def _positive_quantity(shares: Decimal | int | float | str) -> Decimal:
        quantity = to_decimal(shares)
        if quantity <= ZERO:
            raise InvalidQuantityError(f"Quantity must be greater than zero, got {quantity}")
        return quantity
