"""Interactive text menu over the portfolio registry.

Reads answers line by line from an input stream and writes prompts and
results to an output stream, so the whole dialogue can be driven from a
test with two StringIO objects. Every domain error is reported as
``Error: <message>`` and the menu is shown again.
"""

import sys
from collections.abc import Callable
from datetime import date
from decimal import Decimal
from typing import TextIO

from stockfolio.exceptions import InvalidDateError, InvalidQuantityError, StockfolioError
from stockfolio.logging import get_logger
from stockfolio.registry import PortfolioRegistry

logger = get_logger(__name__)

MENU = """\
1. Examine the gain or loss of a stock over a specified period.
2. Examine the x-day moving average of a stock for a specified date and value of x.
3. Determine x-day crossovers for a specified stock over a date range and value of x.
4. Find the value of a portfolio on a specific date.
5. Buy a stock and add it to a portfolio on a specific date.
6. Create a new portfolio.
7. Sell a stock from a portfolio on a specific date.
8. Get the composition of a portfolio.
9. Get the distribution of a portfolio.
10. Save an existing portfolio.
11. Retrieve an existing portfolio.
12. Rebalance a portfolio.
13. Create a graph of performance over time of a portfolio.
0. Exit.
"""


class _EndOfInput(Exception):
    """The input stream is exhausted."""


class Console:
    """Menu-driven front end.

    Args:
        registry: Portfolio registry every action runs against.
        stdin: Source of user answers, one per line.
        stdout: Destination for prompts and results.
    """

    def __init__(
        self,
        registry: PortfolioRegistry,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
    ) -> None:
        self._registry = registry
        self._in = stdin or sys.stdin
        self._out = stdout or sys.stdout
        self._actions: dict[str, Callable[[], None]] = {
            "1": self._gain_or_loss,
            "2": self._moving_average,
            "3": self._crossovers,
            "4": self._value,
            "5": self._buy,
            "6": self._create,
            "7": self._sell,
            "8": self._composition,
            "9": self._distribution,
            "10": self._save,
            "11": self._load,
            "12": self._rebalance,
            "13": self._chart,
        }

    def run(self) -> None:
        """Show the menu until the user picks 0 or input runs out."""
        logger.debug("console_started")
        while True:
            self._write(MENU)
            try:
                choice = self._ask("Enter your choice: ").strip()
                if choice == "0":
                    break
                action = self._actions.get(choice)
                if action is None:
                    self._write("Error: Invalid choice. Please try again.\n")
                    continue
                self._dispatch(action)
            except _EndOfInput:
                break
        logger.debug("console_stopped")

    def _dispatch(self, action: Callable[[], None]) -> None:
        try:
            action()
        except StockfolioError as exc:
            logger.debug("console_action_failed", error=exc.kind, detail=str(exc))
            self._write(f"Error: {exc}\n")

    # ──────────────────────────────────────────────
    # Input helpers
    # ──────────────────────────────────────────────

    def _write(self, text: str) -> None:
        self._out.write(text)
        self._out.flush()

    def _ask(self, prompt: str) -> str:
        self._write(prompt)
        line = self._in.readline()
        if not line:
            raise _EndOfInput
        return line.rstrip("\r\n")

    def _ask_date(self, label: str) -> date:
        raw = self._ask(f"Enter {label} date (yyyy-mm-dd): ").strip()
        try:
            return date.fromisoformat(raw)
        except ValueError:
            raise InvalidDateError(f"Invalid date {raw!r}, expected yyyy-mm-dd") from None

    def _ask_int(self, prompt: str) -> int:
        raw = self._ask(prompt).strip()
        try:
            return int(raw)
        except ValueError:
            raise InvalidQuantityError(f"Expected a whole number, got {raw!r}") from None

    def _ask_symbol(self) -> str:
        return self._ask("Enter stock ticker symbol: ").strip().upper()

    def _ask_portfolio(self) -> str:
        return self._ask("Enter portfolio name: ").strip()

    # ──────────────────────────────────────────────
    # Stock analytics
    # ──────────────────────────────────────────────

    def _gain_or_loss(self) -> None:
        symbol = self._ask_symbol()
        start = self._ask_date("start")
        end = self._ask_date("end")
        change = self._registry.gain_or_loss(symbol, start, end)
        self._write(f"Gain/loss of {symbol} from {start} to {end}: {change:.2f}\n")

    def _moving_average(self) -> None:
        symbol = self._ask_symbol()
        day = self._ask_date("the")
        window = self._ask_int("Enter number of days: ")
        average = self._registry.moving_average(symbol, day, window)
        self._write(f"{window}-day moving average of {symbol} on {day}: {average:.2f}\n")

    def _crossovers(self) -> None:
        symbol = self._ask_symbol()
        start = self._ask_date("start")
        end = self._ask_date("end")
        window = self._ask_int("Enter number of days: ")
        found = self._registry.crossovers(symbol, start, end, window)
        if not found:
            self._write(f"No {window}-day crossovers for {symbol} between {start} and {end}.\n")
            return
        for day in found:
            self._write(f"Crossover on {day}\n")

    # ──────────────────────────────────────────────
    # Portfolio actions
    # ──────────────────────────────────────────────

    def _create(self) -> None:
        portfolio = self._registry.create_portfolio(self._ask_portfolio())
        self._write(f"Portfolio {portfolio.name} created.\n")

    def _buy(self) -> None:
        name = self._ask_portfolio()
        self._registry.get_portfolio(name)
        symbol = self._ask_symbol()
        shares = self._ask("Enter quantity: ").strip()
        day = self._ask_date("purchase")
        transaction = self._registry.buy(name, symbol, shares, day)
        self._write(f"Bought {transaction.shares} shares of {symbol} on {day}.\n")

    def _sell(self) -> None:
        name = self._ask_portfolio()
        self._registry.get_portfolio(name)
        symbol = self._ask_symbol()
        shares = self._ask("Enter quantity: ").strip()
        day = self._ask_date("sale")
        transaction = self._registry.sell(name, symbol, shares, day)
        self._write(f"Sold {transaction.shares} shares of {symbol} on {day}.\n")

    def _value(self) -> None:
        name = self._ask_portfolio()
        day = self._ask_date("the")
        total = self._registry.value(name, day)
        self._write(f"Value of portfolio {name} on {day}: {total:.2f}\n")

    def _composition(self) -> None:
        name = self._ask_portfolio()
        day = self._ask_date("the")
        holdings = self._registry.composition(name, day)
        self._write_table(f"Composition of portfolio {name} on {day}:", holdings, "shares")

    def _distribution(self) -> None:
        name = self._ask_portfolio()
        day = self._ask_date("the")
        values = self._registry.distribution(name, day)
        self._write_table(
            f"Distribution of portfolio {name} on {day}:",
            {symbol: value.quantize(Decimal("0.01")) for symbol, value in values.items()},
            "",
        )

    def _write_table(self, title: str, rows: dict[str, Decimal], unit: str) -> None:
        self._write(title + "\n")
        if not rows:
            self._write("  (empty)\n")
            return
        suffix = f" {unit}" if unit else ""
        for symbol in sorted(rows):
            self._write(f"  {symbol}: {rows[symbol]}{suffix}\n")

    def _save(self) -> None:
        name = self._ask_portfolio()
        path = self._registry.save_portfolio(name)
        self._write(f"Portfolio {name} saved to {path}.\n")

    def _load(self) -> None:
        raw = self._ask("Enter portfolio name or file path: ").strip()
        portfolio = self._registry.load_portfolio(raw)
        self._write(f"Portfolio {portfolio.name} retrieved successfully.\n")

    def _rebalance(self) -> None:
        name = self._ask_portfolio()
        self._registry.get_portfolio(name)
        day = self._ask_date("rebalance")

        weights: dict[str, str] = {}
        self._write("Enter a weight per stock; an empty symbol finishes the list.\n")
        while True:
            symbol = self._ask_symbol()
            if not symbol:
                break
            weights[symbol] = self._ask(
                "Enter weight for this stock (as a decimal, e.g. 0.25 for 25%): "
            ).strip()

        emitted = self._registry.rebalance(name, day, weights)
        self._write(f"Portfolio {name} rebalanced with {len(emitted)} transaction(s).\n")

    def _chart(self) -> None:
        name = self._ask_portfolio()
        start = self._ask_date("start")
        end = self._ask_date("end")
        chart = self._registry.performance_chart(name, start, end)
        self._write(chart.render() + "\n")
