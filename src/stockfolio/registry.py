"""Named portfolio registry: the single entry point front ends talk to.

Owns the portfolios of one process together with the shared PriceService
and SymbolValidator, resolves names to portfolios, and routes per-stock
analytics to the price series they need.
"""

import os
from datetime import date
from decimal import Decimal

from stockfolio.analytics.chart import PerformanceChart, build_performance_chart
from stockfolio.analytics.indicators import (
    find_crossovers,
    gain_or_loss,
    is_crossover,
    moving_average,
)
from stockfolio.config import ChartSettings, PortfolioSettings
from stockfolio.exceptions import InvalidPortfolioError, UnknownPortfolioError, UnknownStockError
from stockfolio.logging import get_logger
from stockfolio.market_data.price_service import PriceService
from stockfolio.market_data.symbols import SymbolValidator
from stockfolio.models import Transaction
from stockfolio.portfolio.persistence import load_portfolio, save_portfolio
from stockfolio.portfolio.portfolio import Portfolio, normalize_symbol

logger = get_logger(__name__)

PORTFOLIO_FILE_SUFFIX = ".txt"


class PortfolioRegistry:
    """Portfolios keyed by name, sharing one price service.

    Args:
        price_service: Shared symbol -> price series cache.
        symbol_validator: Reference list checked before every buy.
        settings: Storage directory and rebalance tolerance.
        chart_settings: Scale preferences for performance charts.
    """

    def __init__(
        self,
        price_service: PriceService,
        symbol_validator: SymbolValidator,
        settings: PortfolioSettings | None = None,
        chart_settings: ChartSettings | None = None,
    ) -> None:
        self._price_service = price_service
        self._symbol_validator = symbol_validator
        self._settings = settings or PortfolioSettings()
        self._chart_settings = chart_settings or ChartSettings()
        self._portfolios: dict[str, Portfolio] = {}

    @property
    def price_service(self) -> PriceService:
        return self._price_service

    # ──────────────────────────────────────────────
    # Registry
    # ──────────────────────────────────────────────

    def create_portfolio(self, name: str) -> Portfolio:
        """Register a new empty portfolio.

        Raises:
            InvalidPortfolioError: If the name is empty or already taken.
        """
        name = name.strip()
        if not name:
            raise InvalidPortfolioError("Portfolio name must not be empty")
        if name in self._portfolios:
            raise InvalidPortfolioError(f"Portfolio with name {name} already exists")

        portfolio = Portfolio(
            name, self._price_service, weight_tolerance=self._settings.weight_tolerance
        )
        self._portfolios[name] = portfolio
        logger.info("portfolio_created", portfolio=name)
        return portfolio

    def get_portfolio(self, name: str) -> Portfolio:
        """Look up a portfolio by name.

        Raises:
            UnknownPortfolioError: If no portfolio has that name.
        """
        portfolio = self._portfolios.get(name.strip())
        if portfolio is None:
            raise UnknownPortfolioError(f"Portfolio with name {name} does not exist")
        return portfolio

    def has_portfolio(self, name: str) -> bool:
        return name.strip() in self._portfolios

    def portfolio_names(self) -> list[str]:
        return sorted(self._portfolios)

    # ──────────────────────────────────────────────
    # Portfolio operations
    # ──────────────────────────────────────────────

    def buy(self, name: str, symbol: str, shares: Decimal | int | str, day: date) -> Transaction:
        """Buy shares of a listed ticker into a named portfolio.

        The symbol's price history is loaded before the purchase is recorded
        so that an unreachable or empty quote source fails the buy.

        Raises:
            UnknownPortfolioError: If the portfolio does not exist.
            UnknownStockError: If the symbol is not a listed ticker or has no data.
        """
        portfolio = self.get_portfolio(name)
        symbol = normalize_symbol(symbol)
        if not self._symbol_validator.is_valid_symbol(symbol):
            raise UnknownStockError(f"Invalid stock symbol: {symbol}")
        self._price_service.series(symbol)
        return portfolio.buy(symbol, shares, day)

    def sell(self, name: str, symbol: str, shares: Decimal | int | str, day: date) -> Transaction:
        return self.get_portfolio(name).sell(symbol, shares, day)

    def value(self, name: str, day: date) -> Decimal:
        return self.get_portfolio(name).value_as_of(day)

    def composition(self, name: str, day: date) -> dict[str, Decimal]:
        return self.get_portfolio(name).composition_as_of(day)

    def distribution(self, name: str, day: date) -> dict[str, Decimal]:
        return self.get_portfolio(name).distribution_as_of(day)

    def rebalance(
        self, name: str, day: date, weights: dict[str, Decimal | int | str]
    ) -> list[Transaction]:
        return self.get_portfolio(name).rebalance(day, weights)

    # ──────────────────────────────────────────────
    # Persistence
    # ──────────────────────────────────────────────

    def default_path(self, name: str) -> str:
        return os.path.join(self._settings.storage_dir, f"{name}{PORTFOLIO_FILE_SUFFIX}")

    def save_portfolio(self, name: str, path: str | None = None) -> str:
        """Save a portfolio and return the path written."""
        portfolio = self.get_portfolio(name)
        target = path or self.default_path(portfolio.name)
        save_portfolio(portfolio, target)
        return target

    def load_portfolio(self, name_or_path: str) -> Portfolio:
        """Load a portfolio file and register it under the name it declares.

        A bare name resolves to ``<storage_dir>/<name>.txt``; anything with a
        directory part or the ``.txt`` suffix is used as a path. Nothing is
        registered when loading fails.

        Raises:
            PortfolioFileNotFoundError: If the file does not exist.
            MalformedFileError: If the file content is malformed.
            InvalidPortfolioError: If the declared name is already registered.
        """
        path = self._resolve_path(name_or_path)
        portfolio = load_portfolio(path, self._price_service, self._settings.weight_tolerance)
        if portfolio.name in self._portfolios:
            raise InvalidPortfolioError(f"Portfolio with name {portfolio.name} already exists")
        self._portfolios[portfolio.name] = portfolio
        return portfolio

    def _resolve_path(self, name_or_path: str) -> str:
        name_or_path = name_or_path.strip()
        if os.path.dirname(name_or_path) or name_or_path.endswith(PORTFOLIO_FILE_SUFFIX):
            return name_or_path
        return self.default_path(name_or_path)

    # ──────────────────────────────────────────────
    # Analytics
    # ──────────────────────────────────────────────

    def gain_or_loss(self, symbol: str, start: date, end: date) -> Decimal:
        return gain_or_loss(self._price_service.series(symbol), start, end)

    def moving_average(self, symbol: str, day: date, window: int) -> Decimal:
        return moving_average(self._price_service.series(symbol), day, window)

    def is_crossover(self, symbol: str, day: date, window: int) -> bool:
        return is_crossover(self._price_service.series(symbol), day, window)

    def crossovers(self, symbol: str, start: date, end: date, window: int) -> list[date]:
        return find_crossovers(self._price_service.series(symbol), start, end, window)

    def performance_chart(self, name: str, start: date, end: date) -> PerformanceChart:
        return build_performance_chart(self.get_portfolio(name), start, end, self._chart_settings)
