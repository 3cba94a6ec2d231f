"""Shared test fixtures for the stock portfolio tracker.

Quotes come from an in-memory stub provider so no test touches the network.
All prices are Decimal (project convention).
"""

from collections.abc import Callable
from datetime import date
from decimal import Decimal

import pytest

from stockfolio.config import ChartSettings, PortfolioSettings
from stockfolio.market_data.price_service import PriceService
from stockfolio.market_data.provider import QuoteProvider
from stockfolio.market_data.symbols import SymbolValidator
from stockfolio.models import PricePoint
from stockfolio.registry import PortfolioRegistry

JAN_1 = date(2023, 1, 1)
FEB_1 = date(2023, 2, 1)


def make_point(day: date, close: str | Decimal, volume: int = 1000) -> PricePoint:
    """Price point whose open/high/low all equal the close."""
    price = Decimal(close)
    return PricePoint(date=day, open=price, high=price, low=price, close=price, volume=volume)


class StubQuoteProvider(QuoteProvider):
    """Serves fixed price points per symbol and records every fetch."""

    def __init__(
        self,
        data: dict[str, list[PricePoint]],
        errors: dict[str, Exception] | None = None,
    ) -> None:
        self.data = data
        self.errors = errors or {}
        self.calls: list[str] = []

    def fetch(self, symbol: str) -> list[PricePoint]:
        self.calls.append(symbol)
        if symbol in self.errors:
            raise self.errors[symbol]
        return list(self.data.get(symbol, []))


@pytest.fixture
def point() -> Callable[..., PricePoint]:
    """Factory for PricePoint with a single price."""
    return make_point


@pytest.fixture
def quote_data() -> dict[str, list[PricePoint]]:
    """Closing prices on 2023-01-01 and 2023-02-01 for four tickers."""
    return {
        "AAPL": [make_point(JAN_1, "150"), make_point(FEB_1, "160")],
        "GOOG": [make_point(JAN_1, "100"), make_point(FEB_1, "110")],
        "GOOGL": [make_point(JAN_1, "90"), make_point(FEB_1, "95")],
        "AMZN": [make_point(JAN_1, "80"), make_point(FEB_1, "85")],
    }


@pytest.fixture
def stub_provider(quote_data: dict[str, list[PricePoint]]) -> StubQuoteProvider:
    return StubQuoteProvider(quote_data)


@pytest.fixture
def price_service(stub_provider: StubQuoteProvider) -> PriceService:
    return PriceService(stub_provider)


@pytest.fixture
def ticker_file(tmp_path) -> str:
    """Reference ticker list with the fixture symbols plus one without data."""
    path = tmp_path / "tickerSymbols.csv"
    path.write_text(
        "AAPL,Apple Inc\nGOOG,Alphabet Inc C\nGOOGL,Alphabet Inc A\n"
        "AMZN,Amazon.com Inc\nNODATA,Listed Without Quotes\n",
        encoding="utf-8",
    )
    return str(path)


@pytest.fixture
def portfolio_settings(tmp_path, ticker_file: str) -> PortfolioSettings:
    return PortfolioSettings(
        storage_dir=str(tmp_path / "portfolios"),
        ticker_list_path=ticker_file,
    )


@pytest.fixture
def registry(
    price_service: PriceService,
    ticker_file: str,
    portfolio_settings: PortfolioSettings,
) -> PortfolioRegistry:
    """Registry over the stub provider with storage under tmp_path."""
    return PortfolioRegistry(
        price_service,
        SymbolValidator(ticker_file),
        settings=portfolio_settings,
        chart_settings=ChartSettings(),
    )
