"""Portfolio layer -- transaction ledger, valuation engine, and file persistence."""

from stockfolio.portfolio.ledger import TransactionLedger
from stockfolio.portfolio.persistence import (
    dumps_portfolio,
    load_portfolio,
    loads_portfolio,
    save_portfolio,
)
from stockfolio.portfolio.portfolio import Portfolio

__all__ = [
    "Portfolio",
    "TransactionLedger",
    "dumps_portfolio",
    "load_portfolio",
    "loads_portfolio",
    "save_portfolio",
]
