"""Market data layer.

Provides the per-symbol price series, the quote provider contract with its
AlphaVantage implementation and CSV cache, the process-wide price service,
and ticker symbol validation.
"""

from stockfolio.market_data.alpha_vantage import AlphaVantageQuoteProvider
from stockfolio.market_data.csv_cache import CsvPriceCache
from stockfolio.market_data.price_series import PriceSeries
from stockfolio.market_data.price_service import PriceService
from stockfolio.market_data.provider import QuoteProvider
from stockfolio.market_data.symbols import SymbolValidator

__all__ = [
    "AlphaVantageQuoteProvider",
    "CsvPriceCache",
    "PriceSeries",
    "PriceService",
    "QuoteProvider",
    "SymbolValidator",
]
