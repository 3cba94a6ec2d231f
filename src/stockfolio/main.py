"""Entry point for the stock portfolio tracker.

Wires all components together and starts either the interactive console
menu or, when API_ENABLED=true, the JSON API under uvicorn.

Component wiring order (in _build_components):
1. AppSettings (configuration)
2. Logging setup
3. CsvPriceCache (local quote files)
4. AlphaVantageQuoteProvider (remote quotes with cache fallback)
5. PriceService (shared per-symbol price series)
6. SymbolValidator (ticker reference list)
7. PortfolioRegistry (named portfolios and analytics)
"""

from typing import Any

import uvicorn

from stockfolio.config import AppSettings
from stockfolio.logging import get_logger, setup_logging
from stockfolio.market_data.alpha_vantage import AlphaVantageQuoteProvider
from stockfolio.market_data.csv_cache import CsvPriceCache
from stockfolio.market_data.price_service import PriceService
from stockfolio.market_data.symbols import SymbolValidator
from stockfolio.registry import PortfolioRegistry


def _build_components(settings: AppSettings) -> dict[str, Any]:
    """Build all components from settings.

    Args:
        settings: Application-wide settings.

    Returns:
        Dict mapping component names to instances.
    """
    # 3. Local quote cache
    cache = CsvPriceCache(settings.quotes.cache_dir)

    # 4. Remote quote provider
    provider = AlphaVantageQuoteProvider(settings.quotes, cache)

    # 5. Shared price series cache
    price_service = PriceService(provider)

    # 6. Ticker validation
    symbol_validator = SymbolValidator(settings.portfolio.ticker_list_path)

    # 7. Registry
    registry = PortfolioRegistry(
        price_service,
        symbol_validator,
        settings=settings.portfolio,
        chart_settings=settings.chart,
    )

    return {
        "cache": cache,
        "provider": provider,
        "price_service": price_service,
        "symbol_validator": symbol_validator,
        "registry": registry,
    }


def run() -> None:
    """Run the tracker.

    When the API is enabled (API_ENABLED=true) the registry is served over
    HTTP; otherwise the console menu runs on stdin/stdout.
    """
    # 1. Load settings
    settings = AppSettings()

    # 2. Setup logging
    setup_logging(settings.log_level, settings.log_format)
    logger = get_logger("stockfolio.main")

    # 3-7. Build all components
    components = _build_components(settings)

    try:
        if settings.api.enabled:
            from stockfolio.api.app import create_api_app

            app = create_api_app(components["registry"])
            logger.info("starting_api", host=settings.api.host, port=settings.api.port)
            uvicorn.run(
                app,
                host=settings.api.host,
                port=settings.api.port,
                log_level="warning",  # Suppress uvicorn access logs
            )
        else:
            from stockfolio.console import Console

            logger.info("starting_console")
            Console(components["registry"]).run()
    finally:
        components["provider"].close()
        logger.info("stockfolio_stopped")


def main() -> None:
    """Synchronous entry point."""
    run()


if __name__ == "__main__":
    main()
