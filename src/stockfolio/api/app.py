"""FastAPI application factory for the portfolio JSON API."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from stockfolio.api.routes import portfolios, stocks
from stockfolio.exceptions import (
    IOFailureError,
    PortfolioFileNotFoundError,
    StockfolioError,
    UnknownPortfolioError,
)
from stockfolio.logging import get_logger
from stockfolio.registry import PortfolioRegistry

logger = get_logger(__name__)


def status_for(error: StockfolioError) -> int:
    """HTTP status for a domain error."""
    if isinstance(error, (UnknownPortfolioError, PortfolioFileNotFoundError)):
        return 404
    if isinstance(error, IOFailureError):
        return 502
    return 400


async def _handle_domain_error(request: Request, exc: StockfolioError) -> JSONResponse:
    status_code = status_for(exc)
    logger.info(
        "api_request_failed",
        path=request.url.path,
        error=exc.kind,
        detail=str(exc),
        status=status_code,
    )
    return JSONResponse(
        content={"error": exc.kind, "detail": str(exc)},
        status_code=status_code,
    )


def create_api_app(registry: PortfolioRegistry) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        registry: Portfolio registry the routes operate on.

    Returns:
        Configured FastAPI application with the portfolio and stock routers.
    """
    app = FastAPI(title="Stock Portfolio Tracker")

    app.state.registry = registry
    app.add_exception_handler(StockfolioError, _handle_domain_error)

    app.include_router(portfolios.router, prefix="/api/portfolios")
    app.include_router(stocks.router, prefix="/api/stocks")

    return app
