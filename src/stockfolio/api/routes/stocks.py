"""JSON endpoints for per-stock analytics."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from stockfolio.api.helpers import InvalidRequestError, parse_date
from stockfolio.registry import PortfolioRegistry

# Async like the portfolio routes: quote fetches run inline on the event loop.
router = APIRouter()


def _registry(request: Request) -> PortfolioRegistry:
    return request.app.state.registry


def _parse_window(raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise InvalidRequestError(f"window must be an integer, got {raw!r}") from None


@router.get("/{symbol}/moving-average")
async def moving_average(
    request: Request, symbol: str, date: str = "", window: str = "30"
) -> JSONResponse:
    day = parse_date(date)
    days = _parse_window(window)
    registry = _registry(request)
    average = registry.moving_average(symbol, day, days)
    return JSONResponse(content={
        "symbol": symbol.upper(),
        "date": day.isoformat(),
        "window": days,
        "moving_average": str(average),
        "crossover": registry.is_crossover(symbol, day, days),
    })


@router.get("/{symbol}/crossovers")
async def crossovers(
    request: Request, symbol: str, start: str = "", end: str = "", window: str = "30"
) -> JSONResponse:
    first = parse_date(start, "start")
    last = parse_date(end, "end")
    days = _parse_window(window)
    found = _registry(request).crossovers(symbol, first, last, days)
    return JSONResponse(content={
        "symbol": symbol.upper(),
        "window": days,
        "crossovers": [day.isoformat() for day in found],
    })


@router.get("/{symbol}/gain-loss")
async def gain_loss(request: Request, symbol: str, start: str = "", end: str = "") -> JSONResponse:
    first = parse_date(start, "start")
    last = parse_date(end, "end")
    change = _registry(request).gain_or_loss(symbol, first, last)
    return JSONResponse(content={
        "symbol": symbol.upper(),
        "start": first.isoformat(),
        "end": last.isoformat(),
        "gain_or_loss": str(change),
    })
