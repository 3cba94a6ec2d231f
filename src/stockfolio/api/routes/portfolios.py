"""JSON endpoints for portfolio management, valuation and persistence."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from stockfolio.api.helpers import (
    InvalidRequestError,
    decimal_to_str,
    parse_date,
    read_body,
    transaction_to_dict,
)
from stockfolio.registry import PortfolioRegistry

# Handlers are async and call the registry inline on the event loop, so
# requests are served one at a time; the registry is not thread-safe.
router = APIRouter()


def _registry(request: Request) -> PortfolioRegistry:
    return request.app.state.registry


@router.post("")
async def create_portfolio(request: Request) -> JSONResponse:
    """Create an empty portfolio. Body: {name}."""
    body = await read_body(request, "name")
    portfolio = _registry(request).create_portfolio(str(body["name"]))
    return JSONResponse(content={"name": portfolio.name}, status_code=201)


@router.get("")
async def list_portfolios(request: Request) -> JSONResponse:
    return JSONResponse(content=_registry(request).portfolio_names())


@router.post("/load")
async def load_portfolio(request: Request) -> JSONResponse:
    """Load a saved portfolio file. Body: {name} (a name or a file path)."""
    body = await read_body(request, "name")
    portfolio = _registry(request).load_portfolio(str(body["name"]))
    return JSONResponse(
        content={"name": portfolio.name, "symbols": portfolio.symbols()},
        status_code=201,
    )


@router.post("/{name}/buy")
async def buy(request: Request, name: str) -> JSONResponse:
    """Buy shares. Body: {symbol, shares, date}."""
    body = await read_body(request, "symbol", "shares", "date")
    transaction = _registry(request).buy(
        name, str(body["symbol"]), body["shares"], parse_date(body["date"])
    )
    return JSONResponse(content=transaction_to_dict(transaction))


@router.post("/{name}/sell")
async def sell(request: Request, name: str) -> JSONResponse:
    """Sell shares. Body: {symbol, shares, date}."""
    body = await read_body(request, "symbol", "shares", "date")
    transaction = _registry(request).sell(
        name, str(body["symbol"]), body["shares"], parse_date(body["date"])
    )
    return JSONResponse(content=transaction_to_dict(transaction))


@router.get("/{name}/value")
async def value(request: Request, name: str, date: str = "") -> JSONResponse:
    day = parse_date(date)
    total = _registry(request).value(name, day)
    return JSONResponse(content={"name": name, "date": day.isoformat(), "value": str(total)})


@router.get("/{name}/composition")
async def composition(request: Request, name: str, date: str = "") -> JSONResponse:
    day = parse_date(date)
    holdings = _registry(request).composition(name, day)
    return JSONResponse(
        content={"name": name, "date": day.isoformat(), "composition": decimal_to_str(holdings)}
    )


@router.get("/{name}/distribution")
async def distribution(request: Request, name: str, date: str = "") -> JSONResponse:
    day = parse_date(date)
    values = _registry(request).distribution(name, day)
    return JSONResponse(
        content={"name": name, "date": day.isoformat(), "distribution": decimal_to_str(values)}
    )


@router.post("/{name}/rebalance")
async def rebalance(request: Request, name: str) -> JSONResponse:
    """Rebalance toward target weights. Body: {date, weights: {symbol: weight}}."""
    body = await read_body(request, "date", "weights")
    weights = body["weights"]
    if not isinstance(weights, dict):
        raise InvalidRequestError("weights must be an object mapping symbol to weight")

    emitted = _registry(request).rebalance(name, parse_date(body["date"]), weights)
    return JSONResponse(content={"transactions": [transaction_to_dict(t) for t in emitted]})


@router.post("/{name}/save")
async def save(request: Request, name: str) -> JSONResponse:
    path = _registry(request).save_portfolio(name)
    return JSONResponse(content={"name": name, "path": path})


@router.get("/{name}/chart")
async def chart(request: Request, name: str, start: str = "", end: str = "") -> JSONResponse:
    """Performance chart as sampled values plus the rendered text."""
    performance = _registry(request).performance_chart(
        name, parse_date(start, "start"), parse_date(end, "end")
    )
    return JSONResponse(content={
        "name": performance.portfolio_name,
        "granularity": performance.granularity.value,
        "scale": str(performance.scale),
        "points": [
            {"date": day.isoformat(), "value": str(amount)}
            for day, amount in performance.values
        ],
        "text": performance.render(),
    })
