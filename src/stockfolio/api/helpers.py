"""Request parsing and JSON serialization shared by the API routes."""

from datetime import date
from decimal import Decimal
from typing import Any

from fastapi import Request

from stockfolio.exceptions import InvalidDateError, StockfolioError
from stockfolio.models import Transaction


class InvalidRequestError(StockfolioError):
    """Raised for a malformed request body or a missing field."""

    kind = "invalid_request"


def decimal_to_str(obj: Any) -> Any:
    """Recursively convert Decimal values to strings for JSON serialization."""
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, dict):
        return {k: decimal_to_str(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [decimal_to_str(item) for item in obj]
    return obj


def parse_date(raw: Any, field: str = "date") -> date:
    """Parse an ISO yyyy-MM-dd date.

    Raises:
        InvalidDateError: If the value is missing or not an ISO date.
    """
    if raw is None or raw == "":
        raise InvalidDateError(f"Missing required date: {field}")
    try:
        return date.fromisoformat(str(raw))
    except ValueError:
        raise InvalidDateError(f"Invalid {field} {raw!r}, expected yyyy-MM-dd") from None


async def read_body(request: Request, *required: str) -> dict[str, Any]:
    """Decode a JSON object body and check that required fields are present.

    Raises:
        InvalidRequestError: If the body is not a JSON object or lacks a field.
    """
    try:
        body = await request.json()
    except ValueError:
        raise InvalidRequestError("Invalid JSON body") from None
    if not isinstance(body, dict):
        raise InvalidRequestError("JSON body must be an object")

    for field in required:
        if field not in body:
            raise InvalidRequestError(f"Missing required field: {field}")
    return body


def transaction_to_dict(transaction: Transaction) -> dict[str, str]:
    return {
        "symbol": transaction.symbol,
        "type": transaction.kind.value,
        "shares": str(transaction.shares),
        "date": transaction.date.isoformat(),
    }
