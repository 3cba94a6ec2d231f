"""Per-stock price indicators: gain/loss, moving average, crossovers.

All functions take a PriceSeries and work on closing prices in Decimal.
Windows are measured in calendar days; only days with data count toward an
average, which tolerates weekends and market holidays.
"""

from datetime import date, timedelta
from decimal import Decimal

from stockfolio.analytics.bucketing import Granularity, dates_at
from stockfolio.exceptions import InsufficientDataError, InvalidDateError, InvalidQuantityError
from stockfolio.market_data.price_series import PriceSeries
from stockfolio.models import ZERO


def gain_or_loss(series: PriceSeries, start: date, end: date) -> Decimal:
    """Close on ``end`` minus close on ``start``.

    Raises:
        InvalidDateError: If either date has no price data.
    """
    start_close = series.close_on(start)
    end_close = series.close_on(end)
    if start_close is None or end_close is None:
        raise InvalidDateError(
            f"Price data not available for {series.symbol} on {start} and {end}"
        )
    return end_close - start_close


def moving_average(series: PriceSeries, day: date, window: int) -> Decimal:
    """Average close over the ``window`` calendar days ending on ``day``.

    The denominator is the number of days that have data, not ``window``.

    Raises:
        InvalidQuantityError: If window is less than 1.
        InsufficientDataError: If no day in the window has data.
    """
    if window < 1:
        raise InvalidQuantityError(f"Moving average window must be at least 1 day, got {window}")

    # The window is clamped at the earliest representable date
    if window - 1 >= (day - date.min).days:
        earliest = date.min
    else:
        earliest = day - timedelta(days=window - 1)
    closes = [p.close for p in series if earliest <= p.date <= day]

    if not closes:
        raise InsufficientDataError(
            f"Not enough data to calculate the {window}-day moving average "
            f"of {series.symbol} on {day}"
        )
    return sum(closes, ZERO) / len(closes)


def is_crossover(series: PriceSeries, day: date, window: int) -> bool:
    """True when ``day`` has a close strictly above its moving average."""
    close = series.close_on(day)
    if close is None:
        if window < 1:
            raise InvalidQuantityError(
                f"Moving average window must be at least 1 day, got {window}"
            )
        return False
    return close > moving_average(series, day, window)


def find_crossovers(series: PriceSeries, start: date, end: date, window: int) -> list[date]:
    """Scan every calendar day in [start, end] and return the crossover days.

    Raises:
        InvalidDateError: If end is before start.
        InvalidQuantityError: If window is less than 1.
    """
    if end < start:
        raise InvalidDateError(f"End date {end} is before start date {start}")
    if window < 1:
        raise InvalidQuantityError(f"Moving average window must be at least 1 day, got {window}")
    return [day for day in dates_at(start, end, Granularity.DAY) if is_crossover(series, day, window)]
