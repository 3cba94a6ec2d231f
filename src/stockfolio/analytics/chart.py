"""Text bar chart of a portfolio's value over a date range.

Values are sampled at the span's bucketed dates. A zero sample (no prices
on that date, typically a weekend or holiday) repeats the last non-zero
value so the chart does not dip to nothing on market closures.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from stockfolio.analytics.bucketing import Granularity, adjusted_dates, granularity_of, label_for
from stockfolio.config import ChartSettings
from stockfolio.exceptions import InvalidDateError
from stockfolio.logging import get_logger
from stockfolio.models import ZERO
from stockfolio.portfolio.portfolio import Portfolio

logger = get_logger(__name__)


@dataclass(frozen=True)
class PerformanceChart:
    """Sampled portfolio values plus the scale used to draw them."""

    portfolio_name: str
    start: date
    end: date
    granularity: Granularity
    values: list[tuple[date, Decimal]]
    scale: Decimal

    def bars(self) -> list[tuple[str, int]]:
        """(label, asterisk count) per sample."""
        return [
            (label_for(day, self.granularity), int(value / self.scale))
            for day, value in self.values
        ]

    def render(self) -> str:
        lines = [f"Performance of portfolio {self.portfolio_name} from {self.start} to {self.end}", ""]
        for label, width in self.bars():
            lines.append(f"{label}: {'*' * width}")
        lines.append("")
        lines.append(f"Scale: * = {self.scale} units")
        return "\n".join(lines)


def carry_forward(values: list[Decimal]) -> list[Decimal]:
    """Replace each zero with the last non-zero value seen before it."""
    filled: list[Decimal] = []
    last = ZERO
    for value in values:
        if value == ZERO:
            filled.append(last)
        else:
            filled.append(value)
            last = value
    return filled


def choose_scale(max_value: Decimal, max_bars: int, scales: list[int]) -> Decimal:
    """Units per asterisk.

    The first preferred scale that keeps the widest bar within ``max_bars``;
    otherwise the exact scale that makes the widest bar ``max_bars`` long.
    Without preferred scales a chart with no positive value gets a scale of 1.
    """
    for scale in scales:
        if int(max_value) // scale <= max_bars:
            return Decimal(scale)
    if max_value <= ZERO:
        return Decimal(1)
    return max_value / max_bars


def build_performance_chart(
    portfolio: Portfolio,
    start: date,
    end: date,
    settings: ChartSettings | None = None,
) -> PerformanceChart:
    """Sample a portfolio's value across [start, end].

    Raises:
        InvalidDateError: If end is before start.
    """
    if end < start:
        raise InvalidDateError(f"End date {end} is before start date {start}")
    settings = settings or ChartSettings()

    dates = adjusted_dates(start, end)
    values = carry_forward([portfolio.value_as_of(day) for day in dates])
    scale = choose_scale(max(values, default=ZERO), settings.max_bars, settings.scales)
    granularity = granularity_of(start, end)

    logger.debug(
        "performance_chart_built",
        portfolio=portfolio.name,
        granularity=granularity.value,
        samples=len(dates),
        scale=str(scale),
    )
    return PerformanceChart(
        portfolio_name=portfolio.name,
        start=start,
        end=end,
        granularity=granularity,
        values=list(zip(dates, values)),
        scale=scale,
    )
