"""Portfolio analytics.

Date bucketing for charts, per-stock indicators (gain/loss, moving average,
crossovers), and the text performance chart.
"""

from stockfolio.analytics.bucketing import (
    Granularity,
    adjusted_dates,
    dates_at,
    granularity_of,
    label_for,
)
from stockfolio.analytics.chart import PerformanceChart, build_performance_chart, choose_scale
from stockfolio.analytics.indicators import (
    find_crossovers,
    gain_or_loss,
    is_crossover,
    moving_average,
)

__all__ = [
    "Granularity",
    "PerformanceChart",
    "adjusted_dates",
    "build_performance_chart",
    "choose_scale",
    "dates_at",
    "find_crossovers",
    "gain_or_loss",
    "granularity_of",
    "is_crossover",
    "label_for",
    "moving_average",
]
