"""Aggregation, budget and date range queries."""

from pocket_ledger.queries.aggregations import AggregationEngine
from pocket_ledger.queries.budget import (
    BudgetLevel,
    BudgetStatus,
    BudgetTracker,
    CategoryBudgetStatus,
    level_for,
)
from pocket_ledger.queries.ranges import (
    DateRange,
    day_range,
    dense_daily_series,
    last_n_days,
    month_range,
    month_range_offset,
    week_range,
)

__all__ = [
    "AggregationEngine",
    "BudgetLevel",
    "BudgetStatus",
    "BudgetTracker",
    "CategoryBudgetStatus",
    "level_for",
    "DateRange",
    "day_range",
    "dense_daily_series",
    "last_n_days",
    "month_range",
    "month_range_offset",
    "week_range",
]
