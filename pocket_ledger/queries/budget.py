"""
Budget tracking.

Compares what was spent in a calendar month with the monthly budget and the
per-category budgets kept in the user's preferences.
"""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from pocket_ledger.queries.aggregations import AggregationEngine
from pocket_ledger.queries.ranges import month_range
from pocket_ledger.services.preferences import PreferencesService


WARNING_RATIO = 0.7
DANGER_RATIO = 0.9


class BudgetLevel(str, Enum):
    """How close spending is to the budget."""
    OK = "ok"
    WARNING = "warning"
    DANGER = "danger"


def level_for(ratio: float) -> BudgetLevel:
    if ratio > DANGER_RATIO:
        return BudgetLevel.DANGER
    if ratio > WARNING_RATIO:
        return BudgetLevel.WARNING
    return BudgetLevel.OK


class BudgetStatus(BaseModel):
    """Spending against one budget."""
    model_config = ConfigDict(frozen=True)

    budget: float = Field(ge=0)
    spent: float = Field(ge=0)

    @property
    def ratio(self) -> float:
        """spent / budget; 0 when no budget is set."""
        return self.spent / self.budget if self.budget > 0 else 0.0

    @property
    def progress(self) -> float:
        """The ratio capped at 1, for progress bars."""
        return min(self.ratio, 1.0)

    @property
    def remaining(self) -> float:
        return self.budget - self.spent

    @property
    def level(self) -> BudgetLevel:
        return level_for(self.ratio)


class CategoryBudgetStatus(BudgetStatus):
    category: str


class BudgetTracker:
    """Monthly budget progress, overall and per category."""

    def __init__(
        self,
        engine: AggregationEngine,
        preferences: PreferencesService,
    ):
        self._engine = engine
        self._preferences = preferences

    async def monthly_status(self, year: int, month: int) -> BudgetStatus:
        month_span = month_range(year, month)
        spent = await self._engine.total_in_range(month_span.start, month_span.end)
        prefs = await self._preferences.load()
        return BudgetStatus(budget=prefs.monthly_budget, spent=spent)

    async def current_status(self, today: Optional[date] = None) -> BudgetStatus:
        today = today or date.today()
        return await self.monthly_status(today.year, today.month)

    async def category_statuses(self, year: int, month: int) -> list[CategoryBudgetStatus]:
        """
        One status per category with a budget set, most-used budget first.

        Categories without a budget are not listed even if they have spending.
        """
        budgets = await self._preferences.get_category_budgets()
        if not budgets:
            return []

        month_span = month_range(year, month)
        spent = {
            row.category: row.total
            for row in await self._engine.totals_by_category(month_span.start, month_span.end)
        }
        statuses = [
            CategoryBudgetStatus(
                category=category,
                budget=budget,
                spent=spent.get(category, 0.0),
            )
            for category, budget in budgets.items()
        ]
        statuses.sort(key=lambda s: (-s.ratio, s.category))
        return statuses
