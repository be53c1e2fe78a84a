"""
Date range helpers.

Stored expense dates are UTC timestamps in the form
`YYYY-MM-DDTHH:MM:SS.mmmZ` and are compared as strings. The ranges built here
use the same form, spanning from the first to the last millisecond of the
requested days, so they select exactly the expenses of those days.
"""

import calendar
from datetime import date, timedelta

from pydantic import BaseModel, ConfigDict, model_validator

from pocket_ledger.models.expense import DailyTotal


DAY_START = "T00:00:00.000Z"
DAY_END = "T23:59:59.999Z"


class DateRange(BaseModel):
    """An inclusive [start, end] range of stored timestamps."""
    model_config = ConfigDict(frozen=True)

    start: str
    end: str

    @model_validator(mode='after')
    def validate_order(self) -> 'DateRange':
        if self.end < self.start:
            raise ValueError("Range end cannot be before start")
        return self

    @classmethod
    def for_days(cls, first: date, last: date) -> "DateRange":
        return cls(
            start=first.isoformat() + DAY_START,
            end=last.isoformat() + DAY_END,
        )

    @property
    def first_day(self) -> date:
        return date.fromisoformat(self.start[:10])

    @property
    def last_day(self) -> date:
        return date.fromisoformat(self.end[:10])

    def days(self) -> list[date]:
        """Every calendar day the range touches, in order."""
        count = (self.last_day - self.first_day).days + 1
        return [self.first_day + timedelta(days=i) for i in range(count)]


def day_range(day: date) -> DateRange:
    return DateRange.for_days(day, day)


def week_range(day: date) -> DateRange:
    """From the Monday of `day`'s week up to and including `day`."""
    monday = day - timedelta(days=day.weekday())
    return DateRange.for_days(monday, day)


def month_range(year: int, month: int) -> DateRange:
    last = calendar.monthrange(year, month)[1]
    return DateRange.for_days(date(year, month, 1), date(year, month, last))


def month_range_offset(day: date, offset: int) -> DateRange:
    """The whole month `offset` months away from `day`'s month (-1 = previous)."""
    index = day.year * 12 + (day.month - 1) + offset
    return month_range(index // 12, index % 12 + 1)


def last_n_days(day: date, n: int) -> DateRange:
    """The `n` days ending with `day`, inclusive."""
    if n < 1:
        raise ValueError(f"Need at least one day (got {n})")
    return DateRange.for_days(day - timedelta(days=n - 1), day)


def dense_daily_series(daily: list[DailyTotal], date_range: DateRange) -> list[DailyTotal]:
    """
    One entry per day of the range, oldest first; days without expenses are 0.

    The aggregation queries omit empty days; charts and heatmaps need them.
    """
    totals = {row.day: row.total for row in daily}
    return [
        DailyTotal(day=d.isoformat(), total=totals.get(d.isoformat(), 0.0))
        for d in date_range.days()
    ]
