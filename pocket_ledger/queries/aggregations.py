"""
Aggregation Engine

DESIGN DECISION: Aggregation is DETERMINISTIC and runs in SQL.
Every total is a plain SUM over the stored amounts in an inclusive
[start, end] date range, using the same lexicographic comparison as the
repository's range listing, so a screen's list and its totals always agree.

Numeric semantics:
- Sums are floats; no currency rounding (display rounding is the caller's job)
- An empty range totals 0.0, never None
- Groups with no rows are omitted; callers needing a dense series fill gaps
  (see queries.ranges.dense_daily_series)
"""

import structlog

from pocket_ledger.models.expense import CategoryTotal, DailyTotal, WeeklyTotal
from pocket_ledger.services.storage import SQLiteDatabase


logger = structlog.get_logger(__name__)

RANGE_FILTER = "WHERE date >= ? AND date <= ?"


class AggregationEngine:
    """
    Derives totals from the expense table.

    GUARANTEES:
    - sum(totals_by_category) == total_in_range for the same range
    - Results are ordered: categories by total descending, days and weeks
      ascending
    """

    def __init__(self, database: SQLiteDatabase):
        self._db = database

    async def total_in_range(self, start: str, end: str) -> float:
        """Sum of amounts with start <= date <= end; 0.0 when nothing matches."""
        conn = await self._db.acquire()
        async with conn.execute(
            f"SELECT COALESCE(SUM(amount), 0) AS total FROM expenses {RANGE_FILTER}",
            (start, end),
        ) as cursor:
            row = await cursor.fetchone()
        return float(row["total"]) if row is not None else 0.0

    async def totals_by_category(self, start: str, end: str) -> list[CategoryTotal]:
        """Per-category sums, largest first (ties alphabetical)."""
        conn = await self._db.acquire()
        rows = await conn.execute_fetchall(
            f"""
            SELECT category, SUM(amount) AS total
            FROM expenses
            {RANGE_FILTER}
            GROUP BY category
            ORDER BY total DESC, category ASC
            """,
            (start, end),
        )
        return [
            CategoryTotal(category=str(r["category"]), total=float(r["total"]))
            for r in rows
        ]

    async def daily_totals(self, start: str, end: str) -> list[DailyTotal]:
        """
        Per-calendar-day sums, oldest first.

        The day is the UTC calendar date of the stored timestamp (a `+HH:MM`
        offset is applied; `Z` and bare timestamps are taken as UTC). Stored
        dates are validated as ISO-8601 on write, so every row falls in a day.
        """
        conn = await self._db.acquire()
        rows = await conn.execute_fetchall(
            f"""
            SELECT date(date) AS day, SUM(amount) AS total
            FROM expenses
            {RANGE_FILTER}
            GROUP BY day
            ORDER BY day ASC
            """,
            (start, end),
        )
        return [
            DailyTotal(day=r["day"], total=float(r["total"]))
            for r in rows
        ]

    async def weekly_totals(self, start: str, end: str) -> list[WeeklyTotal]:
        """Per-week sums keyed `YYYY-Www` (Monday-based week number), oldest first."""
        conn = await self._db.acquire()
        rows = await conn.execute_fetchall(
            f"""
            SELECT strftime('%Y-W%W', date) AS week, SUM(amount) AS total
            FROM expenses
            {RANGE_FILTER}
            GROUP BY week
            ORDER BY week ASC
            """,
            (start, end),
        )
        return [
            WeeklyTotal(week=r["week"], total=float(r["total"]))
            for r in rows
        ]

    async def summary(self, start: str, end: str) -> dict:
        """
        Everything a dashboard renders for one range.

        Returns a dict with total, by_category, daily and weekly.
        """
        total = await self.total_in_range(start, end)
        by_category = await self.totals_by_category(start, end)
        daily = await self.daily_totals(start, end)
        weekly = await self.weekly_totals(start, end)
        logger.debug(
            "range_summary",
            start=start,
            end=end,
            total=total,
            categories=len(by_category),
        )
        return {
            "total": total,
            "by_category": by_category,
            "daily": daily,
            "weekly": weekly,
        }