"""
Expense Tracker - composition root

This module wires one SQLiteDatabase into every component and exposes the
operations the presentation layer calls:
1. Record, edit, delete and list expenses
2. Read totals for a date range (dashboard, insights)
3. Read and change preferences and budgets (settings screen)
4. Export and wipe everything (settings screen)

DESIGN DECISION: The handle is created once and injected.
No component opens its own connection, so the single-migration guarantee of
SQLiteDatabase.acquire() holds for the whole application.
"""

from pathlib import Path
from typing import Optional, Union

from pocket_ledger.audit import AuditLogger, configure_logging
from pocket_ledger.config import get_settings
from pocket_ledger.models.expense import Expense
from pocket_ledger.queries import AggregationEngine, BudgetTracker, DateRange
from pocket_ledger.services.preferences import PreferencesService
from pocket_ledger.services.storage import (
    SQLiteBulkOperations,
    SQLiteDatabase,
    SQLiteExpenseStorage,
    SQLiteSettingsStorage,
)


class ExpenseTracker:
    """
    Facade over the store's components.

    The components are public attributes; the methods here cover the flows
    that combine more than one of them.
    """

    def __init__(self, database: SQLiteDatabase, audit_logger: Optional[AuditLogger] = None):
        audit_logger = audit_logger or AuditLogger()

        self.database = database
        self.expenses = SQLiteExpenseStorage(database, audit_logger=audit_logger)
        self.settings = SQLiteSettingsStorage(database, audit_logger=audit_logger)
        self.bulk = SQLiteBulkOperations(database, audit_logger=audit_logger)
        self.aggregations = AggregationEngine(database)
        self.preferences = PreferencesService(self.settings)
        self.budgets = BudgetTracker(self.aggregations, self.preferences)

    async def open(self) -> "ExpenseTracker":
        """Open and migrate the database now instead of on first use."""
        await self.database.acquire()
        return self

    async def close(self) -> None:
        await self.database.close()

    async def __aenter__(self) -> "ExpenseTracker":
        return await self.open()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def expenses_in(self, date_range: DateRange) -> list[Expense]:
        return await self.expenses.list_by_date_range(date_range.start, date_range.end)

    async def dashboard(self, date_range: DateRange, recent_limit: int = 5) -> dict:
        """
        Data for the home screen: range totals plus the latest expenses.

        Returns the aggregation summary with a `recent` list added.
        """
        summary = await self.aggregations.summary(date_range.start, date_range.end)
        summary["recent"] = await self.expenses.list_recent(recent_limit)
        return summary


def create_tracker(db_path: Optional[Union[str, Path]] = None) -> ExpenseTracker:
    """
    Factory function to create the tracker from configuration.

    Args:
        db_path: Database file. Defaults to the configured LEDGER_DB_PATH.

    Returns:
        An ExpenseTracker whose database opens on first use
    """
    settings = get_settings()
    configure_logging(settings.app)

    audit_logger = AuditLogger()
    database = SQLiteDatabase(
        db_path=db_path,
        settings=settings.storage,
        audit_logger=audit_logger,
    )
    return ExpenseTracker(database, audit_logger=audit_logger)
