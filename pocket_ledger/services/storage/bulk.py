"""
Bulk operations: chronological export and full wipe.
"""

from typing import Optional

import structlog

from pocket_ledger.audit import AuditLogger
from pocket_ledger.models.expense import Expense
from pocket_ledger.services.storage.expenses import EXPENSE_COLUMNS
from pocket_ledger.services.storage.schema import RESERVED_SETTING_KEYS
from pocket_ledger.services.storage.sqlite import SQLiteDatabase


logger = structlog.get_logger(__name__)


class SQLiteBulkOperations:
    """Whole-table operations over the shared database handle."""

    def __init__(
        self,
        database: SQLiteDatabase,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._db = database
        self._audit_logger = audit_logger or AuditLogger()

    async def export_all(self) -> list[Expense]:
        """
        Every expense, oldest first.

        Note the ordering is the reverse of the listing queries: exports are
        chronological.
        """
        conn = await self._db.acquire()
        rows = await conn.execute_fetchall(
            f"SELECT {EXPENSE_COLUMNS} FROM expenses ORDER BY date ASC, id ASC"
        )
        expenses = [Expense.from_row(row) for row in rows]
        await self._audit_logger.log_data_exported(len(expenses))
        return expenses

    async def wipe_all(self) -> None:
        """
        Delete every expense and every user setting in one transaction.

        The schema version survives the wipe: the tables are still at the
        current schema, and dropping the version would make the next open
        re-run the destructive migration over data recorded after the wipe.
        """
        reserved = sorted(RESERVED_SETTING_KEYS)
        placeholders = ", ".join("?" for _ in reserved)

        async with self._db.transaction() as conn:
            expenses_cursor = await conn.execute("DELETE FROM expenses")
            settings_cursor = await conn.execute(
                f"DELETE FROM settings WHERE key NOT IN ({placeholders})",
                reserved,
            )
            expenses_deleted = expenses_cursor.rowcount
            settings_deleted = settings_cursor.rowcount

        logger.info(
            "store_wiped",
            expenses_deleted=expenses_deleted,
            settings_deleted=settings_deleted,
        )
        await self._audit_logger.log_data_wiped(expenses_deleted, settings_deleted)
