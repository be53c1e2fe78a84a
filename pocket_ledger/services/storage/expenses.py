"""
SQLite Expense Repository

CRUD over the `expenses` table. Every list query shares one ordering
(date descending, then id descending) so same-timestamp inserts appear
newest first everywhere.

Update and delete of a missing id are silent no-ops; both return the number
of rows affected for callers that need to tell the difference.
"""

from typing import Optional

from pocket_ledger.audit import AuditLogger
from pocket_ledger.models.expense import (
    DEFAULT_PAYMENT_METHOD,
    Expense,
    NewExpense,
    ValidationIssue,
    utc_now_iso,
)
from pocket_ledger.services.storage.interface import (
    ExpenseStorageInterface,
    ValidationError,
)
from pocket_ledger.services.storage.sqlite import SQLiteDatabase
from pocket_ledger.validation import ExpenseValidator


EXPENSE_COLUMNS = "id, amount, category, payment_method, note, date, created_at"
NEWEST_FIRST = "ORDER BY date DESC, id DESC"


class SQLiteExpenseStorage(ExpenseStorageInterface):
    """Expense records backed by the `expenses` table."""

    def __init__(
        self,
        database: SQLiteDatabase,
        validator: Optional[ExpenseValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._db = database
        self._validator = validator or ExpenseValidator()
        self._audit_logger = audit_logger or AuditLogger()

    async def _check(self, expense: NewExpense) -> None:
        issues = self._validator.validate(expense)
        if issues:
            await self._audit_logger.log_validation_failed(
                [issue.model_dump() for issue in issues]
            )
            raise ValidationError(issues)

    async def add(self, expense: NewExpense) -> int:
        await self._check(expense)

        async with self._db.transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO expenses (amount, category, payment_method, note, date, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    expense.amount,
                    expense.category,
                    expense.payment_method or DEFAULT_PAYMENT_METHOD,
                    expense.note or "",
                    expense.date,
                    utc_now_iso(),
                ),
            )
            expense_id = int(cursor.lastrowid)

        await self._audit_logger.log_expense_added(expense_id, expense.amount, expense.category)
        return expense_id

    async def update(self, expense_id: int, expense: NewExpense) -> int:
        await self._check(expense)

        async with self._db.transaction() as conn:
            cursor = await conn.execute(
                """
                UPDATE expenses
                SET amount = ?, category = ?, payment_method = ?, note = ?, date = ?
                WHERE id = ?
                """,
                (
                    expense.amount,
                    expense.category,
                    expense.payment_method or DEFAULT_PAYMENT_METHOD,
                    expense.note or "",
                    expense.date,
                    expense_id,
                ),
            )
            rows_affected = cursor.rowcount

        await self._audit_logger.log_expense_updated(expense_id, rows_affected)
        return rows_affected

    async def delete(self, expense_id: int) -> int:
        async with self._db.transaction() as conn:
            cursor = await conn.execute("DELETE FROM expenses WHERE id = ?", (expense_id,))
            rows_affected = cursor.rowcount

        await self._audit_logger.log_expense_deleted(expense_id, rows_affected)
        return rows_affected

    async def get_by_id(self, expense_id: int) -> Optional[Expense]:
        conn = await self._db.acquire()
        async with conn.execute(
            f"SELECT {EXPENSE_COLUMNS} FROM expenses WHERE id = ?", (expense_id,)
        ) as cursor:
            row = await cursor.fetchone()
        return Expense.from_row(row) if row is not None else None

    async def list_all(self) -> list[Expense]:
        return await self._select(f"SELECT {EXPENSE_COLUMNS} FROM expenses {NEWEST_FIRST}")

    async def list_by_date_range(self, start: str, end: str) -> list[Expense]:
        return await self._select(
            f"""
            SELECT {EXPENSE_COLUMNS} FROM expenses
            WHERE date >= ? AND date <= ?
            {NEWEST_FIRST}
            """,
            (start, end),
        )

    async def list_recent(self, limit: int = 5) -> list[Expense]:
        if limit < 0:
            raise ValidationError([ValidationIssue(
                field="limit",
                issue_type="invalid_value",
                message=f"Limit cannot be negative (got {limit})",
            )])
        return await self._select(
            f"SELECT {EXPENSE_COLUMNS} FROM expenses {NEWEST_FIRST} LIMIT ?",
            (limit,),
        )

    async def count(self) -> int:
        conn = await self._db.acquire()
        async with conn.execute("SELECT COUNT(*) FROM expenses") as cursor:
            row = await cursor.fetchone()
        return int(row[0])

    async def _select(self, sql: str, params: tuple = ()) -> list[Expense]:
        conn = await self._db.acquire()
        rows = await conn.execute_fetchall(sql, params)
        return [Expense.from_row(row) for row in rows]
