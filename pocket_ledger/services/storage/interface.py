"""
Abstract Storage Interface

DESIGN DECISION: We define abstract interfaces for the store's operations.
This allows us to:
1. Keep aggregation and preference logic unaware of SQL details
2. Substitute fakes in tests of higher layers
3. Keep the error taxonomy in one place

The interface is intentionally simple - we're not building a full ORM.
Just the operations the expense tracker screens need.
"""

from abc import ABC, abstractmethod
from typing import Mapping, Optional

from pocket_ledger.models.expense import Expense, NewExpense, ValidationIssue


class ExpenseStorageInterface(ABC):
    """
    Abstract interface for expense storage operations.

    Listing operations order by date descending, ties broken by id
    descending, so same-timestamp inserts show newest first.
    """

    @abstractmethod
    async def add(self, expense: NewExpense) -> int:
        """
        Record a new expense.

        Args:
            expense: The caller-supplied expense

        Returns:
            The id assigned by the store

        Raises:
            ValidationError: If amount, category or date is unacceptable.
                Nothing is written in that case.
        """
        pass

    @abstractmethod
    async def update(self, expense_id: int, expense: NewExpense) -> int:
        """
        Replace every mutable field of an expense.

        A missing id is a silent no-op, not an error.

        Returns:
            Number of rows affected (0 or 1)
        """
        pass

    @abstractmethod
    async def delete(self, expense_id: int) -> int:
        """
        Hard-delete an expense. A missing id is a silent no-op.

        Returns:
            Number of rows affected (0 or 1)
        """
        pass

    @abstractmethod
    async def get_by_id(self, expense_id: int) -> Optional[Expense]:
        """Point lookup; None if absent."""
        pass

    @abstractmethod
    async def list_all(self) -> list[Expense]:
        """All expenses, newest first."""
        pass

    @abstractmethod
    async def list_by_date_range(self, start: str, end: str) -> list[Expense]:
        """
        Expenses with start <= date <= end, newest first.

        Args:
            start: Inclusive lower bound (ISO-8601)
            end: Inclusive upper bound (ISO-8601)

        Bounds are compared as strings, so they must follow the same
        zero-padded, same-timezone convention as the stored dates.
        """
        pass

    @abstractmethod
    async def list_recent(self, limit: int = 5) -> list[Expense]:
        """The `limit` newest expenses."""
        pass


class SettingsStorageInterface(ABC):
    """
    Abstract interface for key/value settings.

    Values are always text; callers serialize structured data themselves.
    """

    @abstractmethod
    async def get(self, key: str, default: str = "") -> str:
        """Stored value, or `default` when the key is absent."""
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Insert or replace the value for `key`."""
        pass

    @abstractmethod
    async def set_many(self, values: Mapping[str, str]) -> None:
        """Insert or replace several keys atomically."""
        pass

    @abstractmethod
    async def get_all(self, include_reserved: bool = False) -> dict[str, str]:
        """
        Snapshot of all settings.

        Args:
            include_reserved: Also return internal keys (schema_version)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageUnavailableError(StorageError):
    """The database could not be opened or migrated."""
    pass


class ValidationError(StorageError):
    """
    Caller-supplied data failed a precondition.

    Raised before any write is attempted. `field` names the first offending
    field; `issues` holds every problem found.
    """

    def __init__(self, issues: list[ValidationIssue]):
        if not issues:
            raise ValueError("ValidationError needs at least one issue")
        self.issues = issues
        self.field = issues[0].field
        self.message = issues[0].message
        super().__init__(f"{self.field}: {self.message}")
