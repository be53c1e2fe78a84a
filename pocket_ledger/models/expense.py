"""
Core Data Models for Pocket Ledger

These models define the shapes of everything read from or written to the
expense store:
1. NewExpense - what a caller supplies when recording or editing an expense
2. Expense - a stored row, with its store-assigned id and created_at
3. Aggregation rows returned by the totals queries

DESIGN DECISION: Dates stay ISO-8601 strings end to end.
The store filters and orders them lexicographically, so callers must use one
zero-padded, same-timezone convention (the one `utc_now_iso()` produces).
"""

from datetime import datetime, timezone
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_PAYMENT_METHOD = "cash"


def utc_now_iso() -> str:
    """Current instant as `YYYY-MM-DDTHH:MM:SS.mmmZ`."""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


# =============================================================================
# EXPENSE MODELS
# =============================================================================

class NewExpense(BaseModel):
    """
    Caller-supplied expense data.

    Deliberately unconstrained: the repository's validator decides what is
    acceptable so that a rejected expense is reported as a ValidationError
    naming the offending field, never as a half-written row.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    amount: float = Field(
        ...,
        description="Amount in the user's selected currency"
    )
    category: str = Field(
        default="",
        description="Category identifier from the catalog"
    )
    payment_method: str = Field(
        default=DEFAULT_PAYMENT_METHOD,
        description="Payment method identifier"
    )
    note: str = Field(
        default="",
        description="Free-text note"
    )
    date: str = Field(
        default="",
        description="When the expense occurred (ISO-8601)"
    )


class Expense(BaseModel):
    """A stored expense row."""
    model_config = ConfigDict(frozen=True)

    id: int
    amount: float
    category: str
    payment_method: str = DEFAULT_PAYMENT_METHOD
    note: str = ""
    date: str
    created_at: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Expense":
        """Build from a database row (sqlite Row or mapping)."""
        return cls(
            id=int(row["id"]),
            amount=float(row["amount"]),
            category=str(row["category"]),
            payment_method=str(row["payment_method"]),
            note=row["note"] or "",
            date=str(row["date"]),
            created_at=str(row["created_at"]),
        )

    def to_new_expense(self) -> NewExpense:
        """The mutable part of this expense, e.g. to edit and update it."""
        return NewExpense(
            amount=self.amount,
            category=self.category,
            payment_method=self.payment_method,
            note=self.note,
            date=self.date,
        )


# =============================================================================
# AGGREGATION MODELS
# =============================================================================

class CategoryTotal(BaseModel):
    """Sum of amounts for one category."""
    model_config = ConfigDict(frozen=True)

    category: str
    total: float


class DailyTotal(BaseModel):
    """Sum of amounts for one calendar day (`YYYY-MM-DD`)."""
    model_config = ConfigDict(frozen=True)

    day: str
    total: float


class WeeklyTotal(BaseModel):
    """Sum of amounts for one week key (`YYYY-Www`, Monday-based)."""
    model_config = ConfigDict(frozen=True)

    week: str
    total: float


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem found in caller-supplied data."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
