"""
Expense Validation

DESIGN DECISION: The repository, not the UI, owns the expense invariants.
Every add/update passes through ExpenseValidator before any SQL runs, so a
rejected expense never leaves a partial row behind.

Checks:
- amount is a finite number strictly greater than zero
- category is non-empty
- date is a non-empty ISO-8601 date or timestamp SQLite can group by
  (`YYYY-MM-DD`, optionally `THH:MM[:SS[.fff]]` and `Z` or `±HH:MM`)

The category is NOT checked against the catalog, and the note length is not
bounded here; both are presentation concerns.

IMPORTANT: Validation NEVER silently fixes issues.
It reports them; the repository turns them into a ValidationError.
"""

import math
import re
from datetime import date

from pocket_ledger.models.expense import NewExpense, ValidationIssue


ISO_DATE_PATTERN = re.compile(
    r"(?P<day>\d{4}-\d{2}-\d{2})"
    r"(?:[T ](?:[01]\d|2[0-3]):[0-5]\d(?::[0-5]\d(?:\.\d+)?)?"
    r"(?:Z|[+-](?:[01]\d|2[0-3]):[0-5]\d)?)?"
)


def is_iso_date(value: str) -> bool:
    """True for the date forms the store can filter and group by."""
    match = ISO_DATE_PATTERN.fullmatch(value)
    if match is None:
        return False
    try:
        date.fromisoformat(match.group("day"))
    except ValueError:
        return False
    return True


class ExpenseValidator:
    """Validates caller-supplied expenses before they are written."""

    def validate(self, expense: NewExpense) -> list[ValidationIssue]:
        """
        Collect every issue with an expense.

        Returns: list of issues (empty when the expense is acceptable)
        """
        issues = []

        if not math.isfinite(expense.amount):
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be a finite number",
            ))
        elif expense.amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message=f"Amount must be greater than zero (got {expense.amount})",
            ))

        if not expense.category:
            issues.append(ValidationIssue(
                field="category",
                issue_type="missing",
                message="Category is required",
            ))

        if not expense.date:
            issues.append(ValidationIssue(
                field="date",
                issue_type="missing",
                message="Date is required",
            ))
        elif not is_iso_date(expense.date):
            issues.append(ValidationIssue(
                field="date",
                issue_type="invalid_format",
                message=f"Date must be ISO-8601, e.g. 2024-01-15T10:00:00.000Z (got {expense.date!r})",
            ))

        return issues
