"""
Data Models Package

This package contains all Pydantic models used in Pocket Ledger.
All data flowing in and out of the store conforms to these schemas.
"""

from pocket_ledger.models.expense import (
    DEFAULT_PAYMENT_METHOD,
    CategoryTotal,
    DailyTotal,
    Expense,
    NewExpense,
    ValidationIssue,
    WeeklyTotal,
    utc_now_iso,
)
from pocket_ledger.models.preferences import Preferences
from pocket_ledger.models.catalog import (
    CATEGORIES,
    CURRENCIES,
    PAYMENT_METHODS,
    Category,
    Currency,
    PaymentMethod,
    get_category,
    get_currency,
)
from pocket_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense models
    "DEFAULT_PAYMENT_METHOD",
    "CategoryTotal",
    "DailyTotal",
    "Expense",
    "NewExpense",
    "ValidationIssue",
    "WeeklyTotal",
    "utc_now_iso",
    # Preferences
    "Preferences",
    # Catalog
    "CATEGORIES",
    "CURRENCIES",
    "PAYMENT_METHODS",
    "Category",
    "Currency",
    "PaymentMethod",
    "get_category",
    "get_currency",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
