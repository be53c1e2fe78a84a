"""Services package."""

from pocket_ledger.services.storage import (
    ExpenseStorageInterface,
    SettingsStorageInterface,
    SQLiteBulkOperations,
    SQLiteDatabase,
    SQLiteExpenseStorage,
    SQLiteSettingsStorage,
    StorageError,
    StorageUnavailableError,
    ValidationError,
)
from pocket_ledger.services.preferences import PreferencesService

__all__ = [
    # Preferences
    "PreferencesService",
    # Storage services
    "ExpenseStorageInterface",
    "SettingsStorageInterface",
    "SQLiteBulkOperations",
    "SQLiteDatabase",
    "SQLiteExpenseStorage",
    "SQLiteSettingsStorage",
    "StorageError",
    "StorageUnavailableError",
    "ValidationError",
]
