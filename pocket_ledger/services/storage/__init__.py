"""
Storage Services Package

Provides the abstract interfaces, the error taxonomy and the SQLite
implementation of the expense store.
"""

from pocket_ledger.services.storage.interface import (
    ExpenseStorageInterface,
    SettingsStorageInterface,
    StorageError,
    StorageUnavailableError,
    ValidationError,
)
from pocket_ledger.services.storage.schema import (
    MIGRATIONS,
    SCHEMA_VERSION_KEY,
    TARGET_SCHEMA_VERSION,
)
from pocket_ledger.services.storage.sqlite import SQLiteDatabase
from pocket_ledger.services.storage.expenses import SQLiteExpenseStorage
from pocket_ledger.services.storage.settings_store import SQLiteSettingsStorage
from pocket_ledger.services.storage.bulk import SQLiteBulkOperations

__all__ = [
    # Interfaces
    "ExpenseStorageInterface",
    "SettingsStorageInterface",
    # Exceptions
    "StorageError",
    "StorageUnavailableError",
    "ValidationError",
    # Schema
    "MIGRATIONS",
    "SCHEMA_VERSION_KEY",
    "TARGET_SCHEMA_VERSION",
    # SQLite implementation
    "SQLiteBulkOperations",
    "SQLiteDatabase",
    "SQLiteExpenseStorage",
    "SQLiteSettingsStorage",
]
