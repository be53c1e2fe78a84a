"""
Shared pytest fixtures.

Every test gets its own database file under tmp_path, so tests never share
state and can run in any order.
"""

import pytest
import pytest_asyncio

from pocket_ledger.config import StorageSettings
from pocket_ledger.services.storage import SQLiteDatabase
from pocket_ledger.tracker import ExpenseTracker


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "data" / "expenses.db"


@pytest.fixture
def storage_settings():
    return StorageSettings(journal_mode="WAL", timeout=5.0)


@pytest_asyncio.fixture
async def database(db_path, storage_settings):
    db = SQLiteDatabase(db_path=db_path, settings=storage_settings)
    yield db
    await db.close()


@pytest_asyncio.fixture
async def tracker(database):
    return ExpenseTracker(database)
