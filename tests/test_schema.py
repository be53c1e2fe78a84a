"""
Tests for opening and migrating the database.

The concurrency tests start many first callers at once and check the schema
work ran a single time.
"""

import asyncio
import dataclasses
import sqlite3

import pytest

from pocket_ledger.audit import AuditLogger
from pocket_ledger.models.audit import AuditEventType
from pocket_ledger.services.storage import (
    SCHEMA_VERSION_KEY,
    TARGET_SCHEMA_VERSION,
    SQLiteDatabase,
    StorageUnavailableError,
)
from pocket_ledger.services.storage.schema import pending_migrations


class RecordingAuditLogger(AuditLogger):
    """Keeps every event in memory instead of only logging it."""

    def __init__(self):
        super().__init__()
        self.events = []

    async def log(self, event):
        self.events.append(event)
        return await super().log(event)

    def of_type(self, event_type):
        return [e for e in self.events if e.event_type == event_type]


class FlakyDatabase(SQLiteDatabase):
    """Fails the first migration attempt, then behaves normally."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.failures_left = 1

    async def _migrate(self, conn, current_version):
        if self.failures_left:
            self.failures_left -= 1
            raise RuntimeError("disk I/O error")
        await super()._migrate(conn, current_version)


class HalfMigratingDatabase(SQLiteDatabase):
    """Runs each pending migration with a statement that fails after the table drop."""

    async def _migrate(self, conn, current_version):
        for migration in pending_migrations(current_version):
            broken = dataclasses.replace(
                migration,
                statements=migration.statements[:1] + ("INSERT INTO missing_table VALUES (1)",),
            )
            await self._apply_migration(conn, broken, current_version)


def _create_legacy_database(path):
    """A version 1 file: misnamed columns and a few rows."""
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    conn.executescript(
        """
        CREATE TABLE settings (key TEXT PRIMARY KEY, value TEXT NOT NULL);
        CREATE TABLE expenses (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            amount REAL NOT NULL,
            category TEXT NOT NULL,
            paymentMethod TEXT,
            date TEXT NOT NULL
        );
        INSERT INTO expenses (amount, category, paymentMethod, date)
            VALUES (10, 'food', 'cash', '2023-01-01'), (20, 'bills', 'card', '2023-01-02');
        INSERT INTO settings (key, value) VALUES ('schema_version', '1');
        INSERT INTO settings (key, value) VALUES ('currency', 'USD');
        """
    )
    conn.commit()
    conn.close()


def _column_names(path, table):
    conn = sqlite3.connect(path)
    try:
        return [row[1] for row in conn.execute(f"PRAGMA table_info({table})")]
    finally:
        conn.close()


class TestInitialization:
    """Tests for the first acquire()."""

    @pytest.mark.asyncio
    async def test_fresh_database_is_created_and_migrated(self, database, db_path):
        """Test a new file ends at the current version with both tables."""
        await database.acquire()

        assert db_path.exists()
        assert database.is_ready
        assert await database.schema_version() == TARGET_SCHEMA_VERSION
        assert "payment_method" in _column_names(db_path, "expenses")

    @pytest.mark.asyncio
    async def test_concurrent_first_callers_share_one_initialization(self, database):
        """Test ten simultaneous acquires get one connection and one migration run."""
        connections = await asyncio.gather(*(database.acquire() for _ in range(10)))

        assert all(conn is connections[0] for conn in connections)
        assert database.applied_migrations == [TARGET_SCHEMA_VERSION]

    @pytest.mark.asyncio
    async def test_repeated_acquire_does_not_migrate_again(self, database):
        first = await database.acquire()
        second = await database.acquire()

        assert first is second
        assert database.applied_migrations == [TARGET_SCHEMA_VERSION]

    @pytest.mark.asyncio
    async def test_journal_mode_is_wal(self, database):
        conn = await database.acquire()
        async with conn.execute("PRAGMA journal_mode") as cursor:
            row = await cursor.fetchone()
        assert row[0].lower() == "wal"

    @pytest.mark.asyncio
    async def test_reopening_current_database_skips_migrations(self, db_path, storage_settings):
        """Test a database already at the current version is left alone."""
        first = SQLiteDatabase(db_path=db_path, settings=storage_settings)
        await first.acquire()
        await first.close()

        second = SQLiteDatabase(db_path=db_path, settings=storage_settings)
        try:
            await second.acquire()
            assert second.applied_migrations == []
            assert await second.schema_version() == TARGET_SCHEMA_VERSION
        finally:
            await second.close()

    @pytest.mark.asyncio
    async def test_close_then_acquire_reopens(self, database):
        await database.acquire()
        await database.close()
        assert not database.is_ready

        await database.acquire()
        assert database.is_ready


class TestLegacyMigration:
    """Tests for upgrading a version 1 file."""

    @pytest.mark.asyncio
    async def test_legacy_expenses_table_is_recreated(self, db_path, storage_settings):
        """Test old rows are dropped and the corrected columns exist."""
        _create_legacy_database(db_path)
        audit = RecordingAuditLogger()
        database = SQLiteDatabase(db_path=db_path, settings=storage_settings, audit_logger=audit)
        try:
            conn = await database.acquire()
            rows = await conn.execute_fetchall("SELECT COUNT(*) FROM expenses")

            assert rows[0][0] == 0
            assert database.applied_migrations == [2]
            assert await database.schema_version() == 2
        finally:
            await database.close()

        columns = _column_names(db_path, "expenses")
        assert "payment_method" in columns
        assert "paymentMethod" not in columns

        destructive = audit.of_type(AuditEventType.DESTRUCTIVE_MIGRATION)
        assert len(destructive) == 1
        assert destructive[0].details["rows_dropped"] == 2

    @pytest.mark.asyncio
    async def test_legacy_settings_survive(self, db_path, storage_settings):
        """Test the migration touches only the expenses table."""
        _create_legacy_database(db_path)
        database = SQLiteDatabase(db_path=db_path, settings=storage_settings)
        try:
            conn = await database.acquire()
            rows = await conn.execute_fetchall(
                "SELECT value FROM settings WHERE key = 'currency'"
            )
            assert rows[0][0] == "USD"
        finally:
            await database.close()

    @pytest.mark.asyncio
    async def test_failed_migration_rolls_back_whole_step(self, db_path, storage_settings):
        """Test a step failing after its table drop leaves the old table, rows and version."""
        _create_legacy_database(db_path)
        broken = HalfMigratingDatabase(db_path=db_path, settings=storage_settings)
        with pytest.raises(StorageUnavailableError, match="missing_table"):
            await broken.acquire()
        assert broken.applied_migrations == []

        conn = sqlite3.connect(db_path)
        try:
            version = conn.execute(
                "SELECT value FROM settings WHERE key = ?", (SCHEMA_VERSION_KEY,)
            ).fetchone()[0]
            rows = conn.execute("SELECT COUNT(*) FROM expenses").fetchone()[0]
        finally:
            conn.close()
        assert version == "1"
        assert rows == 2
        assert "paymentMethod" in _column_names(db_path, "expenses")

        database = SQLiteDatabase(db_path=db_path, settings=storage_settings)
        try:
            await database.acquire()
            assert database.applied_migrations == [2]
            assert await database.schema_version() == 2
        finally:
            await database.close()
        assert "payment_method" in _column_names(db_path, "expenses")

    @pytest.mark.asyncio
    async def test_version_and_table_commit_together(self, db_path, storage_settings):
        """Test the stored version matches the table on disk after upgrade."""
        _create_legacy_database(db_path)
        database = SQLiteDatabase(db_path=db_path, settings=storage_settings)
        await database.acquire()
        await database.close()

        conn = sqlite3.connect(db_path)
        try:
            version = conn.execute(
                "SELECT value FROM settings WHERE key = ?", (SCHEMA_VERSION_KEY,)
            ).fetchone()[0]
        finally:
            conn.close()
        assert version == "2"


class TestInitializationFailure:
    """Tests for open and migration errors."""

    @pytest.mark.asyncio
    async def test_unopenable_path_raises_storage_unavailable(self, tmp_path, storage_settings):
        """Test a directory in place of the file surfaces a storage error."""
        bad_path = tmp_path / "not-a-file"
        bad_path.mkdir()
        database = SQLiteDatabase(db_path=bad_path, settings=storage_settings)

        with pytest.raises(StorageUnavailableError):
            await database.acquire()
        assert not database.is_ready

    @pytest.mark.asyncio
    async def test_failed_initialization_can_be_retried(self, db_path, storage_settings):
        """Test a failure clears the in-flight marker so the next call starts over."""
        audit = RecordingAuditLogger()
        database = FlakyDatabase(db_path=db_path, settings=storage_settings, audit_logger=audit)
        try:
            with pytest.raises(StorageUnavailableError, match="disk I/O error"):
                await database.acquire()
            assert database._init_task is None
            assert len(audit.of_type(AuditEventType.INITIALIZATION_FAILED)) == 1

            await database.acquire()
            assert database.is_ready
            assert database.applied_migrations == [TARGET_SCHEMA_VERSION]
        finally:
            await database.close()

    @pytest.mark.asyncio
    async def test_concurrent_callers_all_see_the_failure(self, db_path, storage_settings):
        database = FlakyDatabase(db_path=db_path, settings=storage_settings)
        try:
            results = await asyncio.gather(
                *(database.acquire() for _ in range(5)),
                return_exceptions=True,
            )
            assert all(isinstance(r, StorageUnavailableError) for r in results)
        finally:
            await database.close()
