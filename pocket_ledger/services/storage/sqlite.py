"""
SQLite Database Handle and Schema Manager

DESIGN DECISION: One SQLiteDatabase is created at application start and
injected into every repository. It owns the single aiosqlite connection and
the in-flight initialization task; nothing else holds a handle of its own.

Lifecycle on first acquire():
1. Open (or create) the database file
2. Switch to WAL so readers are not blocked by the writer
3. Ensure the settings table exists (the schema version lives there)
4. Apply every pending migration, each in its own transaction that also
   records the new version, so a crash resumes from the last committed step

Concurrent first callers all await the same initialization task, so the
migrations run exactly once per process.
"""

import asyncio
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional, Union

import aiosqlite
import structlog

from pocket_ledger.audit import AuditLogger
from pocket_ledger.config import StorageSettings
from pocket_ledger.services.storage.interface import StorageUnavailableError
from pocket_ledger.services.storage.schema import (
    CREATE_SETTINGS_SQL,
    SCHEMA_VERSION_KEY,
    Migration,
    pending_migrations,
)


logger = structlog.get_logger(__name__)

UPSERT_SETTING_SQL = """
    INSERT INTO settings (key, value) VALUES (?, ?)
    ON CONFLICT(key) DO UPDATE SET value = excluded.value
"""


class SQLiteDatabase:
    """
    The shared database handle.

    Use `acquire()` to get the ready connection for reads and
    `transaction()` for writes.
    """

    def __init__(
        self,
        db_path: Optional[Union[str, Path]] = None,
        settings: Optional[StorageSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        """
        Initialize the handle. Nothing is opened until the first acquire().

        Args:
            db_path: Database file; overrides the configured path
            settings: Storage settings. Defaults to environment configuration.
            audit_logger: Where lifecycle events go
        """
        self._settings = settings or StorageSettings()
        self.db_path = Path(db_path) if db_path is not None else self._settings.path
        self._audit_logger = audit_logger or AuditLogger()

        self._conn: Optional[aiosqlite.Connection] = None
        self._init_task: Optional[asyncio.Task] = None
        self._write_lock = asyncio.Lock()

        # Versions applied by this instance, in order
        self.applied_migrations: list[int] = []

    @property
    def is_ready(self) -> bool:
        return self._conn is not None

    async def acquire(self) -> aiosqlite.Connection:
        """
        Return the ready, migrated connection.

        Raises:
            StorageUnavailableError: If the database could not be opened or
                migrated. The next call starts over.
        """
        if self._conn is not None:
            return self._conn

        if self._init_task is None or self._init_task.cancelled():
            self._init_task = asyncio.ensure_future(self._initialize())

        # Shielded: a cancelled waiter must not cancel everyone's initialization
        return await asyncio.shield(self._init_task)

    async def _initialize(self) -> aiosqlite.Connection:
        conn = None
        try:
            self._ensure_db_directory()
            conn = await aiosqlite.connect(self.db_path, timeout=self._settings.timeout)
            conn.row_factory = aiosqlite.Row

            journal_mode = await self._set_journal_mode(conn)
            await conn.execute(CREATE_SETTINGS_SQL)
            await conn.commit()

            version = await self._read_schema_version(conn)
            await self._migrate(conn, version)
        except Exception as e:
            self._init_task = None
            if conn is not None:
                await self._close_quietly(conn)
            logger.error("database_initialization_failed", path=str(self.db_path), error=str(e))
            await self._audit_logger.log_initialization_failed(
                path=str(self.db_path),
                error_message=str(e),
            )
            raise StorageUnavailableError(
                f"Could not open database at {self.db_path}: {e}"
            ) from e

        self._conn = conn
        self._init_task = None
        await self._audit_logger.log_database_opened(
            path=str(self.db_path),
            journal_mode=journal_mode,
            schema_version=await self._read_schema_version(conn),
        )
        return conn

    def _ensure_db_directory(self) -> None:
        if str(self.db_path) == ":memory:":
            return
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    async def _set_journal_mode(self, conn: aiosqlite.Connection) -> str:
        async with conn.execute(f"PRAGMA journal_mode = {self._settings.journal_mode}") as cursor:
            row = await cursor.fetchone()
        return str(row[0]) if row else ""

    async def _read_schema_version(self, conn: aiosqlite.Connection) -> int:
        async with conn.execute(
            "SELECT value FROM settings WHERE key = ?", (SCHEMA_VERSION_KEY,)
        ) as cursor:
            row = await cursor.fetchone()
        if row is None:
            return 0
        return int(row["value"])

    async def _migrate(self, conn: aiosqlite.Connection, current_version: int) -> None:
        """Apply every migration newer than `current_version`, in order."""
        for migration in pending_migrations(current_version):
            await self._apply_migration(conn, migration, current_version)
            current_version = migration.version

    async def _apply_migration(
        self,
        conn: aiosqlite.Connection,
        migration: Migration,
        from_version: int,
    ) -> None:
        dropped = {}
        async with _atomic(conn):
            for table in migration.recreates:
                dropped[table] = await _count_rows_if_exists(conn, table)
            for statement in migration.statements:
                await conn.execute(statement)
            # Last statement of the step: the version commits with the DDL
            await conn.execute(UPSERT_SETTING_SQL, (SCHEMA_VERSION_KEY, str(migration.version)))

        self.applied_migrations.append(migration.version)
        logger.info(
            "schema_migrated",
            from_version=from_version,
            to_version=migration.version,
            description=migration.description,
        )
        await self._audit_logger.log_migration_applied(from_version, migration.version)
        for table, rows in dropped.items():
            await self._audit_logger.log_destructive_migration(
                to_version=migration.version,
                table=table,
                rows_dropped=rows,
            )

    async def _close_quietly(self, conn: aiosqlite.Connection) -> None:
        try:
            await conn.close()
        except Exception as e:
            logger.warning("database_close_failed", path=str(self.db_path), error=str(e))

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Run a write as one transaction on the shared connection.

        Writers are serialized so one coroutine's commit can never publish
        another's half-finished work. Commits on success, rolls back on error.

        Reads do not take the lock and share this connection, so a read that
        runs while a write is in progress sees its uncommitted changes (for
        example expenses already deleted by wipe_all while settings are not).
        Only other connections are isolated from an open write.
        """
        conn = await self.acquire()
        async with self._write_lock:
            async with _atomic(conn):
                yield conn

    async def schema_version(self) -> int:
        """The last committed migration version."""
        conn = await self.acquire()
        return await self._read_schema_version(conn)

    async def close(self) -> None:
        """Close the connection. A later acquire() reopens it."""
        if self._init_task is not None:
            try:
                await asyncio.shield(self._init_task)
            except StorageUnavailableError as e:
                # Already raised to the acquire() callers; nothing to close
                logger.debug("close_after_failed_initialization", error=str(e))
        if self._conn is not None:
            conn = self._conn
            self._conn = None
            await conn.close()


@asynccontextmanager
async def _atomic(conn: aiosqlite.Connection) -> AsyncIterator[aiosqlite.Connection]:
    await conn.execute("BEGIN IMMEDIATE")
    try:
        yield conn
    except BaseException:
        await conn.rollback()
        raise
    else:
        await conn.commit()


async def _count_rows_if_exists(conn: aiosqlite.Connection, table: str) -> int:
    async with conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?", (table,)
    ) as cursor:
        exists = await cursor.fetchone() is not None
    if not exists:
        return 0
    async with conn.execute(f"SELECT COUNT(*) FROM {table}") as cursor:
        row = await cursor.fetchone()
    return int(row[0])
