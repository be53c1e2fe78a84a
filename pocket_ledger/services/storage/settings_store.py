"""
SQLite settings store.

One row per key, values always text. Writes are upserts, so the table never
holds two rows for a key.
"""

from typing import Mapping, Optional

from pocket_ledger.audit import AuditLogger
from pocket_ledger.models.expense import ValidationIssue
from pocket_ledger.services.storage.interface import (
    SettingsStorageInterface,
    ValidationError,
)
from pocket_ledger.services.storage.schema import RESERVED_SETTING_KEYS
from pocket_ledger.services.storage.sqlite import UPSERT_SETTING_SQL, SQLiteDatabase


class SQLiteSettingsStorage(SettingsStorageInterface):
    """Key/value settings backed by the `settings` table."""

    def __init__(
        self,
        database: SQLiteDatabase,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._db = database
        self._audit_logger = audit_logger or AuditLogger()

    async def get(self, key: str, default: str = "") -> str:
        conn = await self._db.acquire()
        async with conn.execute("SELECT value FROM settings WHERE key = ?", (key,)) as cursor:
            row = await cursor.fetchone()
        return row["value"] if row is not None else default

    async def set(self, key: str, value: str) -> None:
        await self.set_many({key: value})

    async def set_many(self, values: Mapping[str, str]) -> None:
        if not values:
            return
        _check_values(values)

        async with self._db.transaction() as conn:
            await conn.executemany(UPSERT_SETTING_SQL, list(values.items()))

        await self._audit_logger.log_setting_updated(sorted(values))

    async def get_all(self, include_reserved: bool = False) -> dict[str, str]:
        conn = await self._db.acquire()
        rows = await conn.execute_fetchall("SELECT key, value FROM settings")
        return {
            row["key"]: row["value"]
            for row in rows
            if include_reserved or row["key"] not in RESERVED_SETTING_KEYS
        }


def _check_values(values: Mapping[str, str]) -> None:
    issues = []
    for key, value in values.items():
        if not isinstance(key, str) or not key:
            issues.append(ValidationIssue(
                field="key",
                issue_type="invalid_value",
                message=f"Setting key must be a non-empty string (got {key!r})",
            ))
        elif key in RESERVED_SETTING_KEYS:
            issues.append(ValidationIssue(
                field="key",
                issue_type="reserved",
                message=f"Setting {key} is managed by the store and cannot be written",
            ))
        elif not isinstance(value, str):
            issues.append(ValidationIssue(
                field="value",
                issue_type="invalid_type",
                message=f"Setting {key} must be stored as text (got {type(value).__name__})",
            ))
    if issues:
        raise ValidationError(issues)
