"""
Audit Models for Pocket Ledger

Every mutation of the store and every schema lifecycle step produces an
AuditEvent. Events are written to the local structured log so the history of
a database (migrations, wipes, edits) can be reconstructed when debugging.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Schema lifecycle
    DATABASE_OPENED = "database_opened"
    MIGRATION_APPLIED = "migration_applied"
    DESTRUCTIVE_MIGRATION = "destructive_migration"
    INITIALIZATION_FAILED = "initialization_failed"

    # Expenses
    EXPENSE_ADDED = "expense_added"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"
    VALIDATION_FAILED = "validation_failed"

    # Settings
    SETTING_UPDATED = "setting_updated"

    # Bulk operations
    DATA_EXPORTED = "data_exported"
    DATA_WIPED = "data_wiped"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # What entity is this about? ("expense", "setting", "schema", "store")
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_added(expense_id, amount, category)
        event = AuditEventBuilder.migration_applied(2)
    """

    @staticmethod
    def database_opened(path: str, journal_mode: str, schema_version: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATABASE_OPENED,
            entity_type="store",
            entity_id=path,
            description=f"Database opened at schema version {schema_version}",
            details={
                "journal_mode": journal_mode,
                "schema_version": schema_version,
            },
        )

    @staticmethod
    def migration_applied(from_version: int, to_version: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MIGRATION_APPLIED,
            entity_type="schema",
            entity_id=str(to_version),
            description=f"Schema migrated from version {from_version} to {to_version}",
            details={
                "from_version": from_version,
                "to_version": to_version,
            },
        )

    @staticmethod
    def destructive_migration(to_version: int, table: str, rows_dropped: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DESTRUCTIVE_MIGRATION,
            severity=AuditSeverity.WARNING if rows_dropped else AuditSeverity.INFO,
            entity_type="schema",
            entity_id=str(to_version),
            description=f"Table {table} recreated, {rows_dropped} rows discarded",
            details={
                "table": table,
                "rows_dropped": rows_dropped,
            },
        )

    @staticmethod
    def initialization_failed(path: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INITIALIZATION_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="store",
            entity_id=path,
            description="Database could not be opened or migrated",
            error_message=error_message,
        )

    @staticmethod
    def expense_added(expense_id: int, amount: float, category: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            entity_type="expense",
            entity_id=str(expense_id),
            description=f"Expense recorded: {category} {amount}",
            details={
                "amount": amount,
                "category": category,
            },
        )

    @staticmethod
    def expense_updated(expense_id: int, rows_affected: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_UPDATED,
            entity_type="expense",
            entity_id=str(expense_id),
            description=(
                "Expense updated" if rows_affected else "Update matched no expense"
            ),
            details={"rows_affected": rows_affected},
        )

    @staticmethod
    def expense_deleted(expense_id: int, rows_affected: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            entity_type="expense",
            entity_id=str(expense_id),
            description=(
                "Expense deleted" if rows_affected else "Delete matched no expense"
            ),
            details={"rows_affected": rows_affected},
        )

    @staticmethod
    def validation_failed(issues: list[dict]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="expense",
            description=f"Expense rejected with {len(issues)} issues",
            details={"issues": issues},
        )

    @staticmethod
    def setting_updated(keys: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SETTING_UPDATED,
            entity_type="setting",
            entity_id=",".join(keys),
            description=f"Settings updated: {', '.join(keys)}",
            details={"keys": keys},
        )

    @staticmethod
    def data_exported(row_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_EXPORTED,
            entity_type="store",
            description=f"Exported {row_count} expenses",
            details={"row_count": row_count},
        )

    @staticmethod
    def data_wiped(expenses_deleted: int, settings_deleted: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_WIPED,
            severity=AuditSeverity.WARNING,
            entity_type="store",
            description="All expenses and settings wiped",
            details={
                "expenses_deleted": expenses_deleted,
                "settings_deleted": settings_deleted,
            },
        )
