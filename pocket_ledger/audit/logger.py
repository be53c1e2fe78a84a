"""
Audit Logger

DESIGN DECISION: Every mutation of the store is logged.
This provides:
1. Traceability of edits, deletes and wipes
2. A record of every schema migration (including destructive ones)
3. Debugging capability when a user reports lost data

The audit logger:
- Is async so call sites read the same as storage calls
- Gracefully handles failures (logging never breaks a write)
"""

import logging
from typing import Optional

import structlog

from pocket_ledger.config import AppSettings
from pocket_ledger.models.audit import AuditEvent, AuditEventBuilder


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(app_settings: Optional[AppSettings] = None) -> None:
    """
    Apply the configured log level, and switch to console output in debug mode.

    Call once at application start; the JSON setup above is the default.
    """
    app_settings = app_settings or AppSettings()
    level = getattr(logging, app_settings.log_level)
    logging.basicConfig(format="%(message)s", level=level)
    # basicConfig is a no-op once the root logger has handlers
    logging.getLogger().setLevel(level)
    if app_settings.debug_mode:
        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.format_exc_info,
                structlog.dev.ConsoleRenderer(),
            ],
        )


class AuditLogger:
    """Central audit logging service, backed by the structured local log."""

    def __init__(self):
        self._logger = structlog.get_logger("pocket_ledger.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event at its severity.

        Returns False if the event could not be written; never raises.
        """
        log_dict = event.to_log_dict()

        try:
            if event.severity.value == "error":
                self._logger.error("audit_event", **log_dict)
            elif event.severity.value == "warning":
                self._logger.warning("audit_event", **log_dict)
            elif event.severity.value == "debug":
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            logging.getLogger(__name__).error(
                "Failed to write audit event %s: %s", event.event_id, e
            )
            return False

        return True

    async def log_database_opened(
        self,
        path: str,
        journal_mode: str,
        schema_version: int,
    ) -> None:
        await self.log(AuditEventBuilder.database_opened(
            path=path,
            journal_mode=journal_mode,
            schema_version=schema_version,
        ))

    async def log_migration_applied(self, from_version: int, to_version: int) -> None:
        await self.log(AuditEventBuilder.migration_applied(
            from_version=from_version,
            to_version=to_version,
        ))

    async def log_destructive_migration(
        self,
        to_version: int,
        table: str,
        rows_dropped: int,
    ) -> None:
        """Log a migration step that discarded a table's rows."""
        await self.log(AuditEventBuilder.destructive_migration(
            to_version=to_version,
            table=table,
            rows_dropped=rows_dropped,
        ))

    async def log_initialization_failed(self, path: str, error_message: str) -> None:
        await self.log(AuditEventBuilder.initialization_failed(
            path=path,
            error_message=error_message,
        ))

    async def log_expense_added(self, expense_id: int, amount: float, category: str) -> None:
        await self.log(AuditEventBuilder.expense_added(
            expense_id=expense_id,
            amount=amount,
            category=category,
        ))

    async def log_expense_updated(self, expense_id: int, rows_affected: int) -> None:
        await self.log(AuditEventBuilder.expense_updated(
            expense_id=expense_id,
            rows_affected=rows_affected,
        ))

    async def log_expense_deleted(self, expense_id: int, rows_affected: int) -> None:
        await self.log(AuditEventBuilder.expense_deleted(
            expense_id=expense_id,
            rows_affected=rows_affected,
        ))

    async def log_validation_failed(self, issues: list[dict]) -> None:
        await self.log(AuditEventBuilder.validation_failed(issues=issues))

    async def log_setting_updated(self, keys: list[str]) -> None:
        await self.log(AuditEventBuilder.setting_updated(keys=keys))

    async def log_data_exported(self, row_count: int) -> None:
        await self.log(AuditEventBuilder.data_exported(row_count=row_count))

    async def log_data_wiped(self, expenses_deleted: int, settings_deleted: int) -> None:
        await self.log(AuditEventBuilder.data_wiped(
            expenses_deleted=expenses_deleted,
            settings_deleted=settings_deleted,
        ))
