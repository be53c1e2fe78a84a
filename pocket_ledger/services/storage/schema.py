"""
Schema definition and versioned migrations.

The settings table is created unconditionally on open because the schema
version lives in it. Everything else is created by migrations, applied in
order; each migration commits its DDL together with its version number.
"""

from dataclasses import dataclass


SCHEMA_VERSION_KEY = "schema_version"

# Keys the store manages itself; hidden from user-facing settings snapshots.
RESERVED_SETTING_KEYS = frozenset({SCHEMA_VERSION_KEY})

CREATE_SETTINGS_SQL = """
    CREATE TABLE IF NOT EXISTS settings (
        key TEXT PRIMARY KEY,
        value TEXT NOT NULL
    )
"""

CREATE_EXPENSES_SQL = """
    CREATE TABLE expenses (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        amount REAL NOT NULL,
        category TEXT NOT NULL,
        payment_method TEXT NOT NULL DEFAULT 'cash',
        note TEXT DEFAULT '',
        date TEXT NOT NULL,              -- ISO-8601, ordering/filter key
        created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
    )
"""

EXPENSE_INDEXES = [
    ("idx_expenses_date", "expenses", "date"),
    ("idx_expenses_category", "expenses", "category"),
]


@dataclass(frozen=True)
class Migration:
    """
    One schema step.

    `recreates` lists tables dropped and rebuilt by this step; their rows are
    lost, and the schema manager logs how many.
    """
    version: int
    description: str
    statements: tuple[str, ...]
    recreates: tuple[str, ...] = ()


def _index_statements() -> tuple[str, ...]:
    return tuple(
        f"CREATE INDEX IF NOT EXISTS {index_name} ON {table}({columns})"
        for index_name, table, columns in EXPENSE_INDEXES
    )


# Version 2 replaces the expenses table of versions 0/1, whose columns were
# misnamed. It is destructive by intent: pre-release data is discarded once.
# Later migrations must preserve rows (ALTER TABLE / copy), not drop them.
MIGRATIONS: tuple[Migration, ...] = (
    Migration(
        version=2,
        description="Recreate expenses table with corrected column names",
        statements=(
            "DROP TABLE IF EXISTS expenses",
            CREATE_EXPENSES_SQL,
        ) + _index_statements(),
        recreates=("expenses",),
    ),
)

TARGET_SCHEMA_VERSION = MIGRATIONS[-1].version


def pending_migrations(current_version: int) -> list[Migration]:
    """Migrations newer than `current_version`, oldest first."""
    return [m for m in MIGRATIONS if m.version > current_version]
