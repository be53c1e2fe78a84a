"""
Tests for the settings store and typed preferences.
"""

import pytest

from pocket_ledger.models.preferences import Preferences
from pocket_ledger.services import PreferencesService
from pocket_ledger.services.storage import (
    SCHEMA_VERSION_KEY,
    SQLiteDatabase,
    SQLiteExpenseStorage,
    SQLiteSettingsStorage,
    ValidationError,
)
from tests.factories import make_expense


@pytest.fixture
def settings(database):
    return SQLiteSettingsStorage(database)


@pytest.fixture
def preferences(settings):
    return PreferencesService(settings)


class TestSettingsStorage:
    """Tests for the raw key/value store."""

    @pytest.mark.asyncio
    async def test_set_then_get(self, settings):
        await settings.set("currency", "USD")
        assert await settings.get("currency") == "USD"

    @pytest.mark.asyncio
    async def test_missing_key_returns_default(self, settings):
        assert await settings.get("nope") == ""
        assert await settings.get("nope", "fallback") == "fallback"

    @pytest.mark.asyncio
    async def test_set_overwrites_single_row(self, settings, database):
        """Test writing a key twice keeps one row with the latest value."""
        await settings.set("theme", "dark")
        await settings.set("theme", "light")

        conn = await database.acquire()
        rows = await conn.execute_fetchall("SELECT value FROM settings WHERE key = 'theme'")
        assert [row[0] for row in rows] == ["light"]

    @pytest.mark.asyncio
    async def test_get_all_returns_user_settings(self, settings):
        await settings.set_many({"currency": "EUR", "monthlyBudget": "800"})
        assert await settings.get_all() == {"currency": "EUR", "monthlyBudget": "800"}

    @pytest.mark.asyncio
    async def test_get_all_hides_schema_version(self, settings):
        await settings.set("currency", "EUR")

        assert SCHEMA_VERSION_KEY not in await settings.get_all()
        assert (await settings.get_all(include_reserved=True))[SCHEMA_VERSION_KEY] == "2"

    @pytest.mark.asyncio
    async def test_non_text_value_is_rejected(self, settings):
        with pytest.raises(ValidationError) as exc_info:
            await settings.set("monthlyBudget", 500)

        assert exc_info.value.field == "value"
        assert await settings.get("monthlyBudget") == ""

    @pytest.mark.asyncio
    async def test_empty_key_is_rejected(self, settings):
        with pytest.raises(ValidationError) as exc_info:
            await settings.set("", "x")
        assert exc_info.value.field == "key"

    @pytest.mark.asyncio
    async def test_schema_version_cannot_be_written(self, settings):
        """Test the reserved version key is refused and left as stored."""
        with pytest.raises(ValidationError) as exc_info:
            await settings.set(SCHEMA_VERSION_KEY, "1")

        assert exc_info.value.field == "key"
        assert exc_info.value.issues[0].issue_type == "reserved"
        assert await settings.get(SCHEMA_VERSION_KEY) == "2"

    @pytest.mark.asyncio
    async def test_refused_version_write_keeps_expenses_on_reopen(
        self, settings, database, db_path, storage_settings
    ):
        """Test a rejected version downgrade cannot trigger the destructive migration."""
        expenses = SQLiteExpenseStorage(database)
        await expenses.add(make_expense())
        with pytest.raises(ValidationError):
            await settings.set_many({"currency": "USD", SCHEMA_VERSION_KEY: "two"})
        await database.close()

        reopened = SQLiteDatabase(db_path=db_path, settings=storage_settings)
        try:
            await reopened.acquire()
            assert reopened.applied_migrations == []
            assert await SQLiteExpenseStorage(reopened).count() == 1
            assert await SQLiteSettingsStorage(reopened).get("currency") == ""
        finally:
            await reopened.close()

    @pytest.mark.asyncio
    async def test_set_many_is_all_or_nothing(self, settings):
        """Test one bad value keeps the whole batch out."""
        with pytest.raises(ValidationError):
            await settings.set_many({"currency": "USD", "monthlyBudget": 5})
        assert await settings.get_all() == {}


class TestPreferencesService:
    """Tests for typed preference reads and writes."""

    @pytest.mark.asyncio
    async def test_defaults_when_nothing_saved(self, preferences):
        prefs = await preferences.load()
        assert prefs == Preferences()

    @pytest.mark.asyncio
    async def test_save_writes_every_key(self, preferences, settings):
        await preferences.save(Preferences(currency="EUR", app_lock_enabled=True))

        stored = await settings.get_all()
        assert set(stored) == set(Preferences.storage_keys())
        assert stored["currency"] == "EUR"
        assert stored["appLockEnabled"] == "true"

    @pytest.mark.asyncio
    async def test_update_serializes_to_text(self, preferences, settings):
        """Test numbers and flags are stored in their text form."""
        updated = await preferences.update(monthly_budget=5000, reminder_enabled=True)

        assert updated.monthly_budget == 5000.0
        assert await settings.get("monthlyBudget") == "5000"
        assert await settings.get("reminderEnabled") == "true"

    @pytest.mark.asyncio
    async def test_update_writes_only_changed_keys(self, preferences, settings):
        await preferences.update(currency="USD")
        assert await settings.get_all() == {"currency": "USD"}

    @pytest.mark.asyncio
    async def test_update_round_trips_through_load(self, preferences):
        await preferences.update(currency="GBP", currency_symbol="£", reminder_time="07:15")

        prefs = await preferences.load()
        assert prefs.currency == "GBP"
        assert prefs.currency_symbol == "£"
        assert prefs.reminder_time == "07:15"

    @pytest.mark.asyncio
    async def test_invalid_update_names_storage_key(self, preferences, settings):
        """Test the error uses the stored key name and nothing is written."""
        with pytest.raises(ValidationError) as exc_info:
            await preferences.update(reminder_time="7pm")

        assert exc_info.value.field == "reminderTime"
        assert await settings.get_all() == {}

    @pytest.mark.asyncio
    async def test_negative_monthly_budget_is_rejected(self, preferences):
        with pytest.raises(ValidationError) as exc_info:
            await preferences.update(monthly_budget=-1)
        assert exc_info.value.field == "monthlyBudget"

    @pytest.mark.asyncio
    async def test_bad_stored_value_falls_back_to_default(self, preferences, settings):
        await settings.set("monthlyBudget", "not a number")
        prefs = await preferences.load()
        assert prefs.monthly_budget == 10000.0

    @pytest.mark.asyncio
    async def test_category_budget_stored_as_json(self, preferences, settings):
        budgets = await preferences.set_category_budget("food", 3000)

        assert budgets == {"food": 3000.0}
        assert await settings.get("categoryBudgets") == '{"food": 3000.0}'
        assert await preferences.get_category_budgets() == {"food": 3000.0}

    @pytest.mark.asyncio
    async def test_zero_category_budget_removes_entry(self, preferences):
        await preferences.set_category_budget("food", 3000)
        await preferences.set_category_budget("bills", 1500)

        budgets = await preferences.set_category_budget("food", 0)
        assert budgets == {"bills": 1500.0}
