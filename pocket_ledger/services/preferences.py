"""
Typed preferences over the settings store.

Callers read and write a Preferences model; this service parses the stored
text on the way out and serializes it on the way in. The stored form stays
plain text so older or newer app versions can still read it.
"""

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from pocket_ledger.models.expense import ValidationIssue
from pocket_ledger.models.preferences import Preferences
from pocket_ledger.services.storage.interface import (
    SettingsStorageInterface,
    ValidationError,
)


class PreferencesService:
    """Load, update and save user preferences."""

    def __init__(self, settings_storage: SettingsStorageInterface):
        self._storage = settings_storage

    async def load(self) -> Preferences:
        """Current preferences; defaults fill any key never saved."""
        return Preferences.from_settings_map(await self._storage.get_all())

    async def save(self, preferences: Preferences) -> None:
        """Persist every preference in one transaction."""
        await self._storage.set_many(preferences.to_settings_map())

    async def update(self, **changes: Any) -> Preferences:
        """
        Apply changes by field name and persist only the keys that changed.

        Raises:
            ValidationError: If a change is not a valid value for its field.
                Nothing is written in that case.
        """
        current = await self.load()
        try:
            updated = Preferences.model_validate({**current.model_dump(), **changes})
        except PydanticValidationError as e:
            raise ValidationError([
                ValidationIssue(
                    field=_storage_key(error["loc"]),
                    issue_type=error["type"],
                    message=error["msg"],
                )
                for error in e.errors()
            ]) from e

        before = current.to_settings_map()
        changed = {
            key: value
            for key, value in updated.to_settings_map().items()
            if before.get(key) != value
        }
        await self._storage.set_many(changed)
        return updated

    async def get_category_budgets(self) -> dict[str, float]:
        return (await self.load()).category_budgets

    async def set_category_budget(self, category: str, amount: float) -> dict[str, float]:
        """Set one category's monthly budget; an amount of 0 removes it."""
        budgets = dict(await self.get_category_budgets())
        if amount:
            budgets[category] = amount
        else:
            budgets.pop(category, None)
        updated = await self.update(category_budgets=budgets)
        return updated.category_budgets


def _storage_key(loc: tuple) -> str:
    """Name a failing preference by its storage key, whichever name pydantic used."""
    if not loc:
        return "preferences"
    head = str(loc[0])
    field = Preferences.model_fields.get(head)
    if field is not None and field.alias:
        head = field.alias
    return ".".join([head] + [str(part) for part in loc[1:]])
