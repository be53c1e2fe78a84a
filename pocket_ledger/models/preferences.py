"""
Typed user preferences.

Settings are persisted as text (one row per key). This model is the boundary
where that text is parsed on read and serialized on write, so nothing past it
handles "true"/"false" strings or JSON blobs by hand.
"""

import json
from typing import Mapping

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


logger = structlog.get_logger(__name__)


class Preferences(BaseModel):
    """
    User preferences with their storage keys as aliases.

    `from_settings_map` tolerates bad stored values (falls back to the field's
    default); constructing the model directly validates strictly.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        validate_assignment=True,
        str_strip_whitespace=True,
    )

    currency: str = Field(
        default="INR",
        alias="currency",
        min_length=1,
        description="ISO currency code"
    )
    currency_symbol: str = Field(
        default="₹",
        alias="currencySymbol",
        description="Symbol shown next to amounts"
    )
    monthly_budget: float = Field(
        default=10000.0,
        alias="monthlyBudget",
        ge=0,
        description="Spending budget for a calendar month"
    )
    default_payment_method: str = Field(
        default="cash",
        alias="defaultPaymentMethod",
        min_length=1,
    )
    reminder_enabled: bool = Field(
        default=False,
        alias="reminderEnabled",
    )
    reminder_time: str = Field(
        default="20:00",
        alias="reminderTime",
        pattern=r"^([01]\d|2[0-3]):[0-5]\d$",
        description="Daily reminder time, HH:MM"
    )
    app_lock_enabled: bool = Field(
        default=False,
        alias="appLockEnabled",
    )
    category_budgets: dict[str, float] = Field(
        default_factory=dict,
        alias="categoryBudgets",
        description="Per-category monthly budget"
    )

    @field_validator('category_budgets', mode='before')
    @classmethod
    def parse_category_budgets(cls, v):
        """Accept the JSON text form as stored."""
        if isinstance(v, str):
            return json.loads(v or "{}")
        return v

    @field_validator('category_budgets')
    @classmethod
    def validate_category_budgets(cls, v: dict[str, float]) -> dict[str, float]:
        for category, amount in v.items():
            if amount < 0:
                raise ValueError(f"Budget for {category} cannot be negative")
        return v

    @classmethod
    def storage_keys(cls) -> list[str]:
        return [field.alias for field in cls.model_fields.values()]

    @classmethod
    def from_settings_map(cls, values: Mapping[str, str]) -> "Preferences":
        """Parse stored text values; unknown keys are ignored."""
        parsed = {}
        for name, field in cls.model_fields.items():
            if field.alias not in values:
                continue
            raw = values[field.alias]
            try:
                cls.model_validate({field.alias: raw})
            except ValidationError as e:
                logger.warning(
                    "preference_parse_failed",
                    key=field.alias,
                    value=raw,
                    error=str(e),
                )
                continue
            parsed[name] = raw
        return cls(**parsed)

    def to_settings_map(self) -> dict[str, str]:
        """Serialize every preference to its stored text form."""
        data = self.model_dump()
        result = {}
        for name, field in type(self).model_fields.items():
            result[field.alias] = serialize_value(data[name])
        return result


def serialize_value(value) -> str:
    """Text form of a preference value as the settings table stores it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, dict):
        return json.dumps(value, sort_keys=True)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
