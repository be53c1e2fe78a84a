"""
Fixed catalogs shared with the presentation layer.

The store never validates against these: an expense may carry any non-empty
category id. They exist so callers (budgets, displays) agree on the known ids.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class Category(BaseModel):
    """A spending category shown to the user."""
    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    emoji: str
    color: str


class PaymentMethod(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    label: str


class Currency(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    symbol: str
    label: str


CATEGORIES: tuple[Category, ...] = (
    Category(id="food", label="Food", emoji="🍔", color="#F97316"),
    Category(id="transport", label="Transport", emoji="🚗", color="#3B82F6"),
    Category(id="shopping", label="Shopping", emoji="🛍", color="#EC4899"),
    Category(id="bills", label="Bills", emoji="💡", color="#EAB308"),
    Category(id="entertainment", label="Entertainment", emoji="🎬", color="#8B5CF6"),
    Category(id="groceries", label="Groceries", emoji="🛒", color="#10B981"),
    Category(id="health", label="Health", emoji="💊", color="#EF4444"),
    Category(id="travel", label="Travel", emoji="✈", color="#06B6D4"),
    Category(id="other", label="Other", emoji="📦", color="#6B7280"),
)

PAYMENT_METHODS: tuple[PaymentMethod, ...] = (
    PaymentMethod(id="credit_card", label="Credit Card"),
    PaymentMethod(id="upi", label="UPI"),
    PaymentMethod(id="cash", label="Cash"),
    PaymentMethod(id="other", label="Other"),
)

CURRENCIES: tuple[Currency, ...] = (
    Currency(code="INR", symbol="₹", label="Indian Rupee"),
    Currency(code="USD", symbol="$", label="US Dollar"),
    Currency(code="EUR", symbol="€", label="Euro"),
    Currency(code="GBP", symbol="£", label="British Pound"),
)

_CATEGORIES_BY_ID = {category.id: category for category in CATEGORIES}


def get_category(category_id: str) -> Category:
    """Look up a category, falling back to "other" for unknown ids."""
    return _CATEGORIES_BY_ID.get(category_id, CATEGORIES[-1])


def get_currency(code: str) -> Optional[Currency]:
    for currency in CURRENCIES:
        if currency.code == code:
            return currency
    return None
