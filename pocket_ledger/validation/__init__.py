"""Expense validation package."""

from pocket_ledger.validation.validator import ExpenseValidator

__all__ = ["ExpenseValidator"]
