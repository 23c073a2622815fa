"""Expense input validation package."""

from expense_tracker.validation.validator import (
    ExpenseValidationError,
    ExpenseValidator,
    parse_amount,
    parse_date,
)

__all__ = ["ExpenseValidationError", "ExpenseValidator", "parse_amount", "parse_date"]
