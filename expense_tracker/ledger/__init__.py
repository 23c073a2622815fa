"""Expense ledger and category registry."""

from expense_tracker.ledger.categories import (
    CategoryRegistry,
    InvalidCategoryError,
    clean_category_name,
)
from expense_tracker.ledger.expenses import (
    ExpenseLedger,
    sort_by_date,
    total_amount,
)

__all__ = [
    "CategoryRegistry",
    "ExpenseLedger",
    "InvalidCategoryError",
    "clean_category_name",
    "sort_by_date",
    "total_amount",
]
