"""
Report Builder

DESIGN DECISION: Reports are DETERMINISTIC aggregations over the full
ledger, recomputed on every call. There is no stored aggregate state to
drift out of sync with the files; correctness only depends on the ledger
having been reloaded first.

The aggregation functions take plain lists so they can be reused on a
ledger that was already loaded.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from expense_tracker.ledger import CategoryRegistry, ExpenseLedger, total_amount
from expense_tracker.models.expense import Expense
from expense_tracker.models.report import (
    CategoryTotal,
    ExpenseReport,
    LedgerStats,
    MonthlyTotal,
)


CENT = Decimal("0.01")


def compute_stats(expenses: list[Expense], categories: list[str]) -> LedgerStats:
    """Total, count and average; the average is 0 for an empty ledger."""
    total = total_amount(expenses)
    count = len(expenses)
    average = (total / count).quantize(CENT, rounding=ROUND_HALF_UP) if count else Decimal("0")
    return LedgerStats(
        total_amount=total,
        total_count=count,
        categories_count=len(categories),
        average_expense=average,
    )


def totals_by_category(
    expenses: Iterable[Expense],
    categories: list[str],
) -> list[CategoryTotal]:
    """
    Total and count per category, largest total first.

    Every registered category is listed (with zero totals if unused).
    Categories used by expenses but missing from the registry are listed too.
    """
    groups: dict[str, CategoryTotal] = {
        name: CategoryTotal(name=name) for name in categories
    }

    for expense in expenses:
        if expense.category not in groups:
            groups[expense.category] = CategoryTotal(name=expense.category)
        group = groups[expense.category]
        group.total += expense.amount
        group.count += 1

    # sorted() is stable: equal totals keep registry order
    return sorted(groups.values(), key=lambda group: -group.total)


def totals_by_month(expenses: Iterable[Expense]) -> list[MonthlyTotal]:
    """Total and count per ``YYYY-MM`` month, most recent month first."""
    groups: dict[str, MonthlyTotal] = {}

    for expense in expenses:
        key = expense.month
        if key not in groups:
            groups[key] = MonthlyTotal(month=key)
        groups[key].total += expense.amount
        groups[key].count += 1

    return sorted(groups.values(), key=lambda group: group.month, reverse=True)


class ReportBuilder:
    """Builds reports from freshly loaded ledger and registry data."""

    def __init__(self, ledger: ExpenseLedger, registry: CategoryRegistry):
        self._ledger = ledger
        self._registry = registry

    def stats(self) -> LedgerStats:
        return compute_stats(self._ledger.load(), self._registry.list_categories())

    def by_category(self) -> list[CategoryTotal]:
        return totals_by_category(self._ledger.load(), self._registry.list_categories())

    def by_month(self) -> list[MonthlyTotal]:
        return totals_by_month(self._ledger.load())

    def build(self, category: Optional[str] = None) -> ExpenseReport:
        """
        Full report, loading each file once.

        Args:
            category: Restrict the expenses to one category
        """
        expenses = self._ledger.load()
        categories = self._registry.list_categories()
        if category is not None:
            expenses = [expense for expense in expenses if expense.category == category]

        return ExpenseReport(
            stats=compute_stats(expenses, categories),
            by_category=totals_by_category(expenses, categories),
            by_month=totals_by_month(expenses),
        )
