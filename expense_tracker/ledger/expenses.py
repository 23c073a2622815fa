"""
Expense Ledger

The ledger is the insertion-ordered list stored in ``expenses.json``.
Nothing is cached: every call loads the whole file, mutates the list in
memory and writes the whole file back. This is what lets the terminal
menu and the web app work on the same data without talking to each other.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional

from pydantic import ValidationError

from expense_tracker.models.expense import Expense, generate_expense_id, now
from expense_tracker.services.storage import (
    DocumentStoreInterface,
    InvalidFormatError,
    NotFoundError,
    StoreKind,
)


EDITABLE_FIELDS = ("amount", "category", "description", "date")


def total_amount(expenses: Iterable[Expense]) -> Decimal:
    """Sum of amounts (0 for no expenses)."""
    return sum((expense.amount for expense in expenses), Decimal("0"))


def sort_by_date(expenses: Iterable[Expense]) -> list[Expense]:
    """Newest first; same-day expenses ordered by creation time, newest first."""
    return sorted(
        expenses,
        key=lambda e: (e.date, e.created_at.timestamp()),
        reverse=True,
    )


class ExpenseLedger:
    """Load-mutate-save operations on the expense collection."""

    def __init__(self, store: DocumentStoreInterface):
        self._store = store

    def load(self) -> list[Expense]:
        """
        Load every expense in stored (insertion) order.

        Raises:
            InvalidFormatError: If a stored record is not a valid expense
        """
        records = self._store.load(StoreKind.EXPENSES)
        location = self._store.location(StoreKind.EXPENSES)

        expenses = []
        for index, record in enumerate(records):
            if not isinstance(record, dict):
                raise InvalidFormatError(
                    f"{location}: entry {index} is not an object",
                    location=location,
                )
            try:
                expenses.append(Expense.from_record(record))
            except ValidationError as e:
                raise InvalidFormatError(
                    f"{location}: entry {index} is not a valid expense ({e.error_count()} errors)",
                    location=location,
                ) from e
        return expenses

    def save(self, expenses: Iterable[Expense]) -> None:
        self._store.save(
            StoreKind.EXPENSES,
            [expense.to_record() for expense in expenses],
        )

    def list_expenses(self) -> list[Expense]:
        """All expenses, most recent date first."""
        return sort_by_date(self.load())

    def recent(self, limit: int = 5) -> list[Expense]:
        return self.list_expenses()[:limit]

    def get(self, expense_id: str) -> Expense:
        """
        Find one expense.

        Raises:
            NotFoundError: If no expense has this id
        """
        for expense in self.load():
            if expense.id == expense_id:
                return expense
        raise NotFoundError(f"Expense not found: {expense_id}")

    def count_by_category(self, category: str) -> int:
        return sum(1 for expense in self.load() if expense.category == category)

    def add(
        self,
        amount: Decimal,
        category: str,
        description: str = "",
        expense_date: Optional[date] = None,
    ) -> Expense:
        """
        Append a new expense.

        The category must already be resolved against the registry;
        the ledger does not touch ``categories.json``.
        """
        expenses = self.load()
        expense = Expense(
            id=generate_expense_id({e.id for e in expenses}),
            amount=amount,
            category=category,
            description=description,
            date=expense_date or date.today(),
            created_at=now(),
        )
        expenses.append(expense)
        self.save(expenses)
        return expense

    def edit(self, expense_id: str, changes: Mapping[str, Any]) -> Expense:
        """
        Apply provided, non-empty fields to an expense and stamp ``updated_at``.

        Raises:
            NotFoundError: If no expense has this id
        """
        update = {
            name: value
            for name, value in changes.items()
            if name in EDITABLE_FIELDS and value is not None and value != ""
        }

        expenses = self.load()
        for index, expense in enumerate(expenses):
            if expense.id == expense_id:
                update["updated_at"] = now()
                updated = expense.model_copy(update=update)
                expenses[index] = updated
                self.save(expenses)
                return updated

        raise NotFoundError(f"Expense not found: {expense_id}")

    def delete(self, expense_id: str) -> Expense:
        """
        Remove an expense.

        Raises:
            NotFoundError: If no expense has this id
        """
        expenses = self.load()
        for index, expense in enumerate(expenses):
            if expense.id == expense_id:
                del expenses[index]
                self.save(expenses)
                return expense

        raise NotFoundError(f"Expense not found: {expense_id}")

    def relabel(self, old: str, new: str) -> int:
        """
        Move every expense of category ``old`` to ``new``.

        The file is only rewritten when at least one expense changed.

        Returns:
            Number of expenses relabeled
        """
        expenses = self.load()
        relabeled = 0
        for index, expense in enumerate(expenses):
            if expense.category == old:
                expenses[index] = expense.model_copy(update={"category": new})
                relabeled += 1

        if relabeled:
            self.save(expenses)
        return relabeled
