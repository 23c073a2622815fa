"""
Main Orchestrator for Expense Tracker

This module ties together all the components and defines the flows both
front ends call:
1. Expenses (validate → resolve category → mutate ledger)
2. Categories (add / rename / delete with ledger cascades)

DESIGN DECISION: The front ends hold no state and contain no rules.
The terminal menu and the web routes translate user input into calls on
these flows and translate the exceptions back into messages.

Filing an expense is an explicit two-step protocol:
1. resolve-or-create the category in the registry
2. append the expense referencing the resolved name
Each step can be asserted independently.
"""

from decimal import Decimal
from typing import Any, Mapping, NamedTuple, Optional
from uuid import UUID

from expense_tracker.audit import AuditLogger, create_correlation_id
from expense_tracker.config import AppSettings, StorageSettings, get_settings
from expense_tracker.ledger import CategoryRegistry, ExpenseLedger, total_amount
from expense_tracker.models.expense import Expense
from expense_tracker.queries import ReportBuilder
from expense_tracker.services.storage import (
    DocumentStoreInterface,
    JsonFileStore,
)
from expense_tracker.validation import ExpenseValidationError, ExpenseValidator


class ExpenseFlow:
    """
    Orchestrates changes to the ledger.

    Every mutation is validated first; rejected input never reaches the
    files.
    """

    def __init__(
        self,
        ledger: ExpenseLedger,
        registry: CategoryRegistry,
        validator: Optional[ExpenseValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._ledger = ledger
        self._registry = registry
        self._validator = validator or ExpenseValidator()
        self._audit_logger = audit_logger

    @property
    def validator(self) -> ExpenseValidator:
        return self._validator

    def _resolve_category(self, name: str, correlation_id: UUID) -> str:
        category, created = self._registry.resolve(name)
        if created and self._audit_logger:
            self._audit_logger.log_category_added(
                name=category,
                implicit=True,
                correlation_id=correlation_id,
            )
        return category

    def _log_rejection(
        self,
        error: ExpenseValidationError,
        entity_id: Optional[str],
        correlation_id: UUID,
    ) -> None:
        if self._audit_logger:
            self._audit_logger.log_validation_failed(
                issues=[issue.model_dump() for issue in error.result.issues],
                entity_id=entity_id,
                correlation_id=correlation_id,
            )

    def add_expense(
        self,
        form: Mapping[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> Expense:
        """
        Validate input and file a new expense.

        Raises:
            ExpenseValidationError: If the input is rejected (nothing is written)
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            draft = self._validator.validate_or_raise(form)
        except ExpenseValidationError as e:
            self._log_rejection(e, None, correlation_id)
            raise

        # Step 1: resolve-or-create the category
        category = self._resolve_category(draft.category, correlation_id)

        # Step 2: append the expense
        expense = self._ledger.add(
            amount=draft.amount,
            category=category,
            description=draft.description or "",
            expense_date=draft.date,
        )

        if self._audit_logger:
            self._audit_logger.log_expense_added(
                expense_id=expense.id,
                amount=str(expense.amount),
                category=expense.category,
                correlation_id=correlation_id,
            )
        return expense

    def edit_expense(
        self,
        expense_id: str,
        form: Mapping[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> Expense:
        """
        Apply the non-empty fields of ``form`` to an expense.

        Raises:
            NotFoundError: If the expense does not exist
            ExpenseValidationError: If a provided field is rejected
        """
        correlation_id = correlation_id or create_correlation_id()

        # Unknown ids are reported before any input problem
        self._ledger.get(expense_id)

        try:
            draft = self._validator.validate_or_raise(form, partial=True)
        except ExpenseValidationError as e:
            self._log_rejection(e, expense_id, correlation_id)
            raise

        changes = draft.changes()
        if "category" in changes:
            changes["category"] = self._resolve_category(changes["category"], correlation_id)

        expense = self._ledger.edit(expense_id, changes)

        if self._audit_logger:
            self._audit_logger.log_expense_updated(
                expense_id=expense.id,
                changed_fields=sorted(changes),
                correlation_id=correlation_id,
            )
        return expense

    def delete_expense(
        self,
        expense_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> Expense:
        """
        Remove an expense.

        Raises:
            NotFoundError: If the expense does not exist
        """
        expense = self._ledger.delete(expense_id)
        if self._audit_logger:
            self._audit_logger.log_expense_deleted(
                expense_id=expense.id,
                amount=str(expense.amount),
                category=expense.category,
                correlation_id=correlation_id,
            )
        return expense

    def get_expense(self, expense_id: str) -> Expense:
        return self._ledger.get(expense_id)

    def list_expenses(self) -> list[Expense]:
        """All expenses, most recent first."""
        return self._ledger.list_expenses()

    def recent_expenses(self, limit: int = 5) -> list[Expense]:
        return self._ledger.recent(limit)

    def all_in_stored_order(self) -> list[Expense]:
        return self._ledger.load()

    @staticmethod
    def total(expenses: list[Expense]) -> Decimal:
        return total_amount(expenses)


class CategoryFlow:
    """Orchestrates registry changes and their ledger cascades."""

    def __init__(
        self,
        registry: CategoryRegistry,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._registry = registry
        self._audit_logger = audit_logger

    @property
    def fallback_category(self) -> str:
        return self._registry.fallback_category

    def list_categories(self) -> list[str]:
        return self._registry.list_categories()

    def add_category(
        self,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """
        Register a category explicitly.

        Returns:
            True if the category was created, False if it already existed
        """
        created = self._registry.add(name)
        if created and self._audit_logger:
            self._audit_logger.log_category_added(
                name=name.strip(),
                implicit=False,
                correlation_id=correlation_id,
            )
        return created

    def rename_category(
        self,
        old: str,
        new: str,
        correlation_id: Optional[UUID] = None,
    ) -> int:
        """Rename a category; returns the number of relabeled expenses."""
        relabeled = self._registry.rename(old, new)
        if self._audit_logger:
            self._audit_logger.log_category_renamed(
                old_name=old,
                new_name=new.strip(),
                relabeled=relabeled,
                correlation_id=correlation_id,
            )
        return relabeled

    def delete_category(
        self,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> int:
        """Delete a category; returns the number of expenses moved to the fallback."""
        relabeled = self._registry.delete(name)
        if self._audit_logger:
            self._audit_logger.log_category_deleted(
                name=name,
                relabeled=relabeled,
                fallback=self._registry.fallback_category,
                correlation_id=correlation_id,
            )
        return relabeled


class AppComponents(NamedTuple):
    """Everything a front end needs, built by ``create_app_components``."""
    expenses: ExpenseFlow
    categories: CategoryFlow
    reports: ReportBuilder
    audit_logger: AuditLogger


def create_app_components(
    storage_settings: Optional[StorageSettings] = None,
    app_settings: Optional[AppSettings] = None,
    store: Optional[DocumentStoreInterface] = None,
    source: str = "core",
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        storage_settings: File locations and category seed.
                          Defaults to the environment configuration.
        app_settings: Validation thresholds. Defaults to the environment configuration.
        store: Storage backend. Defaults to JSON files from ``storage_settings``.
        source: Name of the front end, attached to audit events.
    """
    settings = get_settings()
    storage_settings = storage_settings or settings.storage
    app_settings = app_settings or settings.app

    store = store or JsonFileStore(storage_settings)
    audit_logger = AuditLogger(source=source)

    ledger = ExpenseLedger(store)
    registry = CategoryRegistry(
        store,
        ledger,
        storage_settings,
        audit_logger=audit_logger,
    )

    return AppComponents(
        expenses=ExpenseFlow(
            ledger,
            registry,
            validator=ExpenseValidator(app_settings),
            audit_logger=audit_logger,
        ),
        categories=CategoryFlow(registry, audit_logger=audit_logger),
        reports=ReportBuilder(ledger, registry),
        audit_logger=audit_logger,
    )
