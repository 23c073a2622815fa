"""
Category Registry

The registry is the ordered list of names stored in ``categories.json``.
It behaves as a set (exact, case-sensitive membership) and is kept
consistent with the ledger by two cascades:

- rename(old, new): every expense filed under ``old`` moves to ``new``
- delete(name): every expense filed under ``name`` moves to the fallback
  category ("Autres"), which is created if needed

CONSISTENCY RULE: the ledger is always written before the registry.
If the ledger cannot be loaded (corrupt file) the operation aborts before
either file is touched.
"""

from typing import Optional

from expense_tracker.audit import AuditLogger
from expense_tracker.config import StorageSettings
from expense_tracker.ledger.expenses import ExpenseLedger
from expense_tracker.services.storage import (
    DocumentStoreInterface,
    DuplicateError,
    InvalidFormatError,
    NotFoundError,
    StoreKind,
)


class InvalidCategoryError(ValueError):
    """A category name or category operation was rejected."""
    pass


def clean_category_name(name: Optional[str]) -> str:
    """
    Trim a category name.

    Raises:
        InvalidCategoryError: If nothing is left after trimming
    """
    cleaned = (name or "").strip()
    if not cleaned:
        raise InvalidCategoryError("Le nom de catégorie ne peut pas être vide.")
    return cleaned


class CategoryRegistry:
    """Load-mutate-save operations on the category list."""

    def __init__(
        self,
        store: DocumentStoreInterface,
        ledger: ExpenseLedger,
        settings: StorageSettings,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._ledger = ledger
        self._settings = settings
        self._audit_logger = audit_logger

    @property
    def fallback_category(self) -> str:
        return self._settings.fallback_category

    def _load(self) -> list[str]:
        names = self._store.load(StoreKind.CATEGORIES)
        location = self._store.location(StoreKind.CATEGORIES)
        for index, name in enumerate(names):
            if not isinstance(name, str):
                raise InvalidFormatError(
                    f"{location}: entry {index} is not a string",
                    location=location,
                )
        return names

    def _save(self, names: list[str]) -> None:
        self._store.save(StoreKind.CATEGORIES, names)

    def ensure_default(self) -> list[str]:
        """
        Return the registry, writing the default seed first if none exists.
        """
        if self._store.exists(StoreKind.CATEGORIES):
            return self._load()

        defaults = list(self._settings.default_categories)
        self._save(defaults)
        if self._audit_logger:
            self._audit_logger.log_categories_seeded(defaults)
        return defaults

    def list_categories(self) -> list[str]:
        """All category names in stored order."""
        return self.ensure_default()

    def contains(self, name: str) -> bool:
        return name in self.ensure_default()

    def add(self, name: str) -> bool:
        """
        Register a category.

        Returns:
            True if the registry grew, False if the name was already present

        Raises:
            InvalidCategoryError: If the name is empty after trimming
        """
        name = clean_category_name(name)
        names = self.ensure_default()
        if name in names:
            return False
        names.append(name)
        self._save(names)
        return True

    def resolve(self, name: str) -> tuple[str, bool]:
        """
        Resolve-or-create: the first step of filing an expense.

        Returns:
            (category name to store on the expense, whether it was created)
        """
        name = clean_category_name(name)
        created = self.add(name)
        return name, created

    def rename(self, old: str, new: str) -> int:
        """
        Rename a category in place and relabel its expenses.

        Returns:
            Number of expenses relabeled

        Raises:
            InvalidCategoryError: If ``new`` is empty after trimming
            DuplicateError: If ``new`` is already registered
            NotFoundError: If ``old`` is not registered
        """
        new = clean_category_name(new)
        names = self.ensure_default()

        if new in names:
            raise DuplicateError(f"La catégorie '{new}' existe déjà.")
        if old not in names:
            raise NotFoundError(f"Category not found: {old}")

        relabeled = self._ledger.relabel(old, new)
        names[names.index(old)] = new
        self._save(names)
        return relabeled

    def delete(self, name: str) -> int:
        """
        Remove a category, moving its expenses to the fallback category.

        Returns:
            Number of expenses relabeled

        Raises:
            NotFoundError: If the name is neither registered nor used by an expense
            InvalidCategoryError: If the fallback category itself is still in use
        """
        names = self.ensure_default()
        fallback = self.fallback_category
        referenced = self._ledger.count_by_category(name)

        if name not in names and not referenced:
            raise NotFoundError(f"Category not found: {name}")
        if referenced and name == fallback:
            raise InvalidCategoryError(
                f"La catégorie '{fallback}' est utilisée par {referenced} dépense(s) "
                "et ne peut pas être supprimée."
            )

        relabeled = 0
        if referenced:
            relabeled = self._ledger.relabel(name, fallback)

        names = [existing for existing in names if existing != name]
        if relabeled and fallback not in names:
            names.append(fallback)
        self._save(names)
        return relabeled
