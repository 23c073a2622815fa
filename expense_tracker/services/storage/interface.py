"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the JSON files as the backend both front ends share
2. Use in-memory storage for testing
3. Keep the category/ledger rules decoupled from file handling

The interface is intentionally tiny: a document store holding two ordered
collections. The whole collection is read and written every time; there
are no partial updates, no locking and no transactions.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional


class StoreKind(str, Enum):
    """The two documents the application persists."""
    EXPENSES = "expenses"
    CATEGORIES = "categories"


class DocumentStoreInterface(ABC):
    """
    Abstract interface for collection storage.

    Any storage implementation must implement these methods.
    Collections are plain JSON-compatible lists.
    """

    @abstractmethod
    def load(self, kind: StoreKind) -> list[Any]:
        """
        Load a whole collection.

        Args:
            kind: Which collection to load

        Returns:
            The stored collection, or an empty list if nothing is stored yet

        Raises:
            InvalidFormatError: If stored data exists but cannot be parsed
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def save(self, kind: StoreKind, collection: list[Any]) -> None:
        """
        Replace a whole collection.

        Args:
            kind: Which collection to write
            collection: The full collection

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def exists(self, kind: StoreKind) -> bool:
        """
        Check whether a collection has ever been saved.

        Args:
            kind: Which collection to check

        Returns:
            True if the backing document exists
        """
        pass

    @abstractmethod
    def location(self, kind: StoreKind) -> str:
        """Human-readable location of a collection (for error messages)."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class InvalidFormatError(StorageError):
    """Stored data exists but cannot be understood."""

    def __init__(self, message: str, location: Optional[str] = None):
        super().__init__(message)
        self.location = location
