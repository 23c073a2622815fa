"""
Storage Services Package

Provides the abstract document store interface and its implementations.
JSON files are the production backend; the in-memory store backs the tests.
"""

from expense_tracker.services.storage.interface import (
    DocumentStoreInterface,
    DuplicateError,
    InvalidFormatError,
    NotFoundError,
    StorageError,
    StoreKind,
)
from expense_tracker.services.storage.json_files import JsonFileStore
from expense_tracker.services.storage.memory import InMemoryStore

__all__ = [
    # Interfaces
    "DocumentStoreInterface",
    "StoreKind",
    # Exceptions
    "DuplicateError",
    "InvalidFormatError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "InMemoryStore",
    "JsonFileStore",
]
