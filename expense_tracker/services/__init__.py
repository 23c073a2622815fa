"""Services package."""

from expense_tracker.services.storage import (
    DocumentStoreInterface,
    DuplicateError,
    InMemoryStore,
    InvalidFormatError,
    JsonFileStore,
    NotFoundError,
    StorageError,
    StoreKind,
)

__all__ = [
    "DocumentStoreInterface",
    "DuplicateError",
    "InMemoryStore",
    "InvalidFormatError",
    "JsonFileStore",
    "NotFoundError",
    "StorageError",
    "StoreKind",
]
