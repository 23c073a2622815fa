"""In-memory document store, used by the test suite."""

import copy
from typing import Any, Optional

from expense_tracker.services.storage.interface import (
    DocumentStoreInterface,
    StoreKind,
)


class InMemoryStore(DocumentStoreInterface):
    """
    Keeps collections in a dict.

    Loads and saves copy the data, so callers mutating a loaded list do not
    change what is stored until they save, exactly like the file store.
    """

    def __init__(self, initial: Optional[dict[StoreKind, list[Any]]] = None):
        self._documents: dict[StoreKind, list[Any]] = {}
        for kind, collection in (initial or {}).items():
            self._documents[StoreKind(kind)] = copy.deepcopy(list(collection))

    def location(self, kind: StoreKind) -> str:
        return f"memory://{StoreKind(kind).value}"

    def exists(self, kind: StoreKind) -> bool:
        return StoreKind(kind) in self._documents

    def load(self, kind: StoreKind) -> list[Any]:
        return copy.deepcopy(self._documents.get(StoreKind(kind), []))

    def save(self, kind: StoreKind, collection: list[Any]) -> None:
        self._documents[StoreKind(kind)] = copy.deepcopy(list(collection))
