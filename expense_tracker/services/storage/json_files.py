"""
JSON File Storage Implementation

DESIGN DECISION: Two flat JSON files act as the database because:
1. Users can read and fix their data with any text editor
2. No database setup required
3. The terminal menu and the web app can share the files without a server

TRADEOFFS:
- No locking: two processes writing at once lose one update (last writer wins)
- No partial updates: every save rewrites the whole file
- No indexes: every query is a scan of the loaded list

The implementation follows the abstract interface, so a real database can
replace it later without changing the category/ledger rules.
"""

import json
import os
from pathlib import Path
from typing import Any

from expense_tracker.config import StorageSettings
from expense_tracker.services.storage.interface import (
    DocumentStoreInterface,
    InvalidFormatError,
    StorageError,
    StoreKind,
)


class JsonFileStore(DocumentStoreInterface):
    """
    Stores each collection as a pretty-printed UTF-8 JSON array.

    File locations come from ``StorageSettings``; nothing is read from
    module-level constants.
    """

    def __init__(self, settings: StorageSettings):
        self._paths = {
            StoreKind.EXPENSES: settings.expenses_path,
            StoreKind.CATEGORIES: settings.categories_path,
        }

    def path_for(self, kind: StoreKind) -> Path:
        return self._paths[StoreKind(kind)]

    def location(self, kind: StoreKind) -> str:
        return str(self.path_for(kind))

    def exists(self, kind: StoreKind) -> bool:
        return self.path_for(kind).is_file()

    def load(self, kind: StoreKind) -> list[Any]:
        """Load a collection; a missing file is an empty collection."""
        path = self.path_for(kind)
        if not path.exists():
            return []

        try:
            with path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise InvalidFormatError(
                f"{path} is not valid JSON: {e}",
                location=str(path),
            ) from e
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

        if not isinstance(data, list):
            raise InvalidFormatError(
                f"{path} must contain a JSON array, found {type(data).__name__}",
                location=str(path),
            )
        return data

    def save(self, kind: StoreKind, collection: list[Any]) -> None:
        """
        Overwrite a collection.

        The document is written to a sibling temporary file first and then
        moved over the target, so readers never see a half-written file.
        """
        path = self.path_for(kind)
        tmp_path = path.with_name(f"{path.name}.tmp")

        try:
            payload = json.dumps(
                list(collection),
                indent=2,
                ensure_ascii=False,
                allow_nan=False,
            )
        except ValueError as e:
            raise StorageError(f"Refusing to write {path}: {e}") from e

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as fh:
                fh.write(payload)
                fh.write("\n")
            os.replace(tmp_path, path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise StorageError(f"Failed to write {path}: {e}") from e
