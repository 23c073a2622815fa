"""Shared fixtures: every test works on its own temporary data directory."""

import json
from pathlib import Path

import pytest

from expense_tracker.config import AppSettings, StorageSettings
from expense_tracker.orchestrator import create_app_components
from expense_tracker.services.storage import JsonFileStore


def make_record(
    expense_id: str,
    amount: float,
    category: str,
    expense_date: str = "2024-05-01",
    description: str = "",
) -> dict:
    """A record in the on-disk format of expenses.json."""
    return {
        "id": expense_id,
        "amount": amount,
        "category": category,
        "description": description,
        "date": expense_date,
        "created_at": f"{expense_date}T12:00:00+00:00",
    }


def write_json(path: Path, data) -> None:
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")


def read_json(path: Path):
    return json.loads(path.read_text(encoding="utf-8"))


@pytest.fixture
def storage_settings(tmp_path) -> StorageSettings:
    return StorageSettings(data_dir=tmp_path)


@pytest.fixture
def app_settings() -> AppSettings:
    return AppSettings(max_expense_amount=100000.0, future_date_tolerance_days=1)


@pytest.fixture
def store(storage_settings) -> JsonFileStore:
    return JsonFileStore(storage_settings)


@pytest.fixture
def components(storage_settings, app_settings):
    return create_app_components(
        storage_settings=storage_settings,
        app_settings=app_settings,
        source="test",
    )


@pytest.fixture
def transport_ledger(storage_settings):
    """Two Transport expenses (12.50 and 7.00) and the default registry."""
    write_json(storage_settings.expenses_path, [
        make_record("1", 12.50, "Transport", "2024-05-01", "Metro"),
        make_record("2", 7.00, "Transport", "2024-05-03", "Bus"),
    ])
    return storage_settings
