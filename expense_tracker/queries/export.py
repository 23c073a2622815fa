"""Full-ledger exports (CSV and JSON)."""

import csv
import io
import json
from typing import Iterable

from expense_tracker.models.expense import Expense


CSV_HEADER = ["Date", "Montant", "Catégorie", "Description"]


def expenses_to_csv(expenses: Iterable[Expense]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_HEADER)
    for expense in expenses:
        writer.writerow([
            expense.date.isoformat(),
            float(expense.amount),
            expense.category,
            expense.description,
        ])
    return buffer.getvalue()


def expenses_to_json(expenses: Iterable[Expense]) -> str:
    """Pretty-printed dump in the same record format as ``expenses.json``."""
    return json.dumps(
        [expense.to_record() for expense in expenses],
        indent=2,
        ensure_ascii=False,
    )
