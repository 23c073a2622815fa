"""Reports and exports package."""

from expense_tracker.queries.export import expenses_to_csv, expenses_to_json
from expense_tracker.queries.reports import (
    ReportBuilder,
    compute_stats,
    totals_by_category,
    totals_by_month,
)

__all__ = [
    "ReportBuilder",
    "compute_stats",
    "expenses_to_csv",
    "expenses_to_json",
    "totals_by_category",
    "totals_by_month",
]
