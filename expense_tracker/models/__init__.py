"""
Data Models Package

This package contains all Pydantic models used by the expense tracker.
Everything read from or written to the JSON files goes through these schemas.
"""

from expense_tracker.models.expense import (
    Expense,
    ExpenseDraft,
    ValidationIssue,
    ValidationResult,
    generate_expense_id,
)
from expense_tracker.models.report import (
    CategoryTotal,
    ExpenseReport,
    LedgerStats,
    MonthlyTotal,
)
from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense models
    "Expense",
    "ExpenseDraft",
    "ValidationIssue",
    "ValidationResult",
    "generate_expense_id",
    # Report models
    "CategoryTotal",
    "ExpenseReport",
    "LedgerStats",
    "MonthlyTotal",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
