"""
Tests for Expense Tracker models

Test strategy:
1. Unit tests for individual components (models, validators)
2. Integration tests for flows on temporary directories
3. No shared files: every test gets its own data directory
"""

import pytest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

from expense_tracker.models.expense import (
    Expense,
    ExpenseDraft,
    ValidationIssue,
    ValidationResult,
    generate_expense_id,
)
from expense_tracker.models.report import (
    CategoryTotal,
    LedgerStats,
    MonthlyTotal,
)
from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from expense_tracker.audit import AuditLogger, create_correlation_id


class TestExpenseModel:
    """Tests for the stored expense record."""

    def test_expense_from_record(self):
        """Test loading a record as written to expenses.json."""
        expense = Expense.from_record({
            "id": "1714557600123456",
            "amount": 12.5,
            "category": "Transport",
            "description": "Metro",
            "date": "2024-05-01",
            "created_at": "2024-05-01T10:00:00+02:00",
        })
        assert expense.amount == Decimal("12.5")
        assert expense.date == date(2024, 5, 1)
        assert expense.updated_at is None

    def test_expense_accepts_legacy_timestamps(self):
        """Test the first-version timestamp format still loads."""
        expense = Expense.from_record({
            "id": "1",
            "amount": 3,
            "category": "Alimentation",
            "description": "Pain",
            "date": "2024-05-01",
            "created_at": "2024-05-01 10:00:00 +0200",
            "updated_at": "2024-05-02 08:30:00 +0200",
        })
        assert expense.created_at.utcoffset() == timedelta(hours=2)
        assert expense.updated_at.day == 2

    def test_expense_coerces_numeric_id_and_null_description(self):
        """Test hand-edited records with a numeric id and null description."""
        expense = Expense.from_record({
            "id": 42,
            "amount": 1,
            "category": "Autres",
            "description": None,
            "date": "2024-01-01",
        })
        assert expense.id == "42"
        assert expense.description == ""

    def test_expense_ignores_unknown_keys(self):
        """Test extra keys on disk are tolerated."""
        expense = Expense.from_record({
            "id": "1",
            "amount": 1,
            "category": "Autres",
            "date": "2024-01-01",
            "tags": ["old"],
        })
        assert not hasattr(expense, "tags")

    def test_expense_requires_date(self):
        """Test a record without a date is rejected."""
        with pytest.raises(ValueError):
            Expense.from_record({"id": "1", "amount": 1, "category": "Autres"})

    def test_month_bucket(self):
        """Test the YYYY-MM bucket used by the monthly report."""
        expense = Expense(id="1", amount=Decimal("1"), category="Autres", date=date(2024, 3, 9))
        assert expense.month == "2024-03"

    def test_to_record_writes_canonical_format(self):
        """Test amounts are JSON numbers and timestamps ISO-8601."""
        created = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)
        expense = Expense(
            id="1",
            amount=Decimal("12.50"),
            category="Transport",
            description="Metro",
            date=date(2024, 5, 1),
            created_at=created,
        )
        record = expense.to_record()
        assert record["amount"] == 12.5
        assert isinstance(record["amount"], float)
        assert record["date"] == "2024-05-01"
        assert record["created_at"] == "2024-05-01T10:00:00+00:00"
        assert "updated_at" not in record

    def test_to_record_includes_updated_at_once_edited(self):
        """Test updated_at is only written after an edit."""
        expense = Expense(
            id="1",
            amount=Decimal("1"),
            category="Autres",
            date=date(2024, 5, 1),
            updated_at=datetime(2024, 5, 2, tzinfo=timezone.utc),
        )
        assert expense.to_record()["updated_at"].startswith("2024-05-02")


class TestExpenseIds:
    """Tests for timestamp-derived ids."""

    def test_id_is_digits_only(self):
        """Test the id is the epoch time without its decimal point."""
        expense_id = generate_expense_id()
        assert expense_id.isdigit()

    def test_id_avoids_taken_values(self):
        """Test a generated id never collides with an existing one."""
        first = generate_expense_id()
        second = generate_expense_id({first})
        assert second != first


class TestExpenseDraft:
    """Tests for parsed user input."""

    def test_changes_only_contains_provided_fields(self):
        """Test blank fields are not part of an edit patch."""
        draft = ExpenseDraft(amount=Decimal("5"), category="", description=None)
        assert draft.changes() == {"amount": Decimal("5")}


class TestReportModels:
    """Tests for report models."""

    def test_category_total_defaults(self):
        """Test an unused category totals zero."""
        group = CategoryTotal(name="Loisirs")
        assert group.total == Decimal("0")
        assert group.count == 0

    def test_monthly_total_rejects_bad_month(self):
        """Test the month key must be YYYY-MM."""
        with pytest.raises(ValueError):
            MonthlyTotal(month="2024-5")

    def test_stats_api_dict_uses_numbers(self):
        """Test /api/stats receives JSON numbers."""
        stats = LedgerStats(
            total_amount=Decimal("19.50"),
            total_count=2,
            categories_count=8,
            average_expense=Decimal("9.75"),
        )
        assert stats.to_api_dict() == {
            "total_amount": 19.5,
            "total_count": 2,
            "categories_count": 8,
            "average_expense": 9.75,
        }


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            description="Expense added",
        )
        assert event.event_type == AuditEventType.EXPENSE_ADDED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.CATEGORY_DELETED,
            description="Category deleted",
            details={"relabeled_expenses": 2},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "category_deleted"
        assert log_dict["details"]["relabeled_expenses"] == 2

    def test_audit_event_builder_expense_added(self):
        """Test AuditEventBuilder.expense_added."""
        correlation_id = uuid4()

        event = AuditEventBuilder.expense_added(
            expense_id="1714557600123456",
            amount="12.50",
            category="Transport",
            correlation_id=correlation_id,
        )

        assert event.event_type == AuditEventType.EXPENSE_ADDED
        assert event.entity_id == "1714557600123456"
        assert event.correlation_id == correlation_id
        assert event.is_user_action is True

    def test_audit_event_builder_implicit_category(self):
        """Test categories created while filing an expense are not user actions."""
        event = AuditEventBuilder.category_added(name="Cadeaux", implicit=True)
        assert event.entity_id == "Cadeaux"
        assert event.details["implicit"] is True
        assert event.is_user_action is False

    def test_audit_event_builder_category_deleted(self):
        """Test AuditEventBuilder.category_deleted records the cascade."""
        event = AuditEventBuilder.category_deleted(
            name="Transport",
            relabeled=2,
            fallback="Autres",
        )
        assert event.details == {"relabeled_expenses": 2, "fallback_category": "Autres"}

    def test_storage_format_error_is_error_severity(self):
        """Test corrupt files are logged as errors."""
        event = AuditEventBuilder.storage_format_error(
            path="expenses.json",
            error_message="not valid JSON",
        )
        assert event.severity == AuditSeverity.ERROR
        assert event.details["path"] == "expenses.json"


class TestAuditLogger:
    """Tests for the structured audit logger."""

    def test_log_returns_true(self):
        """Test events are written to the structured log."""
        audit_logger = AuditLogger(source="test")
        event = AuditEventBuilder.categories_seeded(["Autres"])
        assert audit_logger.log(event) is True
        assert audit_logger.source == "test"

    def test_helpers_do_not_raise(self):
        """Test the typed helpers accept correlation ids."""
        audit_logger = AuditLogger()
        correlation_id = create_correlation_id()
        audit_logger.log_category_renamed(
            old_name="Transport",
            new_name="Mobilité",
            relabeled=2,
            correlation_id=correlation_id,
        )
        audit_logger.log_error(error_type="StorageError", error_message="disk full")


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult(
            is_valid=False,
            issues=[
                ValidationIssue(
                    field="amount",
                    issue_type="missing",
                    message="Le montant est obligatoire.",
                    severity="error",
                ),
            ],
        )
        assert result.has_errors is True
        assert result.error_count == 1
        assert result.error_messages == ["Le montant est obligatoire."]

    def test_validation_result_warnings_only(self):
        """Test that warnings don't count as errors."""
        result = ValidationResult(
            is_valid=True,
            issues=[
                ValidationIssue(
                    field="date",
                    issue_type="future_date",
                    message="Date in future",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors is False
        assert result.error_count == 0

    def test_issue_severity_is_constrained(self):
        """Test unknown severities are rejected."""
        with pytest.raises(ValueError):
            ValidationIssue(
                field="amount",
                issue_type="missing",
                message="x",
                severity="fatal",
            )


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
