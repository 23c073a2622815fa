"""
Tests for expense validation and the flows both front ends use.

The same rules must hold for adding and editing, whichever front end
calls the flow.
"""

import pytest
from datetime import date
from decimal import Decimal

from expense_tracker.config import AppSettings
from expense_tracker.ledger import InvalidCategoryError
from expense_tracker.services.storage import DuplicateError, NotFoundError
from expense_tracker.validation import (
    ExpenseValidationError,
    ExpenseValidator,
    parse_amount,
    parse_date,
)

from conftest import read_json


@pytest.fixture
def validator():
    return ExpenseValidator(
        AppSettings(max_expense_amount=1000.0, future_date_tolerance_days=1),
        today=lambda: date(2024, 5, 10),
    )


class TestParsing:
    """Tests for amount and date parsing."""

    def test_parse_amount_formats(self):
        """Test decimal point, decimal comma and euro sign."""
        assert parse_amount("12.50") == Decimal("12.50")
        assert parse_amount("12,50") == Decimal("12.50")
        assert parse_amount(" 12,5 € ") == Decimal("12.5")
        assert parse_amount(7) == Decimal("7")

    def test_parse_amount_rejects_text(self):
        """Test non-numbers raise ValueError."""
        with pytest.raises(ValueError):
            parse_amount("douze")
        with pytest.raises(ValueError):
            parse_amount("nan")

    def test_parse_amount_keeps_huge_exponents_finite(self):
        """Test parsing alone does not bound the magnitude."""
        assert parse_amount("1e400").is_finite()
        assert parse_amount("1e2") == Decimal("100")

    def test_parse_date(self):
        """Test ISO dates are accepted and others rejected."""
        assert parse_date("2024-05-01") == date(2024, 5, 1)
        with pytest.raises(ValueError):
            parse_date("01/05/2024")


class TestExpenseValidator:
    """Tests for ExpenseValidator."""

    def test_valid_input(self, validator):
        """Test a complete form produces a draft."""
        result = validator.validate({
            "amount": "12.50",
            "category": "Transport",
            "description": "Metro",
            "date": "2024-05-01",
        })
        assert result.is_valid is True
        assert result.draft.amount == Decimal("12.50")
        assert result.draft.date == date(2024, 5, 1)

    def test_date_defaults_to_today(self, validator):
        """Test a blank date means today for new expenses."""
        draft = validator.validate_or_raise({"amount": "3", "category": "Autres"})
        assert draft.date == date(2024, 5, 10)
        assert draft.description == ""

    @pytest.mark.parametrize("amount", ["0", "-5", "-0.01"])
    def test_non_positive_amount_rejected(self, validator, amount):
        """Test amounts must be strictly positive."""
        result = validator.validate({"amount": amount, "category": "Autres"})
        assert result.is_valid is False
        assert result.issues[0].issue_type == "invalid_value"

    def test_missing_fields_rejected(self, validator):
        """Test amount and category are required for new expenses."""
        result = validator.validate({})
        assert {issue.field for issue in result.issues} == {"amount", "category"}
        assert result.error_count == 2

    def test_partial_allows_blanks(self, validator):
        """Test edits may leave every field blank."""
        draft = validator.validate_or_raise(
            {"amount": "", "category": "", "description": "", "date": ""},
            partial=True,
        )
        assert draft.changes() == {}

    def test_large_amount_is_warning_only(self, validator):
        """Test amounts above the threshold are accepted with a warning."""
        result = validator.validate({"amount": "5000", "category": "Logement"})
        assert result.is_valid is True
        assert len(result.warnings) == 1

    def test_future_date_is_warning_only(self, validator):
        """Test dates beyond the tolerance are accepted with a warning."""
        result = validator.validate({
            "amount": "5",
            "category": "Loisirs",
            "date": "2024-06-01",
        })
        assert result.is_valid is True
        assert result.issues[0].issue_type == "future_date"

    def test_invalid_date_rejected(self, validator):
        """Test malformed dates are errors."""
        result = validator.validate({
            "amount": "5",
            "category": "Loisirs",
            "date": "demain",
        })
        assert result.is_valid is False

    def test_long_description_rejected(self, validator):
        """Test descriptions are bounded."""
        result = validator.validate({
            "amount": "5",
            "category": "Loisirs",
            "description": "x" * 501,
        })
        assert result.is_valid is False

    @pytest.mark.parametrize("amount", ["1e400", "1000000000.01", "12.345", "0.001"])
    def test_unstorable_amount_rejected(self, validator, amount):
        """Test amounts that would not survive storage are errors, not warnings."""
        result = validator.validate({"amount": amount, "category": "Autres"})
        assert result.is_valid is False
        assert result.issues[0].field == "amount"
        assert result.issues[0].severity == "error"

    @pytest.mark.parametrize("amount", ["999999999.99", "12.500", "1e2", "0.01"])
    def test_boundary_amounts_accepted(self, validator, amount):
        """Test whole-cent amounts up to the hard limit are accepted."""
        assert validator.validate({"amount": amount, "category": "Autres"}).is_valid is True

    def test_validate_or_raise_carries_result(self, validator):
        """Test the exception exposes the issues."""
        with pytest.raises(ExpenseValidationError) as exc_info:
            validator.validate_or_raise({"amount": "0", "category": "Autres"})
        assert exc_info.value.result.error_messages == ["Le montant doit être positif."]

    def test_user_friendly_summary(self, validator):
        """Test the summary lists errors and fixes."""
        result = validator.validate({"amount": "abc", "category": "Autres"})
        summary = validator.get_user_friendly_summary(result)
        assert "Saisie refusée" in summary
        assert "12.50" in summary


class TestExpenseFlow:
    """Tests for the add/edit/delete flow."""

    def test_add_registers_new_category(self, components, storage_settings):
        """Test adding with a new category grows the registry by exactly one."""
        before = components.categories.list_categories()

        expense = components.expenses.add_expense({
            "amount": "25",
            "category": "Cadeaux",
            "description": "Anniversaire",
        })

        after = components.categories.list_categories()
        assert len(after) == len(before) + 1
        assert after[-1] == "Cadeaux"
        assert read_json(storage_settings.expenses_path)[0]["category"] == expense.category

    @pytest.mark.parametrize("amount, expected", [
        ("999999999.99", Decimal("999999999.99")),
        ("0.01", Decimal("0.01")),
        ("1e2", Decimal("100")),
        ("12,500", Decimal("12.5")),
    ])
    def test_added_amount_reloads_unchanged(self, components, amount, expected):
        """Test an accepted amount reads back identically from disk."""
        added = components.expenses.add_expense({"amount": amount, "category": "Transport"})

        reloaded = components.expenses.get_expense(added.id)
        assert reloaded.amount == expected
        assert components.reports.stats().total_amount == expected

    def test_huge_amount_leaves_ledger_readable(self, components, transport_ledger):
        """Test an out-of-range amount is refused and the ledger still loads."""
        with pytest.raises(ExpenseValidationError):
            components.expenses.add_expense({"amount": "1e400", "category": "Transport"})
        with pytest.raises(ExpenseValidationError):
            components.expenses.edit_expense("1", {"amount": "1e400"})

        assert len(components.expenses.list_expenses()) == 2
        assert components.expenses.get_expense("1").amount == Decimal("12.5")

    def test_add_with_known_category_keeps_registry(self, components):
        """Test adding with an existing category does not grow the registry."""
        before = components.categories.list_categories()
        components.expenses.add_expense({"amount": "3", "category": "Transport"})
        assert components.categories.list_categories() == before

    def test_add_rejects_non_positive_amount(self, components, storage_settings):
        """Test rejected input writes nothing, not even the new category."""
        with pytest.raises(ExpenseValidationError):
            components.expenses.add_expense({"amount": "0", "category": "Nouvelle"})

        assert not storage_settings.expenses_path.exists()
        assert "Nouvelle" not in components.categories.list_categories()

    def test_edit_rejects_non_positive_amount(self, components, transport_ledger):
        """Test the positive-amount rule also applies to edits."""
        with pytest.raises(ExpenseValidationError):
            components.expenses.edit_expense("1", {"amount": "-4"})
        assert components.expenses.get_expense("1").amount == Decimal("12.5")

    def test_edit_registers_new_category(self, components, transport_ledger):
        """Test editing into a new category registers it."""
        updated = components.expenses.edit_expense("1", {"category": "Vélo"})
        assert updated.category == "Vélo"
        assert "Vélo" in components.categories.list_categories()

    def test_edit_blank_fields_keep_values(self, components, transport_ledger):
        """Test blank fields mean keep the current value."""
        updated = components.expenses.edit_expense("1", {
            "amount": "",
            "category": "",
            "description": "Metro ligne 4",
            "date": "",
        })
        assert updated.amount == Decimal("12.5")
        assert updated.category == "Transport"
        assert updated.description == "Metro ligne 4"

    def test_edit_unknown_id_reported_first(self, components):
        """Test unknown ids win over input problems."""
        with pytest.raises(NotFoundError):
            components.expenses.edit_expense("missing", {"amount": "0"})

    def test_delete_expense(self, components, transport_ledger):
        """Test deletion returns the removed expense."""
        removed = components.expenses.delete_expense("2")
        assert removed.description == "Bus"
        assert [e.id for e in components.expenses.all_in_stored_order()] == ["1"]

    def test_delete_unknown_expense(self, components):
        """Test deleting an unknown id raises NotFoundError."""
        with pytest.raises(NotFoundError):
            components.expenses.delete_expense("missing")

    def test_total(self, components, transport_ledger):
        """Test the total of the listed expenses."""
        expenses = components.expenses.list_expenses()
        assert components.expenses.total(expenses) == Decimal("19.5")


class TestCategoryFlow:
    """Tests for the category flow."""

    def test_add_category(self, components):
        """Test explicit registration."""
        assert components.categories.add_category("Voyages") is True
        assert components.categories.add_category("Voyages") is False

    def test_rename_category(self, components, transport_ledger):
        """Test the rename cascade through the flow."""
        assert components.categories.rename_category("Transport", "Mobilité") == 2
        categories = {e.category for e in components.expenses.all_in_stored_order()}
        assert categories == {"Mobilité"}

    def test_rename_to_existing(self, components):
        """Test renaming onto an existing name is refused."""
        with pytest.raises(DuplicateError):
            components.categories.rename_category("Transport", "Santé")

    def test_delete_category(self, components, transport_ledger):
        """Test the delete cascade through the flow."""
        assert components.categories.delete_category("Transport") == 2
        assert components.categories.fallback_category == "Autres"
        assert components.categories.list_categories().count("Autres") == 1

    def test_delete_fallback_in_use(self, components, transport_ledger):
        """Test the fallback cannot be removed while in use."""
        components.categories.delete_category("Transport")
        with pytest.raises(InvalidCategoryError):
            components.categories.delete_category("Autres")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
