"""
Expense Input Validation

DESIGN DECISION: Both front ends hand raw user input (menu answers, form
fields) to the same validator. There is ONE rule set:
- amount must parse as a number and be strictly positive
- amount must be whole cents and at most AMOUNT_HARD_LIMIT, so it is stored
  and read back unchanged
- category must be non-empty
- date must be an ISO date (defaults to today for new expenses)

The rule applies to adding AND editing, from the terminal AND the web.
Earlier versions only checked the amount in the terminal; the web
accepted zero and negative amounts.

Issues are split by severity:
- error: the operation is refused, nothing is written
- warning: the input is accepted but the user should double check

IMPORTANT: Validation NEVER silently fixes values.
"""

from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Mapping, Optional

from pydantic import ValidationError

from expense_tracker.config import AppSettings, get_settings
from expense_tracker.models.expense import (
    ExpenseDraft,
    ValidationIssue,
    ValidationResult,
)


MAX_DESCRIPTION_LENGTH = 500
MAX_CATEGORY_LENGTH = 100

# Amounts are written to JSON as floats; cents below this bound survive the round trip
AMOUNT_HARD_LIMIT = Decimal("1000000000")
CENT = Decimal("0.01")


class ExpenseValidationError(ValueError):
    """Raised when user input for an expense is rejected."""

    def __init__(self, result: ValidationResult):
        self.result = result
        super().__init__("; ".join(result.error_messages) or "Invalid expense")


def parse_amount(value: Any) -> Decimal:
    """
    Parse a user-typed amount.

    Accepts a decimal comma ("12,50") as well as a decimal point.

    Raises:
        ValueError: If the value is not a finite number
    """
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        amount = Decimal(str(value))
    else:
        text = str(value).strip().replace(" ", "").replace(",", ".").rstrip("€")
        try:
            amount = Decimal(text)
        except InvalidOperation:
            raise ValueError(f"'{value}' is not a number")
    if not amount.is_finite():
        raise ValueError(f"'{value}' is not a number")
    return amount


def parse_date(value: Any) -> date:
    """
    Parse an ISO date (``YYYY-MM-DD``).

    Raises:
        ValueError: If the value is not a valid date
    """
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise ValueError(f"'{value}' is not a date (expected YYYY-MM-DD)")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class ExpenseValidator:
    """
    Validates and parses user input for expenses.

    ``validate`` never raises; ``validate_or_raise`` is the convenience
    used by the flows.
    """

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        today: Optional[Callable[[], date]] = None,
    ):
        """
        Initialize validator.

        Args:
            settings: Thresholds for warnings. Defaults to the app settings.
            today: Clock used for the default date and future-date checks.
        """
        self._settings = settings or get_settings().app
        self._today = today or date.today

    def _check_amount(
        self,
        raw: Any,
        partial: bool,
        issues: list[ValidationIssue],
    ) -> Optional[Decimal]:
        if _is_blank(raw):
            if not partial:
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="missing",
                    message="Le montant est obligatoire.",
                    severity="error",
                ))
            return None

        try:
            amount = parse_amount(raw)
        except ValueError:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message=f"Montant invalide : '{raw}'.",
                severity="error",
                suggested_fix="Saisissez un nombre, par exemple 12.50",
            ))
            return None

        if amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Le montant doit être positif.",
                severity="error",
            ))
            return None

        if amount > AMOUNT_HARD_LIMIT:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="out_of_range",
                message=f"Le montant ne peut pas dépasser {AMOUNT_HARD_LIMIT}€.",
                severity="error",
            ))
            return None

        if amount != amount.quantize(CENT):
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_precision",
                message="Le montant ne peut pas avoir plus de deux décimales.",
                severity="error",
                suggested_fix="Arrondissez au centime, par exemple 12.50",
            ))
            return None

        max_amount = Decimal(str(self._settings.max_expense_amount))
        if amount > max_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Le montant ({amount}€) semble inhabituellement élevé.",
                severity="warning",
                suggested_fix="Vérifiez le montant",
            ))
        return amount

    def _check_category(
        self,
        raw: Any,
        partial: bool,
        issues: list[ValidationIssue],
    ) -> Optional[str]:
        if _is_blank(raw):
            if not partial:
                issues.append(ValidationIssue(
                    field="category",
                    issue_type="missing",
                    message="La catégorie est obligatoire.",
                    severity="error",
                ))
            return None

        category = str(raw).strip()
        if len(category) > MAX_CATEGORY_LENGTH:
            issues.append(ValidationIssue(
                field="category",
                issue_type="invalid_value",
                message=f"Le nom de catégorie dépasse {MAX_CATEGORY_LENGTH} caractères.",
                severity="error",
            ))
            return None
        return category

    def _check_description(
        self,
        raw: Any,
        issues: list[ValidationIssue],
    ) -> Optional[str]:
        if raw is None:
            return None
        description = str(raw).strip()
        if len(description) > MAX_DESCRIPTION_LENGTH:
            issues.append(ValidationIssue(
                field="description",
                issue_type="invalid_value",
                message=f"La description dépasse {MAX_DESCRIPTION_LENGTH} caractères.",
                severity="error",
            ))
            return None
        return description

    def _check_date(
        self,
        raw: Any,
        partial: bool,
        issues: list[ValidationIssue],
    ) -> Optional[date]:
        if _is_blank(raw):
            return None if partial else self._today()

        try:
            expense_date = parse_date(raw)
        except ValueError:
            issues.append(ValidationIssue(
                field="date",
                issue_type="invalid_format",
                message=f"Date invalide : '{raw}'.",
                severity="error",
                suggested_fix="Utilisez le format AAAA-MM-JJ",
            ))
            return None

        tolerance = timedelta(days=self._settings.future_date_tolerance_days)
        if expense_date > self._today() + tolerance:
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"La date ({expense_date}) est dans le futur.",
                severity="warning",
                suggested_fix="Vérifiez la date",
            ))
        return expense_date

    def validate(
        self,
        form: Mapping[str, Any],
        partial: bool = False,
    ) -> ValidationResult:
        """
        Validate raw expense input.

        Args:
            form: Raw values keyed by amount/category/description/date
            partial: True for edits, where blank fields mean "keep current value"

        Returns:
            ValidationResult; ``draft`` is set when there are no errors
        """
        issues: list[ValidationIssue] = []

        amount = self._check_amount(form.get("amount"), partial, issues)
        category = self._check_category(form.get("category"), partial, issues)
        description = self._check_description(form.get("description"), issues)
        expense_date = self._check_date(form.get("date"), partial, issues)

        if not partial and description is None and not any(
            issue.field == "description" for issue in issues
        ):
            description = ""

        warnings = [issue.message for issue in issues if issue.severity == "warning"]
        is_valid = not any(issue.severity == "error" for issue in issues)

        draft = None
        if is_valid:
            try:
                draft = ExpenseDraft(
                    amount=amount,
                    category=category,
                    description=description,
                    date=expense_date,
                )
            except ValidationError as e:
                issues.append(ValidationIssue(
                    field="expense",
                    issue_type="invalid_format",
                    message=str(e),
                    severity="error",
                ))
                is_valid = False

        return ValidationResult(
            is_valid=is_valid,
            issues=issues,
            warnings=warnings,
            draft=draft,
        )

    def validate_or_raise(
        self,
        form: Mapping[str, Any],
        partial: bool = False,
    ) -> ExpenseDraft:
        """Validate and return the parsed draft, or raise ExpenseValidationError."""
        result = self.validate(form, partial=partial)
        if not result.is_valid or result.draft is None:
            raise ExpenseValidationError(result)
        return result.draft

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """Render validation results as the short text both front ends show."""
        if result.is_valid and not result.warnings:
            return "✅ Données valides."

        lines = []

        if result.has_errors:
            lines.append("❌ Saisie refusée :")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ À vérifier :")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
