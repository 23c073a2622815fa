"""
Core Data Models for Expense Tracker

These models define the schemas for everything read from or written to
the JSON files. They are designed to:
1. Accept what is already on disk (including records written by older versions)
2. Write one canonical record format
3. Keep validation messages readable by the front ends

DESIGN DECISION: The models are deliberately lenient about *stored* values
(an old record with a zero amount still loads). The strict business rules
live in the validation package and run on every create and edit path.
"""

import datetime as dt
import time
from decimal import Decimal
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# Timestamp format written by the first version of the tool
LEGACY_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S %z"


def generate_expense_id(taken: Optional[set[str]] = None) -> str:
    """
    Generate a timestamp-derived expense id.

    The id is the current epoch time with the decimal point removed.
    If ``taken`` is given, the generator waits for the clock to move on
    until it produces an id that is not in the set.
    """
    while True:
        candidate = f"{time.time():.6f}".replace(".", "")
        if not taken or candidate not in taken:
            return candidate
        time.sleep(0.000001)


def _parse_timestamp(value: Any) -> Any:
    """Accept ISO-8601 as well as the legacy ``YYYY-MM-DD HH:MM:SS +ZZZZ`` form."""
    if isinstance(value, str):
        try:
            return dt.datetime.fromisoformat(value)
        except ValueError:
            return dt.datetime.strptime(value, LEGACY_TIMESTAMP_FORMAT)
    return value


def now() -> dt.datetime:
    """Current local time, timezone aware, to the second."""
    return dt.datetime.now().astimezone().replace(microsecond=0)


# =============================================================================
# EXPENSE
# =============================================================================

class Expense(BaseModel):
    """
    A single expense as stored in the ledger.

    On disk:
        {"id": "...", "amount": 12.5, "category": "Transport",
         "description": "Metro", "date": "2024-05-01",
         "created_at": "...", "updated_at": "..."}

    ``updated_at`` is only present once the record has been edited.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    id: str = Field(
        ...,
        min_length=1,
        description="Timestamp-derived identifier"
    )
    amount: Decimal = Field(
        ...,
        description="Amount in euros"
    )
    category: str = Field(
        ...,
        description="Category name (refers to the registry)"
    )
    description: str = Field(
        default="",
        description="Free text description"
    )
    date: dt.date = Field(
        ...,
        description="Day the expense occurred"
    )
    created_at: dt.datetime = Field(
        default_factory=now,
        description="When the expense was recorded"
    )
    updated_at: Optional[dt.datetime] = Field(
        default=None,
        description="Last edit timestamp"
    )

    @field_validator('id', mode='before')
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        """Ids have always been strings, but hand-edited files may hold numbers."""
        if isinstance(v, int):
            return str(v)
        return v

    @field_validator('description', mode='before')
    @classmethod
    def coerce_description(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator('created_at', 'updated_at', mode='before')
    @classmethod
    def parse_timestamps(cls, v: Any) -> Any:
        return _parse_timestamp(v)

    @property
    def month(self) -> str:
        """Year-month bucket (``YYYY-MM``) used by the monthly report."""
        return self.date.isoformat()[:7]

    def to_record(self) -> dict:
        """
        Convert to the dictionary written to ``expenses.json``.

        Amounts are written as JSON numbers and timestamps as ISO-8601.
        """
        record = {
            "id": self.id,
            "amount": float(self.amount),
            "category": self.category,
            "description": self.description,
            "date": self.date.isoformat(),
            "created_at": self.created_at.isoformat(),
        }
        if self.updated_at is not None:
            record["updated_at"] = self.updated_at.isoformat()
        return record

    @classmethod
    def from_record(cls, record: dict) -> "Expense":
        return cls.model_validate(record)


class ExpenseDraft(BaseModel):
    """
    Expense fields as typed by a user, after parsing.

    Every field is optional: a draft for a new expense is completed by
    the validator (date defaults to today), while a draft used as an
    edit patch only carries the fields the user actually filled in.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    amount: Optional[Decimal] = None
    category: Optional[str] = None
    description: Optional[str] = None
    date: Optional[dt.date] = None

    def changes(self) -> dict[str, Any]:
        """Provided, non-empty fields only."""
        return {
            name: value
            for name, value in self.model_dump().items()
            if value is not None and value != ""
        }


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'invalid_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of validating user input for an expense.

    ``draft`` holds the parsed values when parsing succeeded, so callers
    never parse the same input twice.
    """

    is_valid: bool = Field(
        ...,
        description="True when no error-level issue was found"
    )
    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-blocking warnings"
    )
    draft: Optional[ExpenseDraft] = None

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def error_messages(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "error"]
