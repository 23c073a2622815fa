"""
Report Models

Reports are aggregations recomputed from the full ledger on every call.
Nothing here is ever persisted.
"""

from decimal import Decimal

from pydantic import BaseModel, Field


class CategoryTotal(BaseModel):
    """Total spent in one category."""

    name: str
    total: Decimal = Field(default=Decimal("0"))
    count: int = Field(default=0, ge=0)


class MonthlyTotal(BaseModel):
    """Total spent in one ``YYYY-MM`` month."""

    month: str = Field(..., pattern=r"^\d{4}-\d{2}$")
    total: Decimal = Field(default=Decimal("0"))
    count: int = Field(default=0, ge=0)


class LedgerStats(BaseModel):
    """
    Headline numbers served by ``/api/stats``.

    ``average_expense`` is rounded to two places and is 0 for an empty ledger.
    """

    total_amount: Decimal
    total_count: int = Field(ge=0)
    categories_count: int = Field(ge=0)
    average_expense: Decimal

    def to_api_dict(self) -> dict:
        return {
            "total_amount": float(self.total_amount),
            "total_count": self.total_count,
            "categories_count": self.categories_count,
            "average_expense": float(self.average_expense),
        }


class ExpenseReport(BaseModel):
    """Everything the reports page shows."""

    stats: LedgerStats
    by_category: list[CategoryTotal] = Field(default_factory=list)
    by_month: list[MonthlyTotal] = Field(default_factory=list)
