"""Pydantic schemas for the aggregated transactions report."""

from pydantic import BaseModel, Field


class ReportSummary(BaseModel):
    """Totals over all transactions. Percentages are of income + expenses, rounded half-up."""

    transaction_count: int = Field(ge=0)
    total_income: float
    total_expenses: float
    balance: float
    income_percentage: int = Field(ge=0, le=100)
    expense_percentage: int = Field(ge=0, le=100)
