"""Financial aggregations over transactions: totals, balance, percentages and the CSV export."""

import csv
import io
from collections.abc import Iterable
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol

from cashbook.models.transaction import TYPE_EXPENSE, TYPE_INCOME
from cashbook.schemas.reports import ReportSummary


class _HasAmountAndType(Protocol):
    amount: Decimal | float | int
    type: str


def _total(transactions: Iterable[_HasAmountAndType], kind: str) -> Decimal:
    return sum(
        (Decimal(str(t.amount)) for t in transactions if t.type == kind),
        Decimal("0"),
    )


def total_income(transactions: Iterable[_HasAmountAndType]) -> Decimal:
    return _total(transactions, TYPE_INCOME)


def total_expenses(transactions: Iterable[_HasAmountAndType]) -> Decimal:
    return _total(transactions, TYPE_EXPENSE)


def balance(transactions: Iterable[_HasAmountAndType]) -> Decimal:
    items = list(transactions)
    return total_income(items) - total_expenses(items)


def percentage(part: Decimal | float | int, total: Decimal | float | int) -> int:
    """Whole-number share of part in total, rounded half-up; 0 when total is 0."""
    total = Decimal(str(total))
    if total == 0:
        return 0
    share = Decimal(str(part)) / total * 100
    return int(share.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def summarize(transactions: Iterable[_HasAmountAndType]) -> ReportSummary:
    items = list(transactions)
    income = total_income(items)
    expenses = total_expenses(items)
    turnover = income + expenses
    return ReportSummary(
        transaction_count=len(items),
        total_income=float(income),
        total_expenses=float(expenses),
        balance=float(income - expenses),
        income_percentage=percentage(income, turnover),
        expense_percentage=percentage(expenses, turnover),
    )


CSV_HEADERS = ("ID", "Concepto", "Monto", "Tipo", "Fecha", "Usuario", "Fecha Creación")


def _day(value: datetime | None) -> str:
    return value.strftime("%d/%m/%Y") if value is not None else ""


def transactions_csv(transactions: Iterable) -> str:
    """CSV with one row per transaction, in the given order. Owner shows as N/A when unset."""
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for t in transactions:
        owner = t.user.name if t.user is not None else "N/A"
        writer.writerow(
            [t.id, t.concept, Decimal(str(t.amount)), t.type, _day(t.date), owner, _day(t.created_at)]
        )
    return output.getvalue()
