"""Totals and category breakdowns over a user's transactions."""
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date

from app.models.transaction import TransactionType


def _cents(value: float) -> float:
    return round(value, 2)


@dataclass
class TransactionSummary:
    total_income: float = 0.0
    total_expense: float = 0.0
    by_category: dict[str, float] = field(default_factory=dict)

    @property
    def balance(self) -> float:
        return _cents(self.total_income - self.total_expense)

    def top_categories(self, limit: int = 3) -> list[tuple[str, float]]:
        """Expense categories ordered by amount spent, largest first."""
        ranked = sorted(self.by_category.items(), key=lambda item: (-item[1], item[0]))
        return ranked[:limit]


def summarize_transactions(transactions: Iterable) -> TransactionSummary:
    """Sum income and expenses and group expenses by category.

    Income never appears in the category breakdown. An empty input gives an
    all-zero summary. Totals are rounded to cents.
    """
    summary = TransactionSummary()
    for txn in transactions:
        txn_type = TransactionType(txn.type)
        if txn_type is TransactionType.INCOME:
            summary.total_income += txn.amount
        elif txn_type is TransactionType.EXPENSE:
            summary.total_expense += txn.amount
            summary.by_category[txn.category] = summary.by_category.get(txn.category, 0.0) + txn.amount

    summary.total_income = _cents(summary.total_income)
    summary.total_expense = _cents(summary.total_expense)
    summary.by_category = {category: _cents(amount) for category, amount in summary.by_category.items()}
    return summary


def month_key(today: date | None = None) -> str:
    """YYYY-MM for the given day, today by default."""
    return (today or date.today()).strftime("%Y-%m")


def budget_usage(monthly_summary: TransactionSummary, budgets: Iterable) -> list[dict]:
    """Compare each monthly budget limit against one month's spending in its category.

    `monthly_summary` must cover a single month; budgets are monthly limits.
    """
    usage = []
    for budget in budgets:
        spent = monthly_summary.by_category.get(budget.category, 0.0)
        usage.append({
            "category": budget.category,
            "limit": budget.amount,
            "spent": spent,
            "remaining": _cents(budget.amount - spent),
            "over_budget": spent > budget.amount,
        })
    return usage
