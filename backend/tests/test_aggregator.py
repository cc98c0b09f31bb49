from datetime import date
from types import SimpleNamespace

from app.models.transaction import TransactionType
from app.services.aggregator import budget_usage, month_key, summarize_transactions


def _txn(kind: str, amount: float, category: str = "Other"):
    return SimpleNamespace(type=TransactionType(kind), amount=amount, category=category)


def test_totals_and_category_breakdown():
    summary = summarize_transactions([
        _txn("expense", 100, "Food"),
        _txn("expense", 50, "Food"),
        _txn("income", 500, "Salary"),
    ])

    assert summary.total_income == 500
    assert summary.total_expense == 150
    assert summary.balance == 350
    assert summary.by_category == {"Food": 150}


def test_empty_list_is_all_zero():
    summary = summarize_transactions([])

    assert summary.total_income == 0
    assert summary.total_expense == 0
    assert summary.balance == 0
    assert summary.by_category == {}
    assert summary.top_categories() == []


def test_accepts_plain_string_types():
    summary = summarize_transactions([SimpleNamespace(type="expense", amount=5, category="Fun")])
    assert summary.by_category == {"Fun": 5}


def test_top_categories_orders_by_amount_then_name():
    summary = summarize_transactions([
        _txn("expense", 10, "B"),
        _txn("expense", 30, "C"),
        _txn("expense", 10, "A"),
    ])
    assert summary.top_categories(limit=2) == [("C", 30), ("A", 10)]


def test_budget_usage_flags_overspending():
    summary = summarize_transactions([_txn("expense", 120, "Food")])
    budgets = [
        SimpleNamespace(category="Food", amount=100),
        SimpleNamespace(category="Rent", amount=900),
    ]

    usage = budget_usage(summary, budgets)
    assert usage[0] == {"category": "Food", "limit": 100, "spent": 120, "remaining": -20, "over_budget": True}
    assert usage[1]["spent"] == 0
    assert usage[1]["over_budget"] is False


def test_totals_are_rounded_to_cents():
    summary = summarize_transactions([
        _txn("expense", 0.1, "Food"),
        _txn("expense", 0.2, "Food"),
        _txn("income", 0.3, "Salary"),
    ])

    assert summary.total_expense == 0.3
    assert summary.by_category == {"Food": 0.3}
    assert summary.balance == 0


def test_budget_remaining_is_rounded_to_cents():
    summary = summarize_transactions([_txn("expense", 0.1, "Food"), _txn("expense", 0.2, "Food")])

    usage = budget_usage(summary, [SimpleNamespace(category="Food", amount=0.4)])
    assert usage[0]["remaining"] == 0.1
    assert usage[0]["over_budget"] is False


def test_month_key():
    assert month_key(date(2024, 1, 31)) == "2024-01"
    assert month_key(date(2024, 12, 1)) == "2024-12"
    assert month_key() == date.today().strftime("%Y-%m")
