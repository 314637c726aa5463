"""
rollups.py — Aggregates and threshold classification for the dashboard cards.

Pure functions over record iterables. Ratio helpers define explicit results
for a zero denominator instead of dividing by it.
"""
from __future__ import annotations

from typing import Iterable

from finbuddy.calculator.schemas import (
    BudgetLine,
    BudgetStatus,
    BudgetSummary,
    ChartPoint,
    ExpenseSummary,
)
from finbuddy.records.schemas import BudgetRecord, Category, ExpenseRecord, TransactionKind

CRITICAL_RATIO = 0.9
WARNING_RATIO = 0.7
ALERT_RATIO = 0.8       # "approaching limit" list on the budget page


def aggregate_expenses(records: Iterable[ExpenseRecord]) -> ExpenseSummary:
    total_income = 0.0
    total_expenses = 0.0
    for record in records:
        if record.kind == TransactionKind.income:
            total_income += record.amount
        else:
            total_expenses += record.amount
    return ExpenseSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        balance=total_income - total_expenses,
    )


def aggregate_budgets(records: Iterable[BudgetRecord]) -> BudgetSummary:
    total_budgeted = 0.0
    total_spent = 0.0
    for record in records:
        total_budgeted += record.budgeted_amount
        total_spent += record.spent_amount
    return BudgetSummary(
        total_budgeted=total_budgeted,
        total_spent=total_spent,
        remaining=total_budgeted - total_spent,
    )


def classify_budget_status(spent: float, budgeted: float) -> BudgetStatus:
    """
    ratio >= 0.9 → critical, ratio >= 0.7 → warning, else ok.
    budgeted == 0: critical if anything was spent, ok otherwise.
    """
    if budgeted <= 0:
        return BudgetStatus.critical if spent > 0 else BudgetStatus.ok
    ratio = spent / budgeted
    if ratio >= CRITICAL_RATIO:
        return BudgetStatus.critical
    if ratio >= WARNING_RATIO:
        return BudgetStatus.warning
    return BudgetStatus.ok


def budget_usage_pct(spent: float, budgeted: float) -> float:
    """Percentage of the budget used. A zero budget reads 100% once anything is spent."""
    if budgeted <= 0:
        return 100.0 if spent > 0 else 0.0
    return spent / budgeted * 100


def progress_width(usage_pct: float) -> float:
    """Bar width: usage capped to [0, 100]."""
    return max(0.0, min(usage_pct, 100.0))


def budget_line(record: BudgetRecord) -> BudgetLine:
    usage = budget_usage_pct(record.spent_amount, record.budgeted_amount)
    return BudgetLine(
        budget=record,
        usage_pct=round(usage, 1),
        progress_width=progress_width(usage),
        status=classify_budget_status(record.spent_amount, record.budgeted_amount),
    )


def budget_alerts(
    records: Iterable[BudgetRecord],
    threshold: float = ALERT_RATIO,
) -> list[BudgetLine]:
    """Budgets whose spent/budgeted ratio is at or above threshold, in input order."""
    return [
        budget_line(record)
        for record in records
        if budget_usage_pct(record.spent_amount, record.budgeted_amount) >= threshold * 100
    ]


def expense_breakdown(records: Iterable[ExpenseRecord]) -> list[ChartPoint]:
    """Expense totals per category as chart points, in first-seen category order."""
    totals: dict[Category, float] = {}
    for record in records:
        if record.kind != TransactionKind.expense:
            continue
        totals[record.category] = totals.get(record.category, 0.0) + record.amount
    return [
        ChartPoint(label=category.value, value=value, color=category.display.chart_color)
        for category, value in totals.items()
    ]


def savings_rate(summary: ExpenseSummary) -> float:
    """Balance as a percentage of income; 0 without income."""
    if summary.total_income <= 0:
        return 0.0
    return round(summary.balance / summary.total_income * 100, 1)
