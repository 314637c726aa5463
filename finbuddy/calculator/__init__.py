"""FinanceCalculator: tax, SIP and rollup arithmetic."""
from finbuddy.calculator.parsing import parse_amount, parse_count
from finbuddy.calculator.rollups import (
    aggregate_budgets,
    aggregate_expenses,
    budget_alerts,
    classify_budget_status,
    expense_breakdown,
    savings_rate,
)
from finbuddy.calculator.sip import compute_required_sip, plan_goal
from finbuddy.calculator.tax_engine import compare_regimes, compute_tax

__all__ = [
    "parse_amount",
    "parse_count",
    "aggregate_budgets",
    "aggregate_expenses",
    "budget_alerts",
    "classify_budget_status",
    "expense_breakdown",
    "savings_rate",
    "compute_required_sip",
    "plan_goal",
    "compare_regimes",
    "compute_tax",
]
