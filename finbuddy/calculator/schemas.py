"""
schemas.py — FinanceCalculator pydantic v2 data contracts.

Defines:
  - TaxRegime, BudgetStatus enums
  - TaxInput            (form input; every numeric field coerced, never rejected)
  - DeductionBreakdown  (capped amount actually applied per deduction head)
  - TaxResult           (single-regime computation)
  - RegimeComparison    (both regimes + recommendation)
  - TaxSavingTip, InvestmentOption (static reference data)
  - GoalPlan            (SIP + progress figures for one goal)
  - ExpenseSummary, BudgetSummary, BudgetLine, ChartPoint (rollups)
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from finbuddy.calculator.parsing import parse_amount
from finbuddy.records.schemas import BudgetRecord, InvestmentGoal


class TaxRegime(str, Enum):
    old = "old"
    new = "new"


class BudgetStatus(str, Enum):
    ok = "ok"
    warning = "warning"
    critical = "critical"


# ---------------------------------------------------------------------------
# Tax
# ---------------------------------------------------------------------------

class TaxInput(BaseModel):
    """
    Tax calculator form. All monetary fields are annual INR.

    Numeric fields accept free text; empty, invalid or negative values become 0.
    An empty or unknown regime falls back to old (the form's default selection).
    Caps (80C ₹1.5L, 80D ₹25K, home loan ₹2L) are applied by the engine, not here,
    so the raw input is preserved.
    """
    model_config = ConfigDict(extra="ignore")

    annual_income: float = 0
    regime: TaxRegime = TaxRegime.old
    section_80c: float = 0
    section_80d: float = 0
    home_loan_interest: float = 0
    other_deductions: float = 0

    @field_validator(
        "annual_income", "section_80c", "section_80d",
        "home_loan_interest", "other_deductions",
        mode="before",
    )
    @classmethod
    def _coerce_amount(cls, value: Any) -> float:
        return parse_amount(value)

    @field_validator("regime", mode="before")
    @classmethod
    def _coerce_regime(cls, value: Any) -> TaxRegime:
        if isinstance(value, TaxRegime):
            return value
        text = str(value or "").strip().lower()
        return TaxRegime.new if text == TaxRegime.new.value else TaxRegime.old


class DeductionBreakdown(BaseModel):
    """
    Deductions actually applied (after caps), not the raw input.
    All zero under the new regime.
    """
    model_config = ConfigDict(extra="forbid")

    section_80c: float = 0          # Cap ₹1,50,000
    section_80d: float = 0          # Cap ₹25,000
    home_loan_interest: float = 0   # Cap ₹2,00,000
    other_deductions: float = 0     # Uncapped


class TaxResult(BaseModel):
    """
    Computation sequence:
      1. total_deductions = sum of capped heads (old regime only)
      2. taxable_income = max(0, gross_income - total_deductions)
      3. income_tax = progressive slab tax on taxable_income
      4. cess = 4% of income_tax
      5. total_tax = income_tax + cess
    """
    model_config = ConfigDict(extra="forbid")

    regime: TaxRegime
    gross_income: float
    total_deductions: float
    taxable_income: float
    income_tax: float
    cess: float
    total_tax: float
    net_income: float
    effective_rate: float            # Percentage of gross income, 0 when gross is 0
    deduction_breakdown: DeductionBreakdown


class RegimeComparison(BaseModel):
    model_config = ConfigDict(extra="forbid")

    old_regime: TaxResult
    new_regime: TaxResult
    recommended_regime: TaxRegime
    savings_amount: float            # abs(old.total_tax - new.total_tax)
    rationale: str


class TaxSavingTip(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    title: str
    limit: float
    options: str


# ---------------------------------------------------------------------------
# Investments
# ---------------------------------------------------------------------------

class InvestmentOption(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    returns: str
    risk: str
    liquidity: str


class GoalPlan(BaseModel):
    model_config = ConfigDict(extra="forbid")

    goal: InvestmentGoal
    required_sip: int
    remaining_amount: float          # May be negative when the goal is exceeded
    progress_pct: float
    progress_width: float            # progress_pct capped at 100 for the bar
    assumed_annual_return: float
    duration_years: int
    duration_months: int


# ---------------------------------------------------------------------------
# Rollups
# ---------------------------------------------------------------------------

class ExpenseSummary(BaseModel):
    model_config = ConfigDict(extra="forbid")

    total_income: float = 0
    total_expenses: float = 0
    balance: float = 0


class BudgetSummary(BaseModel):
    model_config = ConfigDict(extra="forbid")

    total_budgeted: float = 0
    total_spent: float = 0
    remaining: float = 0             # Negative when over budget overall


class BudgetLine(BaseModel):
    model_config = ConfigDict(extra="forbid")

    budget: BudgetRecord
    usage_pct: float
    progress_width: float
    status: BudgetStatus


class ChartPoint(BaseModel):
    """{label, value} pair consumed by the charting layer."""
    model_config = ConfigDict(extra="forbid")

    label: str
    value: float
    color: Optional[str] = None


__all__ = [
    "TaxRegime",
    "BudgetStatus",
    "TaxInput",
    "DeductionBreakdown",
    "TaxResult",
    "RegimeComparison",
    "TaxSavingTip",
    "InvestmentOption",
    "GoalPlan",
    "ExpenseSummary",
    "BudgetSummary",
    "BudgetLine",
    "ChartPoint",
]
