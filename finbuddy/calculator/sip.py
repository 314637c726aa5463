"""
FinBuddy SIP planner.
Pure functions. No I/O.

Required monthly SIP is the inverse of the future value of an ordinary annuity:
    FV = sip * ((1 + r)^n - 1) / r   →   sip = FV * r / ((1 + r)^n - 1)
with r = annual_return / 12 and n = timeframe_months.
"""
from __future__ import annotations

import math
from typing import Optional

from finbuddy.calculator.schemas import GoalPlan, InvestmentOption
from finbuddy.records.schemas import InvestmentGoal, RiskProfile

# Assumed annual return per risk profile
ANNUAL_RETURN_BY_RISK: dict[RiskProfile, float] = {
    RiskProfile.low:    0.06,
    RiskProfile.medium: 0.12,
    RiskProfile.high:   0.15,
}

INVESTMENT_OPTIONS: dict[RiskProfile, list[InvestmentOption]] = {
    RiskProfile.low: [
        InvestmentOption(name="Fixed Deposits", returns="6-7%", risk="Very Low", liquidity="Medium"),
        InvestmentOption(name="Liquid Funds", returns="4-6%", risk="Very Low", liquidity="High"),
        InvestmentOption(name="Savings Account", returns="3-4%", risk="Very Low", liquidity="High"),
    ],
    RiskProfile.medium: [
        InvestmentOption(name="Hybrid Funds", returns="8-12%", risk="Medium", liquidity="Medium"),
        InvestmentOption(name="Large Cap Funds", returns="10-14%", risk="Medium", liquidity="High"),
        InvestmentOption(name="Index Funds", returns="10-13%", risk="Medium", liquidity="High"),
    ],
    RiskProfile.high: [
        InvestmentOption(name="Small Cap Funds", returns="12-18%", risk="High", liquidity="Medium"),
        InvestmentOption(name="Mid Cap Funds", returns="12-16%", risk="High", liquidity="Medium"),
        InvestmentOption(name="Sectoral Funds", returns="10-20%", risk="Very High", liquidity="Medium"),
    ],
}


def investment_options(risk_profile: RiskProfile) -> list[InvestmentOption]:
    return list(INVESTMENT_OPTIONS[risk_profile])


def compute_required_sip(goal: InvestmentGoal, annual_rate: Optional[float] = None) -> int:
    """
    Monthly contribution needed to close the gap to target_amount, rounded up.

    Edge cases (never raises, never negative):
      - remaining <= 0         → 0 (goal already met or exceeded)
      - timeframe_months <= 0  → ceil(remaining) (everything is due now)
      - monthly rate == 0      → ceil(remaining / months), no compounding
    annual_rate overrides the risk-profile assumption when given.
    """
    remaining = goal.target_amount - goal.current_amount
    if remaining <= 0:
        return 0

    months = goal.timeframe_months
    if months <= 0:
        return math.ceil(remaining)

    rate = ANNUAL_RETURN_BY_RISK[goal.risk_profile] if annual_rate is None else annual_rate
    monthly_rate = rate / 12
    if monthly_rate == 0:
        return math.ceil(remaining / months)

    growth = math.pow(1 + monthly_rate, months) - 1
    return math.ceil(remaining * monthly_rate / growth)


def future_value_of_sip(monthly_amount: float, annual_rate: float, months: int) -> float:
    """Corpus from contributing monthly_amount at the end of each month for `months` months."""
    if months <= 0:
        return 0.0
    monthly_rate = annual_rate / 12
    if monthly_rate == 0:
        return monthly_amount * months
    return monthly_amount * (math.pow(1 + monthly_rate, months) - 1) / monthly_rate


def plan_goal(goal: InvestmentGoal) -> GoalPlan:
    """SIP recommendation plus the progress figures shown on a goal card."""
    remaining = goal.target_amount - goal.current_amount
    progress = goal.current_amount / goal.target_amount * 100
    years, months = divmod(goal.timeframe_months, 12)
    return GoalPlan(
        goal=goal,
        required_sip=compute_required_sip(goal),
        remaining_amount=remaining,
        progress_pct=round(progress, 2),
        progress_width=min(round(progress, 2), 100.0),
        assumed_annual_return=ANNUAL_RETURN_BY_RISK[goal.risk_profile],
        duration_years=years,
        duration_months=months,
    )
