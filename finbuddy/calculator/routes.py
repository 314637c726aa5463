"""
FinanceCalculator HTTP routes: POST /api/tax/calculate, POST /api/tax/compare,
                                 GET /api/tax/tips,
                                 POST /api/investments/sip,
                                 GET /api/investments/options/{risk_profile}

Stateless: every endpoint is a pure function of its request body.
Tax endpoints never reject numeric input; TaxInput coerces bad values to 0.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Response

from finbuddy.calculator.schemas import (
    GoalPlan,
    InvestmentOption,
    RegimeComparison,
    TaxInput,
    TaxResult,
    TaxSavingTip,
)
from finbuddy.calculator.sip import investment_options, plan_goal
from finbuddy.calculator.tax_engine import TAX_SAVING_TIPS, compare_regimes, compute_tax
from finbuddy.records.aggregator import goal_from_form
from finbuddy.records.schemas import GoalForm, RiskProfile

router = APIRouter(prefix="/api", tags=["calculator"])
logger = logging.getLogger(__name__)


@router.post("/tax/calculate", response_model=TaxResult)
async def calculate_tax(tax_input: TaxInput) -> TaxResult:
    result = compute_tax(tax_input)
    logger.info("Tax calculated regime=%s", result.regime.value)
    return result


@router.post("/tax/compare", response_model=RegimeComparison)
async def compare_tax_regimes(tax_input: TaxInput) -> RegimeComparison:
    return compare_regimes(tax_input)


@router.get("/tax/tips", response_model=list[TaxSavingTip])
async def tax_saving_tips() -> list[TaxSavingTip]:
    return TAX_SAVING_TIPS


@router.post("/investments/sip", response_model=GoalPlan)
async def sip_plan(form: GoalForm):
    """
    Free-text goal form, parsed like the goals page form. Answers 204 when
    name, target or timeframe is missing, as the form add does.
    """
    goal = goal_from_form(form)
    if goal is None:
        return Response(status_code=204)
    return plan_goal(goal)


@router.get("/investments/options/{risk_profile}", response_model=list[InvestmentOption])
async def options_for_risk(risk_profile: RiskProfile) -> list[InvestmentOption]:
    return investment_options(risk_profile)
