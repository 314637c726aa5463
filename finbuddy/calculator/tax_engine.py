"""
FinBuddy Tax Engine: simplified Indian income tax, old vs new regime.
Pure Python, deterministic. Same input → same output. Never raises on input.

Slabs are the dashboard's simplified tables:
  Old: 2.5L/5L/10L breakpoints (0/5/20/30%)
  New: 3L/6L/9L/12L/15L breakpoints (0/5/10/15/20/30%)
No standard deduction, no 87A rebate, no surcharge. Only the 4% cess applies.
"""
from __future__ import annotations

import logging

from finbuddy.calculator.schemas import (
    DeductionBreakdown,
    RegimeComparison,
    TaxInput,
    TaxRegime,
    TaxResult,
    TaxSavingTip,
)

logger = logging.getLogger(__name__)

# ===========================================================================
# DEDUCTION CAP CONSTANTS (old regime only)
# ===========================================================================

CAP_80C             = 150_000
CAP_80D             = 25_000
CAP_HOME_LOAN       = 200_000
CAP_80CCD1B         = 50_000    # Reference only (tips), not an input head

CESS_RATE           = 0.04

# ===========================================================================
# SLAB TABLES: list[tuple[ceiling, rate]]
# ===========================================================================

OLD_REGIME_SLABS: list[tuple[float, float]] = [
    (250_000,      0.00),   # 0–2.5L: 0%
    (500_000,      0.05),   # 2.5–5L: 5%
    (1_000_000,    0.20),   # 5–10L: 20%
    (float("inf"), 0.30),   # >10L: 30%
]

NEW_REGIME_SLABS: list[tuple[float, float]] = [
    (300_000,      0.00),   # 0–3L: 0%
    (600_000,      0.05),   # 3–6L: 5%
    (900_000,      0.10),   # 6–9L: 10%
    (1_200_000,    0.15),   # 9–12L: 15%
    (1_500_000,    0.20),   # 12–15L: 20%
    (float("inf"), 0.30),   # >15L: 30%
]

SLABS_BY_REGIME: dict[TaxRegime, list[tuple[float, float]]] = {
    TaxRegime.old: OLD_REGIME_SLABS,
    TaxRegime.new: NEW_REGIME_SLABS,
}

TAX_SAVING_TIPS: list[TaxSavingTip] = [
    TaxSavingTip(title="Section 80C", limit=CAP_80C, options="ELSS, PPF, NSC, Life Insurance"),
    TaxSavingTip(title="Section 80D", limit=CAP_80D, options="Health Insurance Premiums"),
    TaxSavingTip(title="Home Loan Interest", limit=CAP_HOME_LOAN, options="Interest on home loan"),
    TaxSavingTip(title="NPS (80CCD(1B))", limit=CAP_80CCD1B, options="Additional NPS investment"),
]


# ===========================================================================
# INTERNAL HELPERS (pure functions, no I/O)
# ===========================================================================

def calculate_slab_tax(taxable_income: float, slabs: list[tuple[float, float]]) -> float:
    """
    Apply progressive slab tax to taxable_income using a bracket-list pattern.
    Accumulates tax on each bracket, stops when taxable_income <= previous ceiling.
    """
    tax = 0.0
    prev_ceiling = 0.0
    for ceiling, rate in slabs:
        if taxable_income <= prev_ceiling:
            break
        slab_income = min(taxable_income, ceiling) - prev_ceiling
        tax += slab_income * rate
        prev_ceiling = ceiling
    return tax


def _old_regime_deductions(tax_input: TaxInput) -> DeductionBreakdown:
    return DeductionBreakdown(
        section_80c=min(tax_input.section_80c, CAP_80C),
        section_80d=min(tax_input.section_80d, CAP_80D),
        home_loan_interest=min(tax_input.home_loan_interest, CAP_HOME_LOAN),
        other_deductions=tax_input.other_deductions,
    )


# ===========================================================================
# SINGLE-REGIME CALCULATOR: public API
# ===========================================================================

def compute_tax(tax_input: TaxInput) -> TaxResult:
    """
    Tax for the regime selected on tax_input.

    Old regime: 80C / 80D / home loan interest (capped) + other deductions
    are subtracted before slabs. New regime: deductions are ignored and
    total_deductions is reported as 0.
    """
    gross_income = tax_input.annual_income

    # Step 1: Deductions (old regime only)
    if tax_input.regime == TaxRegime.old:
        breakdown = _old_regime_deductions(tax_input)
    else:
        breakdown = DeductionBreakdown()
    total_deductions = (
        breakdown.section_80c
        + breakdown.section_80d
        + breakdown.home_loan_interest
        + breakdown.other_deductions
    )

    # Step 2: Taxable income (never negative)
    taxable_income = max(gross_income - total_deductions, 0.0)

    # Step 3: Slab tax
    income_tax = calculate_slab_tax(taxable_income, SLABS_BY_REGIME[tax_input.regime])

    # Step 4: Cess on tax, not on income
    cess = round(income_tax * CESS_RATE, 2)

    # Step 5: Final tax
    total_tax = round(income_tax + cess, 2)
    effective_rate = total_tax / gross_income * 100 if gross_income > 0 else 0.0

    return TaxResult(
        regime=tax_input.regime,
        gross_income=gross_income,
        total_deductions=total_deductions,
        taxable_income=taxable_income,
        income_tax=round(income_tax, 2),
        cess=cess,
        total_tax=total_tax,
        net_income=round(gross_income - total_tax, 2),
        effective_rate=round(effective_rate, 4),
        deduction_breakdown=breakdown,
    )


# ===========================================================================
# COMPARE REGIMES: public API
# ===========================================================================

def compare_regimes(tax_input: TaxInput) -> RegimeComparison:
    """
    Run both regimes on the same input and recommend the lower-tax one.
    Ties go to the new regime (no investment proof needed).
    """
    old = compute_tax(tax_input.model_copy(update={"regime": TaxRegime.old}))
    new = compute_tax(tax_input.model_copy(update={"regime": TaxRegime.new}))

    if old.total_tax < new.total_tax:
        recommended = TaxRegime.old
        savings = new.total_tax - old.total_tax
    elif new.total_tax < old.total_tax:
        recommended = TaxRegime.new
        savings = old.total_tax - new.total_tax
    else:
        recommended = TaxRegime.new
        savings = 0.0

    if savings == 0.0:
        rationale = (
            f"Both regimes result in the same tax (₹{old.total_tax:,.0f}). "
            "New Regime recommended as the simpler option."
        )
    elif recommended == TaxRegime.old:
        rationale = (
            f"Old Regime saves ₹{savings:,.0f} because deductions of "
            f"₹{old.total_deductions:,.0f} lower your taxable income."
        )
    else:
        rationale = (
            f"New Regime saves ₹{savings:,.0f}; its wider lower slabs outweigh "
            f"the ₹{old.total_deductions:,.0f} of deductions available under the Old Regime."
        )

    logger.debug("Regime comparison recommended=%s", recommended.value)
    return RegimeComparison(
        old_regime=old,
        new_regime=new,
        recommended_regime=recommended,
        savings_amount=round(savings, 2),
        rationale=rationale,
    )
