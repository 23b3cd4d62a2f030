"""DSCR, PITIA and LTV for a single property.

Pure functions: Decimal in, dataclass out. No I/O.

DSCR here is the lender's rental-DSCR: monthly rent / monthly PITIA
(P&I + taxes + insurance + flood + HOA), not NOI / debt service.
"""

import logging
from dataclasses import replace
from decimal import Decimal, localcontext

from loan_metrics.engine.amortization import monthly_pi_for_terms
from loan_metrics.engine.errors import InvalidInputError
from loan_metrics.engine.precision import (
    DEFAULT_CONTEXT,
    HUNDRED,
    MONTHS_PER_YEAR,
    ZERO,
    CalculatorContext,
    money,
    ratio,
    to_decimal,
)
from loan_metrics.models.loan import LoanTerms, PropertyExpenses
from loan_metrics.models.results import DSCRResult, StressScenario

logger = logging.getLogger(__name__)


def _non_negative(value, field: str, default: Decimal | None = None) -> Decimal:
    amount = to_decimal(value, field, default=default)
    if amount < 0:
        raise InvalidInputError(field, "cannot be negative")
    return amount


def evaluate_pitia(
    monthly_pi: Decimal,
    expenses: PropertyExpenses | None,
    monthly_rent: Decimal,
    *,
    ctx: CalculatorContext = DEFAULT_CONTEXT,
) -> DSCRResult:
    """Build a DSCRResult from an already computed monthly P&I.

    Each field is rounded on its own; PITIA and the ratio are derived from the
    unrounded monthly expense figures, so the displayed PITIA can differ by a
    cent from the sum of the displayed components.
    """
    expenses = expenses or PropertyExpenses()

    with localcontext(ctx.decimal_context()):
        rent = _non_negative(monthly_rent, "monthly_rent")
        taxes = _non_negative(expenses.property_taxes_annual, "property_taxes_annual", ZERO) / MONTHS_PER_YEAR
        insurance = _non_negative(expenses.insurance_annual, "insurance_annual", ZERO) / MONTHS_PER_YEAR
        flood = _non_negative(expenses.flood_insurance_annual, "flood_insurance_annual", ZERO) / MONTHS_PER_YEAR
        hoa = _non_negative(expenses.hoa_dues_monthly, "hoa_dues_monthly", ZERO)

        pitia = monthly_pi + taxes + insurance + flood + hoa
        dscr_ratio = ratio(rent / pitia, ctx) if pitia > 0 else ratio(ZERO, ctx)

        return DSCRResult(
            monthly_pi=money(monthly_pi, ctx),
            monthly_taxes=money(taxes, ctx),
            monthly_insurance=money(insurance, ctx),
            monthly_flood=money(flood, ctx),
            monthly_hoa=money(hoa, ctx),
            monthly_pitia=money(pitia, ctx),
            monthly_rent=rent,
            dscr_ratio=dscr_ratio,
            qualifies=dscr_ratio >= ctx.min_dscr,
            qualifies_standard=dscr_ratio >= ctx.standard_dscr,
        )


def calculate_dscr(
    terms: LoanTerms,
    expenses: PropertyExpenses | None,
    monthly_rent: Decimal,
    *,
    ctx: CalculatorContext = DEFAULT_CONTEXT,
) -> DSCRResult:
    """DSCR = monthly rent / monthly PITIA.

    ``monthly_rent`` is the rent already resolved for underwriting; see
    ``rent_for_underwriting``. Invalid loan terms raise from the
    amortization engine unchanged.
    """
    pi = monthly_pi_for_terms(terms, ctx=ctx)
    result = evaluate_pitia(pi, expenses, monthly_rent, ctx=ctx)
    logger.debug(
        "dscr rent=%s pitia=%s -> %s", result.monthly_rent, result.monthly_pitia, result.dscr_ratio
    )
    return result


def calculate_ltv(
    loan_amount: Decimal,
    property_value: Decimal,
    *,
    ctx: CalculatorContext = DEFAULT_CONTEXT,
) -> Decimal:
    """LTV as a percentage, 2 dp. A property value <= 0 yields 0."""
    with localcontext(ctx.decimal_context()):
        loan = _non_negative(loan_amount, "loan_amount")
        value = to_decimal(property_value, "property_value", default=ZERO)
        if value <= 0:
            return ratio(ZERO, ctx)
        return ratio(loan / value * HUNDRED, ctx, field="loan_amount")


def calculate_loan_amount(
    purchase_price: Decimal,
    down_payment_percent: Decimal,
    *,
    ctx: CalculatorContext = DEFAULT_CONTEXT,
) -> Decimal:
    """Loan amount = purchase price less the down payment."""
    with localcontext(ctx.decimal_context()):
        price = _non_negative(purchase_price, "purchase_price")
        down = _non_negative(down_payment_percent, "down_payment_percent")
        if down > HUNDRED:
            raise InvalidInputError("down_payment_percent", "cannot exceed 100%")
        return money(price * (1 - down / HUNDRED), ctx, field="purchase_price")


def rent_for_underwriting(current_lease_rent: Decimal | None, market_rent: Decimal | None) -> Decimal:
    """Lesser of lease and market rent.

    A missing or zero figure is ignored; with neither available the result is 0.
    """
    figures = [
        _non_negative(current_lease_rent, "current_lease_rent", ZERO),
        _non_negative(market_rent, "market_rent", ZERO),
    ]
    available = [f for f in figures if f > 0]
    return min(available) if available else ZERO


def stress_test(
    terms: LoanTerms,
    expenses: PropertyExpenses | None,
    monthly_rent: Decimal,
    rate_shock_bps: int = 50,
    rent_shock_percent: Decimal = Decimal("5"),
    *,
    ctx: CalculatorContext = DEFAULT_CONTEXT,
) -> list[StressScenario]:
    """DSCR under rate and rent shocks.

    Scenarios, in order: rate up, rate down (floored at 0%), rent down, rent up.
    """
    with localcontext(ctx.decimal_context()):
        rate = to_decimal(terms.annual_rate_percent, "annual_rate_percent")
        rent = _non_negative(monthly_rent, "monthly_rent")
        shock = _non_negative(rate_shock_bps, "rate_shock_bps") / HUNDRED
        rent_shock = _non_negative(rent_shock_percent, "rent_shock_percent") / HUNDRED

        cases = [
            (f"+{rate_shock_bps}bps", rate + shock, rent),
            (f"-{rate_shock_bps}bps", max(rate - shock, ZERO), rent),
            (f"-{rent_shock_percent}% rent", rate, money(rent * (1 - rent_shock), ctx)),
            (f"+{rent_shock_percent}% rent", rate, money(rent * (1 + rent_shock), ctx)),
        ]

    scenarios = []
    for name, shocked_rate, shocked_rent in cases:
        result = calculate_dscr(
            replace(terms, annual_rate_percent=shocked_rate), expenses, shocked_rent, ctx=ctx
        )
        scenarios.append(StressScenario(
            name=name,
            annual_rate_percent=shocked_rate,
            monthly_rent=shocked_rent,
            dscr_ratio=result.dscr_ratio,
            qualifies=result.qualifies,
        ))
    return scenarios
