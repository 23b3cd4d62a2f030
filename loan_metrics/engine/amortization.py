"""Monthly P&I and amortization schedules.

Pure functions: Decimal in, Decimal/dataclass out. No I/O.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, localcontext

from loan_metrics.engine.errors import InvalidInputError
from loan_metrics.engine.precision import (
    DEFAULT_CONTEXT,
    HUNDRED,
    MONTHS_PER_YEAR,
    ZERO,
    CalculatorContext,
    money,
    to_decimal,
)
from loan_metrics.models.loan import LoanTerms

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AmortizationPayment:
    period: int
    payment: Decimal
    principal: Decimal
    interest: Decimal
    balance: Decimal


@dataclass(frozen=True)
class AmortizationSchedule:
    payments: tuple[AmortizationPayment, ...]
    monthly_payment: Decimal
    total_interest: Decimal
    total_principal: Decimal
    is_interest_only: bool = False


@dataclass(frozen=True)
class YearlyDebtService:
    year: int
    principal: Decimal
    interest: Decimal
    debt_service: Decimal
    ending_balance: Decimal
    interest_only: bool


def _principal(value) -> Decimal:
    principal = to_decimal(value, "principal")
    if principal <= 0:
        raise InvalidInputError("principal", "must be greater than zero")
    return principal


def _annual_rate(value, ctx: CalculatorContext) -> Decimal:
    rate = to_decimal(value, "annual_rate_percent")
    if rate < 0:
        raise InvalidInputError("annual_rate_percent", "cannot be negative")
    if rate > ctx.max_annual_rate_percent:
        raise InvalidInputError(
            "annual_rate_percent", f"cannot exceed {ctx.max_annual_rate_percent}%"
        )
    return rate


def _months(value, field: str = "amortization_months") -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(field, "must be a whole number of months")
    if value <= 0:
        raise InvalidInputError(field, "must be greater than zero")
    return value


def monthly_pi(
    principal: Decimal,
    annual_rate_percent: Decimal,
    amortization_months: int,
    is_interest_only: bool = False,
    *,
    ctx: CalculatorContext = DEFAULT_CONTEXT,
) -> Decimal:
    """Fixed monthly principal-and-interest payment, rounded to cents.

    Interest-only loans pay ``principal * r`` and ignore ``amortization_months``.
    A zero rate amortizes straight-line.
    """
    with localcontext(ctx.decimal_context()):
        p = _principal(principal)
        r = _annual_rate(annual_rate_percent, ctx) / HUNDRED / MONTHS_PER_YEAR

        if is_interest_only:
            payment = p * r
        else:
            n = _months(amortization_months)
            if r == 0:
                payment = p / n
            else:
                # M = P * [r(1+r)^n] / [(1+r)^n - 1]
                factor = (1 + r) ** n
                payment = p * (r * factor) / (factor - 1)

        result = money(payment, ctx, field="principal")

    logger.debug(
        "monthly_pi principal=%s rate=%s%% months=%s io=%s -> %s",
        principal, annual_rate_percent, amortization_months, is_interest_only, result,
    )
    return result


def monthly_pi_for_terms(terms: LoanTerms, *, ctx: CalculatorContext = DEFAULT_CONTEXT) -> Decimal:
    return monthly_pi(
        terms.principal,
        terms.annual_rate_percent,
        terms.amortization_months,
        terms.is_interest_only,
        ctx=ctx,
    )


def amortization_schedule(
    terms: LoanTerms,
    months: int | None = None,
    *,
    ctx: CalculatorContext = DEFAULT_CONTEXT,
) -> AmortizationSchedule:
    """Generate a full or partial payment schedule.

    Args:
        terms: Loan terms
        months: If provided, only generate this many periods

    Interest is rounded to cents each period. The final period of a full
    amortizing schedule pays off whatever balance remains, so the principal
    portions sum exactly to the loan amount. Interest-only schedules never
    reduce the balance, and need no amortization term when ``months`` is given.
    """
    pmt = monthly_pi_for_terms(terms, ctx=ctx)
    if terms.is_interest_only and terms.amortization_months is None:
        if months is None:
            raise InvalidInputError("months", "required for an interest-only loan without a term")
        term_months = _months(months, "months")
    else:
        term_months = _months(terms.amortization_months)
    n_periods = term_months if months is None else min(_months(months, "months"), term_months)

    with localcontext(ctx.decimal_context()):
        balance = to_decimal(terms.principal, "principal")
        r = to_decimal(terms.annual_rate_percent, "annual_rate_percent") / HUNDRED / MONTHS_PER_YEAR

        payments: list[AmortizationPayment] = []
        total_interest = ZERO
        total_principal = ZERO

        for period in range(1, n_periods + 1):
            interest = money(balance * r, ctx)
            if terms.is_interest_only:
                principal_paid = ZERO
                actual_payment = interest
            else:
                principal_paid = pmt - interest
                # Final payment adjustment
                if period == term_months or principal_paid > balance:
                    principal_paid = balance
                    actual_payment = interest + principal_paid
                else:
                    actual_payment = pmt

            balance -= principal_paid
            total_interest += interest
            total_principal += principal_paid

            payments.append(AmortizationPayment(
                period=period,
                payment=actual_payment,
                principal=principal_paid,
                interest=interest,
                balance=money(balance, ctx),
            ))
            if balance == 0:
                break

    return AmortizationSchedule(
        payments=tuple(payments),
        monthly_payment=pmt,
        total_interest=total_interest,
        total_principal=total_principal,
        is_interest_only=terms.is_interest_only,
    )


def yearly_debt_summary(
    schedule: AmortizationSchedule,
    *,
    ctx: CalculatorContext = DEFAULT_CONTEXT,
) -> list[YearlyDebtService]:
    """Roll a schedule up into loan years.

    A trailing partial year is reported on its own. A year in which no
    principal was repaid is flagged ``interest_only``.
    """
    by_year: dict[int, list[AmortizationPayment]] = {}
    for p in schedule.payments:
        by_year.setdefault((p.period - 1) // 12 + 1, []).append(p)

    summary: list[YearlyDebtService] = []
    with localcontext(ctx.decimal_context()):
        for year, payments in by_year.items():
            principal = money(sum((p.principal for p in payments), ZERO), ctx)
            summary.append(YearlyDebtService(
                year=year,
                principal=principal,
                interest=money(sum((p.interest for p in payments), ZERO), ctx),
                debt_service=money(sum((p.payment for p in payments), ZERO), ctx),
                ending_balance=payments[-1].balance,
                interest_only=principal == 0,
            ))
    return summary
