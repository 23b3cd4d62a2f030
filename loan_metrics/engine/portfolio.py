"""Blanket-loan allocation across multiple properties.

Each property carries its own slice of the loan at the shared rate and term;
per-property LTV/DSCR come from that slice, aggregates from the sums.
"""

import logging
from dataclasses import replace
from decimal import Decimal, localcontext

from loan_metrics.engine.amortization import monthly_pi_for_terms
from loan_metrics.engine.dscr import calculate_ltv, evaluate_pitia
from loan_metrics.engine.errors import InvalidInputError
from loan_metrics.engine.precision import (
    DEFAULT_CONTEXT,
    HUNDRED,
    ZERO,
    CalculatorContext,
    money,
    ratio,
    to_decimal,
)
from loan_metrics.models.loan import (
    AllocationStrategy,
    EvenSplit,
    LoanTerms,
    Manual,
    PropertyInput,
)
from loan_metrics.models.results import PortfolioMetrics, PropertyAllocation

logger = logging.getLogger(__name__)


def _allocations(
    strategy: AllocationStrategy, count: int, total: Decimal
) -> list[Decimal]:
    if isinstance(strategy, EvenSplit):
        # No remainder reconciliation: every share is total / N at full precision
        share = total / count
        return [share] * count

    if isinstance(strategy, Manual):
        if len(strategy.allocations) != count:
            raise InvalidInputError(
                "allocations",
                f"expected {count} amounts, got {len(strategy.allocations)}",
            )
        amounts = []
        for i, raw in enumerate(strategy.allocations):
            amount = to_decimal(raw, f"allocations[{i}]")
            if amount < 0:
                raise InvalidInputError(f"allocations[{i}]", "cannot be negative")
            amounts.append(amount)
        return amounts

    raise InvalidInputError("strategy", f"unknown allocation strategy {strategy!r}")


def allocate_blanket_loan(
    properties: list[PropertyInput],
    total_loan_amount: Decimal,
    terms: LoanTerms,
    strategy: AllocationStrategy = EvenSplit(),
    *,
    ctx: CalculatorContext = DEFAULT_CONTEXT,
) -> PortfolioMetrics:
    """Distribute one loan over ``properties`` and compute portfolio metrics.

    Manual allocations need not sum to the total; the gap is reported in
    ``balance_difference`` and judged against ``ctx.balance_tolerance``.
    ``property_breakdowns[i]`` always describes ``properties[i]``.
    """
    properties = list(properties)
    if not properties:
        raise InvalidInputError("properties", "at least one property is required")

    with localcontext(ctx.decimal_context()):
        total = to_decimal(total_loan_amount, "total_loan_amount")
        if total <= 0:
            raise InvalidInputError("total_loan_amount", "must be greater than zero")

        amounts = _allocations(strategy, len(properties), total)

        breakdowns: list[PropertyAllocation] = []
        sum_rent = ZERO
        sum_pitia = ZERO
        sum_pi = ZERO
        sum_value = ZERO

        for prop, amount in zip(properties, amounts):
            if amount > 0:
                pi = monthly_pi_for_terms(replace(terms, principal=amount), ctx=ctx)
            else:
                pi = ZERO  # Nothing allocated, no debt service
            gross_rent = to_decimal(prop.monthly_rent, "monthly_rent", ZERO) + to_decimal(
                prop.other_income_monthly, "other_income_monthly", ZERO
            )
            result = evaluate_pitia(pi, prop.expenses, gross_rent, ctx=ctx)
            ltv = calculate_ltv(amount, prop.property_value, ctx=ctx)

            breakdowns.append(PropertyAllocation(
                property_id=prop.property_id,
                allocated_loan_amount=money(amount, ctx),
                share_of_total_percent=ratio(amount / total * HUNDRED, ctx),
                ltv_ratio=ltv,
                dscr_ratio=result.dscr_ratio,
                dscr=result,
            ))

            sum_rent += result.monthly_rent
            sum_pitia += result.monthly_pitia
            sum_pi += result.monthly_pi
            value = to_decimal(prop.property_value, "property_value", ZERO)
            if value > 0:
                sum_value += value

        sum_allocated = sum(amounts, ZERO)
        difference = money(total - sum_allocated, ctx)
        is_balanced = abs(difference) <= ctx.balance_tolerance
        if not is_balanced:
            logger.warning(
                "Blanket allocation off by %s (total %s, allocated %s)",
                difference, total, sum_allocated,
            )

        metrics = PortfolioMetrics(
            aggregate_dscr=ratio(sum_rent / sum_pitia, ctx) if sum_pitia > 0 else ratio(ZERO, ctx),
            aggregate_ltv=ratio(sum_allocated / sum_value * HUNDRED, ctx) if sum_value > 0 else ratio(ZERO, ctx),
            total_monthly_pi=money(sum_pi, ctx),
            total_monthly_pitia=money(sum_pitia, ctx),
            total_gross_rent=money(sum_rent, ctx),
            total_allocated=money(sum_allocated, ctx),
            balance_difference=difference,
            is_balanced=is_balanced,
            property_breakdowns=tuple(breakdowns),
        )

    logger.debug(
        "blanket allocation properties=%d dscr=%s ltv=%s",
        len(properties), metrics.aggregate_dscr, metrics.aggregate_ltv,
    )
    return metrics
