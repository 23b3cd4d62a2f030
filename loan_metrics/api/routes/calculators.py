"""Calculator routes: payment, amortization, DSCR, LTV, loan sizing, stress test, blanket allocation."""

from dataclasses import asdict

from fastapi import APIRouter, Depends

from loan_metrics.api.deps import get_calculator_context
from loan_metrics.api.schemas import (
    AmortizationRequest,
    AmortizationResponse,
    BlanketAllocationRequest,
    DSCRRequest,
    DSCRResponse,
    LoanTermsRequest,
    LoanAmountRequest,
    LoanAmountResponse,
    LTVRequest,
    LTVResponse,
    PaymentResponse,
    PortfolioResponse,
    PropertyAllocationResponse,
    StressScenarioResponse,
    StressTestRequest,
)
from loan_metrics.engine.amortization import amortization_schedule, monthly_pi_for_terms, yearly_debt_summary
from loan_metrics.engine.bands import dscr_status, ltv_status
from loan_metrics.engine.dscr import (
    calculate_dscr,
    calculate_loan_amount,
    calculate_ltv,
    rent_for_underwriting,
    stress_test,
)
from loan_metrics.engine.portfolio import allocate_blanket_loan
from loan_metrics.engine.precision import CalculatorContext, money

router = APIRouter(prefix="/api/v1", tags=["calculators"])


@router.post("/payment", response_model=PaymentResponse)
async def payment(
    req: LoanTermsRequest,
    ctx: CalculatorContext = Depends(get_calculator_context),
):
    return PaymentResponse(monthly_pi=monthly_pi_for_terms(req.to_terms(), ctx=ctx))


@router.post("/amortization", response_model=AmortizationResponse)
async def amortization(
    req: AmortizationRequest,
    ctx: CalculatorContext = Depends(get_calculator_context),
):
    schedule = amortization_schedule(req.loan.to_terms(), req.months, ctx=ctx)
    return AmortizationResponse(
        monthly_payment=schedule.monthly_payment,
        total_interest=schedule.total_interest,
        total_principal=schedule.total_principal,
        is_interest_only=schedule.is_interest_only,
        payments=[asdict(p) for p in schedule.payments],
        yearly=[asdict(y) for y in yearly_debt_summary(schedule, ctx=ctx)],
    )


@router.post("/dscr", response_model=DSCRResponse)
async def dscr(
    req: DSCRRequest,
    ctx: CalculatorContext = Depends(get_calculator_context),
):
    """DSCR for one property.

    Without an explicit ``monthly_rent`` the lesser of lease and market rent is used.
    """
    rent = req.monthly_rent
    if rent is None:
        rent = rent_for_underwriting(req.current_lease_rent, req.market_rent)

    result = calculate_dscr(req.loan.to_terms(), req.expenses.to_expenses(), rent, ctx=ctx)
    return DSCRResponse(**asdict(result), status=dscr_status(result.dscr_ratio).value)


@router.post("/ltv", response_model=LTVResponse)
async def ltv(
    req: LTVRequest,
    ctx: CalculatorContext = Depends(get_calculator_context),
):
    ratio = calculate_ltv(req.loan_amount, req.property_value, ctx=ctx)
    return LTVResponse(ltv_ratio=ratio, status=ltv_status(ratio).value)


@router.post("/loan-amount", response_model=LoanAmountResponse)
async def loan_amount(
    req: LoanAmountRequest,
    ctx: CalculatorContext = Depends(get_calculator_context),
):
    """Loan sized from purchase price and down payment."""
    amount = calculate_loan_amount(req.purchase_price, req.down_payment_percent, ctx=ctx)
    return LoanAmountResponse(
        loan_amount=amount,
        down_payment=money(req.purchase_price - amount, ctx),
        ltv_ratio=calculate_ltv(amount, req.purchase_price, ctx=ctx),
    )


@router.post("/stress-test", response_model=list[StressScenarioResponse])
async def stress(
    req: StressTestRequest,
    ctx: CalculatorContext = Depends(get_calculator_context),
):
    scenarios = stress_test(
        req.loan.to_terms(),
        req.expenses.to_expenses(),
        req.monthly_rent,
        rate_shock_bps=req.rate_shock_bps,
        rent_shock_percent=req.rent_shock_percent,
        ctx=ctx,
    )
    return [StressScenarioResponse(**asdict(s)) for s in scenarios]


@router.post("/blanket-allocation", response_model=PortfolioResponse)
async def blanket_allocation(
    req: BlanketAllocationRequest,
    ctx: CalculatorContext = Depends(get_calculator_context),
):
    metrics = allocate_blanket_loan(
        [p.to_property() for p in req.properties],
        req.total_loan_amount,
        req.to_terms(),
        req.to_strategy(),
        ctx=ctx,
    )

    breakdowns = [
        PropertyAllocationResponse(
            property_id=b.property_id,
            allocated_loan_amount=b.allocated_loan_amount,
            share_of_total_percent=b.share_of_total_percent,
            ltv_ratio=b.ltv_ratio,
            ltv_status=ltv_status(b.ltv_ratio).value,
            dscr_ratio=b.dscr_ratio,
            dscr_status=dscr_status(b.dscr_ratio).value,
            monthly_pi=b.dscr.monthly_pi,
            monthly_pitia=b.dscr.monthly_pitia,
        )
        for b in metrics.property_breakdowns
    ]

    return PortfolioResponse(
        aggregate_dscr=metrics.aggregate_dscr,
        aggregate_dscr_status=dscr_status(metrics.aggregate_dscr).value,
        aggregate_ltv=metrics.aggregate_ltv,
        aggregate_ltv_status=ltv_status(metrics.aggregate_ltv).value,
        total_monthly_pi=metrics.total_monthly_pi,
        total_monthly_pitia=metrics.total_monthly_pitia,
        total_gross_rent=metrics.total_gross_rent,
        total_allocated=metrics.total_allocated,
        balance_difference=metrics.balance_difference,
        is_balanced=metrics.is_balanced,
        property_breakdowns=breakdowns,
    )
