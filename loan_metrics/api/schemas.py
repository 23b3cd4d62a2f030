"""Pydantic schemas for API request/response models."""

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

from loan_metrics.models.loan import EvenSplit, LoanTerms, Manual, PropertyExpenses, PropertyInput


# ---- Request schemas ----

class LoanTermsRequest(BaseModel):
    principal: Decimal = Field(..., description="Loan amount")
    annual_rate_percent: Decimal = Field(..., description="Annual note rate, e.g. 7.5")
    amortization_months: int | None = Field(360, description="Optional for interest-only loans")
    is_interest_only: bool = False

    def to_terms(self) -> LoanTerms:
        return LoanTerms(
            principal=self.principal,
            annual_rate_percent=self.annual_rate_percent,
            amortization_months=self.amortization_months,
            is_interest_only=self.is_interest_only,
        )


class ExpensesRequest(BaseModel):
    property_taxes_annual: Decimal | None = None
    insurance_annual: Decimal | None = None
    flood_insurance_annual: Decimal | None = None
    hoa_dues_monthly: Decimal | None = None

    def to_expenses(self) -> PropertyExpenses:
        return PropertyExpenses(
            property_taxes_annual=self.property_taxes_annual,
            insurance_annual=self.insurance_annual,
            flood_insurance_annual=self.flood_insurance_annual,
            hoa_dues_monthly=self.hoa_dues_monthly,
        )


class AmortizationRequest(BaseModel):
    loan: LoanTermsRequest
    months: int | None = Field(None, description="Only schedule this many periods")


class DSCRRequest(BaseModel):
    loan: LoanTermsRequest
    expenses: ExpensesRequest = Field(default_factory=ExpensesRequest)

    # Either the resolved rent, or lease/market figures to take the lesser of
    monthly_rent: Decimal | None = None
    current_lease_rent: Decimal | None = None
    market_rent: Decimal | None = None


class LTVRequest(BaseModel):
    loan_amount: Decimal
    property_value: Decimal


class LoanAmountRequest(BaseModel):
    purchase_price: Decimal
    down_payment_percent: Decimal = Field(..., description="Down payment, e.g. 25 for 25%")


class StressTestRequest(BaseModel):
    loan: LoanTermsRequest
    expenses: ExpensesRequest = Field(default_factory=ExpensesRequest)
    monthly_rent: Decimal
    rate_shock_bps: int = 50
    rent_shock_percent: Decimal = Decimal("5")


class BlanketPropertyRequest(BaseModel):
    property_id: str
    property_value: Decimal
    expenses: ExpensesRequest = Field(default_factory=ExpensesRequest)
    monthly_rent: Decimal = Decimal("0")
    other_income_monthly: Decimal = Decimal("0")

    def to_property(self) -> PropertyInput:
        return PropertyInput(
            property_id=self.property_id,
            property_value=self.property_value,
            expenses=self.expenses.to_expenses(),
            monthly_rent=self.monthly_rent,
            other_income_monthly=self.other_income_monthly,
        )


class BlanketAllocationRequest(BaseModel):
    properties: list[BlanketPropertyRequest]
    total_loan_amount: Decimal
    annual_rate_percent: Decimal
    amortization_months: int = 360
    is_interest_only: bool = False
    strategy: Literal["even_split", "manual"] = "even_split"
    allocations: list[Decimal] | None = None

    def to_terms(self) -> LoanTerms:
        return LoanTerms(
            principal=self.total_loan_amount,
            annual_rate_percent=self.annual_rate_percent,
            amortization_months=self.amortization_months,
            is_interest_only=self.is_interest_only,
        )

    def to_strategy(self) -> EvenSplit | Manual:
        if self.strategy == "manual":
            return Manual(allocations=tuple(self.allocations or ()))
        return EvenSplit()


# ---- Response schemas ----

class PaymentResponse(BaseModel):
    monthly_pi: Decimal


class AmortizationPaymentResponse(BaseModel):
    period: int
    payment: Decimal
    principal: Decimal
    interest: Decimal
    balance: Decimal


class YearlyDebtResponse(BaseModel):
    year: int
    principal: Decimal
    interest: Decimal
    debt_service: Decimal
    ending_balance: Decimal
    interest_only: bool


class AmortizationResponse(BaseModel):
    monthly_payment: Decimal
    total_interest: Decimal
    total_principal: Decimal
    is_interest_only: bool
    payments: list[AmortizationPaymentResponse]
    yearly: list[YearlyDebtResponse]


class DSCRResponse(BaseModel):
    monthly_pi: Decimal
    monthly_taxes: Decimal
    monthly_insurance: Decimal
    monthly_flood: Decimal
    monthly_hoa: Decimal
    monthly_pitia: Decimal
    monthly_rent: Decimal
    dscr_ratio: Decimal
    qualifies: bool
    qualifies_standard: bool
    status: str


class LTVResponse(BaseModel):
    ltv_ratio: Decimal
    status: str


class LoanAmountResponse(BaseModel):
    loan_amount: Decimal
    down_payment: Decimal
    ltv_ratio: Decimal


class StressScenarioResponse(BaseModel):
    name: str
    annual_rate_percent: Decimal
    monthly_rent: Decimal
    dscr_ratio: Decimal
    qualifies: bool


class PropertyAllocationResponse(BaseModel):
    property_id: str
    allocated_loan_amount: Decimal
    share_of_total_percent: Decimal
    ltv_ratio: Decimal
    ltv_status: str
    dscr_ratio: Decimal
    dscr_status: str
    monthly_pi: Decimal
    monthly_pitia: Decimal


class PortfolioResponse(BaseModel):
    aggregate_dscr: Decimal
    aggregate_dscr_status: str
    aggregate_ltv: Decimal
    aggregate_ltv_status: str
    total_monthly_pi: Decimal
    total_monthly_pitia: Decimal
    total_gross_rent: Decimal
    total_allocated: Decimal
    balance_difference: Decimal
    is_balanced: bool
    property_breakdowns: list[PropertyAllocationResponse]
