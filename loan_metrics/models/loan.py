from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(frozen=True)
class LoanTerms:
    principal: Decimal
    annual_rate_percent: Decimal  # e.g. 7.5 for 7.5%
    amortization_months: int = 360
    is_interest_only: bool = False  # amortization_months is ignored for the payment


@dataclass(frozen=True)
class PropertyExpenses:
    """Operating expenses carried in PITIA. ``None`` counts as zero."""
    property_taxes_annual: Decimal | None = Decimal("0")
    insurance_annual: Decimal | None = Decimal("0")
    flood_insurance_annual: Decimal | None = Decimal("0")
    hoa_dues_monthly: Decimal | None = Decimal("0")


@dataclass(frozen=True)
class PropertyInput:
    """One collateral property of a blanket loan."""
    property_id: str
    property_value: Decimal  # Appraised value, or purchase price when not yet appraised
    expenses: PropertyExpenses = field(default_factory=PropertyExpenses)
    monthly_rent: Decimal = Decimal("0")  # Rent used for underwriting
    other_income_monthly: Decimal = Decimal("0")  # Parking, laundry, etc.


@dataclass(frozen=True)
class EvenSplit:
    """Each property carries total / N."""


@dataclass(frozen=True)
class Manual:
    """Caller-supplied amount per property, in property order."""
    allocations: tuple[Decimal, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "allocations", tuple(self.allocations))


AllocationStrategy = EvenSplit | Manual
