from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class MetricStatus(Enum):
    GOOD = "good"
    FAIR = "fair"
    RISK = "risk"


@dataclass(frozen=True)
class DSCRResult:
    monthly_pi: Decimal
    monthly_taxes: Decimal
    monthly_insurance: Decimal
    monthly_flood: Decimal
    monthly_hoa: Decimal
    monthly_pitia: Decimal  # Rounded from the unrounded components
    monthly_rent: Decimal
    dscr_ratio: Decimal  # 0 when PITIA is 0
    qualifies: bool  # >= minimum DSCR (1.00)
    qualifies_standard: bool  # >= standard DSCR (1.25)


@dataclass(frozen=True)
class PropertyAllocation:
    property_id: str
    allocated_loan_amount: Decimal
    share_of_total_percent: Decimal
    ltv_ratio: Decimal  # 0 when the property value is not positive
    dscr_ratio: Decimal
    dscr: DSCRResult


@dataclass(frozen=True)
class PortfolioMetrics:
    aggregate_dscr: Decimal
    aggregate_ltv: Decimal
    total_monthly_pi: Decimal
    total_monthly_pitia: Decimal
    total_gross_rent: Decimal
    total_allocated: Decimal
    balance_difference: Decimal  # total loan amount - sum(allocations)
    is_balanced: bool
    property_breakdowns: tuple[PropertyAllocation, ...]


@dataclass(frozen=True)
class StressScenario:
    name: str
    annual_rate_percent: Decimal
    monthly_rent: Decimal
    dscr_ratio: Decimal
    qualifies: bool
