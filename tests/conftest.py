"""Canonical test fixtures used across engine and API tests.

Fixture: $500K loan, 7.5% rate, 30yr fixed; $4,200 taxes and $1,800 insurance
per year; $4,500 rent.
"""

import pytest
from decimal import Decimal

from loan_metrics.models.loan import LoanTerms, PropertyExpenses, PropertyInput


@pytest.fixture
def canonical_terms() -> LoanTerms:
    """$500K, 7.5%, 30-year fully amortizing."""
    return LoanTerms(
        principal=Decimal("500000"),
        annual_rate_percent=Decimal("7.5"),
        amortization_months=360,
        is_interest_only=False,
    )


@pytest.fixture
def canonical_expenses() -> PropertyExpenses:
    return PropertyExpenses(
        property_taxes_annual=Decimal("4200"),
        insurance_annual=Decimal("1800"),
        flood_insurance_annual=Decimal("0"),
        hoa_dues_monthly=Decimal("0"),
    )


@pytest.fixture
def canonical_rent() -> Decimal:
    return Decimal("4500")


@pytest.fixture
def duplex_pair() -> list[PropertyInput]:
    """Two identical $300K rentals for blanket-loan tests."""
    expenses = PropertyExpenses(
        property_taxes_annual=Decimal("3600"),
        insurance_annual=Decimal("1200"),
    )
    return [
        PropertyInput(
            property_id=f"prop-{i}",
            property_value=Decimal("300000"),
            expenses=expenses,
            monthly_rent=Decimal("2200"),
        )
        for i in (1, 2)
    ]
