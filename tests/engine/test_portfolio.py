"""Tests for blanket-loan allocation."""

from dataclasses import replace
from decimal import Decimal, ROUND_HALF_UP

import pytest

from loan_metrics.engine.dscr import calculate_dscr
from loan_metrics.engine.errors import InvalidInputError
from loan_metrics.engine.portfolio import allocate_blanket_loan
from loan_metrics.models.loan import EvenSplit, LoanTerms, Manual, PropertyExpenses, PropertyInput


@pytest.fixture
def blanket_terms() -> LoanTerms:
    return LoanTerms(Decimal("400000"), Decimal("7.5"), 360)


class TestEvenSplit:
    def test_two_identical_properties(self, duplex_pair, blanket_terms):
        metrics = allocate_blanket_loan(duplex_pair, Decimal("400000"), blanket_terms, EvenSplit())
        assert len(metrics.property_breakdowns) == 2
        for b in metrics.property_breakdowns:
            assert b.allocated_loan_amount == Decimal("200000")
            assert b.ltv_ratio == Decimal("66.67")
            assert b.share_of_total_percent == Decimal("50.00")
        assert metrics.aggregate_ltv == Decimal("66.67")
        assert metrics.balance_difference == Decimal("0")
        assert metrics.is_balanced is True

    def test_even_split_is_default(self, duplex_pair, blanket_terms):
        assert allocate_blanket_loan(duplex_pair, Decimal("400000"), blanket_terms) == \
            allocate_blanket_loan(duplex_pair, Decimal("400000"), blanket_terms, EvenSplit())

    @pytest.mark.parametrize("count", [1, 3, 7])
    def test_identical_properties_identical_breakdowns(self, duplex_pair, blanket_terms, count):
        properties = [replace(duplex_pair[0], property_id=f"p{i}") for i in range(count)]
        metrics = allocate_blanket_loan(properties, Decimal("400000"), blanket_terms)
        normalized = {replace(b, property_id="") for b in metrics.property_breakdowns}
        assert len(normalized) == 1

    def test_uneven_division_not_reconciled(self, duplex_pair, blanket_terms):
        properties = [replace(duplex_pair[0], property_id=f"p{i}") for i in range(3)]
        metrics = allocate_blanket_loan(properties, Decimal("400000"), blanket_terms)
        assert all(b.allocated_loan_amount == Decimal("133333.33") for b in metrics.property_breakdowns)
        assert metrics.balance_difference == Decimal("0")
        assert metrics.is_balanced is True

    def test_matches_single_property_dscr(self, duplex_pair, blanket_terms):
        metrics = allocate_blanket_loan(duplex_pair, Decimal("400000"), blanket_terms)
        prop = duplex_pair[0]
        single = calculate_dscr(replace(blanket_terms, principal=Decimal("200000")), prop.expenses, prop.monthly_rent)
        assert metrics.property_breakdowns[0].dscr == single
        assert metrics.property_breakdowns[0].dscr_ratio == single.dscr_ratio


class TestManualAllocation:
    def test_amounts_used_as_is(self, duplex_pair, blanket_terms):
        metrics = allocate_blanket_loan(
            duplex_pair, Decimal("400000"), blanket_terms,
            Manual(allocations=(Decimal("250000"), Decimal("150000"))),
        )
        first, second = metrics.property_breakdowns
        assert first.allocated_loan_amount == Decimal("250000")
        assert second.allocated_loan_amount == Decimal("150000")
        assert first.ltv_ratio == Decimal("83.33")
        assert second.ltv_ratio == Decimal("50.00")
        assert first.share_of_total_percent == Decimal("62.50")
        assert first.dscr_ratio < second.dscr_ratio

    def test_unbalanced_reported_not_rejected(self, duplex_pair, blanket_terms):
        metrics = allocate_blanket_loan(
            duplex_pair, Decimal("400000"), blanket_terms,
            Manual(allocations=[Decimal("250000"), Decimal("140000")]),
        )
        assert metrics.total_allocated == Decimal("390000.00")
        assert metrics.balance_difference == Decimal("10000.00")
        assert metrics.is_balanced is False

    def test_over_allocation_negative_difference(self, duplex_pair, blanket_terms):
        metrics = allocate_blanket_loan(
            duplex_pair, Decimal("400000"), blanket_terms,
            Manual(allocations=(Decimal("200000.50"), Decimal("200000.25"))),
        )
        assert metrics.balance_difference == Decimal("-0.75")
        assert metrics.is_balanced is True

    def test_order_preserved(self, blanket_terms):
        properties = [
            PropertyInput(f"p{i}", Decimal(value), monthly_rent=Decimal("2000"))
            for i, value in enumerate(["100000", "200000", "400000"])
        ]
        metrics = allocate_blanket_loan(
            properties, Decimal("350000"), blanket_terms,
            Manual(allocations=(Decimal("50000"), Decimal("100000"), Decimal("200000"))),
        )
        assert [b.property_id for b in metrics.property_breakdowns] == ["p0", "p1", "p2"]
        assert [b.ltv_ratio for b in metrics.property_breakdowns] == [Decimal("50.00")] * 3

    def test_zero_allocation_has_no_debt_service(self, duplex_pair, blanket_terms):
        metrics = allocate_blanket_loan(
            duplex_pair, Decimal("400000"), blanket_terms,
            Manual(allocations=(Decimal("400000"), Decimal("0"))),
        )
        second = metrics.property_breakdowns[1]
        assert second.dscr.monthly_pi == Decimal("0")
        assert second.dscr.monthly_pitia == Decimal("400.00")  # 300 taxes + 100 insurance
        assert second.ltv_ratio == Decimal("0")

    def test_length_mismatch_rejected(self, duplex_pair, blanket_terms):
        with pytest.raises(InvalidInputError) as exc:
            allocate_blanket_loan(
                duplex_pair, Decimal("400000"), blanket_terms, Manual(allocations=(Decimal("400000"),))
            )
        assert exc.value.field == "allocations"

    def test_negative_amount_rejected(self, duplex_pair, blanket_terms):
        with pytest.raises(InvalidInputError):
            allocate_blanket_loan(
                duplex_pair, Decimal("400000"), blanket_terms,
                Manual(allocations=(Decimal("500000"), Decimal("-100000"))),
            )


class TestAggregates:
    def test_aggregate_dscr_is_rent_over_pitia(self, blanket_terms):
        properties = [
            PropertyInput(
                "a", Decimal("300000"),
                PropertyExpenses(property_taxes_annual=Decimal("3600"), insurance_annual=Decimal("1200")),
                monthly_rent=Decimal("2400"),
            ),
            PropertyInput(
                "b", Decimal("250000"),
                PropertyExpenses(property_taxes_annual=Decimal("2400"), hoa_dues_monthly=Decimal("150")),
                monthly_rent=Decimal("1800"),
                other_income_monthly=Decimal("100"),
            ),
        ]
        metrics = allocate_blanket_loan(properties, Decimal("400000"), blanket_terms)
        rents = sum(b.dscr.monthly_rent for b in metrics.property_breakdowns)
        pitia = sum(b.dscr.monthly_pitia for b in metrics.property_breakdowns)
        assert rents == Decimal("4300")
        assert metrics.total_gross_rent == Decimal("4300.00")
        assert metrics.total_monthly_pitia == pitia
        assert metrics.aggregate_dscr == (rents / pitia).quantize(Decimal("0.01"), ROUND_HALF_UP)
        # 400000 / 550000
        assert metrics.aggregate_ltv == Decimal("72.73")

    def test_totals(self, duplex_pair, blanket_terms):
        metrics = allocate_blanket_loan(duplex_pair, Decimal("400000"), blanket_terms)
        each = metrics.property_breakdowns[0].dscr
        assert metrics.total_monthly_pi == each.monthly_pi * 2
        assert metrics.total_monthly_pitia == each.monthly_pitia * 2

    def test_other_income_counts_as_rent(self, duplex_pair, blanket_terms):
        with_parking = [replace(p, other_income_monthly=Decimal("150")) for p in duplex_pair]
        metrics = allocate_blanket_loan(with_parking, Decimal("400000"), blanket_terms)
        assert metrics.property_breakdowns[0].dscr.monthly_rent == Decimal("2350")

    def test_interest_only_blanket(self, duplex_pair):
        terms = LoanTerms(Decimal("400000"), Decimal("6"), 360, is_interest_only=True)
        metrics = allocate_blanket_loan(duplex_pair, Decimal("400000"), terms)
        # 200000 * 0.06 / 12 each
        assert all(b.dscr.monthly_pi == Decimal("1000.00") for b in metrics.property_breakdowns)
        assert metrics.total_monthly_pi == Decimal("2000.00")

    def test_zero_value_property_ltv_sentinel(self, duplex_pair, blanket_terms):
        properties = [duplex_pair[0], replace(duplex_pair[1], property_value=Decimal("0"))]
        metrics = allocate_blanket_loan(properties, Decimal("400000"), blanket_terms)
        assert metrics.property_breakdowns[1].ltv_ratio == Decimal("0")
        # 400000 / 300000
        assert metrics.aggregate_ltv == Decimal("133.33")

    def test_all_zero_values(self, duplex_pair, blanket_terms):
        properties = [replace(p, property_value=Decimal("0")) for p in duplex_pair]
        metrics = allocate_blanket_loan(properties, Decimal("400000"), blanket_terms)
        assert metrics.aggregate_ltv == Decimal("0")

    def test_idempotent(self, duplex_pair, blanket_terms):
        a = allocate_blanket_loan(duplex_pair, Decimal("400000"), blanket_terms)
        b = allocate_blanket_loan(duplex_pair, Decimal("400000"), blanket_terms)
        assert a == b


class TestPortfolioValidation:
    def test_empty_properties(self, blanket_terms):
        with pytest.raises(InvalidInputError) as exc:
            allocate_blanket_loan([], Decimal("400000"), blanket_terms)
        assert exc.value.field == "properties"

    @pytest.mark.parametrize("total", [Decimal("0"), Decimal("-5"), None])
    def test_non_positive_total(self, duplex_pair, blanket_terms, total):
        with pytest.raises(InvalidInputError) as exc:
            allocate_blanket_loan(duplex_pair, total, blanket_terms)
        assert exc.value.field == "total_loan_amount"

    def test_bad_rate_propagates(self, duplex_pair):
        terms = LoanTerms(Decimal("400000"), Decimal("-1"), 360)
        with pytest.raises(InvalidInputError) as exc:
            allocate_blanket_loan(duplex_pair, Decimal("400000"), terms)
        assert exc.value.field == "annual_rate_percent"
