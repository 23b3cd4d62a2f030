"""Command-line loan calculators.

Usage:
    python -m loan_metrics.cli payment 500000 7.5 --months 360
    python -m loan_metrics.cli payment 500000 6 --interest-only
    python -m loan_metrics.cli dscr 500000 7.5 --rent 4500 --taxes 4200 --insurance 1800
    python -m loan_metrics.cli dscr 500000 7.5 --lease-rent 4600 --market-rent 4500
    python -m loan_metrics.cli ltv 375000 500000
    python -m loan_metrics.cli loan-amount 500000 25
"""

import argparse
import logging
import sys
from decimal import Decimal

from loan_metrics.config import settings
from loan_metrics.engine.amortization import monthly_pi
from loan_metrics.engine.bands import dscr_status, ltv_status
from loan_metrics.engine.dscr import calculate_dscr, calculate_loan_amount, calculate_ltv, rent_for_underwriting
from loan_metrics.engine.errors import InvalidInputError
from loan_metrics.engine.precision import CalculatorContext, to_decimal
from loan_metrics.models.loan import LoanTerms, PropertyExpenses


def print_dscr(result) -> None:
    print(f"\n{'=' * 40}")
    print("  DSCR Analysis")
    print(f"{'=' * 40}")
    print(f"  Monthly P&I:        ${result.monthly_pi:>12,}")
    print(f"  Taxes:              ${result.monthly_taxes:>12,}")
    print(f"  Insurance:          ${result.monthly_insurance:>12,}")
    print(f"  Flood:              ${result.monthly_flood:>12,}")
    print(f"  HOA:                ${result.monthly_hoa:>12,}")
    print(f"  PITIA:              ${result.monthly_pitia:>12,}")
    print(f"  Rent:               ${result.monthly_rent:>12,}")
    print(f"  DSCR:               {result.dscr_ratio:>13} ({dscr_status(result.dscr_ratio).value})")
    print(f"  Qualifies (1.00):   {'Yes' if result.qualifies else 'No':>13}")
    print(f"  Qualifies (1.25):   {'Yes' if result.qualifies_standard else 'No':>13}")
    print()


def _amount(text: str) -> Decimal:
    try:
        return to_decimal(text, "argument")
    except InvalidInputError as e:
        raise argparse.ArgumentTypeError(e.message) from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="DSCR / LTV / payment calculators")
    sub = parser.add_subparsers(dest="command", required=True)

    pay = sub.add_parser("payment", help="Monthly principal and interest")
    pay.add_argument("principal", type=_amount)
    pay.add_argument("rate", type=_amount, help="Annual rate in percent, e.g. 7.5")
    pay.add_argument("--months", type=int, default=360, help="Amortization months (default: 360)")
    pay.add_argument("--interest-only", action="store_true")

    dscr = sub.add_parser("dscr", help="Debt service coverage ratio")
    dscr.add_argument("principal", type=_amount)
    dscr.add_argument("rate", type=_amount, help="Annual rate in percent, e.g. 7.5")
    dscr.add_argument("--months", type=int, default=360)
    dscr.add_argument("--interest-only", action="store_true")
    dscr.add_argument("--rent", type=_amount, help="Rent used for underwriting")
    dscr.add_argument("--lease-rent", type=_amount, help="Current lease rent")
    dscr.add_argument("--market-rent", type=_amount, help="Market rent")
    dscr.add_argument("--taxes", type=_amount, default=Decimal("0"), help="Annual property taxes")
    dscr.add_argument("--insurance", type=_amount, default=Decimal("0"), help="Annual insurance")
    dscr.add_argument("--flood", type=_amount, default=Decimal("0"), help="Annual flood insurance")
    dscr.add_argument("--hoa", type=_amount, default=Decimal("0"), help="Monthly HOA dues")

    ltv = sub.add_parser("ltv", help="Loan-to-value")
    ltv.add_argument("loan_amount", type=_amount)
    ltv.add_argument("property_value", type=_amount)

    size = sub.add_parser("loan-amount", help="Loan amount from purchase price and down payment")
    size.add_argument("purchase_price", type=_amount)
    size.add_argument("down_payment_percent", type=_amount, help="Down payment in percent, e.g. 25")

    return parser


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=settings.log_level)
    args = build_parser().parse_args(argv)
    ctx = CalculatorContext.from_settings(settings)

    try:
        if args.command == "payment":
            pmt = monthly_pi(args.principal, args.rate, args.months, args.interest_only, ctx=ctx)
            print(f"Monthly P&I: ${pmt:,}")
        elif args.command == "dscr":
            rent = args.rent
            if rent is None:
                rent = rent_for_underwriting(args.lease_rent, args.market_rent)
            terms = LoanTerms(args.principal, args.rate, args.months, args.interest_only)
            expenses = PropertyExpenses(args.taxes, args.insurance, args.flood, args.hoa)
            print_dscr(calculate_dscr(terms, expenses, rent, ctx=ctx))
        elif args.command == "ltv":
            ratio = calculate_ltv(args.loan_amount, args.property_value, ctx=ctx)
            print(f"LTV: {ratio}% ({ltv_status(ratio).value})")
        elif args.command == "loan-amount":
            amount = calculate_loan_amount(args.purchase_price, args.down_payment_percent, ctx=ctx)
            print(f"Loan amount: ${amount:,}")
    except InvalidInputError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
