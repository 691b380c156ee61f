"""CLI for checking proposal and payoff math without the API.

Usage:
    python -m src.cli proposals 250000
    python -m src.cli payoff 200000 --rate 6.5 --years 10 --extra 500
"""

import argparse
import sys
from decimal import Decimal, InvalidOperation

from src.engine.amortization import payoff_with_extra
from src.engine.exceptions import FundingError
from src.engine.proposals import generate_proposals


def print_proposals(amount: Decimal) -> None:
    print(f"\n{'=' * 60}")
    print(f"  Proposals for ${amount:,.2f}")
    print(f"{'=' * 60}")
    for p in generate_proposals(amount):
        print(f"  {p.name:<20} {p.interest_rate}% / {p.term_months} mo   score {p.better_off_score}")
        print(f"  {'':<20} ${p.monthly_payment:,.2f}/mo   total interest ${p.total_interest:,.2f}")
    print()


def print_payoff(principal: Decimal, rate: Decimal, years: int, extra: Decimal) -> None:
    result = payoff_with_extra(principal, rate, years * 12, extra)
    print(f"\n{'=' * 60}")
    print(f"  Payoff: ${principal:,.2f} at {rate}% over {years}y, +${extra:,.2f}/mo")
    print(f"{'=' * 60}")
    print(f"  Standard payment:  ${result.standard_payment:,.2f}/mo")
    if not result.payoff_reached:
        print(f"  Not paid off within {result.months_to_payoff} months")
        print()
        return
    print(f"  Payoff time:       {result.payoff_years}y {result.months_to_payoff % 12}m")
    print(f"  Total interest:    ${result.total_interest:,.2f}")
    print(f"  Months saved:      {result.months_saved}")
    print(f"  Interest saved:    ${result.interest_saved:,.2f}")
    print()


def _decimal(value: str) -> Decimal:
    try:
        return Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"not a number: {value}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Funding math CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    p_prop = sub.add_parser("proposals", help="Generate the three proposals for an amount")
    p_prop.add_argument("amount", type=_decimal)

    p_pay = sub.add_parser("payoff", help="Loan payoff with extra monthly payments")
    p_pay.add_argument("principal", type=_decimal)
    p_pay.add_argument("--rate", type=_decimal, default=Decimal("4.5"), help="Annual rate, percent")
    p_pay.add_argument("--years", type=int, default=10)
    p_pay.add_argument("--extra", type=_decimal, default=Decimal("0"))

    args = parser.parse_args()

    try:
        if args.command == "proposals":
            print_proposals(args.amount)
        else:
            print_payoff(args.principal, args.rate, args.years, args.extra)
    except FundingError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
