"""Fixed-rate amortization math.

Pure functions: Decimal in, Decimal/dataclass out. No I/O.
Rates are annual percentages (Decimal("4.5") for 4.5%).
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, ROUND_UP

from src.engine.exceptions import InvalidInputError
from src.models.results import PayoffResult

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0")
MAX_TERM_MONTHS = 1200  # 100 years


@dataclass(frozen=True)
class AmortizationPayment:
    period: int
    payment: Decimal
    principal: Decimal
    interest: Decimal
    balance: Decimal


@dataclass(frozen=True)
class AmortizationSchedule:
    payments: list[AmortizationPayment]
    monthly_payment: Decimal
    total_interest: Decimal
    total_principal: Decimal


def _monthly_rate(annual_rate_percent: Decimal) -> Decimal:
    return annual_rate_percent / 100 / 12


def _validate_loan(principal: Decimal, annual_rate_percent: Decimal, term_months: int) -> None:
    if principal <= 0:
        raise InvalidInputError(f"Principal must be positive, got {principal}")
    if term_months < 1:
        raise InvalidInputError(f"Term must be at least one month, got {term_months}")
    if term_months > MAX_TERM_MONTHS:
        raise InvalidInputError(f"Term cannot exceed {MAX_TERM_MONTHS} months, got {term_months}")
    if annual_rate_percent < 0:
        raise InvalidInputError(f"Interest rate cannot be negative, got {annual_rate_percent}")


def monthly_payment(principal: Decimal, annual_rate_percent: Decimal, term_months: int) -> Decimal:
    """Fixed monthly payment that retires ``principal`` over ``term_months``.

    Rounded up to the cent so the contractual payments always cover the loan.
    """
    _validate_loan(principal, annual_rate_percent, term_months)

    r = _monthly_rate(annual_rate_percent)
    if r == 0:
        return (principal / term_months).quantize(TWO_PLACES, ROUND_UP)

    # M = P * [r(1+r)^n] / [(1+r)^n - 1]
    factor = (1 + r) ** term_months
    payment = principal * r * factor / (factor - 1)
    return payment.quantize(TWO_PLACES, ROUND_UP)


def amortization_schedule(
    principal: Decimal,
    annual_rate_percent: Decimal,
    term_months: int,
) -> AmortizationSchedule:
    """Month-by-month schedule at the contractual payment.

    The final payment is trimmed to the remaining balance; the schedule ends
    as soon as the balance reaches zero.
    """
    pmt = monthly_payment(principal, annual_rate_percent, term_months)
    payments = list(_amortize(principal, _monthly_rate(annual_rate_percent), pmt, term_months))

    return AmortizationSchedule(
        payments=payments,
        monthly_payment=pmt,
        total_interest=sum((p.interest for p in payments), ZERO),
        total_principal=sum((p.principal for p in payments), ZERO),
    )


def _amortize(principal: Decimal, r: Decimal, pmt: Decimal, term_months: int):
    """Yield contractual payments one month at a time until the balance is zero."""
    balance = principal
    for period in range(1, term_months + 1):
        if balance <= 0:
            return
        interest = (balance * r).quantize(TWO_PLACES, ROUND_HALF_UP)
        principal_paid = pmt - interest

        # Final payment adjustment
        if principal_paid > balance or period == term_months:
            principal_paid = balance
            actual_payment = interest + principal_paid
        else:
            actual_payment = pmt

        balance -= principal_paid
        yield AmortizationPayment(
            period=period,
            payment=actual_payment,
            principal=principal_paid,
            interest=interest,
            balance=balance.quantize(TWO_PLACES, ROUND_HALF_UP),
        )


def payoff_with_extra(
    principal: Decimal,
    annual_rate_percent: Decimal,
    term_months: int,
    extra_monthly_payment: Decimal,
) -> PayoffResult:
    """Simulate paying ``standard + extra`` every month until the balance is gone.

    The simulation stops after ``2 * term_months`` periods whatever the balance,
    so a zero or negative extra payment always terminates. When the cap is hit
    the payoff is reported as not reached and the savings figures are zero.
    """
    standard = monthly_payment(principal, annual_rate_percent, term_months)
    r = _monthly_rate(annual_rate_percent)
    payment = standard + extra_monthly_payment
    cap = 2 * term_months

    balance = principal
    months = 0
    total_interest = ZERO
    total_paid = ZERO

    while balance > 0 and months < cap:
        interest = (balance * r).quantize(TWO_PLACES, ROUND_HALF_UP)
        principal_paid = min(payment - interest, balance)
        balance -= principal_paid
        total_interest += interest
        total_paid += principal_paid + interest
        months += 1

    reached = balance <= 0
    if not reached:
        return PayoffResult(
            standard_payment=standard,
            months_to_payoff=months,
            total_interest=total_interest,
            total_paid=total_paid,
            payoff_reached=False,
        )

    # Contractual baseline, streamed so only its totals are kept
    baseline_months = 0
    baseline_interest = ZERO
    for p in _amortize(principal, r, standard, term_months):
        baseline_months += 1
        baseline_interest += p.interest

    return PayoffResult(
        standard_payment=standard,
        months_to_payoff=months,
        total_interest=total_interest,
        total_paid=total_paid,
        payoff_reached=True,
        months_saved=max(0, baseline_months - months),
        interest_saved=max(ZERO, baseline_interest - total_interest),
    )


def future_value(
    initial: Decimal,
    monthly_contribution: Decimal,
    annual_rate_percent: Decimal,
    months: int,
) -> Decimal:
    """Compound growth of a lump sum plus end-of-month contributions."""
    if initial < 0 or monthly_contribution < 0:
        raise InvalidInputError("Initial amount and contribution cannot be negative")
    if months < 0:
        raise InvalidInputError(f"Months cannot be negative, got {months}")
    if annual_rate_percent < 0:
        raise InvalidInputError(f"Rate cannot be negative, got {annual_rate_percent}")

    r = _monthly_rate(annual_rate_percent)
    if r == 0:
        value = initial + monthly_contribution * months
    else:
        growth = (1 + r) ** months
        value = initial * growth + monthly_contribution * ((growth - 1) / r)
    return value.quantize(TWO_PLACES, ROUND_HALF_UP)
