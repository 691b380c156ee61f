"""Wealth-tool projections built on compound growth.

Pure functions. No I/O.
"""

from decimal import Decimal, ROUND_HALF_UP

from src.engine.amortization import future_value
from src.engine.exceptions import InvalidInputError
from src.models.results import InvestmentReturn, RetirementProjection

TWO_PLACES = Decimal("0.01")

RETIREMENT_ANNUAL_RETURN = Decimal("7")  # Percent, assumed market return
SAFE_WITHDRAWAL_RATE = Decimal("0.04")  # 4% rule
RETIREMENT_YEARS = 25


def investment_return(
    initial: Decimal,
    monthly_contribution: Decimal,
    annual_rate_percent: Decimal,
    years: int,
) -> InvestmentReturn:
    """Future value of an initial deposit plus monthly contributions."""
    months = years * 12
    fv = future_value(initial, monthly_contribution, annual_rate_percent, months)
    contributions = initial + monthly_contribution * months
    return InvestmentReturn(
        future_value=fv,
        total_contributions=contributions,
        total_gains=fv - contributions,
    )


def retirement_projection(
    current_age: int,
    retirement_age: int,
    current_savings: Decimal,
    monthly_contribution: Decimal,
) -> RetirementProjection:
    """Projected nest egg at retirement and the income it supports.

    Assumes a 7% annual return until retirement, then a 4% annual withdrawal
    spread over 25 years of retirement.
    """
    if retirement_age <= current_age:
        raise InvalidInputError(
            f"Retirement age ({retirement_age}) must be after current age ({current_age})"
        )

    months = (retirement_age - current_age) * 12
    projected = future_value(current_savings, monthly_contribution, RETIREMENT_ANNUAL_RETURN, months)
    monthly_income = (projected * SAFE_WITHDRAWAL_RATE / 12).quantize(TWO_PLACES, ROUND_HALF_UP)

    return RetirementProjection(
        projected_savings=projected,
        monthly_retirement_income=monthly_income,
        years_of_retirement=RETIREMENT_YEARS,
    )
