"""IRR and equity multiple computation using scipy.

Pure functions. No I/O.
"""

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

from scipy.optimize import brentq

FOUR_PLACES = Decimal("0.0001")


def _solve_rate(cash_flows: list[Decimal]) -> float | None:
    """Per-period rate where NPV is zero, or None if there is no root in range."""
    if not cash_flows or len(cash_flows) < 2:
        return None

    # Convert to float for scipy
    cf_float = [float(cf) for cf in cash_flows]

    def npv(rate: float) -> float:
        return sum(cf / (1 + rate) ** t for t, cf in enumerate(cf_float))

    # Search between -50% and 1000% per period
    try:
        return brentq(npv, -0.5, 10.0, xtol=1e-10, maxiter=1000)
    except (ValueError, ZeroDivisionError, OverflowError):
        # No sign change in range (e.g., all-negative cash flows), or the
        # discount factor underflows on very long vectors
        return None


def monthly_cash_flows(flows: list[tuple[datetime, Decimal]]) -> list[Decimal]:
    """Bucket dated cash flows into a calendar-month vector starting at the earliest month."""
    if not flows:
        return []

    def month_index(d: datetime) -> int:
        return d.year * 12 + d.month - 1

    start = min(month_index(d) for d, _ in flows)
    end = max(month_index(d) for d, _ in flows)
    vector = [Decimal("0")] * (end - start + 1)
    for d, amount in flows:
        vector[month_index(d) - start] += amount
    return vector


def annualized_irr(flows: list[tuple[datetime, Decimal]]) -> Decimal | None:
    """Annualized IRR, in percent, of dated cash flows (outflows negative).

    Solved monthly and compounded to a year. None when the flows span a
    single month or have no solution.
    """
    monthly = _solve_rate(monthly_cash_flows(flows))
    if monthly is None:
        return None
    annual = (1 + monthly) ** 12 - 1
    return (Decimal(str(annual)) * 100).quantize(FOUR_PLACES, ROUND_HALF_UP)


def compute_equity_multiple(
    total_cash_returned: Decimal, total_cash_invested: Decimal
) -> Decimal:
    """Equity multiple = total cash out / total cash in."""
    if total_cash_invested == 0:
        return Decimal("0")
    return (total_cash_returned / total_cash_invested).quantize(FOUR_PLACES, ROUND_HALF_UP)
