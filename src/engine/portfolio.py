"""Dashboard metrics for investors and physicians.

Pure functions over positions loaded by the caller. No I/O.

Two figures are fixed product heuristics, not financial calculations, and are
kept verbatim pending product sign-off:
    portfolio_irr   = ytd_return * 1.2
    portfolio_value = active_funding * 1.15   (physician side, illustrative)
"""

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

from src.engine.irr import annualized_irr, compute_equity_multiple
from src.models.deal import Investment
from src.models.funding import FundingApplication
from src.models.results import InvestorMetrics, PhysicianMetrics, SpecialtyBreakdown

TWO_PLACES = Decimal("0.01")
FOUR_PLACES = Decimal("0.0001")

IRR_APPROXIMATION_FACTOR = Decimal("1.2")
PHYSICIAN_APPRECIATION_MULTIPLIER = Decimal("1.15")
UNKNOWN_SPECIALTY = "Other"


def _cash_flows(investments: list[Investment], as_of: datetime) -> list[tuple[datetime, Decimal]]:
    """Contributions out, distributions in, and current value as a terminal inflow."""
    flows: list[tuple[datetime, Decimal]] = []
    for inv in investments:
        flows.append((inv.invested_at, -inv.amount))
        flows.extend((d.paid_at, d.amount) for d in inv.distributions)
    total_value = sum((inv.current_value for inv in investments), Decimal("0"))
    flows.append((as_of, total_value))
    return flows


def aggregate_investor(
    investments: list[Investment],
    as_of: datetime | None = None,
) -> InvestorMetrics:
    """Roll an investor's positions up into dashboard metrics.

    ``cash_flow_irr`` is only solved when a valuation date is supplied.
    """
    metrics = InvestorMetrics(investment_count=len(investments))

    for inv in investments:
        metrics.total_invested += inv.amount
        metrics.current_value += inv.current_value
        metrics.total_distributions += inv.total_distributions

        group = metrics.by_specialty.setdefault(
            inv.deal_specialty or UNKNOWN_SPECIALTY, SpecialtyBreakdown()
        )
        group.invested += inv.amount
        group.current_value += inv.current_value
        group.count += 1

    if metrics.total_invested > 0:
        gain = metrics.current_value - metrics.total_invested
        metrics.ytd_return = (gain / metrics.total_invested * 100).quantize(
            FOUR_PLACES, ROUND_HALF_UP
        )
    metrics.portfolio_irr = (metrics.ytd_return * IRR_APPROXIMATION_FACTOR).quantize(
        FOUR_PLACES, ROUND_HALF_UP
    )
    metrics.equity_multiple = compute_equity_multiple(
        metrics.current_value + metrics.total_distributions, metrics.total_invested
    )

    if as_of is not None and investments:
        metrics.cash_flow_irr = annualized_irr(_cash_flows(investments, as_of))

    return metrics


def aggregate_physician(applications: list[FundingApplication]) -> PhysicianMetrics:
    """Metrics from the physician's most recent application and its chosen proposal."""
    if not applications:
        return PhysicianMetrics()

    latest = max(applications, key=lambda a: a.created_at)
    selected = next(
        (p for p in latest.proposals if p.id == latest.selected_proposal_id),
        None,
    )
    if selected is None:
        return PhysicianMetrics(latest_application=latest)

    return PhysicianMetrics(
        active_funding=selected.amount,
        monthly_payment=selected.monthly_payment,
        interest_rate=selected.interest_rate,
        portfolio_value=(selected.amount * PHYSICIAN_APPRECIATION_MULTIPLIER).quantize(
            TWO_PLACES, ROUND_HALF_UP
        ),
        latest_application=latest,
        selected_proposal=selected,
    )
