"""Proposal generation and selection.

Every funding request gets the same three fixed-shape offers; only the
principal and the derived payment depend on the request. Selection is a single
transition over the whole set so exactly one proposal ends up accepted.
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from uuid import UUID

from src.engine.amortization import monthly_payment
from src.engine.exceptions import InvalidInputError, NotFoundError
from src.models.funding import (
    ApplicationStatus,
    FundingApplication,
    Proposal,
    ProposalStatus,
)


@dataclass(frozen=True)
class ProposalVariant:
    name: str
    description: str
    interest_rate: Decimal  # Annual, percent
    term_months: int
    better_off_score: int


# Fixed product table, in presentation order.
VARIANTS: tuple[ProposalVariant, ...] = (
    ProposalVariant(
        name="Growth Accelerator",
        description="Lower monthly payments, maximize cash flow during residency/early career",
        interest_rate=Decimal("4.5"),
        term_months=120,
        better_off_score=92,
    ),
    ProposalVariant(
        name="Balanced Growth",
        description="Balanced approach with moderate payments and competitive rate",
        interest_rate=Decimal("5.5"),
        term_months=84,
        better_off_score=88,
    ),
    ProposalVariant(
        name="Wealth Builder",
        description="Higher payments, build equity faster, lowest total interest",
        interest_rate=Decimal("6.5"),
        term_months=60,
        better_off_score=85,
    ),
)


def generate_proposals(funding_amount: Decimal) -> list[Proposal]:
    """Build the three pending proposals for ``funding_amount``."""
    if funding_amount <= 0:
        raise InvalidInputError(f"Funding amount must be positive, got {funding_amount}")

    return [
        Proposal(
            name=v.name,
            description=v.description,
            amount=funding_amount,
            interest_rate=v.interest_rate,
            term_months=v.term_months,
            monthly_payment=monthly_payment(funding_amount, v.interest_rate, v.term_months),
            better_off_score=v.better_off_score,
        )
        for v in VARIANTS
    ]


def accept_proposal(proposals: list[Proposal], chosen_id: UUID) -> list[Proposal]:
    """Accept ``chosen_id`` and reject every sibling.

    Returns the full target state; re-accepting is idempotent. Persisting the
    result atomically is the caller's job.
    """
    if not any(p.id == chosen_id for p in proposals):
        raise NotFoundError(f"Proposal {chosen_id} not found")

    return [
        replace(
            p,
            status=ProposalStatus.ACCEPTED if p.id == chosen_id else ProposalStatus.REJECTED,
        )
        for p in proposals
    ]


def select_proposal(application: FundingApplication, chosen_id: UUID) -> FundingApplication:
    """Apply a proposal selection to an application and approve it."""
    return replace(
        application,
        proposals=accept_proposal(application.proposals, chosen_id),
        selected_proposal_id=chosen_id,
        status=ApplicationStatus.APPROVED,
    )
