"""Investment ledger bookkeeping.

Pure functions: given the current deal and position, compute the next state.
Callers must serialize ``record_investment`` per deal (row lock or per-deal
mutex) around the read-modify-write of the deal and the investment row.
"""

from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from uuid import UUID

from src.engine.exceptions import (
    BelowMinimumError,
    DealNotOpenError,
    InvalidInputError,
)
from src.models.deal import Deal, DealStatus, Investment
from src.models.results import DealFundingSummary, LedgerUpdate

TWO_PLACES = Decimal("0.01")


def open_deal(
    name: str,
    target_amount: Decimal,
    minimum_investment: Decimal,
    opened_at: datetime | None = None,
    **details,
) -> Deal:
    """Validate and create a new Open deal with nothing committed."""
    if target_amount <= 0:
        raise InvalidInputError(f"Target amount must be positive, got {target_amount}")
    if minimum_investment <= 0:
        raise InvalidInputError(f"Minimum investment must be positive, got {minimum_investment}")
    if minimum_investment > target_amount:
        raise InvalidInputError("Minimum investment cannot exceed the target amount")

    return Deal(
        name=name,
        target_amount=target_amount,
        minimum_investment=minimum_investment,
        accumulated_amount=Decimal("0"),
        status=DealStatus.OPEN,
        opened_at=opened_at or datetime.now(timezone.utc),
        **details,
    )


def record_investment(
    deal: Deal,
    investor_id: UUID,
    amount: Decimal,
    existing: Investment | None = None,
    invested_at: datetime | None = None,
) -> LedgerUpdate:
    """Commit ``amount`` from ``investor_id`` into ``deal``.

    Checks, in order: the deal is Open, the amount meets the deal minimum.
    A repeat investor tops up their existing position instead of opening a
    second one. The fully-funded check runs on the post-increment total, so
    the investment that reaches or overshoots the target flips the status.
    Overshoot is accepted as-is.
    """
    if deal.status != DealStatus.OPEN:
        raise DealNotOpenError(deal.status)
    if amount < deal.minimum_investment:
        raise BelowMinimumError(required=deal.minimum_investment)
    if amount <= 0:
        raise InvalidInputError(f"Investment amount must be positive, got {amount}")

    if existing is not None:
        if existing.deal_id != deal.id or existing.investor_id != investor_id:
            raise InvalidInputError("Existing investment does not belong to this investor and deal")
        investment = replace(
            existing,
            amount=existing.amount + amount,
            current_value=existing.current_value + amount,
        )
    else:
        investment = Investment(
            investor_id=investor_id,
            deal_id=deal.id,
            amount=amount,
            current_value=amount,
            invested_at=invested_at or datetime.now(timezone.utc),
            deal_specialty=deal.specialty,
        )

    accumulated = deal.accumulated_amount + amount
    transition = accumulated >= deal.target_amount
    updated_deal = replace(
        deal,
        accumulated_amount=accumulated,
        status=DealStatus.FULLY_FUNDED if transition else deal.status,
    )

    return LedgerUpdate(
        deal=updated_deal,
        investment=investment,
        fully_funded_transition=transition,
        is_top_up=existing is not None,
    )


def funding_summary(deal: Deal, investments: list[Investment]) -> DealFundingSummary:
    """Recompute a deal's committed capital from its investment rows."""
    committed = sum((inv.amount for inv in investments if inv.deal_id == deal.id), Decimal("0"))
    investor_count = len({inv.investor_id for inv in investments if inv.deal_id == deal.id})
    percent = (committed / deal.target_amount * 100).quantize(TWO_PLACES, ROUND_HALF_UP)
    return DealFundingSummary(
        deal=deal,
        committed_amount=committed,
        investor_count=investor_count,
        percent_funded=percent,
        remaining_amount=max(Decimal("0"), deal.target_amount - committed),
    )
