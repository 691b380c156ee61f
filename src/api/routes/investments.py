"""Investment routes: list positions, fund a deal."""

from fastapi import APIRouter, BackgroundTasks, Depends

from src.api.deps import get_current_user, get_mailer, get_store, require_role
from src.api.schemas import (
    InvestmentCreate,
    InvestmentListResponse,
    InvestmentRecordedResponse,
    InvestmentResponse,
    InvestmentTotals,
)
from src.data.base import FundingStore, Mailer
from src.engine.portfolio import aggregate_investor
from src.models.user import SessionUser, UserRole

router = APIRouter(prefix="/api/v1/investments", tags=["investments"])


@router.get("", response_model=InvestmentListResponse)
async def list_investments(
    user: SessionUser = Depends(get_current_user),
    store: FundingStore = Depends(get_store),
):
    investments = await store.list_investments(user.id)
    metrics = aggregate_investor(investments)
    return InvestmentListResponse(
        investments=[InvestmentResponse.model_validate(inv) for inv in investments],
        totals=InvestmentTotals(
            total_invested=metrics.total_invested,
            current_value=metrics.current_value,
            total_distributions=metrics.total_distributions,
        ),
    )


@router.post("", response_model=InvestmentRecordedResponse)
async def invest(
    req: InvestmentCreate,
    background_tasks: BackgroundTasks,
    user: SessionUser = Depends(
        require_role(UserRole.INVESTOR, detail="Only investors can make investments")
    ),
    store: FundingStore = Depends(get_store),
    mailer: Mailer = Depends(get_mailer),
):
    """Commit capital to a deal; a repeat investor tops up their position."""
    update = await store.record_investment(user.id, req.deal_id, req.amount)

    background_tasks.add_task(
        mailer.send_investment_confirmation,
        user.email,
        user.name or "",
        update.deal.name,
        req.amount,
    )
    return InvestmentRecordedResponse(
        investment=InvestmentResponse.model_validate(update.investment),
        deal_status=update.deal.status,
        deal_current_amount=update.deal.accumulated_amount,
        fully_funded_transition=update.fully_funded_transition,
        is_top_up=update.is_top_up,
    )
