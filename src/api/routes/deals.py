"""Deal routes: browse open deals, create deals (admin)."""

from fastapi import APIRouter, Depends

from src.api.deps import get_current_user, get_store, require_role
from src.api.schemas import DealCreate, DealResponse
from src.data.base import FundingStore
from src.engine.ledger import funding_summary, open_deal
from src.models.deal import DealStatus
from src.models.user import SessionUser, UserRole

router = APIRouter(prefix="/api/v1/deals", tags=["deals"])

LISTED_STATUSES = [DealStatus.OPEN, DealStatus.FULLY_FUNDED]


@router.get("", response_model=list[DealResponse])
async def list_deals(
    user: SessionUser = Depends(get_current_user),
    store: FundingStore = Depends(get_store),
):
    """Open and fully funded deals, with committed capital recomputed from investments."""
    deals = await store.list_deals(LISTED_STATUSES)
    return [DealResponse.from_summary(funding_summary(deal, investments)) for deal, investments in deals]


@router.post("", response_model=DealResponse)
async def create_deal(
    req: DealCreate,
    admin: SessionUser = Depends(require_role(UserRole.ADMIN)),
    store: FundingStore = Depends(get_store),
):
    deal = open_deal(
        name=req.name,
        target_amount=req.target_amount,
        minimum_investment=req.minimum_investment,
        description=req.description,
        specialty=req.specialty,
        deal_type=req.deal_type,
        target_irr=req.target_irr,
        target_moic=req.target_moic,
        term_months=req.term_months,
        distribution_frequency=req.distribution_frequency,
    )
    saved = await store.create_deal(deal)
    return DealResponse.from_summary(funding_summary(saved, []))
