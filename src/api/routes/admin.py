"""Platform overview for administrators."""

from fastapi import APIRouter, Depends

from src.api.deps import get_store, require_role
from src.api.schemas import AdminOverviewResponse
from src.data.base import FundingStore
from src.models.user import SessionUser, UserRole

router = APIRouter(prefix="/api/v1/admin", tags=["admin"])

RECENT_ACTIVITY_LIMIT = 10


@router.get("", response_model=AdminOverviewResponse)
async def overview(
    user: SessionUser = Depends(require_role(UserRole.ADMIN)),
    store: FundingStore = Depends(get_store),
):
    return AdminOverviewResponse.model_validate(await store.admin_overview(RECENT_ACTIVITY_LIMIT))
