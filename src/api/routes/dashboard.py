"""Role-dependent dashboard metrics."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from src.api.deps import get_current_user, get_store
from src.api.schemas import (
    ApplicationResponse,
    DashboardResponse,
    InvestmentResponse,
    InvestorDashboard,
    InvestorMetricsResponse,
    PhysicianDashboard,
    PhysicianMetricsResponse,
)
from src.data.base import FundingStore
from src.engine.portfolio import aggregate_investor, aggregate_physician
from src.models.user import SessionUser, UserRole

router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardResponse)
async def dashboard(
    user: SessionUser = Depends(get_current_user),
    store: FundingStore = Depends(get_store),
):
    resp = DashboardResponse(role=user.role, name=user.name, email=user.email)

    if user.role == UserRole.PHYSICIAN:
        applications = await store.list_applications(user.id)
        metrics = aggregate_physician(applications)
        resp.physician = PhysicianDashboard(
            metrics=PhysicianMetricsResponse.model_validate(metrics),
            applications=[ApplicationResponse.model_validate(a) for a in applications],
        )
    elif user.role == UserRole.INVESTOR:
        investments = await store.list_investments(user.id)
        metrics = aggregate_investor(investments, as_of=datetime.now(timezone.utc))
        resp.investor = InvestorDashboard(
            metrics=InvestorMetricsResponse.model_validate(metrics),
            investments=[InvestmentResponse.model_validate(inv) for inv in investments],
        )

    return resp
