"""Funding application routes: submit, list, and select a proposal."""

from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends

from src.api.deps import get_current_user, get_mailer, get_store
from src.api.schemas import ApplicationCreate, ApplicationResponse, ProposalSelect
from src.config import settings
from src.data.base import FundingStore, Mailer
from src.engine.exceptions import NotFoundError
from src.engine.proposals import generate_proposals, select_proposal
from src.models.funding import FundingRequest
from src.models.user import SessionUser

router = APIRouter(prefix="/api/v1/applications", tags=["applications"])


@router.get("", response_model=list[ApplicationResponse])
async def list_applications(
    user: SessionUser = Depends(get_current_user),
    store: FundingStore = Depends(get_store),
):
    applications = await store.list_applications(user.id)
    return [ApplicationResponse.model_validate(a) for a in applications]


@router.post("", response_model=ApplicationResponse)
async def submit_application(
    req: ApplicationCreate,
    background_tasks: BackgroundTasks,
    user: SessionUser = Depends(get_current_user),
    store: FundingStore = Depends(get_store),
    mailer: Mailer = Depends(get_mailer),
):
    """Submit an intake and generate its three proposals."""
    amount = req.funding_needed
    if amount is None:
        amount = settings.default_funding_amount

    request = FundingRequest(
        amount=amount,
        full_name=req.full_name,
        degree=req.degree,
        specialty=req.specialty,
        years_in_practice=req.years_in_practice,
        estimated_income=req.estimated_income,
        medical_debt=req.medical_debt,
        funding_timeline=req.funding_timeline,
        career_goals=req.career_goals,
        use_of_funds=req.use_of_funds,
    )
    proposals = generate_proposals(request.amount)
    application = await store.create_application(user.id, request, proposals)

    background_tasks.add_task(
        mailer.send_application_submitted,
        user.email,
        req.full_name or user.name or "",
        application.id,
    )
    return ApplicationResponse.model_validate(application)


@router.get("/{application_id}", response_model=ApplicationResponse)
async def get_application(
    application_id: UUID,
    user: SessionUser = Depends(get_current_user),
    store: FundingStore = Depends(get_store),
):
    application = await store.get_application(user.id, application_id)
    if application is None:
        raise NotFoundError("Application not found")
    return ApplicationResponse.model_validate(application)


@router.patch("/{application_id}", response_model=ApplicationResponse)
async def choose_proposal(
    application_id: UUID,
    req: ProposalSelect,
    user: SessionUser = Depends(get_current_user),
    store: FundingStore = Depends(get_store),
):
    """Accept one proposal; its siblings are rejected in the same commit."""
    application = await store.get_application(user.id, application_id)
    if application is None:
        raise NotFoundError("Application not found")

    updated = select_proposal(application, req.selected_proposal_id)
    saved = await store.save_selection(updated)
    return ApplicationResponse.model_validate(saved)
