"""SQLAlchemy-backed FundingStore.

Maps ORM rows to engine dataclasses and provides the transaction boundaries
the engine relies on: proposal creation and selection are single commits,
and investment recording runs under a per-deal Redis lock plus
``SELECT ... FOR UPDATE`` on the deal and position rows.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.data.locks import deal_lock
from src.engine import ledger
from src.engine.exceptions import NotFoundError
from src.models.db import (
    DealRecord,
    DistributionRecord,
    FundingApplicationRecord,
    InvestmentRecord,
    InvestorProfileRecord,
    PhysicianProfileRecord,
    ProposalRecord,
    UserRecord,
)
from src.models.deal import Deal, DealStatus, Distribution, Investment
from src.models.funding import (
    ApplicationStatus,
    FundingApplication,
    FundingRequest,
    Proposal,
    ProposalStatus,
)
from src.models.results import (
    AdminOverview,
    LedgerUpdate,
    PlatformStats,
    RecentApplication,
    RecentInvestment,
)
from src.models.user import (
    InvestorProfile,
    PhysicianProfile,
    SessionUser,
    UserProfile,
    UserRole,
)

logger = logging.getLogger(__name__)


# ---- Row -> domain ----

def _user(rec: UserRecord) -> SessionUser:
    return SessionUser(
        id=rec.id,
        supabase_id=rec.supabase_id,
        email=rec.email,
        name=rec.name,
        role=UserRole(rec.role),
    )


def _proposal(rec: ProposalRecord) -> Proposal:
    return Proposal(
        id=rec.id,
        name=rec.name,
        description=rec.description,
        amount=rec.amount,
        interest_rate=rec.interest_rate,
        term_months=rec.term_months,
        monthly_payment=rec.monthly_payment,
        better_off_score=rec.better_off_score,
        status=ProposalStatus(rec.status),
    )


def _application(rec: FundingApplicationRecord) -> FundingApplication:
    return FundingApplication(
        id=rec.id,
        user_id=rec.user_id,
        funding_needed=rec.funding_needed,
        created_at=rec.created_at,
        submitted_at=rec.submitted_at,
        status=ApplicationStatus(rec.status),
        selected_proposal_id=rec.selected_proposal_id,
        proposals=[_proposal(p) for p in rec.proposals],
        request=FundingRequest(
            amount=rec.funding_needed,
            full_name=rec.full_name,
            degree=rec.degree,
            specialty=rec.specialty,
            years_in_practice=rec.years_in_practice,
            estimated_income=rec.estimated_income,
            medical_debt=rec.medical_debt,
            funding_timeline=rec.funding_timeline,
            career_goals=rec.career_goals,
            use_of_funds=rec.use_of_funds,
        ),
    )


def _deal(rec: DealRecord) -> Deal:
    return Deal(
        id=rec.id,
        name=rec.name,
        description=rec.description,
        specialty=rec.specialty,
        deal_type=rec.deal_type,
        target_amount=rec.target_amount,
        minimum_investment=rec.minimum_investment,
        accumulated_amount=rec.current_amount,
        status=DealStatus(rec.status),
        target_irr=rec.target_irr,
        target_moic=rec.target_moic,
        term_months=rec.term_months,
        distribution_frequency=rec.distribution_frequency,
        opened_at=rec.opened_at,
    )


def _investment(
    rec: InvestmentRecord,
    specialty: str | None,
    distributions: list[DistributionRecord] | None = None,
) -> Investment:
    return Investment(
        id=rec.id,
        investor_id=rec.user_id,
        deal_id=rec.deal_id,
        amount=rec.amount,
        current_value=rec.current_value,
        invested_at=rec.invested_at,
        deal_specialty=specialty,
        distributions=[
            Distribution(id=d.id, amount=d.amount, paid_at=d.paid_at)
            for d in (distributions or [])
        ],
    )


class SqlFundingStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_user_by_supabase_id(self, supabase_id: str) -> SessionUser | None:
        result = await self.session.execute(
            select(UserRecord).where(UserRecord.supabase_id == supabase_id)
        )
        rec = result.scalar_one_or_none()
        return _user(rec) if rec else None

    # ---- Applications ----

    async def list_applications(self, user_id: UUID) -> list[FundingApplication]:
        result = await self.session.execute(
            select(FundingApplicationRecord)
            .where(FundingApplicationRecord.user_id == user_id)
            .options(selectinload(FundingApplicationRecord.proposals))
            .order_by(FundingApplicationRecord.created_at.desc())
        )
        return [_application(rec) for rec in result.scalars().all()]

    async def _load_application(self, user_id: UUID, application_id: UUID) -> FundingApplicationRecord | None:
        result = await self.session.execute(
            select(FundingApplicationRecord)
            .where(
                FundingApplicationRecord.id == application_id,
                FundingApplicationRecord.user_id == user_id,
            )
            .options(selectinload(FundingApplicationRecord.proposals))
        )
        return result.scalar_one_or_none()

    async def get_application(self, user_id: UUID, application_id: UUID) -> FundingApplication | None:
        rec = await self._load_application(user_id, application_id)
        return _application(rec) if rec else None

    async def create_application(
        self, user_id: UUID, request: FundingRequest, proposals: list[Proposal]
    ) -> FundingApplication:
        now = datetime.now(timezone.utc)
        rec = FundingApplicationRecord(
            user_id=user_id,
            created_at=now,
            submitted_at=now,
            status=ApplicationStatus.SUBMITTED.value,
            full_name=request.full_name,
            degree=request.degree,
            specialty=request.specialty,
            years_in_practice=request.years_in_practice,
            estimated_income=request.estimated_income,
            medical_debt=request.medical_debt,
            funding_needed=request.amount,
            funding_timeline=request.funding_timeline,
            career_goals=request.career_goals,
            use_of_funds=request.use_of_funds,
            proposals=[
                ProposalRecord(
                    id=p.id,
                    position=i,
                    name=p.name,
                    description=p.description,
                    amount=p.amount,
                    interest_rate=p.interest_rate,
                    term_months=p.term_months,
                    monthly_payment=p.monthly_payment,
                    better_off_score=p.better_off_score,
                    status=p.status.value,
                )
                for i, p in enumerate(proposals)
            ],
        )
        self.session.add(rec)
        await self._upsert_physician_profile(user_id, request)

        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        await self.session.refresh(rec, attribute_names=["proposals"])
        return _application(rec)

    async def _upsert_physician_profile(self, user_id: UUID, request: FundingRequest) -> None:
        result = await self.session.execute(
            select(PhysicianProfileRecord).where(PhysicianProfileRecord.user_id == user_id)
        )
        profile = result.scalar_one_or_none()
        if profile is None:
            profile = PhysicianProfileRecord(user_id=user_id)
            self.session.add(profile)
        profile.degree = request.degree
        profile.specialty = request.specialty
        profile.years_in_practice = request.years_in_practice
        profile.estimated_income = request.estimated_income
        profile.medical_school_debt = request.medical_debt

    async def save_selection(self, application: FundingApplication) -> FundingApplication:
        rec = await self._load_application(application.user_id, application.id)
        if rec is None:
            raise NotFoundError(f"Application {application.id} not found")

        statuses = {p.id: p.status for p in application.proposals}
        rec.status = application.status.value
        rec.selected_proposal_id = application.selected_proposal_id
        for proposal in rec.proposals:
            proposal.status = statuses[proposal.id].value

        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return application

    # ---- Deals & investments ----

    async def list_deals(self, statuses: list[DealStatus]) -> list[tuple[Deal, list[Investment]]]:
        result = await self.session.execute(
            select(DealRecord)
            .where(DealRecord.status.in_([s.value for s in statuses]))
            .options(selectinload(DealRecord.investments))
            .order_by(DealRecord.created_at.desc())
        )
        return [
            (_deal(rec), [_investment(inv, rec.specialty) for inv in rec.investments])
            for rec in result.scalars().all()
        ]

    async def create_deal(self, deal: Deal) -> Deal:
        rec = DealRecord(
            id=deal.id,
            name=deal.name,
            description=deal.description,
            specialty=deal.specialty,
            deal_type=deal.deal_type,
            target_amount=deal.target_amount,
            minimum_investment=deal.minimum_investment,
            current_amount=deal.accumulated_amount,
            target_irr=deal.target_irr,
            target_moic=deal.target_moic,
            term_months=deal.term_months,
            distribution_frequency=deal.distribution_frequency,
            status=deal.status.value,
            opened_at=deal.opened_at,
        )
        self.session.add(rec)
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return deal

    async def record_investment(self, investor_id: UUID, deal_id: UUID, amount: Decimal) -> LedgerUpdate:
        async with deal_lock(deal_id):
            try:
                update = await self._record_investment_locked(investor_id, deal_id, amount)
                await self.session.commit()
            except Exception:
                await self.session.rollback()
                raise

        logger.info(
            "Recorded investment of %s into deal %s (top-up=%s, fully funded=%s)",
            amount,
            deal_id,
            update.is_top_up,
            update.fully_funded_transition,
        )
        return update

    async def _record_investment_locked(
        self, investor_id: UUID, deal_id: UUID, amount: Decimal
    ) -> LedgerUpdate:
        deal_rec = (
            await self.session.execute(
                select(DealRecord).where(DealRecord.id == deal_id).with_for_update()
            )
        ).scalar_one_or_none()
        if deal_rec is None:
            raise NotFoundError(f"Deal {deal_id} not found")

        inv_rec = (
            await self.session.execute(
                select(InvestmentRecord)
                .where(InvestmentRecord.user_id == investor_id, InvestmentRecord.deal_id == deal_id)
                .with_for_update()
            )
        ).scalar_one_or_none()

        existing = _investment(inv_rec, deal_rec.specialty) if inv_rec else None
        update = ledger.record_investment(_deal(deal_rec), investor_id, amount, existing)

        deal_rec.current_amount = update.deal.accumulated_amount
        deal_rec.status = update.deal.status.value
        if inv_rec is None:
            self.session.add(InvestmentRecord(
                id=update.investment.id,
                user_id=investor_id,
                deal_id=deal_id,
                amount=update.investment.amount,
                current_value=update.investment.current_value,
                invested_at=update.investment.invested_at,
            ))
        else:
            inv_rec.amount = update.investment.amount
            inv_rec.current_value = update.investment.current_value
        return update

    async def list_investments(self, user_id: UUID) -> list[Investment]:
        result = await self.session.execute(
            select(InvestmentRecord)
            .where(InvestmentRecord.user_id == user_id)
            .options(
                selectinload(InvestmentRecord.deal),
                selectinload(InvestmentRecord.distributions),
            )
            .order_by(InvestmentRecord.invested_at.desc())
        )
        return [
            _investment(rec, rec.deal.specialty, rec.distributions)
            for rec in result.scalars().all()
        ]

    # ---- Profiles ----

    async def _profile_row(self, model, user_id: UUID):
        result = await self.session.execute(select(model).where(model.user_id == user_id))
        return result.scalar_one_or_none()

    async def get_profile(self, user_id: UUID) -> UserProfile | None:
        user_rec = await self.session.get(UserRecord, user_id)
        if user_rec is None:
            return None

        physician = investor = None
        if user_rec.role == UserRole.PHYSICIAN.value:
            rec = await self._profile_row(PhysicianProfileRecord, user_id)
            if rec:
                physician = PhysicianProfile(
                    degree=rec.degree,
                    specialty=rec.specialty,
                    years_in_practice=rec.years_in_practice,
                    estimated_income=rec.estimated_income,
                    medical_school_debt=rec.medical_school_debt,
                )
        elif user_rec.role == UserRole.INVESTOR.value:
            rec = await self._profile_row(InvestorProfileRecord, user_id)
            if rec:
                investor = InvestorProfile(
                    accredited=rec.accredited,
                    firm_name=rec.firm_name,
                    investment_focus=rec.investment_focus,
                )

        return UserProfile(
            user=_user(user_rec),
            phone=user_rec.phone,
            avatar_url=user_rec.avatar_url,
            physician_profile=physician,
            investor_profile=investor,
        )

    async def save_profile(self, profile: UserProfile) -> UserProfile:
        user_id = profile.user.id
        user_rec = await self.session.get(UserRecord, user_id)
        if user_rec is None:
            raise NotFoundError(f"User {user_id} not found")

        user_rec.name = profile.user.name
        user_rec.phone = profile.phone
        user_rec.avatar_url = profile.avatar_url

        if profile.physician_profile is not None:
            rec = await self._profile_row(PhysicianProfileRecord, user_id)
            if rec is None:
                rec = PhysicianProfileRecord(user_id=user_id)
                self.session.add(rec)
            p = profile.physician_profile
            rec.degree = p.degree
            rec.specialty = p.specialty
            rec.years_in_practice = p.years_in_practice
            rec.estimated_income = p.estimated_income
            rec.medical_school_debt = p.medical_school_debt

        if profile.investor_profile is not None:
            rec = await self._profile_row(InvestorProfileRecord, user_id)
            if rec is None:
                rec = InvestorProfileRecord(user_id=user_id)
                self.session.add(rec)
            i = profile.investor_profile
            rec.accredited = i.accredited
            rec.firm_name = i.firm_name
            rec.investment_focus = i.investment_focus

        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return profile

    # ---- Admin ----

    async def _count(self, model, *where) -> int:
        result = await self.session.execute(select(func.count()).select_from(model).where(*where))
        return result.scalar_one()

    async def admin_overview(self, limit: int) -> AdminOverview:
        stats = PlatformStats(
            user_count=await self._count(UserRecord),
            physician_count=await self._count(UserRecord, UserRecord.role == UserRole.PHYSICIAN.value),
            investor_count=await self._count(UserRecord, UserRecord.role == UserRole.INVESTOR.value),
            application_count=await self._count(FundingApplicationRecord),
            deal_count=await self._count(DealRecord),
            investment_count=await self._count(InvestmentRecord),
        )

        apps = await self.session.execute(
            select(FundingApplicationRecord)
            .options(selectinload(FundingApplicationRecord.user))
            .order_by(FundingApplicationRecord.created_at.desc())
            .limit(limit)
        )
        invs = await self.session.execute(
            select(InvestmentRecord)
            .options(selectinload(InvestmentRecord.user), selectinload(InvestmentRecord.deal))
            .order_by(InvestmentRecord.invested_at.desc())
            .limit(limit)
        )

        return AdminOverview(
            stats=stats,
            recent_applications=[
                RecentApplication(
                    id=rec.id,
                    user_name=rec.user.name,
                    user_email=rec.user.email,
                    funding_needed=rec.funding_needed,
                    status=ApplicationStatus(rec.status),
                    created_at=rec.created_at,
                )
                for rec in apps.scalars().all()
            ],
            recent_investments=[
                RecentInvestment(
                    id=rec.id,
                    user_name=rec.user.name,
                    user_email=rec.user.email,
                    deal_name=rec.deal.name,
                    amount=rec.amount,
                    invested_at=rec.invested_at,
                )
                for rec in invs.scalars().all()
            ],
        )
