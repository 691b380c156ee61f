"""In-memory collaborators for exercising the HTTP layer without Postgres,
Redis, Supabase, or Resend."""

import asyncio
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from src.api.app import app
from src.api.deps import get_identity, get_mailer, get_store
from src.engine import ledger
from src.engine.exceptions import NotFoundError
from src.models.deal import Deal, Investment
from src.models.funding import FundingApplication, FundingRequest, Proposal
from src.models.results import (
    AdminOverview,
    LedgerUpdate,
    PlatformStats,
    RecentApplication,
    RecentInvestment,
)
from src.models.user import SessionUser, UserProfile, UserRole


class InMemoryFundingStore:
    def __init__(self):
        self.users: dict[str, SessionUser] = {}
        self.applications: dict[UUID, FundingApplication] = {}
        self.deals: dict[UUID, Deal] = {}
        self.investments: dict[UUID, Investment] = {}
        self.profiles: dict[UUID, UserProfile] = {}
        self._deal_locks: dict[UUID, asyncio.Lock] = {}

    def add_user(self, role: UserRole, name: str) -> SessionUser:
        user = SessionUser(
            id=uuid4(),
            supabase_id=f"sb-{name.lower()}",
            email=f"{name.lower()}@example.com",
            role=role,
            name=name,
        )
        self.users[user.supabase_id] = user
        return user

    async def get_user_by_supabase_id(self, supabase_id):
        return self.users.get(supabase_id)

    async def list_applications(self, user_id):
        apps = [a for a in self.applications.values() if a.user_id == user_id]
        return sorted(apps, key=lambda a: a.created_at, reverse=True)

    async def get_application(self, user_id, application_id):
        app_ = self.applications.get(application_id)
        if app_ is None or app_.user_id != user_id:
            return None
        return app_

    async def create_application(self, user_id, request: FundingRequest, proposals: list[Proposal]):
        now = datetime.now(timezone.utc)
        application = FundingApplication(
            id=uuid4(),
            user_id=user_id,
            funding_needed=request.amount,
            created_at=now,
            proposals=list(proposals),
            request=request,
            submitted_at=now,
        )
        self.applications[application.id] = application
        return application

    async def save_selection(self, application):
        self.applications[application.id] = application
        return application

    async def list_deals(self, statuses):
        return [
            (deal, [inv for inv in self.investments.values() if inv.deal_id == deal.id])
            for deal in self.deals.values()
            if deal.status in statuses
        ]

    async def create_deal(self, deal):
        self.deals[deal.id] = deal
        return deal

    async def record_investment(self, investor_id, deal_id, amount) -> LedgerUpdate:
        lock = self._deal_locks.setdefault(deal_id, asyncio.Lock())
        async with lock:
            deal = self.deals.get(deal_id)
            if deal is None:
                raise NotFoundError("Deal not found")
            existing = next(
                (i for i in self.investments.values()
                 if i.deal_id == deal_id and i.investor_id == investor_id),
                None,
            )
            # Yield between read and write, as a real round trip would
            await asyncio.sleep(0)
            update = ledger.record_investment(deal, investor_id, amount, existing)
            self.deals[deal_id] = update.deal
            self.investments[update.investment.id] = update.investment
            return update

    async def list_investments(self, user_id):
        return [i for i in self.investments.values() if i.investor_id == user_id]

    def _user_by_id(self, user_id):
        return next((u for u in self.users.values() if u.id == user_id), None)

    async def get_profile(self, user_id):
        user = self._user_by_id(user_id)
        if user is None:
            return None
        return self.profiles.get(user_id, UserProfile(user=user))

    async def save_profile(self, profile):
        self.users[profile.user.supabase_id] = profile.user
        self.profiles[profile.user.id] = profile
        return profile

    async def admin_overview(self, limit):
        users = list(self.users.values())
        stats = PlatformStats(
            user_count=len(users),
            physician_count=sum(1 for u in users if u.role == UserRole.PHYSICIAN),
            investor_count=sum(1 for u in users if u.role == UserRole.INVESTOR),
            application_count=len(self.applications),
            deal_count=len(self.deals),
            investment_count=len(self.investments),
        )
        apps = sorted(self.applications.values(), key=lambda a: a.created_at, reverse=True)[:limit]
        invs = sorted(self.investments.values(), key=lambda i: i.invested_at, reverse=True)[:limit]
        recent_apps = []
        for a in apps:
            owner = self._user_by_id(a.user_id)
            recent_apps.append(RecentApplication(
                id=a.id,
                user_name=owner.name,
                user_email=owner.email,
                funding_needed=a.funding_needed,
                status=a.status,
                created_at=a.created_at,
            ))
        recent_invs = []
        for i in invs:
            owner = self._user_by_id(i.investor_id)
            recent_invs.append(RecentInvestment(
                id=i.id,
                user_name=owner.name,
                user_email=owner.email,
                deal_name=self.deals[i.deal_id].name,
                amount=i.amount,
                invested_at=i.invested_at,
            ))
        return AdminOverview(stats=stats, recent_applications=recent_apps, recent_investments=recent_invs)


class FakeIdentity:
    """Bearer token is the Supabase user id."""

    async def get_user_id(self, access_token):
        return access_token if access_token.startswith("sb-") else None


class FakeMailer:
    def __init__(self):
        self.sent: list[tuple] = []

    async def send_application_submitted(self, to, name, application_id):
        self.sent.append(("application_submitted", to, name, application_id))
        return True

    async def send_investment_confirmation(self, to, name, deal_name, amount):
        self.sent.append(("investment_confirmation", to, name, deal_name, amount))
        return True


@pytest.fixture
def store():
    return InMemoryFundingStore()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def client(store, mailer):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_identity] = lambda: FakeIdentity()
    app.dependency_overrides[get_mailer] = lambda: mailer
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def physician(store):
    return store.add_user(UserRole.PHYSICIAN, "Patel")


@pytest.fixture
def investor(store):
    return store.add_user(UserRole.INVESTOR, "Nguyen")


@pytest.fixture
def admin(store):
    return store.add_user(UserRole.ADMIN, "Ops")


@pytest.fixture
def auth():
    def headers(user: SessionUser) -> dict[str, str]:
        return {"Authorization": f"Bearer {user.supabase_id}"}
    return headers


@pytest.fixture
def open_deal_in_store(store):
    deal = ledger.open_deal(
        "Cardiology Fund I",
        Decimal("100000"),
        Decimal("25000"),
        specialty="Cardiology",
    )
    deal = replace(deal, accumulated_amount=Decimal("80000"))
    store.deals[deal.id] = deal
    return deal
