"""Protocol definitions for external collaborators.

Each protocol defines the interface that concrete implementations (SQL store,
identity provider, mailer) must satisfy. Request handlers depend on these, so
tests can swap in in-memory fakes.
"""

from decimal import Decimal
from typing import Protocol, runtime_checkable
from uuid import UUID

from src.models.deal import Deal, DealStatus, Investment
from src.models.funding import FundingApplication, FundingRequest, Proposal
from src.models.results import AdminOverview, LedgerUpdate
from src.models.user import SessionUser, UserProfile


@runtime_checkable
class FundingStore(Protocol):
    async def get_user_by_supabase_id(self, supabase_id: str) -> SessionUser | None:
        """Map an identity-provider user to the local user row."""
        ...

    async def list_applications(self, user_id: UUID) -> list[FundingApplication]:
        """All applications for a user, newest first, with proposals."""
        ...

    async def get_application(self, user_id: UUID, application_id: UUID) -> FundingApplication | None:
        """One application owned by ``user_id``."""
        ...

    async def create_application(
        self, user_id: UUID, request: FundingRequest, proposals: list[Proposal]
    ) -> FundingApplication:
        """Persist an application and its proposals in one transaction."""
        ...

    async def save_selection(self, application: FundingApplication) -> FundingApplication:
        """Persist a proposal selection (application status and all proposal statuses) atomically."""
        ...

    async def list_deals(self, statuses: list[DealStatus]) -> list[tuple[Deal, list[Investment]]]:
        """Deals in the given statuses, newest first, with their investments."""
        ...

    async def create_deal(self, deal: Deal) -> Deal:
        ...

    async def record_investment(self, investor_id: UUID, deal_id: UUID, amount: Decimal) -> LedgerUpdate:
        """Apply a funding event under a per-deal serialization boundary."""
        ...

    async def list_investments(self, user_id: UUID) -> list[Investment]:
        """An investor's positions with distributions, newest first."""
        ...

    async def get_profile(self, user_id: UUID) -> UserProfile | None:
        """User row plus the physician or investor profile, if any."""
        ...

    async def save_profile(self, profile: UserProfile) -> UserProfile:
        """Persist contact fields and upsert the role profile in one commit."""
        ...

    async def admin_overview(self, limit: int) -> AdminOverview:
        """Platform counts and the ``limit`` most recent applications and investments."""
        ...


@runtime_checkable
class IdentityProvider(Protocol):
    async def get_user_id(self, access_token: str) -> str | None:
        """Resolve a session token to the provider's user id, or None if invalid."""
        ...


@runtime_checkable
class Mailer(Protocol):
    async def send_application_submitted(self, to: str, name: str, application_id: UUID) -> bool:
        ...

    async def send_investment_confirmation(self, to: str, name: str, deal_name: str, amount: Decimal) -> bool:
        ...
