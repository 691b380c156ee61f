"""FastAPI dependency injection."""

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from src.config import settings
from src.data.base import FundingStore, IdentityProvider, Mailer
from src.data.email import ResendClient
from src.data.repository import SqlFundingStore
from src.data.supabase import SupabaseAuthClient
from src.models.user import SessionUser, UserRole

engine = create_async_engine(settings.database_url, echo=settings.debug)
async_session = async_sessionmaker(engine, expire_on_commit=False)


async def get_db() -> AsyncSession:
    async with async_session() as session:
        yield session


def get_store(db: AsyncSession = Depends(get_db)) -> FundingStore:
    return SqlFundingStore(db)


def get_identity() -> IdentityProvider:
    return SupabaseAuthClient()


def get_mailer() -> Mailer:
    return ResendClient()


async def get_current_user(
    authorization: str | None = Header(None),
    store: FundingStore = Depends(get_store),
    identity: IdentityProvider = Depends(get_identity),
) -> SessionUser:
    """Resolve the bearer token to the local user for this request."""
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Unauthorized")

    supabase_id = await identity.get_user_id(authorization[7:].strip())
    if supabase_id is None:
        raise HTTPException(status_code=401, detail="Unauthorized")

    user = await store.get_user_by_supabase_id(supabase_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def require_role(role: UserRole, detail: str = "Forbidden"):
    async def dependency(user: SessionUser = Depends(get_current_user)) -> SessionUser:
        if user.role != role:
            raise HTTPException(status_code=403, detail=detail)
        return user
    return dependency
