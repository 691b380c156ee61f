from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from uuid import UUID


class UserRole(Enum):
    PHYSICIAN = "PHYSICIAN"
    INVESTOR = "INVESTOR"
    ADMIN = "ADMIN"


@dataclass(frozen=True)
class SessionUser:
    """Authenticated caller, resolved per request from the bearer token."""
    id: UUID
    supabase_id: str
    email: str
    role: UserRole
    name: str | None = None


@dataclass(frozen=True)
class PhysicianProfile:
    degree: str | None = None
    specialty: str | None = None
    years_in_practice: int | None = None
    estimated_income: Decimal | None = None
    medical_school_debt: Decimal | None = None


@dataclass(frozen=True)
class InvestorProfile:
    accredited: bool = False
    firm_name: str | None = None
    investment_focus: str | None = None


@dataclass(frozen=True)
class UserProfile:
    """A user with contact details and the profile matching their role."""
    user: SessionUser
    phone: str | None = None
    avatar_url: str | None = None
    physician_profile: PhysicianProfile | None = None
    investor_profile: InvestorProfile | None = None
