from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4


class ProposalStatus(Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class ApplicationStatus(Enum):
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    UNDER_REVIEW = "UNDER_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    FUNDED = "FUNDED"


@dataclass(frozen=True)
class FundingRequest:
    """Physician intake. Only ``amount`` shapes the proposals today."""
    amount: Decimal
    full_name: str | None = None
    degree: str | None = None
    specialty: str | None = None
    years_in_practice: int | None = None
    estimated_income: Decimal | None = None
    medical_debt: Decimal | None = None
    funding_timeline: str | None = None
    career_goals: str | None = None
    use_of_funds: str | None = None


@dataclass(frozen=True)
class Proposal:
    name: str
    description: str
    amount: Decimal  # Principal, equal to the requested funding amount
    interest_rate: Decimal  # Annual, percent (Decimal("4.5") = 4.5%)
    term_months: int
    monthly_payment: Decimal
    better_off_score: int  # 0-100
    status: ProposalStatus = ProposalStatus.PENDING
    id: UUID = field(default_factory=uuid4)

    @property
    def total_repayment(self) -> Decimal:
        return self.monthly_payment * self.term_months

    @property
    def total_interest(self) -> Decimal:
        return self.total_repayment - self.amount


@dataclass(frozen=True)
class FundingApplication:
    id: UUID
    user_id: UUID
    funding_needed: Decimal
    created_at: datetime
    status: ApplicationStatus = ApplicationStatus.SUBMITTED
    proposals: list[Proposal] = field(default_factory=list)
    selected_proposal_id: UUID | None = None
    request: FundingRequest | None = None
    submitted_at: datetime | None = None
