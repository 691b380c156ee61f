"""Pydantic schemas for API request/response models."""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.models.deal import DealStatus
from src.models.funding import ApplicationStatus, ProposalStatus
from src.models.results import DealFundingSummary
from src.models.user import UserProfile, UserRole


# ---- Request schemas ----

class ApplicationCreate(BaseModel):
    full_name: str | None = None
    degree: str | None = None
    specialty: str | None = None
    years_in_practice: int | None = None
    estimated_income: Decimal | None = None
    medical_debt: Decimal | None = None
    funding_needed: Decimal | None = Field(None, description="Requested principal; blank uses the default amount")
    funding_timeline: str | None = None
    career_goals: str | None = None
    use_of_funds: str | None = None

    @field_validator("funding_needed", mode="before")
    @classmethod
    def _unparsable_funding_is_blank(cls, v):
        if v is None or v == "":
            return None
        try:
            Decimal(str(v))
        except InvalidOperation:
            return None
        return v


class ProposalSelect(BaseModel):
    selected_proposal_id: UUID


class DealCreate(BaseModel):
    name: str
    description: str = ""
    specialty: str | None = None
    deal_type: str = ""
    target_amount: Decimal
    minimum_investment: Decimal
    target_irr: Decimal | None = None
    target_moic: Decimal | None = None
    term_months: int | None = None
    distribution_frequency: str | None = None


class InvestmentCreate(BaseModel):
    deal_id: UUID
    amount: Decimal


class LoanPayoffRequest(BaseModel):
    principal: Decimal = Field(gt=0, le=Decimal("100000000"))
    interest_rate: Decimal = Field(Decimal("4.5"), ge=0, le=30, description="Annual rate, percent")
    loan_term_years: int = Field(10, ge=1, le=50)
    extra_payment: Decimal = Field(Decimal("500"), ge=0, le=Decimal("1000000"))


class InvestmentReturnRequest(BaseModel):
    initial_investment: Decimal = Field(ge=0, le=Decimal("100000000"))
    monthly_contribution: Decimal = Field(Decimal("0"), ge=0, le=Decimal("1000000"))
    expected_return: Decimal = Field(Decimal("7"), ge=0, le=30, description="Annual return, percent")
    investment_years: int = Field(10, ge=1, le=50)


class RetirementRequest(BaseModel):
    current_age: int = Field(ge=18, le=100)
    retirement_age: int = Field(ge=18, le=100)
    current_savings: Decimal = Field(Decimal("0"), ge=0, le=Decimal("100000000"))
    monthly_contribution: Decimal = Field(Decimal("0"), ge=0, le=Decimal("1000000"))


class PhysicianProfileUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    degree: str | None = None
    specialty: str | None = None
    years_in_practice: int | None = Field(None, ge=0, le=70)
    estimated_income: Decimal | None = Field(None, ge=0)
    medical_school_debt: Decimal | None = Field(None, ge=0)


class InvestorProfileUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    accredited: bool = False
    firm_name: str | None = None
    investment_focus: str | None = None


class ProfileUpdate(BaseModel):
    """Only fields present in the body are changed."""
    name: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=40)
    avatar_url: str | None = Field(None, max_length=500)
    physician_profile: PhysicianProfileUpdate | None = None
    investor_profile: InvestorProfileUpdate | None = None


# ---- Response schemas ----

class ProposalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str
    amount: Decimal
    interest_rate: Decimal
    term_months: int
    monthly_payment: Decimal
    better_off_score: int
    status: ProposalStatus
    total_repayment: Decimal
    total_interest: Decimal


class FundingRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

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


class ApplicationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    funding_needed: Decimal
    status: ApplicationStatus
    created_at: datetime
    submitted_at: datetime | None = None
    selected_proposal_id: UUID | None = None
    proposals: list[ProposalResponse]
    request: FundingRequestResponse | None = None


class DealResponse(BaseModel):
    id: UUID
    name: str
    description: str
    specialty: str | None
    deal_type: str
    status: DealStatus
    target_amount: Decimal
    minimum_investment: Decimal
    target_irr: Decimal | None = None
    target_moic: Decimal | None = None
    term_months: int | None = None
    distribution_frequency: str | None = None
    current_amount: Decimal
    investor_count: int = 0
    percent_funded: Decimal = Decimal("0")
    remaining_amount: Decimal = Decimal("0")

    @classmethod
    def from_summary(cls, summary: DealFundingSummary) -> "DealResponse":
        d = summary.deal
        return cls(
            id=d.id,
            name=d.name,
            description=d.description,
            specialty=d.specialty,
            deal_type=d.deal_type,
            status=d.status,
            target_amount=d.target_amount,
            minimum_investment=d.minimum_investment,
            target_irr=d.target_irr,
            target_moic=d.target_moic,
            term_months=d.term_months,
            distribution_frequency=d.distribution_frequency,
            current_amount=summary.committed_amount,
            investor_count=summary.investor_count,
            percent_funded=summary.percent_funded,
            remaining_amount=summary.remaining_amount,
        )


class DistributionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    amount: Decimal
    paid_at: datetime


class InvestmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    deal_id: UUID
    amount: Decimal
    current_value: Decimal
    invested_at: datetime
    deal_specialty: str | None = None
    distributions: list[DistributionResponse] = []


class InvestmentTotals(BaseModel):
    total_invested: Decimal
    current_value: Decimal
    total_distributions: Decimal


class InvestmentListResponse(BaseModel):
    investments: list[InvestmentResponse]
    totals: InvestmentTotals


class InvestmentRecordedResponse(BaseModel):
    investment: InvestmentResponse
    deal_status: DealStatus
    deal_current_amount: Decimal
    fully_funded_transition: bool
    is_top_up: bool


class SpecialtyBreakdownResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    invested: Decimal
    current_value: Decimal
    count: int


class InvestorMetricsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_invested: Decimal
    current_value: Decimal
    total_distributions: Decimal
    ytd_return: Decimal
    portfolio_irr: Decimal
    investment_count: int
    equity_multiple: Decimal
    cash_flow_irr: Decimal | None = None
    by_specialty: dict[str, SpecialtyBreakdownResponse]


class PhysicianMetricsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    active_funding: Decimal
    monthly_payment: Decimal
    interest_rate: Decimal
    portfolio_value: Decimal
    latest_application: ApplicationResponse | None = None
    selected_proposal: ProposalResponse | None = None


class PhysicianDashboard(BaseModel):
    metrics: PhysicianMetricsResponse
    applications: list[ApplicationResponse]


class InvestorDashboard(BaseModel):
    metrics: InvestorMetricsResponse
    investments: list[InvestmentResponse]


class DashboardResponse(BaseModel):
    role: UserRole
    name: str | None = None
    email: str
    physician: PhysicianDashboard | None = None
    investor: InvestorDashboard | None = None


class LoanPayoffResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    standard_payment: Decimal
    months_to_payoff: int
    payoff_years: int
    total_interest: Decimal
    total_paid: Decimal
    payoff_reached: bool
    months_saved: int
    interest_saved: Decimal


class InvestmentReturnResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    future_value: Decimal
    total_contributions: Decimal
    total_gains: Decimal


class RetirementResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    projected_savings: Decimal
    monthly_retirement_income: Decimal
    years_of_retirement: int


class PhysicianProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    degree: str | None = None
    specialty: str | None = None
    years_in_practice: int | None = None
    estimated_income: Decimal | None = None
    medical_school_debt: Decimal | None = None


class InvestorProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    accredited: bool
    firm_name: str | None = None
    investment_focus: str | None = None


class UserProfileResponse(BaseModel):
    id: UUID
    email: str
    name: str | None = None
    role: UserRole
    phone: str | None = None
    avatar_url: str | None = None
    physician_profile: PhysicianProfileResponse | None = None
    investor_profile: InvestorProfileResponse | None = None

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "UserProfileResponse":
        return cls(
            id=profile.user.id,
            email=profile.user.email,
            name=profile.user.name,
            role=profile.user.role,
            phone=profile.phone,
            avatar_url=profile.avatar_url,
            physician_profile=(
                PhysicianProfileResponse.model_validate(profile.physician_profile)
                if profile.physician_profile else None
            ),
            investor_profile=(
                InvestorProfileResponse.model_validate(profile.investor_profile)
                if profile.investor_profile else None
            ),
        )


class PlatformStatsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_count: int
    physician_count: int
    investor_count: int
    application_count: int
    deal_count: int
    investment_count: int


class RecentApplicationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_name: str | None = None
    user_email: str
    funding_needed: Decimal
    status: ApplicationStatus
    created_at: datetime


class RecentInvestmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_name: str | None = None
    user_email: str
    deal_name: str
    amount: Decimal
    invested_at: datetime


class AdminOverviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    stats: PlatformStatsResponse
    recent_applications: list[RecentApplicationResponse]
    recent_investments: list[RecentInvestmentResponse]
