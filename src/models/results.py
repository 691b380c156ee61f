from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from src.models.deal import Deal, Investment
from src.models.funding import ApplicationStatus, FundingApplication, Proposal


@dataclass(frozen=True)
class PayoffResult:
    """Loan payoff with an extra monthly payment applied each period."""
    standard_payment: Decimal
    months_to_payoff: int
    total_interest: Decimal
    total_paid: Decimal
    payoff_reached: bool
    months_saved: int = 0  # Versus the contractual term, never negative
    interest_saved: Decimal = Decimal("0")  # Versus the contractual schedule, never negative

    @property
    def payoff_years(self) -> int:
        return self.months_to_payoff // 12


@dataclass(frozen=True)
class InvestmentReturn:
    future_value: Decimal
    total_contributions: Decimal
    total_gains: Decimal


@dataclass(frozen=True)
class RetirementProjection:
    projected_savings: Decimal
    monthly_retirement_income: Decimal
    years_of_retirement: int


@dataclass(frozen=True)
class LedgerUpdate:
    """Next state of a deal and the investor's position after one funding event."""
    deal: Deal
    investment: Investment
    fully_funded_transition: bool
    is_top_up: bool


@dataclass(frozen=True)
class DealFundingSummary:
    deal: Deal
    committed_amount: Decimal
    investor_count: int
    percent_funded: Decimal
    remaining_amount: Decimal


@dataclass
class SpecialtyBreakdown:
    invested: Decimal = Decimal("0")
    current_value: Decimal = Decimal("0")
    count: int = 0


@dataclass
class InvestorMetrics:
    total_invested: Decimal = Decimal("0")
    current_value: Decimal = Decimal("0")
    total_distributions: Decimal = Decimal("0")
    ytd_return: Decimal = Decimal("0")  # Percent
    portfolio_irr: Decimal = Decimal("0")  # Percent, heuristic (ytd_return * 1.2)
    investment_count: int = 0
    equity_multiple: Decimal = Decimal("0")
    cash_flow_irr: Decimal | None = None  # Percent, annualized; solved from dated cash flows
    by_specialty: dict[str, SpecialtyBreakdown] = field(default_factory=dict)


@dataclass
class PhysicianMetrics:
    active_funding: Decimal = Decimal("0")
    monthly_payment: Decimal = Decimal("0")
    interest_rate: Decimal = Decimal("0")
    portfolio_value: Decimal = Decimal("0")  # Illustrative: active_funding * 1.15
    latest_application: FundingApplication | None = None
    selected_proposal: Proposal | None = None


@dataclass(frozen=True)
class PlatformStats:
    user_count: int = 0
    physician_count: int = 0
    investor_count: int = 0
    application_count: int = 0
    deal_count: int = 0
    investment_count: int = 0


@dataclass(frozen=True)
class RecentApplication:
    id: UUID
    user_name: str | None
    user_email: str
    funding_needed: Decimal
    status: ApplicationStatus
    created_at: datetime


@dataclass(frozen=True)
class RecentInvestment:
    id: UUID
    user_name: str | None
    user_email: str
    deal_name: str
    amount: Decimal
    invested_at: datetime


@dataclass(frozen=True)
class AdminOverview:
    """Platform counts plus the latest applications and investments."""
    stats: PlatformStats
    recent_applications: list[RecentApplication] = field(default_factory=list)
    recent_investments: list[RecentInvestment] = field(default_factory=list)
