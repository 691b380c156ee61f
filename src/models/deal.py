from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4


class DealStatus(Enum):
    OPEN = "OPEN"
    FULLY_FUNDED = "FULLY_FUNDED"
    CLOSED = "CLOSED"


@dataclass(frozen=True)
class Deal:
    """A pool of physician funding that investors commit capital to."""
    name: str
    target_amount: Decimal
    minimum_investment: Decimal
    accumulated_amount: Decimal = Decimal("0")
    status: DealStatus = DealStatus.OPEN
    specialty: str | None = None
    description: str = ""
    deal_type: str = ""
    target_irr: Decimal | None = None
    target_moic: Decimal | None = None
    term_months: int | None = None
    distribution_frequency: str | None = None
    opened_at: datetime | None = None
    id: UUID = field(default_factory=uuid4)


@dataclass(frozen=True)
class Distribution:
    amount: Decimal
    paid_at: datetime
    id: UUID = field(default_factory=uuid4)


@dataclass(frozen=True)
class Investment:
    investor_id: UUID
    deal_id: UUID
    amount: Decimal
    current_value: Decimal
    invested_at: datetime
    deal_specialty: str | None = None
    distributions: list[Distribution] = field(default_factory=list)
    id: UUID = field(default_factory=uuid4)

    @property
    def total_distributions(self) -> Decimal:
        return sum((d.amount for d in self.distributions), Decimal("0"))
