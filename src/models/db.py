"""SQLAlchemy ORM models for PostgreSQL persistence."""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    String,
    Integer,
    Numeric,
    DateTime,
    ForeignKey,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import DeclarativeBase, relationship, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class UserRecord(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    supabase_id: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(String(20), default="PHYSICIAN")  # PHYSICIAN, INVESTOR, ADMIN
    phone: Mapped[str | None] = mapped_column(String(40), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    applications: Mapped[list["FundingApplicationRecord"]] = relationship(back_populates="user")
    investments: Mapped[list["InvestmentRecord"]] = relationship(back_populates="user")


class PhysicianProfileRecord(Base):
    __tablename__ = "physician_profiles"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), unique=True)

    degree: Mapped[str | None] = mapped_column(String(20), nullable=True)
    specialty: Mapped[str | None] = mapped_column(String(100), nullable=True)
    years_in_practice: Mapped[int | None] = mapped_column(Integer, nullable=True)
    estimated_income: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    medical_school_debt: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)


class InvestorProfileRecord(Base):
    __tablename__ = "investor_profiles"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), unique=True)

    accredited: Mapped[bool] = mapped_column(Boolean, default=False)
    firm_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    investment_focus: Mapped[str | None] = mapped_column(Text, nullable=True)


class FundingApplicationRecord(Base):
    __tablename__ = "funding_applications"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), index=True)
    status: Mapped[str] = mapped_column(String(20), default="SUBMITTED")
    selected_proposal_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)

    # Intake
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    degree: Mapped[str | None] = mapped_column(String(20), nullable=True)
    specialty: Mapped[str | None] = mapped_column(String(100), nullable=True)
    years_in_practice: Mapped[int | None] = mapped_column(Integer, nullable=True)
    estimated_income: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    medical_debt: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    funding_needed: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    funding_timeline: Mapped[str | None] = mapped_column(String(100), nullable=True)
    career_goals: Mapped[str | None] = mapped_column(Text, nullable=True)
    use_of_funds: Mapped[str | None] = mapped_column(Text, nullable=True)

    user: Mapped["UserRecord"] = relationship(back_populates="applications")
    proposals: Mapped[list["ProposalRecord"]] = relationship(
        back_populates="application", order_by="ProposalRecord.position"
    )


class ProposalRecord(Base):
    __tablename__ = "proposals"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    application_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("funding_applications.id"), index=True)
    position: Mapped[int] = mapped_column(Integer, default=0)

    name: Mapped[str] = mapped_column(String(100))
    description: Mapped[str] = mapped_column(Text, default="")
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    interest_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2))  # Percent
    term_months: Mapped[int] = mapped_column(Integer)
    monthly_payment: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    better_off_score: Mapped[int] = mapped_column(Integer)
    status: Mapped[str] = mapped_column(String(20), default="PENDING")

    application: Mapped["FundingApplicationRecord"] = relationship(back_populates="proposals")


class DealRecord(Base):
    __tablename__ = "deals"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    opened_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str] = mapped_column(Text, default="")
    specialty: Mapped[str | None] = mapped_column(String(100), nullable=True)
    deal_type: Mapped[str] = mapped_column(String(50), default="")
    target_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    minimum_investment: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    current_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0)
    target_irr: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), nullable=True)
    target_moic: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), nullable=True)
    term_months: Mapped[int | None] = mapped_column(Integer, nullable=True)
    distribution_frequency: Mapped[str | None] = mapped_column(String(50), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="OPEN", index=True)

    investments: Mapped[list["InvestmentRecord"]] = relationship(back_populates="deal")


class InvestmentRecord(Base):
    __tablename__ = "investments"
    __table_args__ = (UniqueConstraint("user_id", "deal_id", name="uq_investment_user_deal"),)

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    invested_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), index=True)
    deal_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("deals.id"), index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    current_value: Mapped[Decimal] = mapped_column(Numeric(14, 2))

    user: Mapped["UserRecord"] = relationship(back_populates="investments")
    deal: Mapped["DealRecord"] = relationship(back_populates="investments")
    distributions: Mapped[list["DistributionRecord"]] = relationship(
        back_populates="investment", order_by="DistributionRecord.paid_at.desc()"
    )


class DistributionRecord(Base):
    __tablename__ = "distributions"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    investment_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("investments.id"), index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    paid_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    investment: Mapped["InvestmentRecord"] = relationship(back_populates="distributions")
