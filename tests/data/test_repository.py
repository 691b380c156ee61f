"""Tests for SqlFundingStore against a mocked AsyncSession."""

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest
from sqlalchemy.dialects import postgresql

from src.data.repository import SqlFundingStore
from src.engine.exceptions import BelowMinimumError, DealNotOpenError, NotFoundError
from src.models.db import (
    DealRecord,
    FundingApplicationRecord,
    InvestmentRecord,
    InvestorProfileRecord,
    UserRecord,
)
from src.models.funding import ApplicationStatus
from src.models.user import InvestorProfile, SessionUser, UserProfile, UserRole


def _result(value):
    res = MagicMock()
    res.scalar_one_or_none.return_value = value
    return res


def _session():
    # AsyncSession.add is sync; execute/commit/rollback are coroutines
    session = MagicMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


def _deal_rec(current="80000", target="100000", minimum="25000", status="OPEN"):
    return DealRecord(
        id=uuid4(),
        name="Cardiology Fund I",
        description="",
        specialty="Cardiology",
        deal_type="Practice Acquisition",
        target_amount=Decimal(target),
        minimum_investment=Decimal(minimum),
        current_amount=Decimal(current),
        status=status,
        opened_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


def _sql(stmt) -> str:
    return str(stmt.compile(dialect=postgresql.dialect()))


@pytest.fixture
def held_locks():
    held = []

    @asynccontextmanager
    async def fake_lock(deal_id, *args, **kwargs):
        held.append(deal_id)
        yield

    with patch("src.data.repository.deal_lock", new=fake_lock):
        yield held


class TestRecordInvestment:
    async def test_new_position_commits(self, held_locks):
        deal_rec = _deal_rec()
        session = _session()
        session.execute.side_effect = [_result(deal_rec), _result(None)]
        investor_id = uuid4()

        update = await SqlFundingStore(session).record_investment(
            investor_id, deal_rec.id, Decimal("30000")
        )

        assert held_locks == [deal_rec.id]
        assert update.is_top_up is False
        assert update.fully_funded_transition is True
        assert deal_rec.current_amount == Decimal("110000")
        assert deal_rec.status == "FULLY_FUNDED"

        session.add.assert_called_once()
        added = session.add.call_args.args[0]
        assert isinstance(added, InvestmentRecord)
        assert added.user_id == investor_id
        assert added.deal_id == deal_rec.id
        assert added.amount == Decimal("30000")
        session.commit.assert_awaited_once()
        session.rollback.assert_not_awaited()

    async def test_rows_selected_for_update(self, held_locks):
        deal_rec = _deal_rec()
        session = _session()
        session.execute.side_effect = [_result(deal_rec), _result(None)]

        await SqlFundingStore(session).record_investment(uuid4(), deal_rec.id, Decimal("25000"))

        statements = [c.args[0] for c in session.execute.await_args_list]
        assert len(statements) == 2
        assert "deals" in _sql(statements[0])
        assert "investments" in _sql(statements[1])
        for stmt in statements:
            assert "FOR UPDATE" in _sql(stmt)

    async def test_top_up_writes_back_position(self, held_locks):
        deal_rec = _deal_rec(current="50000", target="500000")
        investor_id = uuid4()
        invested_at = datetime(2024, 2, 1, tzinfo=timezone.utc)
        inv_rec = InvestmentRecord(
            id=uuid4(),
            user_id=investor_id,
            deal_id=deal_rec.id,
            amount=Decimal("50000"),
            current_value=Decimal("52000"),
            invested_at=invested_at,
        )
        session = _session()
        session.execute.side_effect = [_result(deal_rec), _result(inv_rec)]

        update = await SqlFundingStore(session).record_investment(
            investor_id, deal_rec.id, Decimal("30000")
        )

        assert update.is_top_up is True
        assert update.fully_funded_transition is False
        assert update.investment.id == inv_rec.id
        assert inv_rec.amount == Decimal("80000")
        assert inv_rec.current_value == Decimal("82000")
        assert inv_rec.invested_at == invested_at
        assert deal_rec.current_amount == Decimal("80000")
        assert deal_rec.status == "OPEN"
        session.add.assert_not_called()
        session.commit.assert_awaited_once()

    async def test_below_minimum_rolls_back(self, held_locks):
        deal_rec = _deal_rec()
        session = _session()
        session.execute.side_effect = [_result(deal_rec), _result(None)]

        with pytest.raises(BelowMinimumError):
            await SqlFundingStore(session).record_investment(uuid4(), deal_rec.id, Decimal("10000"))

        session.rollback.assert_awaited_once()
        session.commit.assert_not_awaited()
        session.add.assert_not_called()
        assert deal_rec.current_amount == Decimal("80000")
        assert deal_rec.status == "OPEN"

    async def test_closed_deal_rolls_back(self, held_locks):
        deal_rec = _deal_rec(current="100000", status="FULLY_FUNDED")
        session = _session()
        session.execute.side_effect = [_result(deal_rec), _result(None)]

        with pytest.raises(DealNotOpenError):
            await SqlFundingStore(session).record_investment(uuid4(), deal_rec.id, Decimal("25000"))

        session.rollback.assert_awaited_once()
        session.commit.assert_not_awaited()

    async def test_missing_deal(self, held_locks):
        session = _session()
        session.execute.side_effect = [_result(None)]

        with pytest.raises(NotFoundError):
            await SqlFundingStore(session).record_investment(uuid4(), uuid4(), Decimal("25000"))

        session.rollback.assert_awaited_once()
        session.commit.assert_not_awaited()


class TestConcurrentRecordInvestment:
    """Many stores, each with its own session, funding one shared deal row."""

    async def test_serialized_under_deal_lock(self):
        deal_rec = _deal_rec(current="0", target="100000", minimum="10000")
        positions = []
        locks: dict = {}

        @asynccontextmanager
        async def local_lock(deal_id, *args, **kwargs):
            async with locks.setdefault(deal_id, asyncio.Lock()):
                yield

        async def execute(stmt):
            # Each round trip yields, so interleaving would expose lost updates
            await asyncio.sleep(0)
            entity = stmt.column_descriptions[0]["entity"]
            return _result(deal_rec if entity is DealRecord else None)

        def store():
            session = _session()
            session.execute.side_effect = execute
            session.add.side_effect = positions.append
            return SqlFundingStore(session)

        with patch("src.data.repository.deal_lock", new=local_lock):
            results = await asyncio.gather(
                *(store().record_investment(uuid4(), deal_rec.id, Decimal("10000")) for _ in range(12)),
                return_exceptions=True,
            )

        updates = [r for r in results if not isinstance(r, Exception)]
        errors = [r for r in results if isinstance(r, Exception)]
        assert len(updates) == 10
        assert all(isinstance(e, DealNotOpenError) for e in errors)
        assert len(errors) == 2
        assert sum(1 for u in updates if u.fully_funded_transition) == 1
        assert deal_rec.current_amount == Decimal("100000")
        assert deal_rec.status == "FULLY_FUNDED"
        assert sum(p.amount for p in positions) == Decimal("100000")


class TestProfiles:
    async def test_save_creates_investor_profile_row(self):
        user_rec = UserRecord(id=uuid4(), supabase_id="sb-n", email="n@example.com", role="INVESTOR")
        session = _session()
        session.get = AsyncMock(return_value=user_rec)
        session.execute.side_effect = [_result(None)]
        profile = UserProfile(
            user=SessionUser(
                id=user_rec.id, supabase_id="sb-n", email="n@example.com",
                role=UserRole.INVESTOR, name="Nguyen",
            ),
            phone="555-0100",
            investor_profile=InvestorProfile(accredited=True, firm_name="Nguyen Family Office"),
        )

        await SqlFundingStore(session).save_profile(profile)

        assert user_rec.name == "Nguyen"
        assert user_rec.phone == "555-0100"
        added = session.add.call_args.args[0]
        assert isinstance(added, InvestorProfileRecord)
        assert added.user_id == user_rec.id
        assert added.accredited is True
        assert added.firm_name == "Nguyen Family Office"
        session.commit.assert_awaited_once()

    async def test_get_missing_user(self):
        session = _session()
        session.get = AsyncMock(return_value=None)
        assert await SqlFundingStore(session).get_profile(uuid4()) is None


class TestAdminOverview:
    async def test_counts_and_recent_rows(self):
        counts = [5, 2, 2, 3, 1, 4]
        user_rec = UserRecord(id=uuid4(), supabase_id="sb-p", email="p@example.com", name="Patel", role="PHYSICIAN")
        app_rec = FundingApplicationRecord(
            id=uuid4(), user=user_rec, funding_needed=Decimal("100000"), status="SUBMITTED",
            created_at=datetime(2024, 3, 1, tzinfo=timezone.utc),
        )
        count_results = []
        for n in counts:
            res = MagicMock()
            res.scalar_one.return_value = n
            count_results.append(res)
        apps = MagicMock()
        apps.scalars.return_value.all.return_value = [app_rec]
        invs = MagicMock()
        invs.scalars.return_value.all.return_value = []
        session = _session()
        session.execute.side_effect = [*count_results, apps, invs]

        overview = await SqlFundingStore(session).admin_overview(10)

        assert overview.stats.user_count == 5
        assert overview.stats.investment_count == 4
        (recent,) = overview.recent_applications
        assert recent.user_email == "p@example.com"
        assert recent.status == ApplicationStatus.SUBMITTED
        assert overview.recent_investments == []
        app_query = _sql(session.execute.await_args_list[6].args[0])
        assert "ORDER BY funding_applications.created_at DESC" in app_query
        assert "LIMIT" in app_query
