"""Canonical test fixtures used across engine and API tests.

Deal fixture: $100K target, $25K minimum, $80K already committed.
Investor fixture: one $100K position worth $115K with a $2K distribution.
"""

from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from src.models.deal import Deal, DealStatus, Distribution, Investment


@pytest.fixture
def investor_id():
    return uuid4()


@pytest.fixture
def nearly_funded_deal() -> Deal:
    return Deal(
        name="Cardiology Fund I",
        target_amount=Decimal("100000"),
        minimum_investment=Decimal("25000"),
        accumulated_amount=Decimal("80000"),
        status=DealStatus.OPEN,
        specialty="Cardiology",
    )


@pytest.fixture
def fresh_deal() -> Deal:
    return Deal(
        name="Residency Bridge Pool",
        target_amount=Decimal("500000"),
        minimum_investment=Decimal("10000"),
        specialty="Emergency Medicine",
    )


@pytest.fixture
def single_position(investor_id) -> Investment:
    return Investment(
        investor_id=investor_id,
        deal_id=uuid4(),
        amount=Decimal("100000"),
        current_value=Decimal("115000"),
        invested_at=datetime(2024, 1, 15, tzinfo=timezone.utc),
        deal_specialty="Cardiology",
        distributions=[
            Distribution(amount=Decimal("2000"), paid_at=datetime(2024, 7, 15, tzinfo=timezone.utc)),
        ],
    )
