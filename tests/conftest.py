"""
Shared fixtures: an isolated server context with a frozen clock and
deterministic payment ids.
"""

import random
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from core.config import Settings
from core.context import build_context
from core.models import Payment, PaymentStatus
from core.store import IdGenerator


# Last day of a 31-day month, so "month" looks back to a clamped 28 February.
FIXED_NOW = datetime(2026, 3, 31, 12, 0, tzinfo=timezone.utc)


def fixed_clock():
    return FIXED_NOW


@pytest.fixture
def context():
    """Context seeded with the demo user U123."""
    return build_context(
        Settings(),
        clock=fixed_clock,
        id_generator=IdGenerator(fixed_clock, random.Random(7)),
        seed=True,
    )


@pytest.fixture
def empty_context():
    """Context with no ledgers at all."""
    return build_context(
        Settings(seed_demo_data=False),
        clock=fixed_clock,
        id_generator=IdGenerator(fixed_clock, random.Random(7)),
    )


@pytest.fixture
def scenario_payments():
    """£100 completed, €200 pending, £50 failed."""
    return [
        Payment(id="A1", amount=Decimal("100"), currency="GBP",
                status=PaymentStatus.COMPLETED, payee="Alice", timestamp=FIXED_NOW),
        Payment(id="A2", amount=Decimal("200"), currency="EUR",
                status=PaymentStatus.PENDING, payee="Bob", timestamp=FIXED_NOW),
        Payment(id="A3", amount=Decimal("50"), currency="GBP",
                status=PaymentStatus.FAILED, payee="Carol", timestamp=FIXED_NOW),
    ]


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def u1_context(empty_context, scenario_payments):
    """Unseeded context holding only the mixed-currency scenario for U1A."""
    empty_context.services.store.seed("U1A", scenario_payments)
    return empty_context
