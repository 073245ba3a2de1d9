# =============================================================================
# core/store.py  —  In-memory payment ledgers
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Owns the mapping  user id → insertion-ordered list of Payment.
#   Two operations only: read a ledger, append to a ledger.  There is no
#   update or delete.  Ledgers live as long as the process.
#
# WHY MOCK DATA?
#   Like any demo backend this would be a database in production.  The
#   interface (list_payments / append_payment) is what the tools depend on,
#   so swapping the storage touches only this module.
#
# IDS:
#   When a payment arrives without an id the store asks its IdGenerator for
#   one: "P" + epoch milliseconds + a 3-digit random suffix.  Uniqueness is
#   best-effort; tests inject a fixed clock and a seeded Random.
# =============================================================================

import asyncio
import logging
import random
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from core.errors import DuplicatePaymentError
from core.models import Payment, PaymentStatus


logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class IdGenerator:
    """Time-seeded payment ids with a random suffix."""

    def __init__(self, clock: Clock = utc_now, rng: random.Random | None = None):
        self._clock = clock
        self._rng = rng or random.Random()

    def __call__(self) -> str:
        millis = int(self._clock().timestamp() * 1000)
        return f"P{millis}{self._rng.randint(0, 999):03d}"


class PaymentStore:
    """Process-lifetime store of per-user payment ledgers."""

    def __init__(self, id_generator: IdGenerator | None = None, clock: Clock = utc_now):
        self._ledgers: dict[str, list[Payment]] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._next_id = id_generator or IdGenerator(clock)
        self._clock = clock

    def seed(self, user_id: str, payments: Iterable[Payment]) -> None:
        """Pre-populate a ledger at startup (replaces anything already there)."""
        self._ledgers[user_id] = list(payments)
        logger.info("Ledger for %s seeded with %d payments", user_id, len(self._ledgers[user_id]))

    def users(self) -> list[str]:
        return list(self._ledgers)

    async def list_payments(self, user_id: str) -> list[Payment]:
        """Return a copy of the user's ledger; unknown users have no payments."""
        logger.debug("Getting payments for %s", user_id)
        payments = list(self._ledgers.get(user_id, ()))
        logger.debug("Retrieved %d payments for %s", len(payments), user_id)
        return payments

    async def append_payment(self, user_id: str, payment: Payment) -> Payment:
        """Append to the user's ledger, creating it on first use.

        Fills in a generated id and the current timestamp when missing and
        returns the stored record.  Raises DuplicatePaymentError rather than
        overwriting an existing id.
        """
        lock = self._locks.setdefault(user_id, asyncio.Lock())
        async with lock:
            ledger = self._ledgers.setdefault(user_id, [])
            stored = replace(
                payment,
                id=payment.id or self._unused_id(ledger),
                timestamp=payment.timestamp or self._clock(),
            )
            if any(existing.id == stored.id for existing in ledger):
                raise DuplicatePaymentError(user_id, stored.id)

            logger.debug("Adding payment %s for %s", stored.id, user_id)
            ledger.append(stored)

        logger.info("Payment %s added for %s", stored.id, user_id)
        return stored

    def _unused_id(self, ledger: list[Payment]) -> str:
        taken = {p.id for p in ledger}
        candidate = self._next_id()
        while candidate in taken:
            candidate = self._next_id()
        return candidate


# -----------------------------------------------------------------------------
# Demo data
# -----------------------------------------------------------------------------
# One user with one payment in each status, two currencies, spread over
# the last couple of weeks so the "week" and "month" timeframes differ.
# -----------------------------------------------------------------------------
DEMO_USER = "U123"


def demo_payments(now: datetime) -> list[Payment]:
    return [
        Payment(
            id="P001",
            amount=Decimal("100"),
            currency="GBP",
            status=PaymentStatus.COMPLETED,
            payee="Alice",
            timestamp=now - timedelta(days=15),
        ),
        Payment(
            id="P002",
            amount=Decimal("200"),
            currency="EUR",
            status=PaymentStatus.PENDING,
            payee="Bob",
            timestamp=now - timedelta(days=5),
        ),
        Payment(
            id="P003",
            amount=Decimal("50"),
            currency="GBP",
            status=PaymentStatus.FAILED,
            payee="Carol",
            timestamp=now - timedelta(days=2),
        ),
    ]
