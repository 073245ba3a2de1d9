# =============================================================================
# core/filters.py  —  Timeframe, status and fraud filters
# =============================================================================
#
# Small pure functions over lists of Payment.  The tools compose them; none
# of them touch the store.
#
# TIMEFRAMES:
#   "all"    everything
#   "week"   timestamp >= now - 7 days
#   "month"  timestamp >= the same day of the previous calendar month
#            (clamped, so 31 March looks back to 28/29 February)
#   anything else is treated as "all".
#   Boundaries are inclusive.  A payment without a timestamp counts as "now".
#
# FRAUD HEURISTIC:
#   A payment is suspicious when its value in the base currency is strictly
#   greater than the threshold, or when it failed.
# =============================================================================

import calendar
from collections.abc import Iterable
from datetime import datetime, timedelta
from decimal import Decimal

from core.currency import RateTable, to_base
from core.models import Payment, PaymentStatus


TIMEFRAMES = ("all", "month", "week")


def month_ago(now: datetime) -> datetime:
    """Same wall-clock time, same day-of-month, one calendar month back."""
    year, month = (now.year - 1, 12) if now.month == 1 else (now.year, now.month - 1)
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day)


def applied_timeframe(timeframe: str) -> str:
    """The window actually used for ``timeframe``: unknown names mean "all"."""
    return timeframe if timeframe in TIMEFRAMES else "all"


def timeframe_cutoff(timeframe: str, now: datetime) -> datetime | None:
    """Earliest timestamp kept by ``timeframe``; None means no cutoff."""
    if timeframe == "week":
        return now - timedelta(days=7)
    if timeframe == "month":
        return month_ago(now)
    return None


def filter_by_timeframe(payments: Iterable[Payment], timeframe: str, now: datetime) -> list[Payment]:
    cutoff = timeframe_cutoff(timeframe, now)
    if cutoff is None:
        return list(payments)
    return [p for p in payments if (p.timestamp or now) >= cutoff]


def filter_by_status(payments: Iterable[Payment], status: str) -> list[Payment]:
    """Case-insensitive status match."""
    wanted = status.strip().lower()
    return [p for p in payments if p.status.value == wanted]


def risk_factors(payment: Payment, threshold: Decimal, table: RateTable) -> list[str]:
    """Reasons a payment is suspicious; empty when it is not."""
    reasons = []
    if payment.status is PaymentStatus.FAILED:
        reasons.append("Failed status")
    if to_base(payment, table) > threshold:
        reasons.append("High amount")
    return reasons


def is_suspicious(payment: Payment, threshold: Decimal, table: RateTable) -> bool:
    return bool(risk_factors(payment, threshold, table))


def find_suspicious(payments: Iterable[Payment], threshold: Decimal, table: RateTable) -> list[Payment]:
    return [p for p in payments if is_suspicious(p, threshold, table)]
