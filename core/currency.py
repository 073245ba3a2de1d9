# =============================================================================
# core/currency.py  —  Rate table & currency conversion
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Holds the ONE rate table the server uses and converts amounts between
#   the currencies it lists.  Every tool, the rates resource and the report
#   prompt read rates from here.
#
# RATE SEMANTICS:
#   rate[code] = units of `code` worth one unit of the base currency.
#   With GBP as base and EUR at 1.15, €200 is worth 200 / 1.15 = £173.91.
#
#       convert_raw(amount, from, to) = amount / rate[from] * rate[to]
#
# ROUNDING:
#   Money is rounded half-up to two places for display only.  Totals are
#   accumulated unrounded in the base currency and rounded once at the end
#   (see total_in).  Rounding each item first would let errors compound.
# =============================================================================

from collections.abc import Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal
from types import MappingProxyType

from core.errors import UnsupportedCurrencyError
from core.models import Payment


BASE_CURRENCY = "GBP"

# Static demo rates.  Live refresh is out of scope; RateTable is immutable.
DEFAULT_RATES: dict[str, str] = {
    "GBP": "1",
    "EUR": "1.15",
    "USD": "1.27",
    "JPY": "190.5",
}

_CENT = Decimal("0.01")


def round_money(amount: Decimal) -> Decimal:
    """Round to two decimal places, half-up."""
    return amount.quantize(_CENT, rounding=ROUND_HALF_UP)


class RateTable:
    """Immutable mapping of currency code → rate relative to the base."""

    def __init__(self, rates: Mapping[str, object], base: str = BASE_CURRENCY):
        parsed = {code.upper(): Decimal(str(rate)) for code, rate in rates.items()}
        if base not in parsed:
            raise ValueError(f"base currency {base} missing from rate table")
        if parsed[base] != 1:
            raise ValueError(f"base currency {base} must have rate 1")
        for code, rate in parsed.items():
            if rate <= 0:
                raise ValueError(f"rate for {code} must be > 0")
        self._rates = MappingProxyType(parsed)
        self.base = base

    @classmethod
    def default(cls) -> "RateTable":
        return cls(DEFAULT_RATES)

    @property
    def codes(self) -> list[str]:
        return list(self._rates)

    def supports(self, code: str) -> bool:
        return code in self._rates

    def rate(self, code: str) -> Decimal:
        try:
            return self._rates[code]
        except KeyError:
            raise UnsupportedCurrencyError(code, self.codes) from None

    def snapshot(self) -> dict[str, float]:
        """Plain dict copy for JSON rendering and tool metadata."""
        return {code: float(rate) for code, rate in self._rates.items()}

    def __contains__(self, code: object) -> bool:
        return code in self._rates

    def __repr__(self) -> str:
        return f"RateTable(base={self.base!r}, rates={dict(self._rates)!r})"


def convert_raw(amount: Decimal, from_code: str, to_code: str, table: RateTable) -> Decimal:
    """Convert without rounding.  Raises UnsupportedCurrencyError."""
    from_rate = table.rate(from_code)
    to_rate = table.rate(to_code)
    return Decimal(amount) / from_rate * to_rate


def convert(amount: Decimal, from_code: str, to_code: str, table: RateTable) -> Decimal:
    """Convert ``amount`` and round to two places for display."""
    return round_money(convert_raw(amount, from_code, to_code, table))


def to_base(payment: Payment, table: RateTable) -> Decimal:
    """Unrounded value of a payment in the base currency."""
    return convert_raw(payment.amount, payment.currency, table.base, table)


def total_in(payments: Iterable[Payment], currency: str, table: RateTable) -> Decimal:
    """Sum payments in ``currency``: accumulate in base, convert and round once.

    Validates the target code first so an unsupported target fails even when
    there is nothing to sum.
    """
    table.rate(currency)
    base_total = sum((to_base(p, table) for p in payments), Decimal("0"))
    return convert(base_total, table.base, currency, table)
