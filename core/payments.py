# =============================================================================
# core/payments.py  —  The payment tools (schemas + handlers)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Declares every payment tool the server offers.  Each tool is a pydantic
#   argument schema sitting directly above the coroutine that handles it;
#   register_payment_tools() puts them into a ToolRegistry.
#
# TOOLS:
#   paymentSummary  read-only  count + converted total over a timeframe
#   fraudCheck      read-only  suspicious payments, basic or detailed report
#   fraudAlert      read-only  short alert with the flagged payments attached
#   paymentDetails  read-only  a user's payments with a given status
#   addPayment      WRITE      appends a pending payment to a user's ledger
#
# CONVENTIONS:
#   - "No data" is a success whose text says so.  Only bad input, domain
#     errors and faults come back error-flagged (see core/registry.py).
#   - The text block always stands on its own; metadata repeats the numbers
#     in machine-readable form for the agent.
# =============================================================================

import json
import logging
from decimal import Decimal
from typing import TYPE_CHECKING, Annotated, Literal, Optional

from pydantic import AfterValidator, Field, ValidationInfo, field_validator

from core.currency import BASE_CURRENCY, convert_raw, round_money, to_base, total_in
from core.filters import (
    applied_timeframe, filter_by_status, filter_by_timeframe, find_suspicious, risk_factors,
)
from core.models import Payment, PaymentStatus, ToolSuccess
from core.registry import ToolRegistry
from core.validation import ToolArguments, required_text, strip_markup, supported_currency

if TYPE_CHECKING:
    from core.context import PaymentServices


logger = logging.getLogger(__name__)

MAX_TRANSACTION_AMOUNT = Decimal("10000")

UserId = Annotated[str, Field(min_length=3, max_length=50, description="User identifier")]
CurrencyCode = Annotated[
    str,
    Field(min_length=3, max_length=3, description="Currency code (ISO 4217)"),
    AfterValidator(supported_currency),
]
Threshold = Annotated[
    Decimal,
    Field(gt=0, description="Amount threshold (base currency) for suspicious transactions"),
]


# =============================================================================
# paymentSummary
# =============================================================================
class PaymentSummaryArgs(ToolArguments):
    user_id: UserId
    currency: CurrencyCode = "GBP"
    # Unrecognised windows fall back to "all" in the handler.
    timeframe: str = Field(
        default="all", description="Time period for summary: all, month or week"
    )
    include_details: bool = Field(
        default=False, description="Include payment details in the metadata"
    )


async def payment_summary(args: PaymentSummaryArgs, services: "PaymentServices") -> ToolSuccess:
    """Summarise a user's payments: how many, and their total in one currency."""
    payments = await services.store.list_payments(args.user_id)
    if not payments:
        logger.warning("No payment data found for %s", args.user_id)
        return ToolSuccess.text(f"No payment data found for user {args.user_id}.")

    timeframe = applied_timeframe(args.timeframe)
    if timeframe != args.timeframe:
        logger.warning("Unknown timeframe %r for %s; using 'all'", args.timeframe, args.user_id)

    in_window = filter_by_timeframe(payments, timeframe, services.clock())
    total = total_in(in_window, args.currency, services.rates)
    base_total = sum((to_base(p, services.rates) for p in in_window), Decimal("0"))

    metadata = {
        "userId": args.user_id,
        "currency": args.currency,
        "timeframe": timeframe,
        "paymentCount": len(in_window),
        "total": float(total),
        "baseTotal": float(round_money(base_total)),
        "conversionRates": services.rates.snapshot(),
    }
    if timeframe != args.timeframe:
        metadata["requestedTimeframe"] = args.timeframe
    if args.include_details:
        metadata["payments"] = [p.to_dict() for p in in_window]

    logger.info(
        "Payment summary for %s: %d payments in %s, %s %s",
        args.user_id, len(in_window), timeframe, args.currency, total,
    )
    return ToolSuccess.text(
        f"User {args.user_id} has {len(in_window)} payments within the {timeframe} "
        f"timeframe, totalling {args.currency} {total:.2f}.",
        metadata,
    )


# =============================================================================
# fraudCheck
# =============================================================================
class FraudCheckArgs(ToolArguments):
    user_id: UserId
    threshold: Threshold = Decimal("100")
    detail_level: Literal["basic", "detailed"] = Field(
        default="basic", description="Level of detail in the report"
    )


async def fraud_check(args: FraudCheckArgs, services: "PaymentServices") -> ToolSuccess:
    """Flag failed payments and payments above the threshold."""
    payments = await services.store.list_payments(args.user_id)
    if not payments:
        logger.warning("No payment data found for %s", args.user_id)
        return ToolSuccess.text(f"No payment data found for user {args.user_id}.")

    rates = services.rates
    suspicious = find_suspicious(payments, args.threshold, rates)
    if not suspicious:
        logger.info("No suspicious transactions for %s (threshold %s)", args.user_id, args.threshold)
        return ToolSuccess.text("No suspicious transactions detected.", {"suspiciousCount": 0})

    headline = f"⚠️ Found {len(suspicious)} suspicious transactions that require review"
    logger.info("%s fraud report for %s: %d flagged", args.detail_level, args.user_id, len(suspicious))

    if args.detail_level == "basic":
        return ToolSuccess.text(f"{headline}.", {"suspiciousCount": len(suspicious)})

    lines = []
    high_amount = failed = 0
    for payment in suspicious:
        factors = risk_factors(payment, args.threshold, rates)
        high_amount += "High amount" in factors
        failed += "Failed status" in factors
        lines.append(
            f"- Transaction {payment.id} to {payment.payee} for {payment.currency} "
            f"{payment.amount:.2f}\n  Risk factors: {', '.join(factors)}"
        )

    return ToolSuccess.text(
        f"{headline}:\n\n" + "\n".join(lines),
        {
            "suspiciousCount": len(suspicious),
            "riskFactors": {"highAmount": high_amount, "failedStatus": failed},
        },
    )


# =============================================================================
# fraudAlert
# =============================================================================
class FraudAlertArgs(ToolArguments):
    user_id: Annotated[str, Field(min_length=1, description="User identifier")]
    threshold: Threshold = Decimal("100")


async def fraud_alert(args: FraudAlertArgs, services: "PaymentServices") -> ToolSuccess:
    """One-line fraud alert with the flagged payments in the metadata."""
    payments = await services.store.list_payments(args.user_id)
    if not payments:
        logger.warning("No payment data found for %s", args.user_id)
        return ToolSuccess.text("No data available for this user.")

    suspicious = find_suspicious(payments, args.threshold, services.rates)
    if not suspicious:
        logger.info("No fraud alerts for %s", args.user_id)
        return ToolSuccess.text(
            f"No fraud alerts for user {args.user_id}.",
            {"userId": args.user_id, "status": "clear"},
        )

    logger.warning("Suspicious payments detected for %s: %d", args.user_id, len(suspicious))
    return ToolSuccess.text(
        f"Alert: Found {len(suspicious)} suspicious payments. Please review for potential fraud.",
        {
            "userId": args.user_id,
            "suspiciousCount": len(suspicious),
            "suspiciousPayments": [p.to_dict() for p in suspicious],
        },
    )


# =============================================================================
# paymentDetails
# =============================================================================
class PaymentDetailsArgs(ToolArguments):
    user_id: Annotated[str, Field(min_length=1, description="User identifier")]
    status: Annotated[
        str,
        Field(min_length=1, description="Payment status to filter by (e.g., completed, pending, failed)"),
    ]


async def payment_details(args: PaymentDetailsArgs, services: "PaymentServices") -> ToolSuccess:
    """List a user's payments with the given status (case-insensitive)."""
    payments = await services.store.list_payments(args.user_id)
    matching = filter_by_status(payments, args.status)
    if not matching:
        logger.info("No payments for %s with status %s", args.user_id, args.status)
        return ToolSuccess.text(f"No payments found with status '{args.status}'.")

    rows = [p.to_dict() for p in matching]
    logger.info("Payments for %s filtered by status %s: %d", args.user_id, args.status, len(rows))
    return ToolSuccess.text(
        f"Payments with status '{args.status}':\n{json.dumps(rows, indent=2)}",
        {"status": args.status, "count": len(rows), "payments": rows},
    )


# =============================================================================
# addPayment  —  the only tool that writes
# =============================================================================
class AddPaymentArgs(ToolArguments):
    user_id: UserId
    # Declared before amount: the ceiling check converts the amount with it.
    currency: CurrencyCode = "GBP"
    amount: Annotated[
        Decimal,
        Field(gt=0, decimal_places=2, description="Payment amount (worth at most 10,000 GBP)"),
    ]
    payee: Annotated[
        str,
        Field(min_length=1, max_length=100, description="Payment recipient"),
        AfterValidator(required_text),
    ]
    description: Optional[str] = Field(default=None, max_length=500, description="Payment description")

    @field_validator("amount")
    @classmethod
    def _within_ceiling(cls, value: Decimal, info: ValidationInfo) -> Decimal:
        """The ceiling applies to the amount's value in the base currency."""
        rates = (info.context or {}).get("rates")
        currency = info.data.get("currency", BASE_CURRENCY)
        if rates is not None and rates.supports(currency):
            base, in_base = rates.base, convert_raw(value, currency, rates.base, rates)
        else:
            base, in_base = BASE_CURRENCY, value
        if in_base > MAX_TRANSACTION_AMOUNT:
            raise ValueError(
                f"must not exceed {MAX_TRANSACTION_AMOUNT} {base} "
                f"({currency} {value} is {base} {round_money(in_base)})"
            )
        return value

    @field_validator("description")
    @classmethod
    def _sanitise_description(cls, value: Optional[str]) -> Optional[str]:
        return strip_markup(value) if value is not None else None


async def add_payment(args: AddPaymentArgs, services: "PaymentServices") -> ToolSuccess:
    """Record a new pending payment for the user."""
    stored = await services.store.append_payment(
        args.user_id,
        Payment(
            amount=args.amount,
            currency=args.currency,
            status=PaymentStatus.PENDING,
            payee=args.payee,
            description=args.description,
            created_from="api",
        ),
    )
    logger.info(
        "Payment %s added for %s: %s %s", stored.id, args.user_id, stored.currency, stored.amount
    )
    return ToolSuccess.text(
        f"Payment of {stored.currency} {stored.amount:.2f} to {stored.payee} has been added "
        f"successfully. Payment ID: {stored.id}",
        {
            "paymentId": stored.id,
            "status": stored.status.value,
            "timestamp": stored.timestamp.isoformat(),
        },
    )


# =============================================================================
# Registration
# =============================================================================
def register_payment_tools(registry: ToolRegistry) -> None:
    registry.register(
        "paymentSummary", PaymentSummaryArgs, payment_summary,
        failure_message="Error generating payment summary. Please try again later.",
    )
    registry.register(
        "fraudCheck", FraudCheckArgs, fraud_check,
        failure_message="Error performing fraud check. Please try again later.",
    )
    registry.register(
        "fraudAlert", FraudAlertArgs, fraud_alert,
        failure_message="Error checking for fraud alerts. Please try again later.",
    )
    registry.register(
        "paymentDetails", PaymentDetailsArgs, payment_details,
        failure_message="Error retrieving payment details. Please try again later.",
    )
    registry.register(
        "addPayment", AddPaymentArgs, add_payment,
        failure_message="Payment creation failed. Please try again later.",
    )
