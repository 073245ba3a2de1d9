# =============================================================================
# core/prompts.py  —  Prompt templates (report generation)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Prompts are canned conversations an MCP client can pull to kick off a
#   flow.  "generateReport" returns a two-turn exchange asking for a payment
#   report, plus a metadata payload with the numbers a report renderer needs:
#   the period, per-status totals and the rate table.
#
# FAILURE MODE:
#   A prompt never surfaces an error to the client.  If building the
#   exchange fails, the provider logs it and returns an apology exchange.
#   (Asking for a prompt that was never registered is a caller bug and
#   raises UnknownOperationError.)
# =============================================================================

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Optional

from core.currency import round_money, to_base
from core.errors import UnknownOperationError
from core.filters import month_ago
from core.models import PromptDescriptor, PromptExchange, PromptMessage
from core.registry import Registry

if TYPE_CHECKING:
    from core.context import PaymentServices


logger = logging.getLogger(__name__)

PromptRenderer = Callable[[dict[str, Any], "PaymentServices"], Awaitable[PromptExchange]]


@dataclass(frozen=True)
class PromptSpec:
    name: str
    description: str
    renderer: PromptRenderer
    fallback: Callable[[], PromptExchange]


class PromptProvider(Registry[PromptSpec]):
    kind = "prompt"

    def __init__(self, services: "PaymentServices"):
        super().__init__()
        self.services = services

    def register(
        self,
        name: str,
        renderer: PromptRenderer,
        fallback: Callable[[], PromptExchange],
        description: str = "",
    ) -> PromptSpec:
        return self.add(name, PromptSpec(name, description, renderer, fallback))

    def list_prompts(self) -> list[PromptDescriptor]:
        return [PromptDescriptor(spec.name, spec.description) for spec in self]

    async def render_prompt(self, name: str, arguments: Optional[dict[str, Any]] = None) -> PromptExchange:
        spec = self.get(name)
        if spec is None:
            raise UnknownOperationError(f"Unknown prompt: {name}")

        try:
            exchange = await spec.renderer(dict(arguments or {}), self.services)
        except Exception:
            logger.exception("Prompt %s failed; returning fallback exchange", name)
            return spec.fallback()

        logger.info("Prompt %s rendered", name)
        return exchange


# =============================================================================
# generateReport
# =============================================================================
@dataclass(frozen=True)
class ReportConfig:
    format: str = "markdown"
    period: str = "monthly"
    include_details: bool = False
    user_id: Optional[str] = None


async def generate_report(arguments: dict[str, Any], services: "PaymentServices") -> PromptExchange:
    config = ReportConfig(**arguments)
    user_id = config.user_id or services.settings.default_user

    payments = await services.store.list_payments(user_id)
    period_end = services.clock()
    period_start = month_ago(period_end)
    in_period = [p for p in payments if (p.timestamp or period_end) >= period_start]

    totals: dict[str, Decimal] = {}
    for payment in in_period:
        status = payment.status.value
        totals[status] = totals.get(status, Decimal("0")) + to_base(payment, services.rates)

    details = " with full transaction details" if config.include_details else ""
    return PromptExchange(
        messages=[
            PromptMessage(
                role="user",
                text=f"Generate a {config.period} payment report in {config.format} format{details}.",
            ),
            PromptMessage(
                role="assistant",
                text=(
                    f"I'll create a detailed {config.period} payment report in {config.format} "
                    f"format for you{details}."
                ),
            ),
        ],
        description=f"{config.period} payment report in {config.format} format",
        metadata={
            "reportType": config.period,
            "format": config.format,
            "userId": user_id,
            "periodStart": period_start.isoformat(),
            "periodEnd": period_end.isoformat(),
            "paymentCount": len(in_period),
            "totalsByStatus": {status: float(round_money(total)) for status, total in totals.items()},
            "baseCurrency": services.rates.base,
            "rates": services.rates.snapshot(),
        },
    )


def report_apology() -> PromptExchange:
    return PromptExchange(
        messages=[
            PromptMessage(role="user", text="Generate a payment report."),
            PromptMessage(
                role="assistant",
                text=(
                    "I apologize, but I'm unable to generate the requested report at this time "
                    "due to a system error. Please try again later or contact support if the "
                    "issue persists."
                ),
            ),
        ],
        description="Error generating payment report",
    )


def register_prompts(provider: PromptProvider) -> None:
    provider.register(
        "generateReport",
        generate_report,
        report_apology,
        description="Generate a payment report in various formats",
    )
