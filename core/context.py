# =============================================================================
# core/context.py  —  Wiring: one explicit object instead of globals
# =============================================================================
#
# build_context() creates the store, the rate table and the three
# registries, then registers every tool, resource and prompt.  The MCP
# server builds one at startup; tests build as many isolated ones as they
# like, with a fixed clock and deterministic ids.
# =============================================================================

from dataclasses import dataclass
from typing import Optional

from core.config import Settings
from core.currency import RateTable
from core.payments import register_payment_tools
from core.prompts import PromptProvider, register_prompts
from core.registry import ToolRegistry
from core.resources import ResourceProvider, register_resources
from core.store import DEMO_USER, Clock, IdGenerator, PaymentStore, demo_payments, utc_now


@dataclass
class PaymentServices:
    """Collaborators shared by every handler."""

    store: PaymentStore
    rates: RateTable
    settings: Settings
    clock: Clock = utc_now


@dataclass
class ServerContext:
    services: PaymentServices
    tools: ToolRegistry
    resources: ResourceProvider
    prompts: PromptProvider


def build_context(
    settings: Optional[Settings] = None,
    *,
    clock: Clock = utc_now,
    id_generator: Optional[IdGenerator] = None,
    rates: Optional[RateTable] = None,
    seed: Optional[bool] = None,
) -> ServerContext:
    """Assemble a ready-to-use context.

    ``seed`` overrides ``settings.seed_demo_data`` when given.
    """
    settings = settings or Settings()
    store = PaymentStore(id_generator=id_generator or IdGenerator(clock), clock=clock)
    should_seed = settings.seed_demo_data if seed is None else seed
    if should_seed:
        store.seed(DEMO_USER, demo_payments(clock()))

    services = PaymentServices(
        store=store,
        rates=rates or RateTable.default(),
        settings=settings,
        clock=clock,
    )

    tools = ToolRegistry(services)
    register_payment_tools(tools)

    resources = ResourceProvider(services)
    register_resources(resources)

    prompts = PromptProvider(services)
    register_prompts(prompts)

    return ServerContext(services=services, tools=tools, resources=resources, prompts=prompts)
