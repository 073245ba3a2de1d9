# =============================================================================
# tools/mcp_server.py  —  FastMCP Server (tools, resources and prompts)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Exposes the core payment server over MCP.  Every tool here is a thin
#   wrapper: it forwards its arguments to the core dispatcher
#   (core/registry.py) and translates the answer into FastMCP terms.
#
# HOW IT WORKS (the flow):
#   1. The agent calls a tool by name via MCP (e.g., "paymentSummary")
#   2. FastMCP routes the call to the decorated wrapper below
#   3. The wrapper hands the arguments to ToolRegistry.dispatch()
#   4. dispatch() validates, runs the handler and returns either
#        ToolSuccess → ToolResult(text content, structured_content=metadata)
#        ToolFailure → ToolError (MCP "isError": true, safe message only)
#
# TOOL NAMING:
#   payment*/fraud*  → read-only, safe to retry
#   addPayment       → WRITES to the store; retrying creates a second payment
#
# RESOURCES:
#   currency://rates/json and currency://rates/text are listed as concrete
#   resources; the currency://rates/{format} template catches every other
#   format so the client gets the "Invalid format" error from core.
#
# RUNNING THIS SERVER:
#   python -m tools.mcp_server          (stdio transport, what the agent uses)
# =============================================================================

import json
import logging
import sys

from dotenv import load_dotenv
from fastmcp import Context, FastMCP
from fastmcp.exceptions import ResourceError, ToolError
from fastmcp.server.middleware import CallNext, Middleware, MiddlewareContext
from fastmcp.tools.tool import ToolResult
from fastmcp.tools.tool_transform import ArgTransformConfig, ToolTransformConfig
from mcp.types import GetPromptRequestParams, GetPromptResult, PromptMessage, TextContent
from pydantic.alias_generators import to_camel

from core.config import Settings
from core.context import ServerContext, build_context
from core.models import ResourceDescriptor, ToolFailure


# =============================================================================
# Logging Setup
# =============================================================================
# Logs go to STDERR: STDOUT carries the MCP JSON stream, and anything else
# written there corrupts it.
#
# ANSI COLOR CODES:
#     - CYAN for incoming requests (tool name + parameters)
#     - GREEN for responses
#     - YELLOW for intermediate status/progress messages
#     - RED for error-flagged responses
# =============================================================================

_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RED = "\033[31m"
_RESET = "\033[0m"

logger = logging.getLogger("tools.mcp_server")


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def _log_request(tool_name: str, **params) -> None:
    """Log an incoming call with its parameters in CYAN."""
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items())
    logger.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    """Log an intermediate status message in YELLOW."""
    logger.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, result: dict) -> dict:
    """Log the response as compact JSON in GREEN (RED for errors), then return it."""
    color = _RED if result.get("isError") else _GREEN
    logger.info(f"{color}  ← {tool_name} response: {json.dumps(result, separators=(',', ':'))}{_RESET}")
    return result


# =============================================================================
# Prompt metadata
# =============================================================================
# FastMCP builds GetPromptResult from the prompt's messages alone.  The
# prompt stores its side-channel payload in the request state and this
# middleware copies it onto the result's _meta, where report renderers
# read it.
# =============================================================================
PROMPT_METADATA_KEY = "promptMetadata"


class PromptMetadataMiddleware(Middleware):
    async def on_get_prompt(
        self,
        context: MiddlewareContext[GetPromptRequestParams],
        call_next: CallNext[GetPromptRequestParams, GetPromptResult],
    ) -> GetPromptResult:
        result = await call_next(context)
        request = context.fastmcp_context
        metadata = request.get_state(PROMPT_METADATA_KEY) if request is not None else None
        if metadata:
            result = result.model_copy(update={"meta": metadata})
        return result


# =============================================================================
# Server factory
# =============================================================================
def create_server(context: ServerContext) -> FastMCP:
    """Build a FastMCP server bound to ``context``.

    Tests call this with an isolated context; the module-level ``mcp`` below
    is the one the stdio entry point runs.
    """
    mcp = FastMCP("payment-tools", middleware=[PromptMetadataMiddleware()])

    async def call_tool(name: str, **arguments) -> ToolResult:
        _log_request(name, **arguments)
        supplied = {key: value for key, value in arguments.items() if value is not None}
        response = await context.tools.dispatch(name, supplied)
        _log_response(name, response.to_dict())

        if isinstance(response, ToolFailure):
            raise ToolError(response.message)
        return ToolResult(
            content=[TextContent(type="text", text=block.text) for block in response.content],
            structured_content=response.metadata,
        )

    # =========================================================================
    # TOOLS
    # =========================================================================
    # The docstrings below are what the LLM reads to decide WHEN to call a
    # tool; keep them specific.
    # =========================================================================
    @mcp.tool(name="paymentSummary")
    async def payment_summary(
        user_id: str,
        currency: str = "GBP",
        timeframe: str = "all",
        include_details: bool = False,
    ) -> ToolResult:
        """Summarise a user's payments: count and total in one currency.

        Args:
            userId: The user's identifier (at least 3 characters, e.g. "U123").
            currency: ISO 4217 code to total in: GBP, EUR, USD or JPY.
            timeframe: "all", "month" (since this day last month) or "week" (last 7 days).
                Anything else is treated as "all".
            includeDetails: Attach the individual payments to the metadata.

        Returns the count and converted total.  A user with no payments is
        reported as such, not as an error.
        """
        return await call_tool(
            "paymentSummary",
            user_id=user_id, currency=currency, timeframe=timeframe, include_details=include_details,
        )

    @mcp.tool(name="fraudCheck")
    async def fraud_check(
        user_id: str,
        threshold: float = 100,
        detail_level: str = "basic",
    ) -> ToolResult:
        """Check a user's payments for suspicious transactions.

        A payment is suspicious when it failed, or when its value in GBP is
        strictly above ``threshold``.

        Args:
            userId: The user's identifier.
            threshold: Amount in GBP above which a payment is flagged (default 100).
            detailLevel: "basic" for a count, "detailed" for per-payment risk factors.
        """
        return await call_tool(
            "fraudCheck", user_id=user_id, threshold=threshold, detail_level=detail_level,
        )

    @mcp.tool(name="fraudAlert")
    async def fraud_alert(user_id: str, threshold: float = 100) -> ToolResult:
        """Quick fraud alert: how many payments look suspicious, with the list attached.

        Args:
            userId: The user's identifier.
            threshold: Amount in GBP above which a payment is flagged (default 100).
        """
        return await call_tool("fraudAlert", user_id=user_id, threshold=threshold)

    @mcp.tool(name="paymentDetails")
    async def payment_details(user_id: str, status: str) -> ToolResult:
        """List a user's payments with a given status.

        Args:
            userId: The user's identifier.
            status: "completed", "pending" or "failed" (case-insensitive).
        """
        return await call_tool("paymentDetails", user_id=user_id, status=status)

    @mcp.tool(name="addPayment")
    async def add_payment(
        user_id: str,
        amount: float,
        payee: str,
        currency: str = "GBP",
        description: str | None = None,
    ) -> ToolResult:
        """Create a new pending payment.  THIS WRITES DATA; do not retry blindly.

        Args:
            userId: The paying user's identifier (3-50 characters).
            amount: Positive amount with at most two decimals, worth no more than
                10,000 GBP once converted.
            payee: Who receives the payment (1-100 characters).
            currency: GBP, EUR, USD or JPY.
            description: Optional note, up to 500 characters.

        Returns the new payment id, its status and timestamp.
        """
        return await call_tool(
            "addPayment",
            user_id=user_id, amount=amount, payee=payee, currency=currency, description=description,
        )

    # On the wire, arguments are camelCase (userId, detailLevel) like the
    # core schemas; the wrappers above keep snake_case parameters.
    for tool in (payment_summary, fraud_check, fraud_alert, payment_details, add_payment):
        renames = {
            param: ArgTransformConfig(name=to_camel(param))
            for param in tool.parameters["properties"]
            if to_camel(param) != param
        }
        mcp.add_tool_transformation(tool.name, ToolTransformConfig(arguments=renames))

    # =========================================================================
    # RESOURCES
    # =========================================================================
    def read(uri: str) -> str:
        _log_request("read_resource", uri=uri)
        result = context.resources.read_resource(uri)
        if isinstance(result, ToolFailure):
            _log_status(f"resource error: {result.message}")
            raise ResourceError(result.message)
        _log_status(f"served {uri} as {result.mime_type}")
        return result.text

    def add_static_resource(descriptor: ResourceDescriptor) -> None:
        def reader() -> str:
            return read(descriptor.uri)

        mcp.resource(descriptor.uri, name=descriptor.name, mime_type=descriptor.mime_type)(reader)

    for descriptor in context.resources.list_resources():
        add_static_resource(descriptor)

    @mcp.resource("currency://rates/{format}", name="currencyRates")
    def currency_rates(format: str) -> str:
        """Exchange rates relative to GBP rendered as "json" or "text"."""
        return read(f"currency://rates/{format}")

    # =========================================================================
    # PROMPTS
    # =========================================================================
    @mcp.prompt(name="generateReport", description="Generate a payment report in various formats")
    async def generate_report(
        ctx: Context,
        format: str = "markdown",
        period: str = "monthly",
        include_details: bool = False,
        user_id: str | None = None,
    ) -> list[PromptMessage]:
        _log_request(
            "generateReport",
            format=format, period=period, include_details=include_details, user_id=user_id,
        )
        arguments = {"format": format, "period": period, "include_details": include_details}
        if user_id:
            arguments["user_id"] = user_id
        exchange = await context.prompts.render_prompt("generateReport", arguments)

        if exchange.metadata:
            _log_status(f"prompt metadata: {json.dumps(exchange.metadata)}")
            ctx.set_state(PROMPT_METADATA_KEY, exchange.metadata)
        return [
            PromptMessage(role=message.role, content=TextContent(type="text", text=message.text))
            for message in exchange.messages
        ]

    return mcp


# =============================================================================
# Module-level server (what `python -m tools.mcp_server` and `fastmcp run` use)
# =============================================================================
load_dotenv()
_settings = Settings.from_env()
configure_logging(_settings.log_level)
mcp = create_server(build_context(_settings))


if __name__ == "__main__":
    mcp.run()
