# =============================================================================
# agent/payment_agent.py  —  Google ADK Agent Configuration
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Builds the ADK agent that answers questions about a user's payments by
#   calling the MCP tools in tools/mcp_server.py.
#
#   ┌────────────────────────┐   stdio (MCP)   ┌─────────────────────────┐
#   │  ADK Agent             │ ──────────────▶ │  FastMCP server         │
#   │  LiteLlm model         │                 │  tools/mcp_server.py    │
#   │  PAYMENT_ASSISTANT_... │ ◀────────────── │  → core/ dispatcher     │
#   └────────────────────────┘                 └─────────────────────────┘
#
# MCP CONNECTION:
#   ADK starts the server as a subprocess with `uv run python -m
#   tools.mcp_server` from the project root, so the subprocess uses the
#   project's virtualenv and can import core/.
#
# MODEL:
#   Any LiteLlm model string works; the default routes GPT-4o through
#   OpenRouter (needs OPENROUTER_API_KEY).  Override with
#   PAYMENTS_AGENT_MODEL.
# =============================================================================

import os

from google.adk.agents import Agent
from google.adk.models.lite_llm import LiteLlm
from google.adk.tools.mcp_tool import MCPToolset
from mcp import StdioServerParameters

from agent.prompt import get_payment_assistant_prompt
from core.config import Settings


PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def create_agent(settings: Settings | None = None) -> Agent:
    """Create the payment assistant agent wired to the MCP tool server."""
    settings = settings or Settings.from_env()

    mcp_tools = MCPToolset(
        connection_params=StdioServerParameters(
            command="uv",
            args=["run", "python", "-m", "tools.mcp_server"],
            cwd=PROJECT_ROOT,
        ),
    )

    return Agent(
        name="payment_assistant",
        model=LiteLlm(model=settings.agent_model),
        instruction=get_payment_assistant_prompt(settings.default_user),
        tools=[mcp_tools],
    )
