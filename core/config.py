# =============================================================================
# core/config.py  —  Runtime settings from environment variables
# =============================================================================
#
# Every knob is an environment variable so the MCP server subprocess (which
# the agent launches via stdio) picks up the same values as the parent.
# Entry points call dotenv.load_dotenv() before Settings.from_env(), so a
# local .env file works too.
#
#   PAYMENTS_LOG_LEVEL       logging level name            (default INFO)
#   PAYMENTS_SEED_DEMO_DATA  seed user U123 on startup     (default true)
#   PAYMENTS_DEFAULT_USER    user the report prompt reads  (default U123)
#   PAYMENTS_AGENT_MODEL     LiteLlm model string for the agent
# =============================================================================

import os
from dataclasses import dataclass


_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration for the payment server."""

    log_level: str = "INFO"
    seed_demo_data: bool = True
    default_user: str = "U123"
    agent_model: str = "openrouter/openai/gpt-4o"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the environment, falling back to defaults."""
        return cls(
            log_level=os.environ.get("PAYMENTS_LOG_LEVEL", "INFO").upper(),
            seed_demo_data=_env_flag("PAYMENTS_SEED_DEMO_DATA", True),
            default_user=os.environ.get("PAYMENTS_DEFAULT_USER", "U123"),
            agent_model=os.environ.get("PAYMENTS_AGENT_MODEL", "openrouter/openai/gpt-4o"),
        )
