# =============================================================================
# main.py  —  Entry Point for the Payment Assistant Agent
# =============================================================================
#
# HOW TO RUN:
#   uv run python main.py
#
# WHAT HAPPENS:
#   1. Creates the Google ADK agent (agent/payment_agent.py), which launches
#      the FastMCP payment server as a stdio subprocess
#   2. Sets up an in-memory session
#   3. Reads questions from the console and streams the agent's answers,
#      printing every tool the agent calls on the way
#
# To run the MCP server on its own (e.g. for the MCP Inspector):
#   uv run python -m tools.mcp_server
# =============================================================================

import asyncio

from dotenv import load_dotenv

# Load .env before anything reads the environment (LiteLlm reads
# OPENROUTER_API_KEY when the model is created; Settings reads PAYMENTS_*).
load_dotenv()

from google.adk.runners import Runner
from google.adk.sessions import InMemorySessionService
from google.genai import types

from agent.payment_agent import create_agent
from core.config import Settings


APP_NAME = "payment_assistant"


async def run_agent():
    """Run the payment assistant interactively until the user quits."""
    settings = Settings.from_env()

    print("=" * 70)
    print("  PAYMENT ASSISTANT AGENT")
    print("  Powered by Google ADK + FastMCP")
    print("=" * 70)
    print("\n🔧 Initializing agent...")
    agent = create_agent(settings)

    session_service = InMemorySessionService()
    runner = Runner(
        agent=agent,
        app_name=APP_NAME,
        session_service=session_service,
    )
    session = await session_service.create_session(
        app_name=APP_NAME,
        user_id=settings.default_user,
    )

    print("✅ Agent initialized and ready!\n")
    print(f"💬 Ask about payments for {settings.default_user} (or name another user).")
    print("   (Type 'quit' to exit)\n")
    print("-" * 70)

    while True:
        try:
            user_input = input("\n🧑 You: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\n\n👋 Goodbye!")
            break

        if user_input.lower() in ("quit", "exit", "q"):
            print("\n👋 Goodbye!")
            break

        if not user_input:
            continue

        user_message = types.Content(
            role="user",
            parts=[types.Part(text=user_input)],
        )

        print("\n🤖 Agent is thinking...\n")
        print("-" * 70)

        # Keep the last text part as the answer; announce tool calls as
        # they stream past.
        final_response = ""
        async for event in runner.run_async(
            user_id=settings.default_user,
            session_id=session.id,
            new_message=user_message,
        ):
            if event.content and event.content.parts:
                for part in event.content.parts:
                    if getattr(part, "text", None):
                        final_response = part.text

                    if getattr(part, "function_call", None):
                        print(f"  🔧 Calling tool: {part.function_call.name}")

        print("-" * 70)
        if final_response:
            print(f"\n🤖 Agent:\n\n{final_response}")
        else:
            print("\n⚠️  No response generated. The agent may have encountered an error.")

        print("\n" + "=" * 70)


if __name__ == "__main__":
    asyncio.run(run_agent())
