# =============================================================================
# agent/__init__.py
# =============================================================================
# This package contains the Google ADK agent configuration.
#
# ARCHITECTURAL ROLE:
#   The agent/ layer is the consumer of the MCP server.  It:
#     1. Receives the user's question ("Did any of my payments fail?")
#     2. Picks the tool that answers it
#     3. Calls the tool over MCP (tools/mcp_server.py)
#     4. Explains the result to the user
#
# WHAT THE AGENT IS NOT:
#   - It is NOT the business logic (that's in core/)
#   - It is NOT the tool implementations (that's in tools/)
#   - It never touches the payment store directly
# =============================================================================
