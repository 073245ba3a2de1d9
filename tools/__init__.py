# =============================================================================
# tools/__init__.py
# =============================================================================
# This package contains the FastMCP server.
#
# ARCHITECTURAL ROLE:
#   tools/ is the translation layer between MCP and core/.  The server:
#     1. Declares each tool with typed parameters and an LLM-facing docstring
#     2. Forwards the call to core's ToolRegistry.dispatch()
#     3. Turns ToolSuccess into a FastMCP ToolResult and ToolFailure into a
#        ToolError (the MCP error channel)
#
# WHAT TOOLS DO NOT DO:
#   - They do NOT validate beyond basic types (core/validation.py does)
#   - They do NOT contain business logic (that's in core/)
#   - They do NOT know about Google ADK
# =============================================================================
