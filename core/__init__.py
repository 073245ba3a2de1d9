# =============================================================================
# core/__init__.py
# =============================================================================
# This package contains ALL business logic for the payment tool server.
#
# ARCHITECTURAL RULE:
#   Nothing in this package imports FastMCP, Google ADK, or any transport.
#   The dispatcher, the store, currency conversion and the resource/prompt
#   providers are plain Python objects wired together by core/context.py.
#   The tools/ layer exposes them over MCP; the agent/ layer consumes them.
# =============================================================================
