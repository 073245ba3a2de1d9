# =============================================================================
# core/registry.py  —  Tool registry & dispatcher
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Holds the named tools and runs one invocation end to end:
#
#     Received → Validating → ValidationFailed
#                           → Executing → Succeeded
#                                       → HandlerFailed
#
#   1. look the tool up by name           (unknown name  → ToolFailure)
#   2. validate raw arguments (schema)    (bad arguments → ToolFailure + field errors)
#   3. await the handler                  (DomainError   → ToolFailure, its message)
#                                         (anything else → ToolFailure, generic message)
#   4. hand back a ToolSuccess / ToolFailure
#
#   dispatch() never raises.  One broken handler cannot take the server (or
#   another in-flight call) down with it, and internal details only reach the
#   log, never the caller.
#
# Invocations are stateless: the registry keeps no per-call state, so
# concurrent dispatch() calls only share what the handlers share (the store).
# =============================================================================

import logging
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from core.errors import DomainError, RegistrationError
from core.models import ToolFailure, ToolResponse
from core.validation import Invalid, validate


logger = logging.getLogger(__name__)

T = TypeVar("T")

ToolHandler = Callable[[Any, Any], Awaitable[ToolResponse]]


class Registry(Generic[T]):
    """Name → entry mapping that refuses duplicate names."""

    kind = "entry"

    def __init__(self):
        self._entries: dict[str, T] = {}

    def add(self, name: str, entry: T) -> T:
        if name in self._entries:
            raise RegistrationError(f"{self.kind} '{name}' is already registered")
        self._entries[name] = entry
        return entry

    def get(self, name: str) -> T | None:
        return self._entries.get(name)

    def names(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[T]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)


@dataclass(frozen=True)
class ToolSpec:
    """A registered tool: its argument schema and the coroutine that runs it."""

    name: str
    description: str
    schema: type[BaseModel]
    handler: ToolHandler
    failure_message: str

    def input_schema(self) -> dict[str, Any]:
        """JSON schema of the arguments, camelCase names."""
        return self.schema.model_json_schema(by_alias=True)


class ToolRegistry(Registry[ToolSpec]):
    """Tools plus the dispatcher that runs them against shared services.

    ``services`` is handed to every handler as its second argument and is
    also the validation context (schemas read ``rates`` from it).
    """

    kind = "tool"

    def __init__(self, services: Any):
        super().__init__()
        self.services = services

    def register(
        self,
        name: str,
        schema: type[BaseModel],
        handler: ToolHandler,
        description: str = "",
        failure_message: str | None = None,
    ) -> ToolSpec:
        spec = ToolSpec(
            name=name,
            description=description or (handler.__doc__ or "").strip(),
            schema=schema,
            handler=handler,
            failure_message=failure_message or f"{name} failed. Please try again later.",
        )
        return self.add(name, spec)

    def tool(self, name: str, schema: type[BaseModel], **kwargs) -> Callable[[ToolHandler], ToolHandler]:
        """Decorator form of register()."""

        def decorator(handler: ToolHandler) -> ToolHandler:
            self.register(name, schema, handler, **kwargs)
            return handler

        return decorator

    def list_tools(self) -> list[dict[str, Any]]:
        return [
            {"name": spec.name, "description": spec.description, "inputSchema": spec.input_schema()}
            for spec in self
        ]

    async def dispatch(self, name: str, arguments: Any = None) -> ToolResponse:
        """Validate, run and wrap one tool call.  Never raises."""
        logger.debug("Tool %s received arguments=%r", name, arguments)

        spec = self.get(name)
        if spec is None:
            logger.warning("Unknown tool requested: %s", name)
            return ToolFailure(f"Unknown tool: {name}")

        result = validate(spec.schema, arguments, context={"rates": self.services.rates})
        if isinstance(result, Invalid):
            logger.warning("Tool %s rejected arguments: %s", name, result.message)
            return ToolFailure(f"Invalid arguments for {name}: {result.message}", errors=result.errors)

        try:
            response = await spec.handler(result.value, self.services)
        except DomainError as exc:
            logger.warning("Tool %s could not complete: %s", name, exc)
            return ToolFailure(str(exc))
        except Exception:
            logger.exception("Tool %s failed with arguments=%r", name, arguments)
            return ToolFailure(spec.failure_message)

        if response.is_error:
            logger.warning("Tool %s returned an error: %s", name, response.summary)
        else:
            logger.info("Tool %s completed", name)
        return response
