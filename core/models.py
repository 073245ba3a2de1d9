# =============================================================================
# core/models.py  —  Data Models (the "nouns" of the system)
# =============================================================================
#
# These dataclasses define the shape of everything that flows through the
# server: the payment records held in the store, and the response contract
# every tool, resource and prompt hands back to the transport.
#
# RESPONSE CONTRACT:
#   A tool call ends in exactly one of two variants:
#     - ToolSuccess  → one or more content blocks + optional metadata
#     - ToolFailure  → an error flag + a user-safe message
#   Callers branch on isinstance() (or .is_error); both variants know how
#   to render themselves as the MCP-shaped dict via to_dict().
#
#   Metadata is additive.  The text content must read correctly on its own.
# =============================================================================

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Union


# -----------------------------------------------------------------------------
# Payment records
# -----------------------------------------------------------------------------
class PaymentStatus(str, Enum):
    """Lifecycle state of a payment."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class Payment:
    """One payment in a user's ledger.

    An empty ``id`` or a missing ``timestamp`` is filled in by the store
    when the payment is appended.
    """

    amount: Decimal                    # > 0, two decimal places
    currency: str                      # "GBP", "EUR", ... (must be in the rate table)
    status: PaymentStatus
    payee: str                         # sanitised, never empty
    id: str = ""
    description: Optional[str] = None  # sanitised, <= 500 chars
    timestamp: Optional[datetime] = None
    created_from: Optional[str] = None  # provenance tag, e.g. "api"

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly view used in tool metadata and text dumps."""
        data: dict[str, Any] = {
            "id": self.id,
            "amount": float(self.amount),
            "currency": self.currency,
            "status": self.status.value,
            "payee": self.payee,
        }
        if self.timestamp is not None:
            data["timestamp"] = self.timestamp.isoformat()
        if self.description is not None:
            data["description"] = self.description
        if self.created_from is not None:
            data["createdFrom"] = self.created_from
        return data


# -----------------------------------------------------------------------------
# Tool responses
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class ContentBlock:
    """One renderable unit of a response. Only text is produced today."""

    text: str
    type: str = "text"

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type, "text": self.text}


@dataclass(frozen=True)
class FieldError:
    """A single validation problem, naming the offending argument."""

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


@dataclass
class ToolSuccess:
    """Successful tool outcome, including "nothing found" results."""

    content: list[ContentBlock]
    metadata: Optional[dict[str, Any]] = None
    is_error: bool = field(default=False, init=False)

    def __post_init__(self):
        if not self.content:
            raise ValueError("a successful response needs at least one content block")

    @classmethod
    def text(cls, text: str, metadata: Optional[dict[str, Any]] = None) -> "ToolSuccess":
        return cls(content=[ContentBlock(text=text)], metadata=metadata)

    @property
    def summary(self) -> str:
        return "\n".join(block.text for block in self.content)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"content": [block.to_dict() for block in self.content]}
        if self.metadata is not None:
            data["metadata"] = self.metadata
        return data


@dataclass
class ToolFailure:
    """Error-flagged outcome. ``message`` is always safe to show the caller."""

    message: str
    errors: list[FieldError] = field(default_factory=list)
    is_error: bool = field(default=True, init=False)

    @property
    def content(self) -> list[ContentBlock]:
        return [ContentBlock(text=self.message)]

    @property
    def summary(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        return {"content": [block.to_dict() for block in self.content], "isError": True}


ToolResponse = Union[ToolSuccess, ToolFailure]


# -----------------------------------------------------------------------------
# Resources
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class ResourceDescriptor:
    """An entry in the resource listing."""

    uri: str
    name: str
    mime_type: str


@dataclass(frozen=True)
class ResourceContent:
    """The rendered body of a resource read."""

    uri: str
    mime_type: str
    text: str


# -----------------------------------------------------------------------------
# Prompts
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class PromptMessage:
    role: str                          # "user" or "assistant"
    text: str


@dataclass
class PromptExchange:
    """A canned conversation plus side-channel data for a report renderer."""

    messages: list[PromptMessage]
    description: str
    metadata: Optional[dict[str, Any]] = None


@dataclass(frozen=True)
class PromptDescriptor:
    name: str
    description: str
