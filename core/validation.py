# =============================================================================
# core/validation.py  —  Argument schemas & the generic validator
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Each tool declares its arguments as a pydantic model (next to the tool's
#   handler, see core/payments.py).  validate() runs raw, untyped arguments
#   through that model and returns one of two variants:
#
#     Valid(value)     → a fully-typed model instance, defaults applied
#     Invalid(errors)  → a list of FieldError naming argument + constraint
#
#   validate() never raises.  The dispatcher calls it before any handler, so
#   an invalid request cannot reach the store.
#
# CONTEXT:
#   Some checks need collaborators (e.g. "is this currency in the rate
#   table?").  They are passed through pydantic's validation context and read
#   from ``info.context`` inside field validators.
# =============================================================================

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from pydantic import BaseModel, ConfigDict, ValidationError, ValidationInfo
from pydantic.alias_generators import to_camel

from core.models import FieldError


M = TypeVar("M", bound=BaseModel)

_MARKUP = re.compile(r"[<>]")


class ToolArguments(BaseModel):
    """Base for tool argument schemas: camelCase on the wire, extras ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


@dataclass(frozen=True)
class Valid(Generic[M]):
    value: M


@dataclass(frozen=True)
class Invalid:
    errors: list[FieldError]

    @property
    def message(self) -> str:
        return "; ".join(str(error) for error in self.errors)


ValidationResult = Union[Valid, Invalid]


def validate(schema: type[M], raw: Any, context: Mapping[str, Any] | None = None) -> ValidationResult:
    """Check ``raw`` against ``schema``; see module docstring."""
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        return Invalid([FieldError("arguments", "must be an object")])

    try:
        value = schema.model_validate(dict(raw), context=dict(context or {}))
    except ValidationError as exc:
        return Invalid([_field_error(error) for error in exc.errors()])
    return Valid(value)


def _field_error(error: Mapping[str, Any]) -> FieldError:
    location = ".".join(str(part) for part in error.get("loc", ()))
    return FieldError(location or "arguments", error.get("msg", "invalid value"))


# -----------------------------------------------------------------------------
# Reusable field checks (called from field validators in tool schemas)
# -----------------------------------------------------------------------------
def strip_markup(text: str) -> str:
    """Remove characters that could be read as markup."""
    return _MARKUP.sub("", text)


def required_text(value: str) -> str:
    cleaned = strip_markup(value).strip()
    if not cleaned:
        raise ValueError("must contain text other than markup characters")
    return cleaned


def supported_currency(value: str, info: ValidationInfo) -> str:
    """Reject codes missing from the rate table in the validation context."""
    rates = (info.context or {}).get("rates")
    if rates is not None and not rates.supports(value):
        raise ValueError(
            f"unsupported currency {value}; supported: {', '.join(rates.codes)}"
        )
    return value
