# =============================================================================
# core/resources.py  —  Read-only resources (currency rates)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   A small registry of URI templates.  Each template knows how to list the
#   concrete URIs it offers and how to render one of them.
#
#   currency://rates/{format}
#       currency://rates/json  → application/json, indented object
#       currency://rates/text  → text/plain, one "CODE: rate" per line
#
#   Both renderings carry the same rates and the same updatedAt stamp, so
#   they parse back to the same table.
#
# ERRORS:
#   read_resource() never raises.  An unknown URI or an unsupported format
#   comes back as a ToolFailure with a specific message; anything unexpected
#   is logged and reported generically.
# =============================================================================

import json
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from core.errors import DomainError, InvalidFormatError
from core.models import ResourceContent, ResourceDescriptor, ToolFailure
from core.registry import Registry

if TYPE_CHECKING:
    from core.context import PaymentServices


logger = logging.getLogger(__name__)

ResourceReader = Callable[[str, dict[str, str], "PaymentServices"], ResourceContent]
ResourceLister = Callable[[], list[ResourceDescriptor]]

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


@dataclass(frozen=True)
class ResourceTemplate:
    name: str
    uri_template: str
    reader: ResourceReader
    lister: ResourceLister
    description: str = ""

    def match(self, uri: str) -> dict[str, str] | None:
        """Template parameters extracted from ``uri``, or None."""
        pattern = ""
        position = 0
        for placeholder in _PLACEHOLDER.finditer(self.uri_template):
            pattern += re.escape(self.uri_template[position:placeholder.start()])
            pattern += f"(?P<{placeholder.group(1)}>[^/]+)"
            position = placeholder.end()
        pattern += re.escape(self.uri_template[position:])
        found = re.fullmatch(pattern, uri)
        return found.groupdict() if found else None


class ResourceProvider(Registry[ResourceTemplate]):
    kind = "resource"

    def __init__(self, services: "PaymentServices"):
        super().__init__()
        self.services = services

    def template(self, name: str, uri_template: str, lister: ResourceLister, description: str = ""):
        """Decorator registering a reader under ``uri_template``."""

        def decorator(reader: ResourceReader) -> ResourceReader:
            self.add(name, ResourceTemplate(name, uri_template, reader, lister, description))
            return reader

        return decorator

    def list_resources(self) -> list[ResourceDescriptor]:
        descriptors = []
        for template in self:
            descriptors.extend(template.lister())
        return descriptors

    def read_resource(self, uri: str) -> Union[ResourceContent, ToolFailure]:
        logger.debug("Resource requested: %s", uri)
        for template in self:
            params = template.match(uri)
            if params is None:
                continue
            try:
                content = template.reader(uri, params, self.services)
            except DomainError as exc:
                logger.warning("Resource %s could not be read: %s", uri, exc)
                return ToolFailure(str(exc))
            except Exception:
                logger.exception("Resource %s failed", uri)
                return ToolFailure("Resource could not be read. Please try again later.")
            logger.info("Resource %s served (%s)", uri, content.mime_type)
            return content

        logger.warning("Unknown resource requested: %s", uri)
        return ToolFailure(f"Unknown resource: {uri}")


# =============================================================================
# currency://rates/{format}
# =============================================================================
RATE_FORMATS = {
    "json": "application/json",
    "text": "text/plain",
}
_LABELS = {"json": "JSON", "text": "Text"}


def list_rate_resources() -> list[ResourceDescriptor]:
    return [
        ResourceDescriptor(
            uri=f"currency://rates/{fmt}",
            name=f"Currency Rates ({_LABELS[fmt]})",
            mime_type=mime_type,
        )
        for fmt, mime_type in RATE_FORMATS.items()
    ]


def render_rates(rates: dict[str, float], updated_at: str, fmt: str) -> str:
    if fmt == "json":
        return json.dumps({**rates, "updatedAt": updated_at}, indent=2)
    if fmt == "text":
        lines = [f"{code}: {rate}" for code, rate in rates.items()]
        lines.append(f"updatedAt: {updated_at}")
        return "\n".join(lines)
    raise InvalidFormatError(fmt)


def parse_rates_text(text: str) -> dict[str, float]:
    """Inverse of the text rendering (the updatedAt line is skipped)."""
    rates = {}
    for line in text.splitlines():
        key, _, value = line.partition(": ")
        if key and key != "updatedAt":
            rates[key] = float(value)
    return rates


def read_currency_rates(uri: str, params: dict[str, str], services: "PaymentServices") -> ResourceContent:
    fmt = params["format"]
    if fmt not in RATE_FORMATS:
        raise InvalidFormatError(fmt)
    text = render_rates(services.rates.snapshot(), services.clock().isoformat(), fmt)
    return ResourceContent(uri=uri, mime_type=RATE_FORMATS[fmt], text=text)


def register_resources(provider: ResourceProvider) -> None:
    provider.template(
        "currencyRates",
        "currency://rates/{format}",
        list_rate_resources,
        description="Exchange rates relative to GBP, as JSON or plain text",
    )(read_currency_rates)
