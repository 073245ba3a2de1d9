"""
Tests for the currency rate resources.
"""
import json

from core.models import ResourceContent, ToolFailure
from core.resources import ResourceProvider, parse_rates_text


class TestListing:

    def test_both_formats_listed(self, context):
        listed = {d.uri: d for d in context.resources.list_resources()}
        assert set(listed) == {"currency://rates/json", "currency://rates/text"}
        assert listed["currency://rates/json"].mime_type == "application/json"
        assert listed["currency://rates/text"].name == "Currency Rates (Text)"


class TestReading:

    def test_json(self, context, now):
        content = context.resources.read_resource("currency://rates/json")
        assert isinstance(content, ResourceContent)
        assert content.mime_type == "application/json"
        body = json.loads(content.text)
        assert body["updatedAt"] == now.isoformat()
        assert body["EUR"] == 1.15

    def test_text(self, context, now):
        content = context.resources.read_resource("currency://rates/text")
        assert content.mime_type == "text/plain"
        assert "GBP: 1.0" in content.text.splitlines()
        assert content.text.splitlines()[-1] == f"updatedAt: {now.isoformat()}"

    def test_formats_agree(self, context):
        """JSON and text renderings carry the same rate table."""
        as_json = json.loads(context.resources.read_resource("currency://rates/json").text)
        del as_json["updatedAt"]
        as_text = parse_rates_text(context.resources.read_resource("currency://rates/text").text)
        assert as_json == as_text == context.services.rates.snapshot()

    def test_invalid_format(self, context):
        result = context.resources.read_resource("currency://rates/xml")
        assert isinstance(result, ToolFailure)
        assert result.message == "Invalid format requested: xml"

    def test_unknown_uri(self, context):
        result = context.resources.read_resource("payments://U123")
        assert result.is_error
        assert result.message == "Unknown resource: payments://U123"


class TestFaults:

    def test_reader_fault_is_not_echoed(self, context):
        provider = ResourceProvider(context.services)

        @provider.template("broken", "broken://{thing}", list)
        def reader(uri, params, services):
            raise KeyError("internal detail")

        result = provider.read_resource("broken://x")
        assert result.message == "Resource could not be read. Please try again later."
        assert "internal detail" not in result.message
