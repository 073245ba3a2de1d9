"""
Tests for the generateReport prompt.
"""
import asyncio

import pytest

from core.errors import RegistrationError, UnknownOperationError
from core.models import PromptExchange
from core.prompts import generate_report, report_apology


def render(context, arguments=None):
    return asyncio.run(context.prompts.render_prompt("generateReport", arguments))


class TestGenerateReport:

    def test_defaults(self, context):
        exchange = render(context)
        assert [m.role for m in exchange.messages] == ["user", "assistant"]
        assert exchange.messages[0].text == "Generate a monthly payment report in markdown format."
        assert exchange.messages[1].text == (
            "I'll create a detailed monthly payment report in markdown format for you."
        )

    def test_metadata_totals(self, context):
        """Demo payments are all within the last month; totals are in GBP."""
        metadata = render(context).metadata
        assert metadata["paymentCount"] == 3
        assert metadata["totalsByStatus"] == {"completed": 100.0, "pending": 173.91, "failed": 50.0}
        assert metadata["baseCurrency"] == "GBP"
        assert metadata["periodStart"] == "2026-02-28T12:00:00+00:00"

    def test_include_details(self, context):
        exchange = render(context, {"format": "csv", "period": "weekly", "include_details": True})
        assert exchange.messages[0].text == (
            "Generate a weekly payment report in csv format with full transaction details."
        )

    def test_report_for_named_user(self, u1_context):
        metadata = render(u1_context, {"user_id": "U1A"}).metadata
        assert metadata["userId"] == "U1A"
        assert metadata["paymentCount"] == 3

    def test_defaults_to_configured_user(self, context):
        assert render(context, {"user_id": "NOBODY"}).metadata["paymentCount"] == 0
        assert render(context).metadata["userId"] == "U123"

    def test_no_payments(self, empty_context):
        metadata = render(empty_context).metadata
        assert metadata["paymentCount"] == 0
        assert metadata["totalsByStatus"] == {}

    def test_failure_returns_apology(self, context):
        exchange = render(context, {"colour": "blue"})
        assert exchange.description == "Error generating payment report"
        assert exchange.messages[1].text.startswith("I apologize")

    def test_unknown_prompt(self, context):
        with pytest.raises(UnknownOperationError):
            asyncio.run(context.prompts.render_prompt("nope"))


class TestProvider:

    def test_listed(self, context):
        [descriptor] = context.prompts.list_prompts()
        assert descriptor.name == "generateReport"

    def test_duplicate_registration(self, context):
        with pytest.raises(RegistrationError):
            context.prompts.register("generateReport", generate_report, report_apology)

    def test_apology_shape(self):
        apology = report_apology()
        assert isinstance(apology, PromptExchange)
        assert apology.metadata is None
