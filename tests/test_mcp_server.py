"""
End-to-end tests through FastMCP's in-memory client.
"""
import asyncio
import json

import pytest
from fastmcp import Client
from fastmcp.exceptions import ToolError

from tools.mcp_server import create_server


def run(server, interaction):
    async def go():
        async with Client(server) as client:
            return await interaction(client)

    return asyncio.run(go())


@pytest.fixture
def server(context):
    return create_server(context)


class TestTools:

    def test_listed(self, server):
        tools = run(server, lambda client: client.list_tools())
        assert {tool.name for tool in tools} == {
            "paymentSummary", "fraudCheck", "fraudAlert", "paymentDetails", "addPayment",
        }

    def test_arguments_are_camel_case(self, server):
        tools = {tool.name: tool for tool in run(server, lambda client: client.list_tools())}
        assert set(tools["fraudCheck"].inputSchema["properties"]) == {"userId", "threshold", "detailLevel"}
        assert tools["paymentSummary"].inputSchema["required"] == ["userId"]
        assert "includeDetails" in tools["paymentSummary"].inputSchema["properties"]

    def test_detailed_fraud_check(self, server):
        result = run(server, lambda client: client.call_tool(
            "fraudCheck", {"userId": "U123", "detailLevel": "detailed"}
        ))
        assert result.structured_content["riskFactors"] == {"highAmount": 1, "failedStatus": 1}

    def test_foreign_currency_under_ceiling(self, server):
        result = run(server, lambda client: client.call_tool(
            "addPayment", {"userId": "U123", "amount": 50000, "payee": "Sato", "currency": "JPY"}
        ))
        assert result.structured_content["status"] == "pending"

    def test_payment_summary(self, server):
        result = run(server, lambda client: client.call_tool(
            "paymentSummary", {"userId": "U123", "currency": "EUR"}
        ))
        assert result.content[0].text == (
            "User U123 has 3 payments within the all timeframe, totalling EUR 372.50."
        )
        assert result.structured_content["paymentCount"] == 3
        assert result.structured_content["total"] == 372.5

    def test_error_flagged(self, server):
        with pytest.raises(ToolError, match="currency"):
            run(server, lambda client: client.call_tool(
                "paymentSummary", {"userId": "U123", "currency": "CHF"}
            ))

    def test_add_payment_reaches_store(self, server, context):
        result = run(server, lambda client: client.call_tool(
            "addPayment", {"userId": "U123", "amount": 12.5, "payee": "Ivy"}
        ))
        payment_id = result.structured_content["paymentId"]
        stored = asyncio.run(context.services.store.list_payments("U123"))
        assert stored[-1].id == payment_id


class TestResources:

    def test_json_rates(self, server):
        contents = run(server, lambda client: client.read_resource("currency://rates/json"))
        assert json.loads(contents[0].text)["USD"] == 1.27

    def test_invalid_format(self, server):
        with pytest.raises(Exception, match="Invalid format"):
            run(server, lambda client: client.read_resource("currency://rates/xml"))


class TestPrompts:

    def test_generate_report(self, server):
        result = run(server, lambda client: client.get_prompt("generateReport", {"format": "html"}))
        assert [m.role for m in result.messages] == ["user", "assistant"]
        assert result.messages[0].content.text == (
            "Generate a monthly payment report in html format."
        )

    def test_report_metadata_delivered(self, server):
        result = run(server, lambda client: client.get_prompt("generateReport", {}))
        assert result.meta["totalsByStatus"] == {"completed": 100.0, "pending": 173.91, "failed": 50.0}
        assert result.meta["paymentCount"] == 3
        assert result.meta["periodStart"] == "2026-02-28T12:00:00+00:00"
        assert result.meta["rates"]["JPY"] == 190.5

    def test_report_for_named_user(self, server):
        result = run(server, lambda client: client.get_prompt("generateReport", {"user_id": "NOBODY"}))
        assert result.meta["userId"] == "NOBODY"
        assert result.meta["paymentCount"] == 0
