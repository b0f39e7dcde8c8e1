"""Tests for finresearch.agents.tools: registry contract and finance tools."""

import httpx
import pytest

from finresearch.agents.tools import (
    AnnualReportItemsTool,
    CurrentReportItemsTool,
    FinancialMetricsSnapshotTool,
    IncomeStatementsTool,
    PriceSnapshotTool,
    QuarterlyReportItemsTool,
    SegmentedRevenuesTool,
    ToolRegistry,
    build_finance_tools,
)
from finresearch.core.exceptions import (
    DataProviderError,
    ToolInvocationError,
    ToolSelectionError,
    UnknownToolError,
)
from finresearch.services.financial_datasets import FinancialDatasetsService

from conftest import ScriptedTool


def _service(handler):
    client = httpx.AsyncClient(
        base_url="https://api.test", transport=httpx.MockTransport(handler)
    )
    return FinancialDatasetsService(client=client)


# ── ToolRegistry ─────────────────────────────────────────────────────────────


class TestToolRegistry:
    def test_duplicate_names_rejected(self):
        with pytest.raises(ValueError, match="Duplicate"):
            ToolRegistry([ScriptedTool("a"), ScriptedTool("a")])

    def test_lookup(self):
        tool = ScriptedTool("a")
        registry = ToolRegistry([tool])
        assert registry.get("a") is tool
        assert "a" in registry
        assert registry.names == ["a"]

    def test_unknown_tool(self):
        registry = ToolRegistry([ScriptedTool("a")])
        with pytest.raises(UnknownToolError):
            registry.get("b")

    def test_validate_fills_defaults(self):
        registry = ToolRegistry([ScriptedTool("a")])
        assert registry.validate("a", {"ticker": "ACME"}) == {
            "ticker": "ACME", "period": "quarterly", "limit": 4
        }

    def test_validate_rejects_missing_required(self):
        registry = ToolRegistry([ScriptedTool("a")])
        with pytest.raises(ToolSelectionError) as exc:
            registry.validate("a", {"period": "annual"})
        assert exc.value.tool_name == "a"

    def test_validate_rejects_unknown_tool(self):
        registry = ToolRegistry([ScriptedTool("a")])
        with pytest.raises(UnknownToolError):
            registry.validate("nope", {"ticker": "ACME"})

    @pytest.mark.asyncio
    async def test_invoke_returns_data(self):
        registry = ToolRegistry([ScriptedTool("a", default={"x": 1})])
        assert await registry.invoke("a", {"ticker": "ACME"}) == {"x": 1}

    @pytest.mark.asyncio
    async def test_invoke_wraps_failures(self):
        registry = ToolRegistry([ScriptedTool("a", outcomes=[RuntimeError("down")])])
        with pytest.raises(ToolInvocationError, match="a failed: down"):
            await registry.invoke("a", {"ticker": "ACME"})

    def test_describe_lists_schema(self):
        text = ToolRegistry([ScriptedTool("a")]).describe()
        assert "- a: Scripted test tool" in text
        assert '"ticker"' in text


# ── Finance tools ────────────────────────────────────────────────────────────


class TestFinanceTools:
    def test_all_tools_unique(self):
        registry = ToolRegistry(build_finance_tools(_service(lambda r: httpx.Response(200))))
        assert len(registry) == 15
        assert "get_income_statements" in registry

    def test_ticker_normalised(self):
        registry = ToolRegistry(build_finance_tools(_service(lambda r: httpx.Response(200))))
        args = registry.validate("get_income_statements", {"ticker": " acme ", "period": "quarterly"})
        assert args["ticker"] == "ACME"
        assert args["limit"] == 4

    def test_blank_ticker_rejected(self):
        registry = ToolRegistry(build_finance_tools(_service(lambda r: httpx.Response(200))))
        with pytest.raises(ToolSelectionError):
            registry.validate("get_income_statements", {"ticker": "   "})

    def test_quarter_bounds(self):
        registry = ToolRegistry(build_finance_tools(_service(lambda r: httpx.Response(200))))
        with pytest.raises(ToolSelectionError):
            registry.validate("get_10q_filing_items", {"ticker": "ACME", "year": 2023, "quarter": 5})

    def test_invalid_period_rejected(self):
        registry = ToolRegistry(build_finance_tools(_service(lambda r: httpx.Response(200))))
        with pytest.raises(ToolSelectionError):
            registry.validate("get_income_statements", {"ticker": "ACME", "period": "weekly"})

    @pytest.mark.asyncio
    async def test_income_statements_request(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={"income_statements": [{"revenue": 5}]})

        tool = IncomeStatementsTool(_service(handler))
        result = await tool.run(ticker="ACME", period="quarterly", limit=4)
        assert result == [{"revenue": 5}]
        assert seen["path"] == "/financials/income-statements/"
        assert seen["params"] == {"ticker": "ACME", "period": "quarterly", "limit": "4"}

    @pytest.mark.asyncio
    async def test_none_params_dropped(self):
        seen = {}

        def handler(request):
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={"snapshot": {"price": 10}})

        tool = PriceSnapshotTool(_service(handler))
        assert await tool.run(ticker="ACME", extra=None) == {"price": 10}
        assert seen["params"] == {"ticker": "ACME"}

    @pytest.mark.asyncio
    async def test_annual_report_items_request(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["params"] = list(request.url.params.multi_items())
            return httpx.Response(200, json={"ticker": "ACME", "items": [{"name": "Item-1A"}]})

        tool = AnnualReportItemsTool(_service(handler))
        result = await tool.run(ticker="ACME", year=2023, item=["Item-1A", "Item-7"])

        assert result == {"ticker": "ACME", "items": [{"name": "Item-1A"}]}
        assert seen["path"] == "/filings/items/"
        assert ("filing_type", "10-K") in seen["params"]
        assert ("year", "2023") in seen["params"]
        assert [v for k, v in seen["params"] if k == "item"] == ["Item-1A", "Item-7"]

    @pytest.mark.asyncio
    async def test_filing_type_fixed_per_tool(self):
        types = []

        def handler(request):
            types.append(request.url.params["filing_type"])
            return httpx.Response(200, json={})

        service = _service(handler)
        await QuarterlyReportItemsTool(service).run(ticker="ACME", year=2023, quarter=2)
        await CurrentReportItemsTool(service).run(ticker="ACME", accession_number="0000320193-24-000001")
        assert types == ["10-Q", "8-K"]

    @pytest.mark.asyncio
    async def test_segmented_revenues_unwrapped(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            return httpx.Response(200, json={"segmented_revenues": [{"segment": "Anvils"}]})

        result = await SegmentedRevenuesTool(_service(handler)).run(ticker="ACME", period="annual", limit=4)
        assert result == [{"segment": "Anvils"}]
        assert seen["path"] == "/financials/segmented-revenues/"

    @pytest.mark.asyncio
    async def test_metrics_snapshot_unwrapped(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            return httpx.Response(200, json={"snapshot": {"price_to_earnings_ratio": 21.5}})

        result = await FinancialMetricsSnapshotTool(_service(handler)).run(ticker="ACME")
        assert result == {"price_to_earnings_ratio": 21.5}
        assert seen["path"] == "/financial-metrics/snapshot/"

    @pytest.mark.asyncio
    async def test_http_error_raises_provider_error(self):
        tool = IncomeStatementsTool(_service(lambda r: httpx.Response(503)))
        with pytest.raises(DataProviderError) as exc:
            await tool.run(ticker="ACME")
        assert exc.value.status_code == 503

    @pytest.mark.asyncio
    async def test_provider_error_becomes_invocation_error(self):
        registry = ToolRegistry(build_finance_tools(_service(lambda r: httpx.Response(500))))
        with pytest.raises(ToolInvocationError):
            await registry.invoke("get_income_statements", {"ticker": "ACME"})
