"""
Finance Tools - Data-retrieval capabilities backed by the data provider.

Each tool maps one provider endpoint to a declared parameter contract.
Results are the provider's JSON payload, unwrapped to the interesting key.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from finresearch.agents.tools.base import BaseTool
from finresearch.services.financial_datasets import FinancialDatasetsService


Period = Literal["annual", "quarterly", "ttm"]


class TickerArgs(BaseModel):
    ticker: str = Field(..., min_length=1, max_length=10, description="Stock ticker, e.g. AAPL")

    @field_validator("ticker", mode="before")
    @classmethod
    def normalise_ticker(cls, v: Any) -> Any:
        # Runs before the length bounds so "  " is rejected as empty
        if isinstance(v, str):
            return v.strip().upper()
        return v


class FinancialStatementArgs(TickerArgs):
    period: Period = Field("annual", description="Reporting period")
    limit: int = Field(4, ge=1, le=40, description="Number of periods to return")
    report_period_gte: Optional[str] = Field(None, description="Earliest report date, YYYY-MM-DD")
    report_period_lte: Optional[str] = Field(None, description="Latest report date, YYYY-MM-DD")


class PricesArgs(TickerArgs):
    start_date: str = Field(..., description="Start date, YYYY-MM-DD")
    end_date: str = Field(..., description="End date, YYYY-MM-DD")
    interval: Literal["minute", "day", "week", "month", "year"] = "day"
    interval_multiplier: int = Field(1, ge=1)


class NewsArgs(TickerArgs):
    limit: int = Field(10, ge=1, le=100)
    start_date: Optional[str] = None
    end_date: Optional[str] = None


class EstimatesArgs(TickerArgs):
    period: Literal["annual", "quarterly"] = "annual"


class FilingsArgs(TickerArgs):
    filing_type: Optional[Literal["10-K", "10-Q", "8-K"]] = None
    limit: int = Field(10, ge=1, le=100)


class AnnualReportItemsArgs(TickerArgs):
    year: int = Field(..., ge=1993, description="Fiscal year of the 10-K")
    item: Optional[List[str]] = Field(None, description="Item names to return, e.g. [\"Item-1A\"]; all if omitted")


class QuarterlyReportItemsArgs(AnnualReportItemsArgs):
    quarter: int = Field(..., ge=1, le=4, description="Fiscal quarter of the 10-Q")


class CurrentReportItemsArgs(TickerArgs):
    accession_number: str = Field(..., min_length=1, description="Accession number of the 8-K, from get_filings")


class SegmentedRevenuesArgs(TickerArgs):
    period: Literal["annual", "quarterly"] = "annual"
    limit: int = Field(4, ge=1, le=40)


class _ProviderTool(BaseTool):
    """Tool that issues one GET against the data provider."""

    path: str = ""
    result_key: str = ""
    fixed_params: Optional[Dict[str, Any]] = None

    def __init__(self, service: FinancialDatasetsService):
        self.service = service

    async def run(self, **kwargs) -> Any:
        params = {**(self.fixed_params or {}), **kwargs}
        data = await self.service.get(self.path, params)
        if self.result_key:
            return data.get(self.result_key, data)
        return data


class IncomeStatementsTool(_ProviderTool):
    name = "get_income_statements"
    description = "Income statements (revenue, expenses, net income) for a company"
    args_schema = FinancialStatementArgs
    path = "/financials/income-statements/"
    result_key = "income_statements"


class BalanceSheetsTool(_ProviderTool):
    name = "get_balance_sheets"
    description = "Balance sheets (assets, liabilities, equity) for a company"
    args_schema = FinancialStatementArgs
    path = "/financials/balance-sheets/"
    result_key = "balance_sheets"


class CashFlowStatementsTool(_ProviderTool):
    name = "get_cash_flow_statements"
    description = "Cash flow statements (operating, investing, financing) for a company"
    args_schema = FinancialStatementArgs
    path = "/financials/cash-flow-statements/"
    result_key = "cash_flow_statements"


class AllFinancialStatementsTool(_ProviderTool):
    name = "get_all_financial_statements"
    description = "Income statements, balance sheets and cash flow statements in one call"
    args_schema = FinancialStatementArgs
    path = "/financials/"
    result_key = "financials"


class SegmentedRevenuesTool(_ProviderTool):
    name = "get_segmented_revenues"
    description = "Revenue broken down by business segment and geography"
    args_schema = SegmentedRevenuesArgs
    path = "/financials/segmented-revenues/"
    result_key = "segmented_revenues"


class PriceSnapshotTool(_ProviderTool):
    name = "get_price_snapshot"
    description = "Latest price snapshot for a stock"
    args_schema = TickerArgs
    path = "/prices/snapshot/"
    result_key = "snapshot"


class PricesTool(_ProviderTool):
    name = "get_prices"
    description = "Historical OHLCV prices for a stock over a date range"
    args_schema = PricesArgs
    path = "/prices/"
    result_key = "prices"


class FinancialMetricsSnapshotTool(_ProviderTool):
    name = "get_financial_metrics_snapshot"
    description = "Current valuation and profitability metrics (P/E, margins, market cap)"
    args_schema = TickerArgs
    path = "/financial-metrics/snapshot/"
    result_key = "snapshot"


class FinancialMetricsTool(_ProviderTool):
    name = "get_financial_metrics"
    description = "Historical valuation and profitability metrics per reporting period"
    args_schema = FinancialStatementArgs
    path = "/financial-metrics/"
    result_key = "financial_metrics"


class NewsTool(_ProviderTool):
    name = "get_news"
    description = "Recent news articles about a company"
    args_schema = NewsArgs
    path = "/news/"
    result_key = "news"


class AnalystEstimatesTool(_ProviderTool):
    name = "get_analyst_estimates"
    description = "Consensus analyst estimates (EPS, revenue) for a company"
    args_schema = EstimatesArgs
    path = "/analyst-estimates/"
    result_key = "analyst_estimates"


class FilingsTool(_ProviderTool):
    name = "get_filings"
    description = "List of SEC filings (10-K, 10-Q, 8-K) for a company"
    args_schema = FilingsArgs
    path = "/filings/"
    result_key = "filings"


class AnnualReportItemsTool(_ProviderTool):
    name = "get_10k_filing_items"
    description = "Text of sections (risk factors, MD&A, ...) from a 10-K annual report"
    args_schema = AnnualReportItemsArgs
    path = "/filings/items/"
    fixed_params = {"filing_type": "10-K"}


class QuarterlyReportItemsTool(_ProviderTool):
    name = "get_10q_filing_items"
    description = "Text of sections from a 10-Q quarterly report"
    args_schema = QuarterlyReportItemsArgs
    path = "/filings/items/"
    fixed_params = {"filing_type": "10-Q"}


class CurrentReportItemsTool(_ProviderTool):
    name = "get_8k_filing_items"
    description = "Text of the items reported in an 8-K current report"
    args_schema = CurrentReportItemsArgs
    path = "/filings/items/"
    fixed_params = {"filing_type": "8-K"}


def build_finance_tools(service: FinancialDatasetsService) -> List[BaseTool]:
    """Instantiate every finance tool against one provider client."""
    return [
        IncomeStatementsTool(service),
        BalanceSheetsTool(service),
        CashFlowStatementsTool(service),
        AllFinancialStatementsTool(service),
        SegmentedRevenuesTool(service),
        PriceSnapshotTool(service),
        PricesTool(service),
        FinancialMetricsSnapshotTool(service),
        FinancialMetricsTool(service),
        NewsTool(service),
        AnalystEstimatesTool(service),
        FilingsTool(service),
        AnnualReportItemsTool(service),
        QuarterlyReportItemsTool(service),
        CurrentReportItemsTool(service),
    ]
