"""
Tools for the Financial Research Agent.

Tools are stateless data-retrieval capabilities with declared contracts:
- BaseTool / ToolRegistry: contract and closed lookup
- Finance tools: statements, segments, prices, metrics, news, estimates,
  filings and filing items
"""

from finresearch.agents.tools.base import BaseTool, ToolRegistry
from finresearch.agents.tools.finance import (
    IncomeStatementsTool,
    BalanceSheetsTool,
    CashFlowStatementsTool,
    AllFinancialStatementsTool,
    SegmentedRevenuesTool,
    PriceSnapshotTool,
    PricesTool,
    FinancialMetricsSnapshotTool,
    FinancialMetricsTool,
    NewsTool,
    AnalystEstimatesTool,
    FilingsTool,
    AnnualReportItemsTool,
    QuarterlyReportItemsTool,
    CurrentReportItemsTool,
    build_finance_tools,
)

__all__ = [
    "BaseTool",
    "ToolRegistry",
    "IncomeStatementsTool",
    "BalanceSheetsTool",
    "CashFlowStatementsTool",
    "AllFinancialStatementsTool",
    "SegmentedRevenuesTool",
    "PriceSnapshotTool",
    "PricesTool",
    "FinancialMetricsSnapshotTool",
    "FinancialMetricsTool",
    "NewsTool",
    "AnalystEstimatesTool",
    "FilingsTool",
    "AnnualReportItemsTool",
    "QuarterlyReportItemsTool",
    "CurrentReportItemsTool",
    "build_finance_tools",
]
