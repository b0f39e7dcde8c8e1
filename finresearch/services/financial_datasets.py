"""
Financial Datasets Service - HTTP client for the market-data provider.

RESPONSIBILITY:
Thin async wrapper around the Financial Datasets REST API used by the
finance tools. One shared httpx.AsyncClient per service instance.

ENDPOINTS:
- /financials/ and /financials/{income-statements,balance-sheets,cash-flow-statements}/
- /financials/segmented-revenues/
- /prices/snapshot/, /prices/
- /financial-metrics/snapshot/, /financial-metrics/
- /news/
- /analyst-estimates/
- /filings/, /filings/items/
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from finresearch.core.exceptions import DataProviderError

logger = logging.getLogger(__name__)


@dataclass
class FinancialDatasetsConfig:
    """Configuration for the data provider client."""
    api_key: Optional[str] = None
    base_url: str = "https://api.financialdatasets.ai"
    timeout_seconds: float = 30.0


class FinancialDatasetsService:
    """
    Fetches financial data for the finance tools.

    Errors (HTTP status, transport) are raised as DataProviderError so the
    tool registry reports them as tool invocation failures.
    """

    def __init__(
        self,
        config: Optional[FinancialDatasetsConfig] = None,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.config = config or FinancialDatasetsConfig()
        headers = {}
        if self.config.api_key:
            headers["X-API-KEY"] = self.config.api_key
        self._client = client or httpx.AsyncClient(
            base_url=self.config.base_url,
            headers=headers,
            timeout=self.config.timeout_seconds,
        )

    async def get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        GET a provider endpoint and return the decoded JSON body.

        Args:
            path: Endpoint path, e.g. "/prices/snapshot/"
            params: Query parameters; None values are dropped
        """
        query = {k: v for k, v in params.items() if v is not None}
        logger.debug(f"GET {path} {query}")

        try:
            response = await self._client.get(path, params=query)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise DataProviderError(
                f"Provider returned {e.response.status_code} for {path}",
                status_code=e.response.status_code,
                path=path
            ) from e
        except httpx.RequestError as e:
            raise DataProviderError(
                f"Request to {path} failed: {e}", path=path
            ) from e

        return response.json()

    async def aclose(self) -> None:
        await self._client.aclose()
