"""USDA FoodData Central API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

SR_LEGACY = "SR Legacy"


class FdcClient(Protocol):
    """Interface for FoodData Central API interactions."""

    async def search_foods(
        self, query: str, page: int = 1, page_size: int = 25
    ) -> dict[str, object]:
        """Search foods by query and return raw API data."""

    async def get_food(self, fdc_id: int) -> dict[str, object]:
        """Fetch a food by FDC id and return raw API data."""


@dataclass
class HttpxFdcClient(FdcClient):
    """HTTPX-backed FDC client."""

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient
    timeout: float = 30

    @classmethod
    def create(
        cls, api_key: str, base_url: str, user_agent: str, timeout: float = 30
    ) -> "HttpxFdcClient":
        """Create an FDC client with a managed httpx session."""
        return cls(
            api_key=api_key,
            base_url=base_url,
            http_client=httpx.AsyncClient(headers={"User-Agent": user_agent}),
            timeout=timeout,
        )

    async def search_foods(
        self, query: str, page: int = 1, page_size: int = 25
    ) -> dict[str, object]:
        """Search SR Legacy foods, which carry household portion names."""
        response = await self.http_client.get(
            f"{self.base_url}/foods/search",
            params={
                "query": query,
                "pageSize": page_size,
                "pageNumber": page,
                "api_key": self.api_key,
                "dataType": SR_LEGACY,
            },
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    async def get_food(self, fdc_id: int) -> dict[str, object]:
        """Fetch a food by FDC id."""
        response = await self.http_client.get(
            f"{self.base_url}/food/{fdc_id}",
            params={"api_key": self.api_key},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
