"""Open Food Facts API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

SEARCH_FIELDS = (
    "code,product_name,brands,image_url,nutriments,serving_size,quantity,"
    "countries_tags"
)


class OpenFoodFactsClient(Protocol):
    """Interface for Open Food Facts lookups."""

    async def get_product(self, barcode: str) -> dict[str, object]:
        """Fetch a product by barcode and return raw API data."""

    async def search_products(
        self, query: str, page: int = 1, page_size: int = 25
    ) -> dict[str, object]:
        """Search products by name and return raw API data."""


@dataclass
class HttpxOpenFoodFactsClient(OpenFoodFactsClient):
    """HTTPX-backed Open Food Facts client."""

    base_url: str
    search_url: str
    http_client: httpx.AsyncClient
    timeout: float = 30

    @classmethod
    def create(
        cls, base_url: str, search_url: str, user_agent: str, timeout: float = 30
    ) -> "HttpxOpenFoodFactsClient":
        """Create a client; Open Food Facts asks callers to send a User-Agent."""
        return cls(
            base_url=base_url,
            search_url=search_url,
            http_client=httpx.AsyncClient(headers={"User-Agent": user_agent}),
            timeout=timeout,
        )

    async def get_product(self, barcode: str) -> dict[str, object]:
        """Fetch a product by barcode."""
        response = await self.http_client.get(
            f"{self.base_url}/product/{barcode}.json",
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    async def search_products(
        self, query: str, page: int = 1, page_size: int = 25
    ) -> dict[str, object]:
        """Run a full-text product search."""
        response = await self.http_client.get(
            self.search_url,
            params={
                "search_terms": query,
                "search_simple": 1,
                "action": "process",
                "json": 1,
                "page": page,
                "page_size": page_size,
                "fields": SEARCH_FIELDS,
            },
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
