"""Open Food Facts lookups."""

import logging
from dataclasses import dataclass

from biteledger.adapters.open_food_facts_client import OpenFoodFactsClient
from biteledger.domain.nutrition import FoodRecord
from biteledger.services.cache import Cache
from biteledger.services.errors import ProductNotFoundError
from biteledger.services.reconcile import from_off_product
from biteledger.services.retry import call_with_retry

_FOUND = 1

_logger = logging.getLogger(__name__)


@dataclass
class OpenFoodFactsService:
    """Barcode and name lookups against Open Food Facts."""

    client: OpenFoodFactsClient
    cache: Cache
    search_ttl_seconds: int = 3600
    product_ttl_seconds: int = 86400
    debug: bool = False
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def fetch_product(self, barcode: str) -> FoodRecord:
        """Look a product up by barcode."""
        cache_key = f"off:product:{barcode}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, FoodRecord):
            return cached

        payload = await call_with_retry(
            lambda: self.client.get_product(barcode),
            action=f"Open Food Facts product:{barcode}",
            attempts=self.retry_attempts,
            delay_seconds=self.retry_delay_seconds,
            debug=self.debug,
        )
        product = payload.get("product")
        if payload.get("status") != _FOUND or not isinstance(product, dict):
            raise ProductNotFoundError(f"No product for barcode {barcode}")
        record = from_off_product({**product, "code": product.get("code") or barcode})
        self.cache.set(cache_key, record, ttl_seconds=self.product_ttl_seconds)
        if self.debug:
            _logger.info(
                "Open Food Facts product: barcode=%s serving=%s",
                barcode,
                record.serving_size,
            )
        return record

    async def search(self, query: str, page: int = 1) -> list[FoodRecord]:
        """Search products by name."""
        cache_key = f"off:search:{query.lower()}:{page}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            return cached

        payload = await call_with_retry(
            lambda: self.client.search_products(query, page=page),
            action="Open Food Facts search",
            attempts=self.retry_attempts,
            delay_seconds=self.retry_delay_seconds,
            debug=self.debug,
        )
        records = [
            from_off_product(product) for product in payload.get("products") or []
        ]
        self.cache.set(cache_key, records, ttl_seconds=self.search_ttl_seconds)
        if self.debug:
            _logger.info(
                "Open Food Facts search: query=%s results=%s", query, len(records)
            )
        return records
