"""USDA FoodData Central lookups."""

import logging
from dataclasses import dataclass

from biteledger.adapters.fdc_client import FdcClient
from biteledger.domain.nutrition import FoodRecord
from biteledger.services.cache import Cache
from biteledger.services.reconcile import from_usda_detail, from_usda_search_item
from biteledger.services.retry import call_with_retry

_logger = logging.getLogger(__name__)


@dataclass
class UsdaFoodService:
    """USDA search and detail lookups with caching."""

    fdc_client: FdcClient
    cache: Cache
    search_ttl_seconds: int = 3600
    food_ttl_seconds: int = 86400
    debug: bool = False
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def search(
        self, query: str, page: int = 1, page_size: int = 25
    ) -> list[FoodRecord]:
        """Search USDA foods; hits without nutrient data are dropped."""
        cache_key = f"usda:search:{query.lower()}:{page}:{page_size}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            return cached

        payload = await call_with_retry(
            lambda: self.fdc_client.search_foods(query, page=page, page_size=page_size),
            action="USDA search",
            attempts=self.retry_attempts,
            delay_seconds=self.retry_delay_seconds,
            debug=self.debug,
        )
        records = [
            record
            for record in (
                from_usda_search_item(food) for food in payload.get("foods") or []
            )
            if record is not None
        ]
        self.cache.set(cache_key, records, ttl_seconds=self.search_ttl_seconds)
        if self.debug:
            _logger.info("USDA search: query=%s results=%s", query, len(records))
        return records

    async def get_food(self, fdc_id: int) -> FoodRecord:
        """Retrieve a USDA food with its full nutrient panel and portions."""
        cache_key = f"usda:food:{fdc_id}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, FoodRecord):
            return cached

        payload = await call_with_retry(
            lambda: self.fdc_client.get_food(fdc_id),
            action=f"USDA get_food:{fdc_id}",
            attempts=self.retry_attempts,
            delay_seconds=self.retry_delay_seconds,
            debug=self.debug,
        )
        record = from_usda_detail(payload)
        self.cache.set(cache_key, record, ttl_seconds=self.food_ttl_seconds)
        if self.debug:
            _logger.info(
                "USDA food: fdc_id=%s portions=%s", fdc_id, len(record.portions)
            )
        return record
