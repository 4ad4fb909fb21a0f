"""Federated search across USDA and Open Food Facts."""

import asyncio
import logging
import re
from dataclasses import dataclass

from biteledger.domain.nutrition import FoodRecord, FoodSource
from biteledger.services.errors import InvalidProductCodeError, NoResultsError
from biteledger.services.open_food_facts import OpenFoodFactsService
from biteledger.services.reconcile import USDA_CODE_PREFIX
from biteledger.services.usda import UsdaFoodService

_NON_ASCII = re.compile(r"[^\x00-\x7F]")

_logger = logging.getLogger(__name__)


@dataclass
class FoodSearchService:
    """Searches both databases and merges the results.

    USDA results come first (whole foods), Open Food Facts second
    (packaged products). A failing source is skipped.
    """

    usda_service: UsdaFoodService
    off_service: OpenFoodFactsService

    async def search_all(self, query: str) -> list[FoodRecord]:
        """Search every database and rank the merged results."""
        usda_result, off_result = await asyncio.gather(
            self.usda_service.search(query),
            self.off_service.search(query),
            return_exceptions=True,
        )

        results: list[FoodRecord] = []
        if isinstance(usda_result, BaseException):
            _logger.warning("USDA search failed: %s", usda_result)
        else:
            usda = [record for record in usda_result if _has_all_words(record, query)]
            _logger.info("USDA returned %s results", len(usda))
            results.extend(usda)

        if isinstance(off_result, BaseException):
            _logger.warning("Open Food Facts search failed: %s", off_result)
        else:
            off = [
                record
                for record in off_result
                if _has_all_words(record, query) and _is_latin(record)
            ]
            _logger.info(
                "Open Food Facts returned %s results (%s after filtering)",
                len(off_result),
                len(off),
            )
            results.extend(off)

        if not results:
            raise NoResultsError(f"No results found for {query!r}")
        return rank_results(results, query)

    async def get_details(self, code: str) -> FoodRecord:
        """Fetch full details from the database the code belongs to."""
        if database_for(code) is FoodSource.USDA:
            raw_id = code.removeprefix(USDA_CODE_PREFIX)
            if not raw_id.isdigit():
                raise InvalidProductCodeError(f"Invalid USDA code {code!r}")
            return await self.usda_service.get_food(int(raw_id))
        return await self.off_service.fetch_product(code)


def database_for(code: str) -> FoodSource:
    """Return which database a product code belongs to."""
    if code.startswith(USDA_CODE_PREFIX):
        return FoodSource.USDA
    return FoodSource.OPEN_FOOD_FACTS


def rank_results(results: list[FoodRecord], query: str) -> list[FoodRecord]:
    """Stable sort: exact name match, then prefix, then substring."""
    needle = query.lower()

    def key(record: FoodRecord) -> tuple[bool, bool, bool]:
        name = record.name.lower()
        return (name != needle, not name.startswith(needle), needle not in name)

    return sorted(results, key=key)


def _combined_text(record: FoodRecord) -> str:
    return f"{record.name.lower()} {(record.brand or '').lower()}"


def _has_all_words(record: FoodRecord, query: str) -> bool:
    text = _combined_text(record)
    return all(word in text for word in query.lower().split())


def _is_latin(record: FoodRecord) -> bool:
    return not _NON_ASCII.search(record.name) and not _NON_ASCII.search(
        record.brand or ""
    )
