"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from biteledger.adapters.fdc_client import HttpxFdcClient
from biteledger.adapters.open_food_facts_client import HttpxOpenFoodFactsClient
from biteledger.adapters.openai_text_client import OpenAITextClient
from biteledger.adapters.supabase_food_log_repository import SupabaseFoodLogRepository
from biteledger.adapters.supabase_food_repository import SupabaseFoodItemRepository
from biteledger.adapters.supabase_preferences_repository import (
    SupabasePreferencesRepository,
)
from biteledger.config import Settings
from biteledger.services.cache import InMemoryCache
from biteledger.services.diary import DiaryService
from biteledger.services.open_food_facts import OpenFoodFactsService
from biteledger.services.preferences import PreferencesService
from biteledger.services.search import FoodSearchService
from biteledger.services.stats import StatsService
from biteledger.services.text_recognition import TextRecognitionService
from biteledger.services.usda import UsdaFoodService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    search_service: FoodSearchService
    text_recognition_service: TextRecognitionService
    diary_service: DiaryService
    stats_service: StatsService
    preferences_service: PreferencesService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    food_repository = SupabaseFoodItemRepository(supabase_client)
    log_repository = SupabaseFoodLogRepository(supabase_client)
    preferences_repository = SupabasePreferencesRepository(supabase_client)

    fdc_client = HttpxFdcClient.create(
        api_key=resolved_settings.fdc_api_key,
        base_url=resolved_settings.fdc_base_url,
        user_agent=resolved_settings.user_agent,
        timeout=resolved_settings.http_timeout,
    )
    off_client = HttpxOpenFoodFactsClient.create(
        base_url=resolved_settings.off_base_url,
        search_url=resolved_settings.off_search_url,
        user_agent=resolved_settings.user_agent,
        timeout=resolved_settings.http_timeout,
    )
    cache = InMemoryCache()
    usda_service = UsdaFoodService(
        fdc_client=fdc_client,
        cache=cache,
        search_ttl_seconds=resolved_settings.search_cache_ttl_seconds,
        food_ttl_seconds=resolved_settings.product_cache_ttl_seconds,
        debug=resolved_settings.debug,
    )
    off_service = OpenFoodFactsService(
        client=off_client,
        cache=cache,
        search_ttl_seconds=resolved_settings.search_cache_ttl_seconds,
        product_ttl_seconds=resolved_settings.product_cache_ttl_seconds,
        debug=resolved_settings.debug,
    )
    search_service = FoodSearchService(usda_service, off_service)
    text_recognition_service = TextRecognitionService(
        client=OpenAITextClient.create(resolved_settings.openai_api_key),
        model=resolved_settings.openai_model,
    )

    async def close_resources() -> None:
        await fdc_client.close()
        await off_client.close()

    return AppContainer(
        settings=resolved_settings,
        search_service=search_service,
        text_recognition_service=text_recognition_service,
        diary_service=DiaryService(food_repository, log_repository),
        stats_service=StatsService(log_repository),
        preferences_service=PreferencesService(preferences_repository),
        close_resources=close_resources,
    )
