"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from uuid import UUID

import pytest

from biteledger.adapters.fdc_client import FdcClient
from biteledger.adapters.open_food_facts_client import OpenFoodFactsClient
from biteledger.config import Settings
from biteledger.containers import AppContainer
from biteledger.domain.diary import FoodItem, FoodLog
from biteledger.domain.preferences import UserPreferences
from biteledger.services.cache import InMemoryCache
from biteledger.services.diary import (
    DiaryService,
    FoodItemRepository,
    FoodLogRepository,
)
from biteledger.services.open_food_facts import OpenFoodFactsService
from biteledger.services.preferences import PreferencesRepository, PreferencesService
from biteledger.services.search import FoodSearchService
from biteledger.services.stats import StatsService
from biteledger.services.text_recognition import (
    TextRecognitionClient,
    TextRecognitionService,
)
from biteledger.services.usda import UsdaFoodService

LABEL_LINES = [
    "Nutrition Facts",
    "8 servings per container",
    "Serving size 2 tbsp (32g)",
    "Amount per serving",
    "Calories",
    "190",
    "Total Fat 16g",
    "Saturated Fat 3g",
    "Trans Fat 0g",
    "Cholesterol 0mg",
    "Sodium 140mg",
    "Total Carbohydrate 8g",
    "Dietary Fiber 2g",
    "Total Sugars 3g",
    "Includes 2g Added Sugars",
    "Protein 7g",
]


def usda_search_item(
    fdc_id: int = 171688, description: str = "Apples, raw, with skin"
) -> dict[str, object]:
    return {
        "fdcId": fdc_id,
        "description": description,
        "dataType": "SR Legacy",
        "foodNutrients": [
            {"nutrientNumber": "208", "value": 52},
            {"nutrientNumber": "203", "value": 0.26},
            {"nutrientNumber": "205", "value": 13.8},
            {"nutrientNumber": "204", "value": 0.17},
            {"nutrientNumber": "291", "value": 2.4},
            {"nutrientNumber": "269", "value": 10.4},
            {"nutrientNumber": "307", "value": 1},
        ],
    }


def off_product(
    code: str = "3017620422003",
    name: str = "Nutella",
    brand: str = "Ferrero",
) -> dict[str, object]:
    return {
        "code": code,
        "product_name": name,
        "brands": brand,
        "serving_size": "2 tbsp (37g)",
        "quantity": "400 g",
        "image_url": "https://images.example/nutella.jpg",
        "countries_tags": ["en:france"],
        "nutriments": {
            "energy-kcal_100g": 539,
            "proteins_100g": 6.3,
            "carbohydrates_100g": 57.5,
            "fat_100g": "30.9",
            "sugars_100g": 56.3,
            "sodium_100g": 0.0428,
        },
    }


@dataclass
class FakeFdcClient(FdcClient):
    """Fake FDC client with in-memory responses."""

    search_payload: dict[str, object] = field(
        default_factory=lambda: {"foods": [usda_search_item()]}
    )
    food_payload: dict[str, object] = field(
        default_factory=lambda: {
            "fdcId": 171688,
            "description": "Apples, raw, with skin",
            "foodNutrients": [
                {"nutrient": {"number": "208"}, "amount": 52},
                {"nutrient": {"number": "203"}, "amount": 0.26},
                {"nutrient": {"number": "205"}, "amount": 13.8},
                {"nutrient": {"number": "204"}, "amount": 0.17},
                {"nutrient": {"number": "401"}, "amount": 4.6},
            ],
            "foodPortions": [
                {"id": 1, "amount": 1, "modifier": "medium", "gramWeight": 182},
                {"id": 2, "amount": 1, "modifier": "cup, sliced", "gramWeight": 109},
            ],
        }
    )
    search_calls: list[str] = field(default_factory=list)
    error: Exception | None = None

    async def search_foods(
        self, query: str, page: int = 1, page_size: int = 25
    ) -> dict[str, object]:
        self.search_calls.append(query)
        if self.error is not None:
            raise self.error
        return self.search_payload

    async def get_food(self, fdc_id: int) -> dict[str, object]:
        if self.error is not None:
            raise self.error
        return self.food_payload


@dataclass
class FakeOpenFoodFactsClient(OpenFoodFactsClient):
    """Fake Open Food Facts client with in-memory responses."""

    products: dict[str, dict[str, object]] = field(
        default_factory=lambda: {"3017620422003": off_product()}
    )
    search_payload: dict[str, object] = field(
        default_factory=lambda: {"products": [off_product()]}
    )
    error: Exception | None = None

    async def get_product(self, barcode: str) -> dict[str, object]:
        if self.error is not None:
            raise self.error
        product = self.products.get(barcode)
        if product is None:
            return {"status": 0, "status_verbose": "product not found"}
        return {"status": 1, "product": product}

    async def search_products(
        self, query: str, page: int = 1, page_size: int = 25
    ) -> dict[str, object]:
        if self.error is not None:
            raise self.error
        return self.search_payload


@dataclass
class FakeTextRecognitionClient(TextRecognitionClient):
    """Fake text recognition returning fixed lines."""

    payload: dict[str, object] = field(
        default_factory=lambda: {"lines": [*LABEL_LINES, "  "]}
    )
    last_data_url: str | None = None

    async def read_lines(
        self,
        *,
        model: str,
        image_data_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        self.last_data_url = image_data_url
        return self.payload


@dataclass
class InMemoryFoodItemRepository(FoodItemRepository):
    """In-memory food repository for tests."""

    items: dict[UUID, FoodItem] = field(default_factory=dict)

    def create_food(self, item: FoodItem) -> FoodItem:
        self.items[item.id] = item
        return item

    def get_food(self, food_id: UUID) -> FoodItem | None:
        return self.items.get(food_id)

    def find_by_barcode(self, barcode: str) -> FoodItem | None:
        return next(
            (item for item in self.items.values() if item.barcode == barcode), None
        )

    def update_food(self, item: FoodItem) -> FoodItem:
        self.items[item.id] = item
        return item


@dataclass
class InMemoryFoodLogRepository(FoodLogRepository):
    """In-memory food log repository for tests."""

    logs: dict[UUID, FoodLog] = field(default_factory=dict)

    def create_log(self, log: FoodLog) -> FoodLog:
        self.logs[log.id] = log
        return log

    def get_log(self, log_id: UUID) -> FoodLog | None:
        return self.logs.get(log_id)

    def update_log(self, log: FoodLog) -> FoodLog:
        self.logs[log.id] = log
        return log

    def delete_log(self, log_id: UUID) -> None:
        self.logs.pop(log_id, None)

    def list_logs(self, start: datetime, end: datetime) -> list[FoodLog]:
        return sorted(
            (log for log in self.logs.values() if start <= log.timestamp < end),
            key=lambda log: log.timestamp,
        )

    def list_recent_logs(self, limit: int) -> list[FoodLog]:
        ordered = sorted(self.logs.values(), key=lambda log: log.timestamp)
        return list(reversed(ordered))[:limit]


@dataclass
class InMemoryPreferencesRepository(PreferencesRepository):
    """In-memory preferences repository for tests."""

    stored: UserPreferences | None = None

    def get_preferences(self) -> UserPreferences | None:
        return self.stored

    def save_preferences(self, preferences: UserPreferences) -> UserPreferences:
        self.stored = replace(preferences)
        return preferences


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service.role.key",
        openai_api_key="openai-key",
        fdc_api_key="fdc-key",
        timezone="UTC",
    )


@pytest.fixture
def fdc_client() -> FakeFdcClient:
    return FakeFdcClient()


@pytest.fixture
def off_client() -> FakeOpenFoodFactsClient:
    return FakeOpenFoodFactsClient()


@pytest.fixture
def search_service(
    fdc_client: FakeFdcClient, off_client: FakeOpenFoodFactsClient
) -> FoodSearchService:
    cache = InMemoryCache()
    return FoodSearchService(
        usda_service=UsdaFoodService(fdc_client=fdc_client, cache=cache),
        off_service=OpenFoodFactsService(client=off_client, cache=cache),
    )


@pytest.fixture
def diary_service() -> DiaryService:
    return DiaryService(InMemoryFoodItemRepository(), InMemoryFoodLogRepository())


@pytest.fixture
def container(
    settings: Settings,
    search_service: FoodSearchService,
    diary_service: DiaryService,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        search_service=search_service,
        text_recognition_service=TextRecognitionService(
            client=FakeTextRecognitionClient(), model=settings.openai_model
        ),
        diary_service=diary_service,
        stats_service=StatsService(diary_service.log_repository),
        preferences_service=PreferencesService(InMemoryPreferencesRepository()),
        close_resources=close_resources,
    )
