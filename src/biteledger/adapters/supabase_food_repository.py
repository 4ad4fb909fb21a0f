"""Supabase repository for stored foods."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from biteledger.domain.diary import FoodItem
from biteledger.domain.nutrition import NUTRIENT_FIELDS, NutrientProfile, ServingPortion
from biteledger.services.diary import FoodItemRepository

_TABLE = "food_items"
_REQUIRED = ("calories", "protein_g", "carbs_g", "fat_g")


@dataclass
class SupabaseFoodItemRepository(FoodItemRepository):
    """Supabase-backed repository for food items."""

    client: Client

    def create_food(self, item: FoodItem) -> FoodItem:
        """Insert a food item and return the stored row."""
        response = self.client.table(_TABLE).insert(food_to_row(item)).execute()
        if not response.data:
            raise RuntimeError("Failed to create food item")
        return food_from_row(response.data[0])

    def get_food(self, food_id: UUID) -> FoodItem | None:
        """Return a food item by id, if present."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .eq("id", str(food_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return food_from_row(response.data[0])

    def find_by_barcode(self, barcode: str) -> FoodItem | None:
        """Return the food stored for a product code, if present."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .eq("barcode", barcode)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return food_from_row(response.data[0])

    def update_food(self, item: FoodItem) -> FoodItem:
        """Replace a food item row and return it."""
        payload = food_to_row(item)
        payload.pop("id")
        response = (
            self.client.table(_TABLE).update(payload).eq("id", str(item.id)).execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update food item")
        return food_from_row(response.data[0])


def food_to_row(item: FoodItem) -> dict[str, object]:
    """Serialize a food item to a table row."""
    return {
        "id": str(item.id),
        "name": item.name,
        "brand": item.brand,
        "barcode": item.barcode,
        "nutrients": item.nutrients.to_dict(),
        "serving_description": item.serving_description,
        "grams_per_serving": item.grams_per_serving,
        "serving_size_is_estimated": item.serving_size_is_estimated,
        "source": item.source,
        "image_url": item.image_url,
        "portions": [
            {
                "id": portion.id,
                "amount": portion.amount,
                "modifier": portion.modifier,
                "gram_weight": portion.gram_weight,
            }
            for portion in item.portions
        ],
        "date_added": item.date_added.isoformat() if item.date_added else None,
    }


def food_from_row(row: dict[str, object]) -> FoodItem:
    """Parse a table row into a food item."""
    raw_nutrients = row.get("nutrients") or {}
    nutrients = NutrientProfile(
        **{
            name: _optional_float(raw_nutrients.get(name))
            for name in NUTRIENT_FIELDS
        }
        | {name: float(raw_nutrients.get(name) or 0.0) for name in _REQUIRED}
    )
    portions = [
        ServingPortion(
            id=int(portion["id"]),
            amount=float(portion.get("amount", 1.0)),
            modifier=str(portion.get("modifier", "")),
            gram_weight=float(portion.get("gram_weight", 0.0)),
        )
        for portion in row.get("portions") or []
    ]
    date_added = row.get("date_added")
    return FoodItem(
        id=UUID(row["id"]),
        name=str(row.get("name", "")),
        brand=row.get("brand"),
        barcode=row.get("barcode"),
        nutrients=nutrients,
        serving_description=str(row.get("serving_description") or "100g"),
        grams_per_serving=float(row.get("grams_per_serving") or 100.0),
        serving_size_is_estimated=bool(row.get("serving_size_is_estimated", True)),
        source=str(row.get("source") or "Manual"),
        image_url=row.get("image_url"),
        portions=portions,
        date_added=datetime.fromisoformat(date_added) if date_added else None,
    )


def _optional_float(value: object) -> float | None:
    if value is None:
        return None
    return float(value)
