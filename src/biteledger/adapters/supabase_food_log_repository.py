"""Supabase repository for food logs."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from biteledger.domain.diary import FoodLog, MealType
from biteledger.services.diary import FoodLogRepository

_TABLE = "food_logs"


@dataclass
class SupabaseFoodLogRepository(FoodLogRepository):
    """Supabase implementation for food logs."""

    client: Client

    def create_log(self, log: FoodLog) -> FoodLog:
        """Insert a food log and return the stored row."""
        response = self.client.table(_TABLE).insert(_to_row(log)).execute()
        if not response.data:
            raise RuntimeError("Failed to create food log")
        return _parse_log(response.data[0])

    def get_log(self, log_id: UUID) -> FoodLog | None:
        """Return a food log by id."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .eq("id", str(log_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_log(response.data[0])

    def update_log(self, log: FoodLog) -> FoodLog:
        """Replace a food log row."""
        payload = _to_row(log)
        payload.pop("id")
        response = (
            self.client.table(_TABLE).update(payload).eq("id", str(log.id)).execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update food log")
        return _parse_log(response.data[0])

    def delete_log(self, log_id: UUID) -> None:
        """Delete a food log row."""
        self.client.table(_TABLE).delete().eq("id", str(log_id)).execute()

    def list_logs(self, start: datetime, end: datetime) -> list[FoodLog]:
        """Return logs within a time range, oldest first."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .gte("timestamp", start.isoformat())
            .lt("timestamp", end.isoformat())
            .order("timestamp", desc=False)
            .execute()
        )
        return [_parse_log(row) for row in response.data or []]

    def list_recent_logs(self, limit: int) -> list[FoodLog]:
        """Return the most recent logs."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .order("timestamp", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_log(row) for row in response.data or []]


def _to_row(log: FoodLog) -> dict[str, object]:
    return {
        "id": str(log.id),
        "food_item_id": str(log.food_item_id) if log.food_item_id else None,
        "timestamp": log.timestamp.isoformat(),
        "meal": log.meal.value,
        "serving_multiplier": log.serving_multiplier,
        "total_grams": log.total_grams,
        "calories": log.calories,
        "protein_g": log.protein_g,
        "carbs_g": log.carbs_g,
        "fat_g": log.fat_g,
        "selected_portion_id": log.selected_portion_id,
        "display_unit": log.display_unit,
        "notes": log.notes,
    }


def _parse_log(row: dict[str, object]) -> FoodLog:
    portion_id = row.get("selected_portion_id")
    return FoodLog(
        id=UUID(row["id"]),
        food_item_id=UUID(row["food_item_id"]) if row.get("food_item_id") else None,
        timestamp=datetime.fromisoformat(row["timestamp"]),
        meal=MealType(row.get("meal", MealType.SNACK)),
        serving_multiplier=float(row.get("serving_multiplier", 1.0)),
        total_grams=float(row.get("total_grams", 0.0)),
        calories=float(row.get("calories", 0.0)),
        protein_g=float(row.get("protein_g", 0.0)),
        carbs_g=float(row.get("carbs_g", 0.0)),
        fat_g=float(row.get("fat_g", 0.0)),
        selected_portion_id=int(portion_id) if portion_id is not None else None,
        display_unit=row.get("display_unit"),
        notes=row.get("notes"),
    )
