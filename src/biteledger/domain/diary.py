"""Domain models for the food diary."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum
from uuid import UUID

from biteledger.domain.nutrition import NutrientProfile, ServingPortion

GRAMS_PER_OUNCE = 28.3495


class MealType(StrEnum):
    """Meal slot a food log belongs to."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


@dataclass(frozen=True)
class FoodItem:
    """A stored food with its nutrient basis per 100 g."""

    id: UUID
    name: str
    nutrients: NutrientProfile
    serving_description: str = "100g"
    grams_per_serving: float = 100.0
    serving_size_is_estimated: bool = True
    source: str = "Manual"
    barcode: str | None = None
    brand: str | None = None
    image_url: str | None = None
    portions: list[ServingPortion] = field(default_factory=list)
    date_added: datetime | None = None

    def portion(self, portion_id: int | None) -> ServingPortion | None:
        """Return the stored portion with the given id."""
        if portion_id is None:
            return None
        return next((p for p in self.portions if p.id == portion_id), None)


@dataclass(frozen=True)
class FoodLog:
    """One eating event with nutrients cached at log time."""

    id: UUID
    food_item_id: UUID | None
    timestamp: datetime
    meal: MealType
    serving_multiplier: float
    total_grams: float
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    selected_portion_id: int | None = None
    display_unit: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class MealTotals:
    """Summed macros for a set of logs."""

    calories: float = 0.0
    protein_g: float = 0.0
    carbs_g: float = 0.0
    fat_g: float = 0.0

    def add(self, log: FoodLog) -> "MealTotals":
        """Return new totals including the log."""
        return MealTotals(
            calories=self.calories + log.calories,
            protein_g=self.protein_g + log.protein_g,
            carbs_g=self.carbs_g + log.carbs_g,
            fat_g=self.fat_g + log.fat_g,
        )


@dataclass(frozen=True)
class DaySummary:
    """Totals for one local day, overall and per meal."""

    day: date
    totals: MealTotals
    by_meal: dict[MealType, MealTotals]
    logs: list[FoodLog] = field(default_factory=list)
