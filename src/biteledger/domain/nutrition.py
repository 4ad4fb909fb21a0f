"""Nutrition domain models."""

from dataclasses import dataclass, field
from enum import StrEnum


class FoodSource(StrEnum):
    """Where a food record came from."""

    USDA = "usda"
    OPEN_FOOD_FACTS = "open_food_facts"
    MANUAL = "manual"


@dataclass(frozen=True)
class NutrientProfile:
    """Nutrients per 100 g. Micronutrients are stored in grams."""

    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    fiber_g: float | None = None
    sugar_g: float | None = None
    sodium_g: float | None = None
    saturated_fat_g: float | None = None
    trans_fat_g: float | None = None
    monounsaturated_fat_g: float | None = None
    polyunsaturated_fat_g: float | None = None
    cholesterol_g: float | None = None
    vitamin_a_g: float | None = None
    vitamin_c_g: float | None = None
    vitamin_d_g: float | None = None
    calcium_g: float | None = None
    iron_g: float | None = None
    potassium_g: float | None = None

    def scaled(self, factor: float) -> "NutrientProfile":
        """Return a copy with every present value multiplied by factor."""
        values = {
            name: (value * factor if value is not None else None)
            for name, value in self.to_dict().items()
        }
        return NutrientProfile(**values)

    def to_dict(self) -> dict[str, float | None]:
        """Return the profile as a plain mapping."""
        return {name: getattr(self, name) for name in NUTRIENT_FIELDS}


NUTRIENT_FIELDS: tuple[str, ...] = (
    "calories",
    "protein_g",
    "carbs_g",
    "fat_g",
    "fiber_g",
    "sugar_g",
    "sodium_g",
    "saturated_fat_g",
    "trans_fat_g",
    "monounsaturated_fat_g",
    "polyunsaturated_fat_g",
    "cholesterol_g",
    "vitamin_a_g",
    "vitamin_c_g",
    "vitamin_d_g",
    "calcium_g",
    "iron_g",
    "potassium_g",
)

EMPTY_PROFILE = NutrientProfile(calories=0.0, protein_g=0.0, carbs_g=0.0, fat_g=0.0)


@dataclass(frozen=True)
class ServingPortion:
    """A named household portion with its gram weight."""

    id: int
    amount: float
    modifier: str
    gram_weight: float

    @property
    def display_name(self) -> str:
        """Human readable portion label."""
        if self.amount == 1.0:
            return self.modifier
        return f"{self.amount:g} {self.modifier}"


@dataclass(frozen=True)
class FoodRecord:
    """A food as returned by a nutrition lookup, normalized per 100 g."""

    code: str
    name: str
    brand: str | None
    source: FoodSource
    serving_size: str | None
    nutrients: NutrientProfile
    portions: list[ServingPortion] = field(default_factory=list)
    image_url: str | None = None
    countries: list[str] = field(default_factory=list)
    quantity: str | None = None
