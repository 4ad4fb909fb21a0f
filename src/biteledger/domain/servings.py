"""Serving units and parsed serving sizes."""

from dataclasses import dataclass
from enum import StrEnum


class ServingUnit(StrEnum):
    """Units a serving can be expressed in."""

    CUP = "cup"
    FLUID_OUNCE = "fluid_ounce"
    TABLESPOON = "tablespoon"
    TEASPOON = "teaspoon"
    MILLILITER = "milliliter"
    LITER = "liter"
    GRAM = "gram"
    OUNCE = "ounce"
    POUND = "pound"
    SERVING = "serving"
    CONTAINER = "container"

    @property
    def abbreviation(self) -> str:
        """Short label used in serving descriptions."""
        return _ABBREVIATIONS[self]

    @property
    def is_volume(self) -> bool:
        """Return True for units that need a density to become grams."""
        return self in _VOLUME_UNITS


_ABBREVIATIONS = {
    ServingUnit.CUP: "cup",
    ServingUnit.FLUID_OUNCE: "fl oz",
    ServingUnit.TABLESPOON: "tbsp",
    ServingUnit.TEASPOON: "tsp",
    ServingUnit.MILLILITER: "mL",
    ServingUnit.LITER: "L",
    ServingUnit.GRAM: "g",
    ServingUnit.OUNCE: "oz",
    ServingUnit.POUND: "lb",
    ServingUnit.SERVING: "serving",
    ServingUnit.CONTAINER: "container",
}

_VOLUME_UNITS = frozenset(
    {
        ServingUnit.CUP,
        ServingUnit.FLUID_OUNCE,
        ServingUnit.TABLESPOON,
        ServingUnit.TEASPOON,
        ServingUnit.MILLILITER,
        ServingUnit.LITER,
    }
)


class FoodType(StrEnum):
    """Coarse food classification used to pick a density."""

    LIQUID = "liquid"
    PEANUT_BUTTER = "peanut_butter"
    HONEY = "honey"
    OIL = "oil"
    FLOUR = "flour"
    SUGAR = "sugar"
    MILK = "milk"
    OTHER = "other"


@dataclass(frozen=True)
class ParsedServing:
    """Result of parsing a free-text serving size."""

    amount: float
    unit: ServingUnit
    grams: float | None
