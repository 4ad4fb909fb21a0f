"""Serving-size parsing and unit conversion."""

import logging
import re

from biteledger.domain.servings import FoodType, ParsedServing, ServingUnit

_NUMBER_PATTERN = re.compile(r"\d+\.?\d*")
_PAREN_GRAMS_PATTERN = re.compile(r"\((\d+\.?\d*)\s*g\)")

# Grams (or millilitres for volume units) per one unit.
_UNIT_FACTORS: dict[ServingUnit, float] = {
    ServingUnit.CUP: 236.588,
    ServingUnit.FLUID_OUNCE: 29.5735,
    ServingUnit.TABLESPOON: 14.7868,
    ServingUnit.TEASPOON: 4.92892,
    ServingUnit.MILLILITER: 1.0,
    ServingUnit.LITER: 1000.0,
    ServingUnit.GRAM: 1.0,
    ServingUnit.OUNCE: 28.3495,
    ServingUnit.POUND: 453.592,
}

_DENSITIES: dict[FoodType, float] = {
    FoodType.LIQUID: 1.0,
    FoodType.PEANUT_BUTTER: 1.08,
    FoodType.HONEY: 1.42,
    FoodType.OIL: 0.92,
    FoodType.FLOUR: 0.59,
    FoodType.SUGAR: 0.85,
    FoodType.MILK: 1.03,
    FoodType.OTHER: 1.0,
}

_FOOD_TYPE_KEYWORDS: tuple[tuple[FoodType, tuple[str, ...]], ...] = (
    (FoodType.PEANUT_BUTTER, ("peanut butter", "almond butter")),
    (FoodType.HONEY, ("honey",)),
    (FoodType.OIL, ("oil",)),
    (FoodType.FLOUR, ("flour",)),
    (FoodType.SUGAR, ("sugar",)),
    (FoodType.MILK, ("milk", "juice")),
    (FoodType.LIQUID, ("water", "beverage", "drink")),
)

_logger = logging.getLogger(__name__)


def parse_serving(text: str | None) -> ParsedServing | None:
    """Parse strings like "2 tbsp (32g)", "1 cup" or "100g".

    Returns None when the text is missing or holds no number.
    """
    if text is None:
        return None
    lowered = text.lower()

    number_match = _NUMBER_PATTERN.search(lowered)
    if number_match is None:
        _logger.debug("No amount in serving size %r", text)
        return None
    amount = float(number_match.group(0))

    grams: float | None = None
    grams_match = _PAREN_GRAMS_PATTERN.search(lowered)
    if grams_match is not None:
        grams = float(grams_match.group(1))

    main_part = lowered.split("(", 1)[0]
    unit = _classify_unit(main_part)
    if unit is ServingUnit.GRAM:
        grams = amount
    return ParsedServing(amount=amount, unit=unit, grams=grams)


def _classify_unit(main_part: str) -> ServingUnit:  # noqa: PLR0911
    """Greedy keyword classification; the check order is significant."""
    if "cup" in main_part:
        return ServingUnit.CUP
    if "fl oz" in main_part or "fluid ounce" in main_part:
        return ServingUnit.FLUID_OUNCE
    # "thsp" is a frequent OCR/typing slip for tbsp
    if any(word in main_part for word in ("tbsp", "tablespoon", "thsp")):
        return ServingUnit.TABLESPOON
    if "tsp" in main_part or "teaspoon" in main_part:
        return ServingUnit.TEASPOON
    if "ml" in main_part:
        return ServingUnit.MILLILITER
    if "oz" in main_part and "fl" not in main_part:
        return ServingUnit.OUNCE
    if "lb" in main_part or "pound" in main_part:
        return ServingUnit.POUND
    if "serving" in main_part or "portion" in main_part:
        return ServingUnit.SERVING
    if main_part.strip().endswith("g"):
        return ServingUnit.GRAM
    return ServingUnit.SERVING


def to_grams(amount: float, unit: ServingUnit, density: float = 1.0) -> float:
    """Convert an amount in unit to grams.

    Density applies to volume units only. Serving and container amounts
    are returned as-is; resolve them against the food's serving size.
    """
    factor = _UNIT_FACTORS.get(unit)
    if factor is None:
        return amount
    if unit.is_volume:
        return amount * factor * density
    return amount * factor


def from_grams(grams: float, unit: ServingUnit, density: float = 1.0) -> float:
    """Inverse of to_grams for the convertible units."""
    factor = _UNIT_FACTORS.get(unit)
    if factor is None:
        return grams
    if unit.is_volume:
        divisor = factor * density
        return grams / divisor if divisor else 0.0
    return grams / factor


def grams_for_serving(
    amount: float,
    unit: ServingUnit,
    *,
    serving_grams: float | None = None,
    density: float = 1.0,
) -> float:
    """Convert to grams, resolving servings against the food's serving weight."""
    if unit is ServingUnit.SERVING and serving_grams:
        return amount * serving_grams
    return to_grams(amount, unit, density)


def infer_food_type(name: str) -> FoodType:
    """Guess the food type from its name."""
    lowered = name.lower()
    for food_type, keywords in _FOOD_TYPE_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return food_type
    return FoodType.OTHER


def density_for(food_type: FoodType) -> float:
    """Return grams per millilitre for a food type."""
    return _DENSITIES[food_type]


def density_for_name(name: str) -> float:
    """Return the density inferred from a food name."""
    return density_for(infer_food_type(name))
