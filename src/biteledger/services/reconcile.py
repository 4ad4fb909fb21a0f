"""Reconcile nutrient data from USDA, Open Food Facts and manual entry.

Every source is normalized to kcal or grams per 100 g. Malformed numbers
default to zero rather than raising.
"""

import math
import re

from biteledger.domain.labels import LabelFacts
from biteledger.domain.nutrition import (
    FoodRecord,
    FoodSource,
    NutrientProfile,
    ServingPortion,
)

MG_PER_G = 1000.0
UG_PER_G = 1_000_000.0

# USDA nutrient numbers mapped to (field, divisor to grams).
_USDA_SEARCH_NUTRIENTS: dict[str, tuple[str, float]] = {
    "208": ("calories", 1.0),
    "203": ("protein_g", 1.0),
    "205": ("carbs_g", 1.0),
    "204": ("fat_g", 1.0),
    "291": ("fiber_g", 1.0),
    "269": ("sugar_g", 1.0),
    "307": ("sodium_g", MG_PER_G),
    "606": ("saturated_fat_g", 1.0),
}

_USDA_DETAIL_NUTRIENTS: dict[str, tuple[str, float]] = {
    **_USDA_SEARCH_NUTRIENTS,
    "605": ("trans_fat_g", 1.0),
    "601": ("cholesterol_g", MG_PER_G),
    "320": ("vitamin_a_g", UG_PER_G),
    "401": ("vitamin_c_g", MG_PER_G),
    "324": ("vitamin_d_g", UG_PER_G),
    "301": ("calcium_g", MG_PER_G),
    "303": ("iron_g", MG_PER_G),
    "306": ("potassium_g", MG_PER_G),
}

_OFF_NUTRIMENT_KEYS: dict[str, str] = {
    "protein_g": "proteins_100g",
    "carbs_g": "carbohydrates_100g",
    "fat_g": "fat_100g",
    "fiber_g": "fiber_100g",
    "sugar_g": "sugars_100g",
    "sodium_g": "sodium_100g",
    "saturated_fat_g": "saturated-fat_100g",
    "trans_fat_g": "trans-fat_100g",
    "monounsaturated_fat_g": "monounsaturated-fat_100g",
    "polyunsaturated_fat_g": "polyunsaturated-fat_100g",
    "cholesterol_g": "cholesterol_100g",
    "vitamin_a_g": "vitamin-a_100g",
    "vitamin_c_g": "vitamin-c_100g",
    "vitamin_d_g": "vitamin-d_100g",
    "calcium_g": "calcium_100g",
    "iron_g": "iron_100g",
    "potassium_g": "potassium_100g",
}

_USDA_LENGTH_QUALIFIERS = (
    ' (7" to 7-7/8" long)',
    ' (8" to 8-7/8" long)',
    ' (6" to 6-7/8" long)',
    ' (9" or longer)',
    ' (less than 6" long)',
)

_NUMERIC_CODE = re.compile(r"^[0-9]+$")

_LABEL_NUMBER_FIELDS = frozenset(LabelFacts.model_fields) - {
    "serving_size",
    "servings_per_container",
}

USDA_CODE_PREFIX = "usda_"
USDA_COUNTRIES = ["en:united-states"]


def flexible_float(value: object) -> float:
    """Decode a value that may be a number or a numeric string.

    Anything else, including NaN and infinities, decodes to 0.0.
    """
    if isinstance(value, bool):
        return 0.0
    if not isinstance(value, int | float | str):
        return 0.0
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (OverflowError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def per_100g(value: float, basis_grams: float) -> float:
    """Normalize a value declared per basis_grams to per 100 g."""
    if basis_grams <= 0:
        return value
    return value / (basis_grams / 100.0)


def normalize_profile(profile: NutrientProfile, basis_grams: float) -> NutrientProfile:
    """Normalize a whole profile declared per basis_grams to per 100 g."""
    if basis_grams <= 0:
        return profile
    return profile.scaled(100.0 / basis_grams)


def from_usda_search_item(item: dict[str, object]) -> FoodRecord | None:
    """Convert a USDA search hit; hits without nutrients are skipped."""
    nutrients = item.get("foodNutrients")
    if not isinstance(nutrients, list):
        return None
    values = _zeroed(_USDA_SEARCH_NUTRIENTS)
    for nutrient in nutrients:
        if not isinstance(nutrient, dict):
            continue
        number = str(nutrient.get("nutrientNumber") or "")
        mapping = _USDA_SEARCH_NUTRIENTS.get(number)
        if mapping is None:
            continue
        field_name, divisor = mapping
        values[field_name] = flexible_float(nutrient.get("value")) / divisor
    return FoodRecord(
        code=f"{USDA_CODE_PREFIX}{item.get('fdcId')}",
        name=str(item.get("description") or ""),
        brand=_optional_text(item.get("brandOwner")),
        source=FoodSource.USDA,
        serving_size="100g",
        nutrients=NutrientProfile(**values),
        countries=list(USDA_COUNTRIES),
    )


def from_usda_detail(payload: dict[str, object]) -> FoodRecord:
    """Convert a USDA food detail payload, including household portions."""
    values = _zeroed(_USDA_DETAIL_NUTRIENTS)
    raw_nutrients = payload.get("foodNutrients")
    for detail in raw_nutrients if isinstance(raw_nutrients, list) else []:
        if not isinstance(detail, dict):
            continue
        nutrient = detail.get("nutrient")
        if not isinstance(nutrient, dict):
            continue
        number = str(nutrient.get("number") or "")
        mapping = _USDA_DETAIL_NUTRIENTS.get(number)
        if mapping is None:
            continue
        # Foundation/Survey foods use "amount", SR Legacy uses "value".
        raw = detail.get("amount")
        if raw is None:
            raw = detail.get("value")
        if raw is None:
            continue
        field_name, divisor = mapping
        values[field_name] = flexible_float(raw) / divisor

    raw_portions = payload.get("foodPortions")
    portions = usda_portions(raw_portions if isinstance(raw_portions, list) else [])
    if portions:
        first = portions[0]
        serving_size = f"1.0 {first.modifier} ({int(first.gram_weight)}g)"
        quantity = ", ".join(
            f"{portion.modifier}: {int(portion.gram_weight)}g" for portion in portions
        )
    else:
        serving_size = "100g"
        quantity = None

    return FoodRecord(
        code=f"{USDA_CODE_PREFIX}{payload.get('fdcId')}",
        name=str(payload.get("description") or ""),
        brand="USDA",
        source=FoodSource.USDA,
        serving_size=serving_size,
        nutrients=NutrientProfile(**values),
        portions=portions,
        countries=list(USDA_COUNTRIES),
        quantity=quantity,
    )


def usda_portions(raw_portions: list[dict[str, object]]) -> list[ServingPortion]:
    """Keep the meaningful household portions of a USDA food."""
    portions: list[ServingPortion] = []
    for raw in raw_portions:
        if not isinstance(raw, dict):
            continue
        modifier = raw.get("modifier")
        if not isinstance(modifier, str):
            continue
        lowered = modifier.lower()
        if "100 g" in lowered or "100g" in lowered:
            continue
        if _NUMERIC_CODE.match(modifier):
            continue
        cleaned = modifier
        for qualifier in _USDA_LENGTH_QUALIFIERS:
            cleaned = cleaned.replace(qualifier, "")
        if cleaned.lower() == "nlea serving":
            continue
        amount = raw.get("amount")
        portions.append(
            ServingPortion(
                id=int(flexible_float(raw.get("id"))),
                amount=flexible_float(amount) if amount is not None else 1.0,
                modifier=cleaned,
                gram_weight=flexible_float(raw.get("gramWeight")),
            )
        )
    return portions


def from_off_nutriments(nutriments: object) -> NutrientProfile:
    """Read Open Food Facts per-100 g nutriments."""
    if not isinstance(nutriments, dict) or not nutriments:
        return NutrientProfile(calories=0.0, protein_g=0.0, carbs_g=0.0, fat_g=0.0)
    calories = flexible_float(nutriments.get("energy-kcal_100g"))
    if calories <= 0:
        calories = flexible_float(nutriments.get("energy-kcal_value_computed"))
    values: dict[str, float] = {"calories": calories}
    for field_name, key in _OFF_NUTRIMENT_KEYS.items():
        values[field_name] = flexible_float(nutriments.get(key))
    return NutrientProfile(**values)


def from_off_product(product: dict[str, object]) -> FoodRecord:
    """Convert an Open Food Facts product payload."""
    name = product.get("product_name")
    countries = product.get("countries_tags")
    return FoodRecord(
        code=str(product.get("code") or ""),
        name=name if isinstance(name, str) and name else "Unknown Product",
        brand=_optional_text(product.get("brands")),
        source=FoodSource.OPEN_FOOD_FACTS,
        serving_size=_optional_text(product.get("serving_size")),
        nutrients=from_off_nutriments(product.get("nutriments")),
        image_url=_optional_text(product.get("image_url")),
        countries=(
            [tag for tag in countries if isinstance(tag, str)]
            if isinstance(countries, list)
            else []
        ),
        quantity=_optional_text(product.get("quantity")),
    )


def from_label(facts: LabelFacts, serving_grams: float) -> NutrientProfile:
    """Convert per-serving label values to per 100 g.

    Label minerals are in mg and vitamin D in µg; they are stored in grams.
    """
    return NutrientProfile(
        calories=per_100g(facts.calories or 0.0, serving_grams),
        protein_g=per_100g(facts.protein or 0.0, serving_grams),
        carbs_g=per_100g(facts.total_carbs or 0.0, serving_grams),
        fat_g=per_100g(facts.total_fat or 0.0, serving_grams),
        fiber_g=_optional_per_100g(facts.fiber, serving_grams),
        sugar_g=_optional_per_100g(facts.sugars, serving_grams),
        sodium_g=_optional_per_100g(facts.sodium, serving_grams, MG_PER_G),
        saturated_fat_g=_optional_per_100g(facts.saturated_fat, serving_grams),
        trans_fat_g=_optional_per_100g(facts.trans_fat, serving_grams),
        cholesterol_g=_optional_per_100g(facts.cholesterol, serving_grams, MG_PER_G),
        vitamin_d_g=_optional_per_100g(facts.vitamin_d, serving_grams, UG_PER_G),
        calcium_g=_optional_per_100g(facts.calcium, serving_grams, MG_PER_G),
        iron_g=_optional_per_100g(facts.iron, serving_grams, MG_PER_G),
        potassium_g=_optional_per_100g(facts.potassium, serving_grams, MG_PER_G),
    )


def from_manual_entry(
    per_serving: dict[str, object], serving_grams: float
) -> NutrientProfile:
    """Convert manually entered per-serving values to per 100 g.

    Keys follow LabelFacts plus vitamin_a (µg) and vitamin_c (mg).
    Missing optional fields stay None.
    """
    facts = LabelFacts(
        **{
            key: _optional_float(value)
            for key, value in per_serving.items()
            if key in _LABEL_NUMBER_FIELDS
        }
    )
    profile = from_label(facts, serving_grams)
    vitamin_a = per_serving.get("vitamin_a")
    vitamin_c = per_serving.get("vitamin_c")
    return NutrientProfile(
        **{
            **profile.to_dict(),
            "vitamin_a_g": _optional_per_100g(
                _optional_float(vitamin_a), serving_grams, UG_PER_G
            ),
            "vitamin_c_g": _optional_per_100g(
                _optional_float(vitamin_c), serving_grams, MG_PER_G
            ),
        }
    )


def _optional_per_100g(
    value: float | None, basis_grams: float, divisor: float = 1.0
) -> float | None:
    if value is None:
        return None
    return per_100g(value / divisor, basis_grams)


def _optional_float(value: object) -> float | None:
    if value is None or value == "":
        return None
    return flexible_float(value)


def _optional_text(value: object) -> str | None:
    return value if isinstance(value, str) and value else None


def _zeroed(mapping: dict[str, tuple[str, float]]) -> dict[str, float]:
    return {field_name: 0.0 for field_name, _ in mapping.values()}
