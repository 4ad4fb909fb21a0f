"""Tests for nutrient reconciliation across sources."""

import pytest

from biteledger.domain.labels import LabelFacts
from biteledger.domain.nutrition import FoodSource, NutrientProfile
from biteledger.services.reconcile import (
    flexible_float,
    from_label,
    from_manual_entry,
    from_off_nutriments,
    from_off_product,
    from_usda_detail,
    from_usda_search_item,
    normalize_profile,
    per_100g,
    usda_portions,
)
from tests.conftest import off_product, usda_search_item


def test_flexible_float() -> None:
    assert flexible_float(12) == 12.0
    assert flexible_float(" 3.5 ") == 3.5
    assert flexible_float("n/a") == 0.0
    assert flexible_float(None) == 0.0
    assert flexible_float(True) == 0.0
    assert flexible_float({"value": 1}) == 0.0


def test_per_100g() -> None:
    assert per_100g(120, 30) == pytest.approx(400.0)
    assert per_100g(50, 100) == 50
    assert per_100g(50, 0) == 50


def test_normalize_profile_scales_present_values() -> None:
    profile = NutrientProfile(
        calories=120, protein_g=3, carbs_g=15, fat_g=6, fiber_g=None, sodium_g=0.1
    )

    normalized = normalize_profile(profile, 30)

    assert normalized.calories == pytest.approx(400.0)
    assert normalized.fat_g == pytest.approx(20.0)
    assert normalized.sodium_g == pytest.approx(1 / 3)
    assert normalized.fiber_g is None


def test_usda_search_item_conversion() -> None:
    record = from_usda_search_item(usda_search_item())

    assert record is not None
    assert record.code == "usda_171688"
    assert record.source is FoodSource.USDA
    assert record.serving_size == "100g"
    assert record.nutrients.calories == 52
    assert record.nutrients.carbs_g == 13.8
    assert record.nutrients.sodium_g == pytest.approx(0.001)
    assert record.nutrients.saturated_fat_g == 0.0
    assert record.countries == ["en:united-states"]


def test_usda_search_item_without_nutrients_is_skipped() -> None:
    assert from_usda_search_item({"fdcId": 1, "description": "Mystery"}) is None


def test_usda_detail_conversion_converts_units() -> None:
    payload = {
        "fdcId": 173944,
        "description": "Bananas, raw",
        "foodNutrients": [
            {"nutrient": {"number": "208"}, "amount": 89},
            {"nutrient": {"number": "203"}, "value": "1.09"},
            {"nutrient": {"number": "307"}, "amount": 1},
            {"nutrient": {"number": "306"}, "amount": 358},
            {"nutrient": {"number": "320"}, "amount": 3},
            {"nutrient": {"number": "999"}, "amount": 7},
            {"nutrient": {"number": "204"}},
        ],
        "foodPortions": [
            {"id": 1, "amount": 1, "modifier": "medium (7\" to 7-7/8\" long)",
             "gramWeight": 118},
        ],
    }

    record = from_usda_detail(payload)

    assert record.code == "usda_173944"
    assert record.brand == "USDA"
    assert record.nutrients.calories == 89
    assert record.nutrients.protein_g == pytest.approx(1.09)
    assert record.nutrients.sodium_g == pytest.approx(0.001)
    assert record.nutrients.potassium_g == pytest.approx(0.358)
    assert record.nutrients.vitamin_a_g == pytest.approx(0.000003)
    assert record.nutrients.fat_g == 0.0
    assert record.serving_size == "1.0 medium (118g)"
    assert record.quantity == "medium: 118g"


def test_usda_detail_without_portions_defaults_to_100g() -> None:
    record = from_usda_detail({"fdcId": 5, "description": "Salt", "foodNutrients": []})

    assert record.serving_size == "100g"
    assert record.portions == []
    assert record.quantity is None


def test_usda_portions_filtering() -> None:
    portions = usda_portions(
        [
            {"id": 1, "amount": 1, "modifier": None, "gramWeight": 50},
            {"id": 2, "amount": 1, "modifier": "100 g", "gramWeight": 100},
            {"id": 3, "amount": 1, "modifier": "10205", "gramWeight": 40},
            {"id": 4, "amount": 1, "modifier": "NLEA serving", "gramWeight": 85},
            {"id": 5, "amount": 1, "modifier": "large (8\" to 8-7/8\" long)",
             "gramWeight": 136},
            {"id": 6, "amount": 0.5, "modifier": "cup, mashed", "gramWeight": "112.5"},
        ]
    )

    assert [portion.id for portion in portions] == [5, 6]
    assert portions[0].modifier == "large"
    assert portions[1].gram_weight == 112.5
    assert portions[1].display_name == "0.5 cup, mashed"
    assert portions[0].display_name == "large"


def test_off_nutriments_prefers_declared_energy() -> None:
    profile = from_off_nutriments(
        {"energy-kcal_100g": "250", "energy-kcal_value_computed": 240, "fat_100g": 10}
    )

    assert profile.calories == 250
    assert profile.fat_g == 10


def test_off_nutriments_falls_back_to_computed_energy() -> None:
    profile = from_off_nutriments(
        {"energy-kcal_100g": 0, "energy-kcal_value_computed": 240}
    )

    assert profile.calories == 240


def test_off_nutriments_missing() -> None:
    profile = from_off_nutriments(None)

    assert profile == NutrientProfile(calories=0, protein_g=0, carbs_g=0, fat_g=0)


def test_off_product_conversion() -> None:
    record = from_off_product(off_product())

    assert record.code == "3017620422003"
    assert record.source is FoodSource.OPEN_FOOD_FACTS
    assert record.brand == "Ferrero"
    assert record.serving_size == "2 tbsp (37g)"
    assert record.nutrients.fat_g == pytest.approx(30.9)
    assert record.countries == ["en:france"]


def test_off_product_without_name() -> None:
    record = from_off_product({"code": "1", "product_name": ""})

    assert record.name == "Unknown Product"
    assert record.nutrients.calories == 0


def test_label_values_normalized_to_100g() -> None:
    facts = LabelFacts(
        calories=120, protein=3, total_carbs=15, total_fat=6, sodium=150, vitamin_d=2
    )

    profile = from_label(facts, 30)

    assert profile.calories == pytest.approx(400.0)
    assert profile.fat_g == pytest.approx(20.0)
    assert profile.sodium_g == pytest.approx(0.5)
    assert profile.vitamin_d_g == pytest.approx(2 / 1_000_000 / 0.3)
    assert profile.fiber_g is None


def test_manual_entry_converts_vitamins() -> None:
    profile = from_manual_entry(
        {
            "calories": "200",
            "protein": 10,
            "total_carbs": 20,
            "total_fat": 8,
            "vitamin_a": 90,
            "vitamin_c": 6,
            "unknown": 4,
        },
        50,
    )

    assert profile.calories == pytest.approx(400.0)
    assert profile.vitamin_a_g == pytest.approx(0.00018)
    assert profile.vitamin_c_g == pytest.approx(0.012)
    assert profile.sugar_g is None


def test_flexible_float_rejects_non_finite() -> None:
    assert flexible_float("nan") == 0.0
    assert flexible_float("inf") == 0.0
    assert flexible_float(float("-inf")) == 0.0
    assert flexible_float(10**400) == 0.0


@pytest.mark.parametrize(
    "nutrients",
    [
        [None, {"nutrientNumber": "208", "value": 5}],
        ["208", 42, {"nutrientNumber": "208", "value": 5}],
        [[], {"nutrientNumber": "208", "value": 5}],
    ],
)
def test_usda_search_item_skips_malformed_nutrients(nutrients: list[object]) -> None:
    record = from_usda_search_item(
        {"fdcId": 1, "description": "x", "foodNutrients": nutrients}
    )

    assert record is not None
    assert record.nutrients.calories == 5


def test_usda_search_item_ignores_non_text_brand() -> None:
    record = from_usda_search_item(
        {"fdcId": 1, "description": "x", "brandOwner": 7, "foodNutrients": []}
    )

    assert record is not None
    assert record.brand is None


@pytest.mark.parametrize(
    "payload",
    [
        {"fdcId": 1, "foodNutrients": None, "foodPortions": None},
        {"fdcId": 1, "foodNutrients": "208", "foodPortions": "cup"},
        {"fdcId": 1, "foodNutrients": [None, 3, "x"], "foodPortions": [None, 1]},
        {
            "fdcId": 1,
            "foodNutrients": [
                {"nutrient": None, "amount": 9},
                {"nutrient": "208", "amount": 9},
                {"nutrient": [], "amount": 9},
            ],
        },
    ],
)
def test_usda_detail_tolerates_malformed_shapes(payload: dict[str, object]) -> None:
    record = from_usda_detail(payload)

    assert record.nutrients.calories == 0
    assert record.portions == []
    assert record.serving_size == "100g"


def test_usda_detail_keeps_valid_entries_among_malformed_ones() -> None:
    record = from_usda_detail(
        {
            "fdcId": 1,
            "foodNutrients": [
                None,
                {"nutrient": None, "amount": 1},
                {"nutrient": {"number": "208"}, "amount": "52"},
            ],
            "foodPortions": [
                "slice",
                {"id": "abc", "amount": "two", "modifier": "cup", "gramWeight": "nan"},
                {"id": 3, "modifier": "medium", "gramWeight": 182},
            ],
        }
    )

    assert record.nutrients.calories == 52
    assert [portion.modifier for portion in record.portions] == ["cup", "medium"]
    assert record.serving_size == "1.0 cup (0g)"


@pytest.mark.parametrize(
    ("raw_id", "expected"),
    [("abc", 0), (None, 0), ("7", 7), (2.0, 2), ({"id": 1}, 0), ("inf", 0)],
)
def test_usda_portion_ids_decode_leniently(raw_id: object, expected: int) -> None:
    portions = usda_portions([{"id": raw_id, "modifier": "cup", "gramWeight": 240}])

    assert portions[0].id == expected
    assert portions[0].gram_weight == 240


@pytest.mark.parametrize("nutriments", [None, [], "x", 5, [{"fat_100g": 3}]])
def test_off_nutriments_of_wrong_type_are_empty(nutriments: object) -> None:
    profile = from_off_nutriments(nutriments)

    assert profile == NutrientProfile(
        calories=0.0, protein_g=0.0, carbs_g=0.0, fat_g=0.0
    )


def test_off_product_ignores_non_text_fields() -> None:
    record = from_off_product(
        {
            "code": "1",
            "product_name": "Crackers",
            "brands": ["Tanaka"],
            "serving_size": 30,
            "nutriments": "none",
            "countries_tags": ["en:japan", None],
        }
    )

    assert record.brand is None
    assert record.serving_size is None
    assert record.nutrients.calories == 0
    assert record.countries == ["en:japan"]
