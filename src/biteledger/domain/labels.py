"""Models for nutrition facts read off a label."""

from pydantic import BaseModel


class LabelFacts(BaseModel):
    """Per-serving values as printed on a nutrition label.

    Cholesterol, sodium, calcium, iron and potassium are in mg;
    vitamin D is in µg; everything else is in grams or kcal.
    """

    serving_size: str | None = None
    servings_per_container: str | None = None
    calories: float | None = None
    total_fat: float | None = None
    saturated_fat: float | None = None
    trans_fat: float | None = None
    cholesterol: float | None = None
    sodium: float | None = None
    total_carbs: float | None = None
    fiber: float | None = None
    sugars: float | None = None
    added_sugars: float | None = None
    protein: float | None = None
    vitamin_d: float | None = None
    calcium: float | None = None
    iron: float | None = None
    potassium: float | None = None


class RecognizedText(BaseModel):
    """Structured output of text recognition."""

    lines: list[str]
