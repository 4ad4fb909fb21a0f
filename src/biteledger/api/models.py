"""Pydantic request models for the HTTP API."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from biteledger.domain.diary import MealType
from biteledger.domain.labels import LabelFacts
from biteledger.domain.preferences import TrackingMetric
from biteledger.domain.servings import FoodType, ServingUnit


class ConvertRequest(BaseModel):
    """Amount to convert to grams and, optionally, to another unit."""

    amount: float = Field(ge=0)
    unit: ServingUnit
    food_name: str | None = None
    food_type: FoodType | None = None
    serving_grams: float | None = Field(default=None, gt=0)
    target_unit: ServingUnit | None = None


class LabelLinesRequest(BaseModel):
    """OCR lines of a nutrition label."""

    lines: list[str]


class ManualFood(BaseModel):
    """A food typed in by hand, with nutrients per serving."""

    name: str = Field(min_length=1)
    brand: str | None = None
    serving_description: str | None = None
    serving_grams: float | None = Field(default=None, gt=0)
    nutrients: dict[str, float | None]


class LabelFood(BaseModel):
    """A food read off a nutrition label."""

    name: str = Field(min_length=1)
    brand: str | None = None
    serving_grams: float | None = Field(default=None, gt=0)
    facts: LabelFacts


class AddFoodRequest(BaseModel):
    """Store a food from a lookup code, a manual entry or a label."""

    code: str | None = None
    unit: ServingUnit | None = None
    manual: ManualFood | None = None
    label: LabelFood | None = None

    @model_validator(mode="after")
    def _one_source(self) -> "AddFoodRequest":
        given = [part for part in (self.code, self.manual, self.label) if part]
        if len(given) != 1:
            raise ValueError("Provide exactly one of code, manual or label")
        return self


class LogFoodRequest(BaseModel):
    """Log a portion of a stored food."""

    food_id: UUID
    meal: MealType
    servings: float | None = Field(default=None, gt=0)
    grams: float | None = Field(default=None, gt=0)
    amount: float | None = Field(default=None, gt=0)
    unit: ServingUnit | None = None
    portion_id: int | None = None
    timestamp: datetime | None = None
    notes: str | None = None

    @model_validator(mode="after")
    def _one_quantity(self) -> "LogFoodRequest":
        if (self.amount is None) != (self.unit is None):
            raise ValueError("amount and unit must be given together")
        given = [
            part
            for part in (self.servings, self.grams, self.amount)
            if part is not None
        ]
        if len(given) > 1:
            raise ValueError("Provide at most one of servings, grams or amount")
        return self


class UpdateLogRequest(BaseModel):
    """Edit a food log."""

    servings: float | None = Field(default=None, gt=0)
    grams: float | None = Field(default=None, gt=0)
    meal: MealType | None = None
    display_unit: str | None = None
    notes: str | None = None

    @model_validator(mode="after")
    def _one_quantity(self) -> "UpdateLogRequest":
        if self.servings is not None and self.grams is not None:
            raise ValueError("Provide at most one of servings or grams")
        return self


class PreferencesUpdate(BaseModel):
    """Fields of the preferences record to change."""

    daily_calorie_goal: float | None = Field(default=None, gt=0)
    tracking_metric: TrackingMetric | None = None
    show_daily_goal: bool | None = None
