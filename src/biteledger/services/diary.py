"""Food diary service: stored foods and logged portions."""

import logging
import re
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID, uuid4

from biteledger.domain.diary import GRAMS_PER_OUNCE, FoodItem, FoodLog, MealType
from biteledger.domain.labels import LabelFacts
from biteledger.domain.nutrition import (
    FoodRecord,
    FoodSource,
    NutrientProfile,
    ServingPortion,
)
from biteledger.domain.servings import ServingUnit
from biteledger.services.errors import FoodNotFoundError, InvalidPortionError
from biteledger.services.labels import label_serving_grams
from biteledger.services.reconcile import from_label, from_manual_entry
from biteledger.services.servings import (
    density_for_name,
    grams_for_serving,
    parse_serving,
    to_grams,
)

_SOURCE_LABELS = {
    FoodSource.USDA: "USDA",
    FoodSource.OPEN_FOOD_FACTS: "OpenFoodFacts",
    FoodSource.MANUAL: "Manual",
}
_DEFAULT_SERVING_GRAMS = 100.0
_UNKNOWN_SERVING_GRAMS = 1.0
_NUMERIC_CHARS = re.compile(r"[\d.]")

_logger = logging.getLogger(__name__)


class FoodItemRepository(Protocol):
    """Persistence interface for stored foods."""

    def create_food(self, item: FoodItem) -> FoodItem:
        """Store a food item and return it."""

    def get_food(self, food_id: UUID) -> FoodItem | None:
        """Return a food item by id."""

    def find_by_barcode(self, barcode: str) -> FoodItem | None:
        """Return the food stored for a barcode or product code."""

    def update_food(self, item: FoodItem) -> FoodItem:
        """Replace a stored food item and return it."""


class FoodLogRepository(Protocol):
    """Persistence interface for food logs."""

    def create_log(self, log: FoodLog) -> FoodLog:
        """Store a food log and return it."""

    def get_log(self, log_id: UUID) -> FoodLog | None:
        """Return a food log by id."""

    def update_log(self, log: FoodLog) -> FoodLog:
        """Replace a stored food log and return it."""

    def delete_log(self, log_id: UUID) -> None:
        """Delete a food log."""

    def list_logs(self, start: datetime, end: datetime) -> list[FoodLog]:
        """Return logs with start <= timestamp < end, oldest first."""

    def list_recent_logs(self, limit: int) -> list[FoodLog]:
        """Return the most recent logs, newest first."""


@dataclass
class DiaryService:
    """Creates foods from any source and logs eaten portions."""

    food_repository: FoodItemRepository
    log_repository: FoodLogRepository

    def add_food_from_record(
        self, record: FoodRecord, unit: ServingUnit | None = None
    ) -> FoodItem:
        """Store a looked-up food, keeping one entry per product code.

        The serving becomes one of unit (defaults to the unit of the
        record's serving size, or grams when it cannot be parsed).
        """
        existing = self.food_repository.find_by_barcode(record.code)
        if existing is not None:
            return existing

        parsed = parse_serving(record.serving_size)
        serving_grams = (parsed.grams if parsed else None) or _DEFAULT_SERVING_GRAMS
        selected = unit or (parsed.unit if parsed else ServingUnit.GRAM)
        if selected in {ServingUnit.SERVING, ServingUnit.CONTAINER}:
            grams_per_unit = serving_grams
            description = record.serving_size or f"1 serving ({serving_grams:g}g)"
        elif selected is ServingUnit.GRAM:
            grams_per_unit = 1.0
            description = "1g"
        else:
            grams_per_unit = to_grams(1.0, selected, density_for_name(record.name))
            description = f"1 {selected.abbreviation} ({round(grams_per_unit, 1):g}g)"

        item = FoodItem(
            id=uuid4(),
            name=record.name,
            brand=record.brand,
            barcode=record.code,
            nutrients=record.nutrients,
            serving_description=description,
            grams_per_serving=grams_per_unit,
            serving_size_is_estimated=False,
            source=_SOURCE_LABELS[record.source],
            image_url=record.image_url,
            portions=list(record.portions),
            date_added=datetime.now(tz=UTC),
        )
        _logger.info("Stored %s food %s", item.source, item.name)
        return self.food_repository.create_food(item)

    def add_manual_food(  # noqa: PLR0913
        self,
        name: str,
        per_serving: dict[str, object],
        *,
        brand: str | None = None,
        serving_description: str | None = None,
        serving_grams: float | None = None,
        portions: list[ServingPortion] | None = None,
    ) -> FoodItem:
        """Store a food entered per serving; nutrients are kept per 100 g."""
        grams = serving_grams if serving_grams and serving_grams > 0 else None
        basis = grams or _UNKNOWN_SERVING_GRAMS
        item = FoodItem(
            id=uuid4(),
            name=name,
            brand=brand,
            nutrients=from_manual_entry(per_serving, basis),
            serving_description=serving_description or f"1 serving ({basis:g}g)",
            grams_per_serving=basis,
            serving_size_is_estimated=grams is None,
            source=_SOURCE_LABELS[FoodSource.MANUAL],
            portions=list(portions or []),
            date_added=datetime.now(tz=UTC),
        )
        return self.food_repository.create_food(item)

    def add_label_food(
        self,
        facts: LabelFacts,
        name: str,
        *,
        brand: str | None = None,
        serving_grams: float | None = None,
    ) -> FoodItem:
        """Store a food read off a nutrition label."""
        grams = serving_grams or label_serving_grams(facts)
        basis = grams or _UNKNOWN_SERVING_GRAMS
        item = FoodItem(
            id=uuid4(),
            name=name,
            brand=brand,
            nutrients=from_label(facts, basis),
            serving_description=facts.serving_size or f"1 serving ({basis:g}g)",
            grams_per_serving=basis,
            serving_size_is_estimated=grams is None,
            source=_SOURCE_LABELS[FoodSource.MANUAL],
            date_added=datetime.now(tz=UTC),
        )
        return self.food_repository.create_food(item)

    def get_food(self, food_id: UUID) -> FoodItem:
        """Return a stored food or raise FoodNotFoundError."""
        item = self.food_repository.get_food(food_id)
        if item is None:
            raise FoodNotFoundError(f"Food {food_id} not found")
        return item

    def correct_food(self, food_id: UUID, nutrients: NutrientProfile) -> FoodItem:
        """Replace a food's nutrients. Existing logs keep their cached values."""
        item = self.get_food(food_id)
        return self.food_repository.update_food(replace(item, nutrients=nutrients))

    def log_food(  # noqa: PLR0913
        self,
        food_id: UUID,
        *,
        meal: MealType,
        servings: float | None = None,
        grams: float | None = None,
        amount: float | None = None,
        unit: ServingUnit | None = None,
        portion_id: int | None = None,
        timestamp: datetime | None = None,
        notes: str | None = None,
    ) -> FoodLog:
        """Log a portion of a stored food.

        The portion is given as servings (of a stored portion when
        portion_id is set), as grams, or as amount + unit.
        """
        item = self.get_food(food_id)
        multiplier, total_grams = _resolve_portion(
            item,
            servings=servings,
            grams=grams,
            amount=amount,
            unit=unit,
            portion_id=portion_id,
        )
        log = _build_log(
            uuid4(),
            item,
            meal=meal,
            timestamp=timestamp or datetime.now(tz=UTC),
            serving_multiplier=multiplier,
            total_grams=total_grams,
            portion_id=portion_id if item.portion(portion_id) else None,
            notes=notes,
        )
        return self.log_repository.create_log(log)

    def update_log(  # noqa: PLR0913
        self,
        log_id: UUID,
        *,
        servings: float | None = None,
        grams: float | None = None,
        meal: MealType | None = None,
        display_unit: str | None = None,
        notes: str | None = None,
    ) -> FoodLog:
        """Edit a log; a new portion recomputes nutrients from the current food."""
        if servings is not None and grams is not None:
            raise InvalidPortionError("Give at most one of servings or grams")
        log = self.get_log(log_id)
        updated = replace(
            log,
            meal=meal or log.meal,
            display_unit=display_unit if display_unit is not None else log.display_unit,
            notes=notes if notes is not None else log.notes,
        )
        if servings is None and grams is None:
            return self.log_repository.update_log(updated)

        item = (
            self.food_repository.get_food(log.food_item_id)
            if log.food_item_id
            else None
        )
        if item is None:
            updated = _rescale_log(updated, servings=servings, grams=grams)
        else:
            multiplier, total_grams = _resolve_portion(
                item,
                servings=servings,
                grams=grams,
                portion_id=log.selected_portion_id,
            )
            updated = _build_log(
                log.id,
                item,
                meal=updated.meal,
                timestamp=log.timestamp,
                serving_multiplier=multiplier,
                total_grams=total_grams,
                portion_id=log.selected_portion_id,
                notes=updated.notes,
                display_unit=updated.display_unit,
            )
        return self.log_repository.update_log(updated)

    def get_log(self, log_id: UUID) -> FoodLog:
        """Return a log or raise FoodNotFoundError."""
        log = self.log_repository.get_log(log_id)
        if log is None:
            raise FoodNotFoundError(f"Food log {log_id} not found")
        return log

    def delete_log(self, log_id: UUID) -> None:
        """Delete a log."""
        self.get_log(log_id)
        self.log_repository.delete_log(log_id)


def _resolve_portion(  # noqa: PLR0913
    item: FoodItem,
    *,
    servings: float | None = None,
    grams: float | None = None,
    amount: float | None = None,
    unit: ServingUnit | None = None,
    portion_id: int | None = None,
) -> tuple[float, float]:
    """Return (serving multiplier, total grams) for a requested portion."""
    if (amount is None) != (unit is None):
        raise InvalidPortionError("amount and unit must be given together")
    if sum(part is not None for part in (servings, grams, amount)) > 1:
        raise InvalidPortionError("Give at most one of servings, grams or amount")
    per_serving = item.grams_per_serving or _DEFAULT_SERVING_GRAMS
    if amount is not None and unit is not None:
        grams = grams_for_serving(
            amount,
            unit,
            serving_grams=per_serving,
            density=density_for_name(item.name),
        )
    if grams is not None:
        return grams / per_serving, grams

    multiplier = servings if servings is not None else 1.0
    portion = item.portion(portion_id)
    if portion is not None:
        return multiplier, multiplier * portion.gram_weight
    return multiplier, multiplier * per_serving


def _build_log(  # noqa: PLR0913
    log_id: UUID,
    item: FoodItem,
    *,
    meal: MealType,
    timestamp: datetime,
    serving_multiplier: float,
    total_grams: float,
    portion_id: int | None,
    notes: str | None,
    display_unit: str | None = None,
) -> FoodLog:
    """Create a log with nutrients cached from the food's per-100 g basis."""
    cached = item.nutrients.scaled(total_grams / 100.0)
    return FoodLog(
        id=log_id,
        food_item_id=item.id,
        timestamp=timestamp,
        meal=meal,
        serving_multiplier=serving_multiplier,
        total_grams=total_grams,
        calories=cached.calories,
        protein_g=cached.protein_g,
        carbs_g=cached.carbs_g,
        fat_g=cached.fat_g,
        selected_portion_id=portion_id,
        display_unit=display_unit,
        notes=notes,
    )


def _rescale_log(
    log: FoodLog, *, servings: float | None, grams: float | None
) -> FoodLog:
    """Scale cached values when the food itself is gone."""
    if grams is None:
        per_serving = (
            log.total_grams / log.serving_multiplier if log.serving_multiplier else 0.0
        )
        grams = (servings or 0.0) * per_serving
        multiplier = servings or 0.0
    else:
        multiplier = (
            grams / (log.total_grams / log.serving_multiplier)
            if log.total_grams and log.serving_multiplier
            else log.serving_multiplier
        )
    factor = grams / log.total_grams if log.total_grams else 0.0
    return replace(
        log,
        serving_multiplier=multiplier,
        total_grams=grams,
        calories=log.calories * factor,
        protein_g=log.protein_g * factor,
        carbs_g=log.carbs_g * factor,
        fat_g=log.fat_g * factor,
    )


def serving_display_text(log: FoodLog, item: FoodItem | None) -> str:
    """Describe a logged portion, e.g. "2 tbsp", "1.5 medium" or "120g"."""
    grams_text = f"{log.total_grams:.0f}g"
    if item is None or log.display_unit == "g":
        return grams_text
    if log.display_unit == "oz":
        ounces = log.total_grams / GRAMS_PER_OUNCE
        return f"{_format_count(ounces)} oz"

    portion = item.portion(log.selected_portion_id)
    if portion is not None:
        return f"{_format_count(log.serving_multiplier)} {portion.modifier}"

    label = _NUMERIC_CHARS.sub("", item.serving_description.split("(", 1)[0]).strip()
    if label and label != "g":
        return f"{_format_count(log.serving_multiplier)} {label}"
    return grams_text


def _format_count(value: float) -> str:
    if value == int(value):
        return str(int(value))
    return f"{value:.1f}"
