"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import date
from uuid import UUID

import httpx
from fastapi import FastAPI, File, HTTPException, Request, UploadFile, status
from openai import OpenAIError

from biteledger.api.models import (
    AddFoodRequest,
    ConvertRequest,
    LabelLinesRequest,
    LogFoodRequest,
    PreferencesUpdate,
    UpdateLogRequest,
)
from biteledger.app_logging import configure_logging
from biteledger.containers import AppContainer
from biteledger.domain.diary import DaySummary, FoodItem, FoodLog, MealTotals
from biteledger.domain.labels import LabelFacts
from biteledger.domain.nutrition import FoodRecord
from biteledger.domain.preferences import GoalProgress, UserPreferences
from biteledger.services.diary import serving_display_text
from biteledger.services.errors import (
    FoodNotFoundError,
    InvalidPortionError,
    LookupFailedError,
)
from biteledger.services.labels import label_serving_grams, parse_label
from biteledger.services.servings import (
    density_for,
    density_for_name,
    from_grams,
    grams_for_serving,
    parse_serving,
)
from biteledger.services.stats import PeriodSummary


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(debug=container.settings.debug)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/foods/search")
    async def search_foods(q: str, request: Request) -> dict[str, object]:
        """Search USDA and Open Food Facts."""
        state_container: AppContainer = request.app.state.container
        try:
            results = await state_container.search_service.search_all(q)
        except LookupFailedError as exc:
            raise HTTPException(status.HTTP_404_NOT_FOUND, str(exc)) from exc
        return {"results": [_record_payload(record) for record in results]}

    @app.get("/foods/barcode/{code}")
    async def food_by_barcode(code: str, request: Request) -> dict[str, object]:
        """Look a packaged product up by barcode."""
        state_container: AppContainer = request.app.state.container
        service = state_container.search_service.off_service
        record = await _lookup(lambda: service.fetch_product(code), logger)
        return _record_payload(record)

    @app.get("/foods/{code}")
    async def food_details(code: str, request: Request) -> dict[str, object]:
        """Fetch full details for a search result code."""
        state_container: AppContainer = request.app.state.container
        service = state_container.search_service
        record = await _lookup(lambda: service.get_details(code), logger)
        return _record_payload(record)

    @app.get("/servings/parse")
    async def parse_serving_text(text: str) -> dict[str, object]:
        """Parse a free-text serving size."""
        parsed = parse_serving(text)
        if parsed is None:
            raise HTTPException(
                status.HTTP_422_UNPROCESSABLE_ENTITY, "No amount in serving size"
            )
        return {
            "amount": parsed.amount,
            "unit": parsed.unit.value,
            "abbreviation": parsed.unit.abbreviation,
            "grams": parsed.grams,
        }

    @app.post("/servings/convert")
    async def convert_serving(payload: ConvertRequest) -> dict[str, object]:
        """Convert an amount to grams and optionally to another unit."""
        if payload.food_type is not None:
            density = density_for(payload.food_type)
        elif payload.food_name:
            density = density_for_name(payload.food_name)
        else:
            density = 1.0
        grams = grams_for_serving(
            payload.amount,
            payload.unit,
            serving_grams=payload.serving_grams,
            density=density,
        )
        result: dict[str, object] = {"grams": grams, "density": density}
        if payload.target_unit is not None:
            result["target_unit"] = payload.target_unit.value
            result["target_amount"] = from_grams(grams, payload.target_unit, density)
        return result

    @app.post("/labels/parse")
    async def parse_label_lines(payload: LabelLinesRequest) -> dict[str, object]:
        """Read nutrition facts from OCR lines."""
        facts = parse_label(payload.lines)
        if facts is None:
            raise HTTPException(
                status.HTTP_422_UNPROCESSABLE_ENTITY, "Not a nutrition label"
            )
        return _label_payload(facts)

    @app.post("/labels/scan")
    async def scan_label(
        request: Request, image: UploadFile = File(...)
    ) -> dict[str, object]:
        """Recognize a label photo and parse its nutrition facts."""
        state_container: AppContainer = request.app.state.container
        image_bytes = await image.read()
        if not image_bytes:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Empty image")
        try:
            lines = await state_container.text_recognition_service.recognize(
                image_bytes
            )
        except (OpenAIError, RuntimeError) as exc:
            logger.warning("Text recognition failed: %s", exc)
            raise HTTPException(
                status.HTTP_502_BAD_GATEWAY, "Text recognition failed"
            ) from exc
        facts = parse_label(lines)
        return {"lines": lines, "facts": _label_payload(facts) if facts else None}

    @app.post("/diary/foods", status_code=status.HTTP_201_CREATED)
    async def add_food(payload: AddFoodRequest, request: Request) -> dict[str, object]:
        """Store a food from a lookup, a manual entry or a label."""
        state_container: AppContainer = request.app.state.container
        diary = state_container.diary_service
        if payload.code:
            service = state_container.search_service
            record = await _lookup(lambda: service.get_details(payload.code), logger)
            item = diary.add_food_from_record(record, unit=payload.unit)
        elif payload.manual:
            manual = payload.manual
            item = diary.add_manual_food(
                manual.name,
                dict(manual.nutrients),
                brand=manual.brand,
                serving_description=manual.serving_description,
                serving_grams=manual.serving_grams,
            )
        else:
            label = payload.label
            item = diary.add_label_food(
                label.facts,
                label.name,
                brand=label.brand,
                serving_grams=label.serving_grams,
            )
        return _food_payload(item)

    @app.get("/diary/foods/{food_id}")
    async def get_food(food_id: UUID, request: Request) -> dict[str, object]:
        """Return a stored food."""
        state_container: AppContainer = request.app.state.container
        try:
            item = state_container.diary_service.get_food(food_id)
        except FoodNotFoundError as exc:
            raise HTTPException(status.HTTP_404_NOT_FOUND, str(exc)) from exc
        return _food_payload(item)

    @app.post("/diary/logs", status_code=status.HTTP_201_CREATED)
    async def log_food(payload: LogFoodRequest, request: Request) -> dict[str, object]:
        """Log a portion of a stored food."""
        state_container: AppContainer = request.app.state.container
        diary = state_container.diary_service
        try:
            log = diary.log_food(
                payload.food_id,
                meal=payload.meal,
                servings=payload.servings,
                grams=payload.grams,
                amount=payload.amount,
                unit=payload.unit,
                portion_id=payload.portion_id,
                timestamp=payload.timestamp,
                notes=payload.notes,
            )
        except FoodNotFoundError as exc:
            raise HTTPException(status.HTTP_404_NOT_FOUND, str(exc)) from exc
        except InvalidPortionError as exc:
            raise HTTPException(
                status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc)
            ) from exc
        return _log_payload(log, diary.get_food(payload.food_id))

    @app.get("/diary/logs/{log_id}")
    async def get_log(log_id: UUID, request: Request) -> dict[str, object]:
        """Return a food log."""
        state_container: AppContainer = request.app.state.container
        diary = state_container.diary_service
        try:
            log = diary.get_log(log_id)
        except FoodNotFoundError as exc:
            raise HTTPException(status.HTTP_404_NOT_FOUND, str(exc)) from exc
        return _log_payload(log, _food_or_none(state_container, log))

    @app.patch("/diary/logs/{log_id}")
    async def update_log(
        log_id: UUID, payload: UpdateLogRequest, request: Request
    ) -> dict[str, object]:
        """Edit a food log."""
        state_container: AppContainer = request.app.state.container
        try:
            log = state_container.diary_service.update_log(
                log_id,
                servings=payload.servings,
                grams=payload.grams,
                meal=payload.meal,
                display_unit=payload.display_unit,
                notes=payload.notes,
            )
        except FoodNotFoundError as exc:
            raise HTTPException(status.HTTP_404_NOT_FOUND, str(exc)) from exc
        except InvalidPortionError as exc:
            raise HTTPException(
                status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc)
            ) from exc
        return _log_payload(log, _food_or_none(state_container, log))

    @app.delete("/diary/logs/{log_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_log(log_id: UUID, request: Request) -> None:
        """Delete a food log."""
        state_container: AppContainer = request.app.state.container
        try:
            state_container.diary_service.delete_log(log_id)
        except FoodNotFoundError as exc:
            raise HTTPException(status.HTTP_404_NOT_FOUND, str(exc)) from exc

    @app.get("/diary/days/{day}")
    async def day_summary(day: date, request: Request) -> dict[str, object]:
        """Return one day of the diary with per-meal totals."""
        state_container: AppContainer = request.app.state.container
        summary = state_container.stats_service.get_day(
            day, state_container.settings.timezone
        )
        progress = state_container.preferences_service.goal_progress(summary.totals)
        return _day_payload(summary, progress, state_container)

    @app.get("/stats/week")
    async def week_stats(request: Request) -> dict[str, object]:
        """Return week-to-date totals."""
        state_container: AppContainer = request.app.state.container
        summary = state_container.stats_service.get_week(
            state_container.settings.timezone
        )
        return _period_payload(summary)

    @app.get("/stats/month")
    async def month_stats(request: Request) -> dict[str, object]:
        """Return month-to-date totals."""
        state_container: AppContainer = request.app.state.container
        summary = state_container.stats_service.get_month(
            state_container.settings.timezone
        )
        return _period_payload(summary)

    @app.get("/stats/history")
    async def history(request: Request, limit: int = 10) -> dict[str, object]:
        """Return recent food logs."""
        state_container: AppContainer = request.app.state.container
        logs = state_container.stats_service.get_history(limit)
        return {
            "logs": [
                _log_payload(log, _food_or_none(state_container, log)) for log in logs
            ]
        }

    @app.get("/preferences")
    async def get_preferences(request: Request) -> dict[str, object]:
        """Return the diary preferences."""
        state_container: AppContainer = request.app.state.container
        return _preferences_payload(state_container.preferences_service.get())

    @app.put("/preferences")
    async def update_preferences(
        payload: PreferencesUpdate, request: Request
    ) -> dict[str, object]:
        """Change the diary preferences."""
        state_container: AppContainer = request.app.state.container
        preferences = state_container.preferences_service.update(
            daily_calorie_goal=payload.daily_calorie_goal,
            tracking_metric=payload.tracking_metric,
            show_daily_goal=payload.show_daily_goal,
            clear_daily_calorie_goal=(
                "daily_calorie_goal" in payload.model_fields_set
                and payload.daily_calorie_goal is None
            ),
        )
        return _preferences_payload(preferences)

    return app


async def _lookup(
    fetch: Callable[[], Awaitable[FoodRecord]], logger: logging.Logger
) -> FoodRecord:
    """Run a remote lookup, mapping failures to HTTP errors."""
    try:
        return await fetch()
    except LookupFailedError as exc:
        raise HTTPException(status.HTTP_404_NOT_FOUND, str(exc)) from exc
    except httpx.HTTPError as exc:
        logger.warning("Upstream lookup failed: %s", exc)
        raise HTTPException(
            status.HTTP_502_BAD_GATEWAY, "Nutrition database unavailable"
        ) from exc


def _food_or_none(container: AppContainer, log: FoodLog) -> FoodItem | None:
    if log.food_item_id is None:
        return None
    return container.diary_service.food_repository.get_food(log.food_item_id)


def _record_payload(record: FoodRecord) -> dict[str, object]:
    return asdict(record)


def _food_payload(item: FoodItem) -> dict[str, object]:
    return asdict(item)


def _log_payload(log: FoodLog, item: FoodItem | None) -> dict[str, object]:
    return {
        **asdict(log),
        "food_name": item.name if item else None,
        "display_text": serving_display_text(log, item),
    }


def _label_payload(facts: LabelFacts) -> dict[str, object]:
    return {
        "facts": facts.model_dump(),
        "serving_grams": label_serving_grams(facts),
    }


def _totals_payload(totals: MealTotals) -> dict[str, float]:
    return asdict(totals)


def _day_payload(
    summary: DaySummary, progress: GoalProgress, container: AppContainer
) -> dict[str, object]:
    return {
        "day": summary.day.isoformat(),
        "totals": _totals_payload(summary.totals),
        "meals": {
            meal.value: _totals_payload(totals)
            for meal, totals in summary.by_meal.items()
        },
        "logs": [
            _log_payload(log, _food_or_none(container, log)) for log in summary.logs
        ],
        "goal": {
            "metric": progress.metric.value,
            "unit": progress.metric.unit,
            "value": progress.value,
            "goal": progress.goal,
            "remaining": progress.remaining,
            "fraction": progress.fraction,
        },
    }


def _period_payload(summary: PeriodSummary) -> dict[str, object]:
    return {
        "daily": [
            {"day": entry.day.isoformat(), **_totals_payload(entry.totals)}
            for entry in summary.daily
        ],
        "avg_calories": summary.avg_calories,
        "avg_protein_g": summary.avg_protein_g,
        "avg_fat_g": summary.avg_fat_g,
        "avg_carbs_g": summary.avg_carbs_g,
    }


def _preferences_payload(preferences: UserPreferences) -> dict[str, object]:
    return {
        "daily_calorie_goal": preferences.daily_calorie_goal,
        "tracking_metric": preferences.tracking_metric.value,
        "show_daily_goal": preferences.show_daily_goal,
    }
