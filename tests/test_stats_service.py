"""Tests for stats service."""

from datetime import UTC, date, datetime, timedelta
from uuid import uuid4

from biteledger.domain.diary import FoodLog, MealType
from biteledger.services.stats import StatsService
from tests.conftest import InMemoryFoodLogRepository


def _log(
    timestamp: datetime, calories: float, meal: MealType = MealType.LUNCH
) -> FoodLog:
    return FoodLog(
        id=uuid4(),
        food_item_id=uuid4(),
        timestamp=timestamp,
        meal=meal,
        serving_multiplier=1,
        total_grams=100,
        calories=calories,
        protein_g=calories / 20,
        carbs_g=calories / 10,
        fat_g=calories / 40,
    )


def _repository(*logs: FoodLog) -> InMemoryFoodLogRepository:
    repo = InMemoryFoodLogRepository()
    for log in logs:
        repo.create_log(log)
    return repo


def test_get_day_totals_per_meal() -> None:
    day = date(2026, 3, 10)
    noon = datetime(2026, 3, 10, 12, tzinfo=UTC)
    repo = _repository(
        _log(noon.replace(hour=8), 300, MealType.BREAKFAST),
        _log(noon, 500, MealType.LUNCH),
        _log(noon.replace(hour=15), 100, MealType.SNACK),
        _log(noon - timedelta(days=1), 900, MealType.DINNER),
    )

    summary = StatsService(repo).get_day(day, "UTC")

    assert summary.totals.calories == 900
    assert summary.by_meal[MealType.BREAKFAST].calories == 300
    assert summary.by_meal[MealType.LUNCH].protein_g == 25
    assert summary.by_meal[MealType.DINNER].calories == 0
    assert len(summary.logs) == 3


def test_get_day_uses_timezone() -> None:
    # 23:30 UTC on the 9th is already the 10th in Tokyo.
    late = datetime(2026, 3, 9, 23, 30, tzinfo=UTC)
    repo = _repository(_log(late, 400))

    tokyo = StatsService(repo).get_day(date(2026, 3, 10), "Asia/Tokyo")
    utc = StatsService(repo).get_day(date(2026, 3, 10), "UTC")

    assert tokyo.totals.calories == 400
    assert utc.totals.calories == 0


def test_get_today_includes_current_logs() -> None:
    repo = _repository(_log(datetime.now(tz=UTC), 250))

    summary = StatsService(repo).get_today("UTC")

    assert summary.totals.calories == 250


def test_get_week_averages_over_days() -> None:
    repo = _repository(_log(datetime.now(tz=UTC), 700))

    summary = StatsService(repo).get_week("UTC")

    assert len(summary.daily) == 7
    assert summary.avg_calories == 100


def test_get_month_covers_whole_month() -> None:
    now = datetime.now(tz=UTC)
    repo = _repository(_log(now, 310))

    summary = StatsService(repo).get_month("UTC")

    assert summary.daily[0].day == now.date().replace(day=1)
    assert sum(entry.totals.calories for entry in summary.daily) == 310


def test_get_history_returns_recent() -> None:
    now = datetime.now(tz=UTC)
    repo = _repository(
        _log(now - timedelta(days=2), 600),
        _log(now, 400),
        _log(now - timedelta(days=1), 500),
    )

    history = StatsService(repo).get_history(limit=2)

    assert [log.calories for log in history] == [400, 500]
