"""Statistics over food logs."""

from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from biteledger.domain.diary import DaySummary, FoodLog, MealTotals, MealType
from biteledger.services.diary import FoodLogRepository

DECEMBER = 12


@dataclass
class PeriodSummary:
    """Aggregated totals for a period."""

    daily: list[DaySummary]
    avg_calories: float
    avg_protein_g: float
    avg_fat_g: float
    avg_carbs_g: float


@dataclass
class StatsService:
    """Computes diary totals in the diary's timezone."""

    repository: FoodLogRepository

    def get_day(self, day: date, timezone_name: str) -> DaySummary:
        """Return totals and logs for one local day."""
        tz = ZoneInfo(timezone_name)
        start = datetime.combine(day, time.min, tzinfo=tz)
        end = start + timedelta(days=1)
        logs = self.repository.list_logs(start.astimezone(UTC), end.astimezone(UTC))
        return _aggregate_day(day, logs, tz)

    def get_today(self, timezone_name: str) -> DaySummary:
        """Return today's totals."""
        today = datetime.now(tz=ZoneInfo(timezone_name)).date()
        return self.get_day(today, timezone_name)

    def get_week(self, timezone_name: str) -> PeriodSummary:
        """Return week-to-date totals and averages."""
        tz = ZoneInfo(timezone_name)
        now = datetime.now(tz=tz)
        start = (now - timedelta(days=now.weekday())).replace(
            hour=0, minute=0, second=0, microsecond=0
        )
        end = start + timedelta(days=7)
        logs = self.repository.list_logs(start.astimezone(UTC), end.astimezone(UTC))
        return _aggregate_period(start, 7, logs, tz)

    def get_month(self, timezone_name: str) -> PeriodSummary:
        """Return month-to-date totals and averages."""
        tz = ZoneInfo(timezone_name)
        now = datetime.now(tz=tz)
        start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        if start.month == DECEMBER:
            end = start.replace(year=start.year + 1, month=1)
        else:
            end = start.replace(month=start.month + 1)
        days = (end - start).days
        logs = self.repository.list_logs(start.astimezone(UTC), end.astimezone(UTC))
        return _aggregate_period(start, days, logs, tz)

    def get_history(self, limit: int = 10) -> list[FoodLog]:
        """Return recent food logs."""
        return self.repository.list_recent_logs(limit)


def _aggregate_day(day: date, logs: list[FoodLog], tz: ZoneInfo) -> DaySummary:
    totals = MealTotals()
    by_meal = {meal: MealTotals() for meal in MealType}
    day_logs = []
    for log in logs:
        if log.timestamp.astimezone(tz).date() != day:
            continue
        totals = totals.add(log)
        by_meal[log.meal] = by_meal[log.meal].add(log)
        day_logs.append(log)
    return DaySummary(day=day, totals=totals, by_meal=by_meal, logs=day_logs)


def _aggregate_period(
    start: datetime, days: int, logs: list[FoodLog], tz: ZoneInfo
) -> PeriodSummary:
    daily = []
    for offset in range(days):
        day = (start + timedelta(days=offset)).date()
        daily.append(_aggregate_day(day, logs, tz))

    total_days = max(len(daily), 1)
    return PeriodSummary(
        daily=daily,
        avg_calories=sum(entry.totals.calories for entry in daily) / total_days,
        avg_protein_g=sum(entry.totals.protein_g for entry in daily) / total_days,
        avg_fat_g=sum(entry.totals.fat_g for entry in daily) / total_days,
        avg_carbs_g=sum(entry.totals.carbs_g for entry in daily) / total_days,
    )
