"""User display preferences."""

from dataclasses import dataclass
from enum import StrEnum


class TrackingMetric(StrEnum):
    """Metric shown as the headline number."""

    CALORIES = "calories"
    PROTEIN = "protein"
    CARBS = "carbs"
    FAT = "fat"

    @property
    def unit(self) -> str:
        """Display unit for the metric."""
        if self is TrackingMetric.CALORIES:
            return "cal"
        return "g"


@dataclass(frozen=True)
class UserPreferences:
    """Singleton preferences record."""

    daily_calorie_goal: float | None = None
    tracking_metric: TrackingMetric = TrackingMetric.CALORIES
    show_daily_goal: bool = False


@dataclass(frozen=True)
class GoalProgress:
    """Progress of the tracked metric against the daily goal."""

    metric: TrackingMetric
    value: float
    goal: float | None
    remaining: float | None

    @property
    def fraction(self) -> float | None:
        """Share of the goal reached, or None without a positive goal."""
        if not self.goal or self.goal <= 0:
            return None
        return self.value / self.goal
