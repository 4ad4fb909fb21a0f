"""User preferences service."""

from dataclasses import dataclass, replace
from typing import Protocol

from biteledger.domain.diary import MealTotals
from biteledger.domain.preferences import GoalProgress, TrackingMetric, UserPreferences

_METRIC_FIELDS = {
    TrackingMetric.CALORIES: "calories",
    TrackingMetric.PROTEIN: "protein_g",
    TrackingMetric.CARBS: "carbs_g",
    TrackingMetric.FAT: "fat_g",
}


class PreferencesRepository(Protocol):
    """Persistence interface for the preferences record."""

    def get_preferences(self) -> UserPreferences | None:
        """Return the stored preferences, if any."""

    def save_preferences(self, preferences: UserPreferences) -> UserPreferences:
        """Create or replace the preferences record."""


@dataclass
class PreferencesService:
    """Reads and updates the single preferences record."""

    repository: PreferencesRepository

    def get(self) -> UserPreferences:
        """Return preferences, or defaults when none are stored."""
        return self.repository.get_preferences() or UserPreferences()

    def update(
        self,
        *,
        daily_calorie_goal: float | None = None,
        tracking_metric: TrackingMetric | None = None,
        show_daily_goal: bool | None = None,
        clear_daily_calorie_goal: bool = False,
    ) -> UserPreferences:
        """Change the given fields and keep the rest.

        None leaves a field unchanged; clear_daily_calorie_goal removes the goal.
        """
        current = self.get()
        if clear_daily_calorie_goal:
            goal = None
        elif daily_calorie_goal is not None:
            goal = daily_calorie_goal
        else:
            goal = current.daily_calorie_goal
        updated = replace(
            current,
            daily_calorie_goal=goal,
            tracking_metric=tracking_metric or current.tracking_metric,
            show_daily_goal=(
                show_daily_goal
                if show_daily_goal is not None
                else current.show_daily_goal
            ),
        )
        return self.repository.save_preferences(updated)

    def goal_progress(self, totals: MealTotals) -> GoalProgress:
        """Return the tracked value against the daily goal.

        The goal applies only when show_daily_goal is on.
        """
        preferences = self.get()
        metric = preferences.tracking_metric
        value = getattr(totals, _METRIC_FIELDS[metric])
        goal = preferences.daily_calorie_goal if preferences.show_daily_goal else None
        return GoalProgress(
            metric=metric,
            value=value,
            goal=goal,
            remaining=goal - value if goal is not None else None,
        )
