"""Supabase repository for user preferences."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from biteledger.domain.preferences import TrackingMetric, UserPreferences
from biteledger.services.preferences import PreferencesRepository

_TABLE = "user_preferences"
# The diary keeps a single preferences row.
_ROW_ID = 1


@dataclass
class SupabasePreferencesRepository(PreferencesRepository):
    """Supabase implementation for the preferences row."""

    client: Client

    def get_preferences(self) -> UserPreferences | None:
        """Return the stored preferences."""
        response = (
            self.client.table(_TABLE)
            .select("daily_calorie_goal, tracking_metric, show_daily_goal")
            .eq("id", _ROW_ID)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        goal = row.get("daily_calorie_goal")
        return UserPreferences(
            daily_calorie_goal=float(goal) if goal is not None else None,
            tracking_metric=TrackingMetric(
                row.get("tracking_metric") or TrackingMetric.CALORIES
            ),
            show_daily_goal=bool(row.get("show_daily_goal", False)),
        )

    def save_preferences(self, preferences: UserPreferences) -> UserPreferences:
        """Upsert the preferences row."""
        self.client.table(_TABLE).upsert(
            {
                "id": _ROW_ID,
                "daily_calorie_goal": preferences.daily_calorie_goal,
                "tracking_metric": preferences.tracking_metric.value,
                "show_daily_goal": preferences.show_daily_goal,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            }
        ).execute()
        return preferences
