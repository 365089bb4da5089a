"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from macro_tracker.domain.days import DayTargets

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    default_timezone: str = "America/Chicago"
    default_target_calories: float = 2200
    default_target_protein: float = 170
    default_target_carbs: float = 210
    default_target_fat: float = 60
    new_day_locked: bool = False
    max_saved_workouts: int = 10
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    def default_targets(self) -> DayTargets:
        """Targets used for a user's first day."""
        return DayTargets(
            calories=self.default_target_calories,
            protein=self.default_target_protein,
            carbs=self.default_target_carbs,
            fat=self.default_target_fat,
        )
