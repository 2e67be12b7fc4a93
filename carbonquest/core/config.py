"""Configuration management using Pydantic Settings."""

from typing import ClassVar
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from carbonquest.shared.exceptions import ConfigError

# Singleton instance
_settings: "Settings | None" = None


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
    )

    # Calendar settings
    timezone: str = "UTC"

    # Dashboard target
    monthly_co2_target_kg: float = 100.0

    # Level 1 achievement requirements
    achievement_cycling_champion_requirement: int = 5
    achievement_tree_guardian_requirement: int = 365
    achievement_waste_warrior_requirement: int = 50
    achievement_water_saver_requirement: int = 1000
    achievement_green_diet_requirement: int = 100

    # Application settings
    log_level: str = "INFO"
    state_file_path: str = "data/carbonquest.json"
    app_version: str = "0.1.0"
    environment: str = "development"

    # Valid log levels
    VALID_LOG_LEVELS: ClassVar[set[str]] = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the allowed values."""
        v_upper = v.upper()
        if v_upper not in cls.VALID_LOG_LEVELS:
            raise ConfigError(
                f"Invalid log level: {v}. Must be one of {', '.join(cls.VALID_LOG_LEVELS)}"
            )
        return v_upper

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Validate timezone is a known IANA zone name."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigError(f"Unknown timezone: {v}") from e
        return v

    @field_validator("monthly_co2_target_kg")
    @classmethod
    def validate_monthly_target(cls, v: float) -> float:
        """Validate the monthly CO2 target is positive."""
        if v <= 0:
            raise ConfigError(f"Monthly CO2 target must be greater than 0, got {v}")
        return v

    @field_validator(
        "achievement_cycling_champion_requirement",
        "achievement_tree_guardian_requirement",
        "achievement_waste_warrior_requirement",
        "achievement_water_saver_requirement",
        "achievement_green_diet_requirement",
    )
    @classmethod
    def validate_achievement_requirements(cls, v: int) -> int:
        """Validate achievement requirements (1-100000)."""
        if not 1 <= v <= 100000:
            raise ConfigError(f"Achievement requirement must be between 1 and 100000, got {v}")
        return v

    @property
    def zone(self) -> ZoneInfo:
        """Timezone used for calendar-day boundaries.

        Returns:
            ZoneInfo for the configured timezone
        """
        return ZoneInfo(self.timezone)


def get_settings() -> Settings:
    """Get or create the global Settings instance (cached singleton)."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
