from pathlib import Path

from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_database_url() -> str:
    """Default to a SQLite file next to the project root.

    Absolute path so the database does not move with the working directory.
    """
    db_path = Path(__file__).parent.parent.parent / "exercise_sync.db"
    return f"sqlite:///{db_path.resolve()}"


class Settings(BaseSettings):
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: str | None = Field(default=None, validation_alias="LOG_FILE")
    database_url: str = Field(
        default_factory=get_database_url,
        validation_alias="DATABASE_URL",
    )
    sync_window_days: int = Field(
        default=7,
        gt=0,
        validation_alias="SYNC_WINDOW_DAYS",
        description="Trailing window fetched from the provider on every sync",
    )
    duplicate_threshold_minutes: int = Field(
        default=5,
        ge=0,
        validation_alias="DUPLICATE_THRESHOLD_MINUTES",
        description="Max start-of-day difference for two records to count as the same event",
    )
    local_timezone: str = Field(
        default="",
        validation_alias="LOCAL_TIMEZONE",
        description="IANA zone for provider timestamps (empty = system local zone)",
    )
    provider_export_path: str | None = Field(default=None, validation_alias="PROVIDER_EXPORT_PATH")
    provider_granted: bool = Field(default=True, validation_alias="PROVIDER_GRANTED")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate that log level is one of the standard logging levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            logger.warning(f"Invalid LOG_LEVEL '{value}'. Valid levels are: {', '.join(sorted(valid_levels))}. Defaulting to INFO.")
            return "INFO"
        return upper_value

    @field_validator("local_timezone")
    @classmethod
    def validate_local_timezone(cls, value: str) -> str:
        """Fall back to the system zone when the configured name is unknown."""
        if not value:
            return value
        from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unknown LOCAL_TIMEZONE '{value}'. Using the system local zone instead.")
            return ""
        return value

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
