from pydantic import Field, field_validator

from core.settings.base import RundeckBaseSettings


class LoggingSettings(RundeckBaseSettings):
    """Logging settings."""

    level: str = Field(default="INFO", alias="RUNDECK_LOG_LEVEL")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"Unknown log level: {v}")
        return level
