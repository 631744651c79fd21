from typing import Optional

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

# Apple calendar subscription for mainland China public holidays
DEFAULT_FEED_URL = "https://calendars.icloud.com/holidays/cn_zh.ics/"
DEFAULT_HOLIDAY_KEYWORD = "休"
DEFAULT_WORKDAY_KEYWORD = "班"


class Settings(BaseSettings):
    """Holiday calendar settings, overridable through CNHOLIDAY_* environment variables"""

    FEED_URL: str = DEFAULT_FEED_URL
    HOLIDAY_KEYWORD: str = DEFAULT_HOLIDAY_KEYWORD
    WORKDAY_KEYWORD: str = DEFAULT_WORKDAY_KEYWORD

    # Cache
    REFRESH_INTERVAL_HOURS: float = 24

    # HTTP
    REQUEST_TIMEOUT: Optional[float] = 30.0

    model_config = SettingsConfigDict(env_prefix="CNHOLIDAY_", case_sensitive=True)

    @field_validator("FEED_URL", "HOLIDAY_KEYWORD", "WORKDAY_KEYWORD")
    @classmethod
    def _not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("REFRESH_INTERVAL_HOURS")
    @classmethod
    def _positive_interval(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    def with_overrides(self, **overrides) -> "Settings":
        """Return a validated copy with the non-None overrides applied."""
        values = self.model_dump()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return load_settings(**values)


def load_settings(**values) -> Settings:
    """
    Build Settings from the environment plus explicit values.

    Raises:
        ConfigurationError: If any setting fails validation
    """
    try:
        return Settings(**values)
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(f"Invalid configuration: {errors}") from e
