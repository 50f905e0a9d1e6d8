"""Application configuration pulled from environment variables via pydantic."""
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="config")


class Settings(BaseSettings):
    """Environment-driven configuration for the SkyCast service."""
    model_config = SettingsConfigDict(env_prefix="SKYCAST_", extra="ignore")

    openweather_api_key: str | None = None
    openweather_base_url: str = "https://api.openweathermap.org/data/2.5"
    openweather_icon_url: str = "https://openweathermap.org/img/wn"
    units: str = "metric"  # options: metric, imperial, standard
    request_timeout_seconds: float = 10.0
    history_limit: int = 5
    forecast_day_limit: int = 5
    forecast_timezone: str = "UTC"
    api_key: str | None = None
    session_redis_url: str | None = None
    session_ttl_seconds: int = 3600
    session_max_age_seconds: int | None = None
    max_city_chars: int = 100

    @field_validator("openweather_base_url", "openweather_icon_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs to avoid double slashes."""
        return str(v).rstrip("/")


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {settings.model_dump_json(indent=4)}")
