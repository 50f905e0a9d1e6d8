"""Factory helpers for binding configured credentials into the data source."""

from __future__ import annotations

from functools import partial

from skycast import config
from skycast.data_sources.base import CallableWeatherDataSource, WeatherDataSource
from skycast.data_sources.openweather_client import fetch_current_weather, fetch_forecast
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/factory")


def build_data_source(settings: config.Settings | None = None) -> WeatherDataSource:
    """Instantiate the OpenWeather data source from settings."""
    settings = settings or config.settings

    if not settings.openweather_api_key:
        logger.warning("No OpenWeather API key configured; upstream calls will be rejected")

    bound = {
        "api_key": settings.openweather_api_key,
        "base_url": settings.openweather_base_url,
        "units": settings.units,
        "timeout": settings.request_timeout_seconds,
    }
    logger.info("Using OpenWeather data source", extra={"base_url": settings.openweather_base_url,
                                                        "units": settings.units})
    return CallableWeatherDataSource(
        current=partial(fetch_current_weather, **bound),
        forecast=partial(fetch_forecast, **bound),
    )
