"""Data source helpers for the upstream weather provider."""

from .base import CallableWeatherDataSource, WeatherDataSource
from .factory import build_data_source
from .openweather_client import (
    fetch_current_weather,
    fetch_forecast,
    get_payload,
    upstream_message,
)

__all__ = [
    "build_data_source",
    "WeatherDataSource",
    "CallableWeatherDataSource",
    "fetch_current_weather",
    "fetch_forecast",
    "get_payload",
    "upstream_message",
]
