"""Helpers for fetching current conditions and forecasts from OpenWeatherMap."""
from __future__ import annotations

from typing import Any, List, Tuple

import requests
from pydantic import ValidationError

from skycast.domain import ForecastSample, WeatherSnapshot
from skycast.errors import TransportError, UpstreamError
from utils.logging_utils import get_tagged_logger, mask_url
logger = get_tagged_logger(__name__, tag='openweather_client')

session = requests.Session()

OPENWEATHER_BASE_URL = "https://api.openweathermap.org/data/2.5"
CURRENT_ENDPOINT = "weather"
FORECAST_ENDPOINT = "forecast"


def get_payload(endpoint: str,
                city: str,
                *,
                api_key: str | None,
                base_url: str = OPENWEATHER_BASE_URL,
                units: str = "metric",
                timeout: float = 10,
                ) -> Tuple[int, Any]:
    """GET an endpoint for ``city`` and return ``(status_code, json_body)``.

    Network failures and non-JSON bodies raise TransportError; the status code
    is returned as-is so callers decide what counts as success.
    """
    params = {"q": city, "appid": api_key or "", "units": units}
    url = f"{base_url.rstrip('/')}/{endpoint}"

    try:
        resp = session.get(url, params=params, timeout=timeout)
    except requests.exceptions.RequestException as exc:
        logger.warning(
            "OpenWeather request failed",
            extra={"url": url, "endpoint": endpoint, "error": str(exc)},
        )
        raise TransportError() from exc

    try:
        data = resp.json()
    except ValueError as exc:
        logger.warning(
            "OpenWeather returned a non-JSON body",
            extra={"endpoint": endpoint, "status": resp.status_code},
        )
        raise TransportError() from exc

    logger.debug(
        "OpenWeather response",
        extra={"url": mask_url(resp.url), "endpoint": endpoint, "status": resp.status_code},
    )
    return resp.status_code, data


def upstream_message(data: Any) -> str | None:
    """Return the provider's human-readable ``message`` if the body carries one."""
    if isinstance(data, dict):
        message = data.get("message")
        if isinstance(message, str) and message.strip():
            return message
    return None


def _raise_for_status(status: int, data: Any, *, endpoint: str) -> None:
    """Raise UpstreamError for any non-2xx status."""
    if 200 <= status < 300:
        return
    message = upstream_message(data)
    logger.info(
        "OpenWeather rejected request",
        extra={"endpoint": endpoint, "status": status, "upstream_message": message},
    )
    raise UpstreamError(status, message)


def _primary_condition(item: dict) -> dict:
    """Return the first weather-condition object of a response item."""
    return (item.get("weather") or [{}])[0]


def parse_current(data: dict) -> WeatherSnapshot:
    """Convert a current-conditions body into a WeatherSnapshot."""
    condition = _primary_condition(data)
    return WeatherSnapshot(
        location=data["name"],
        temperature=data["main"]["temp"],
        humidity=data["main"]["humidity"],
        wind_speed=data["wind"]["speed"],
        condition=condition.get("main", ""),
        description=condition.get("description", ""),
        icon=condition.get("icon", ""),
    )


def parse_forecast(data: dict) -> List[ForecastSample]:
    """Convert a 5-day/3-hour forecast body into samples, keeping upstream order."""
    out: List[ForecastSample] = []
    for item in data.get("list", []):
        condition = _primary_condition(item)
        out.append(
            ForecastSample(
                timestamp=item["dt"],
                temperature=item["main"]["temp"],
                condition=condition.get("main", ""),
                description=condition.get("description", ""),
                icon=condition.get("icon", ""),
            )
        )
    return out


def fetch_current_weather(city: str,
                          *,
                          api_key: str | None,
                          base_url: str = OPENWEATHER_BASE_URL,
                          units: str = "metric",
                          timeout: float = 10,
                          ) -> WeatherSnapshot:
    """Fetch current conditions for ``city``."""
    status, data = get_payload(CURRENT_ENDPOINT, city, api_key=api_key, base_url=base_url,
                               units=units, timeout=timeout)
    _raise_for_status(status, data, endpoint=CURRENT_ENDPOINT)
    try:
        return parse_current(data)
    except (KeyError, IndexError, TypeError, AttributeError, ValidationError) as exc:
        logger.warning("Malformed current-conditions body", extra={"error": str(exc)})
        raise TransportError() from exc


def fetch_forecast(city: str,
                   *,
                   api_key: str | None,
                   base_url: str = OPENWEATHER_BASE_URL,
                   units: str = "metric",
                   timeout: float = 10,
                   ) -> List[ForecastSample]:
    """Fetch the 3-hour forecast samples for ``city``."""
    status, data = get_payload(FORECAST_ENDPOINT, city, api_key=api_key, base_url=base_url,
                               units=units, timeout=timeout)
    _raise_for_status(status, data, endpoint=FORECAST_ENDPOINT)
    try:
        return parse_forecast(data)
    except (KeyError, IndexError, TypeError, AttributeError, ValidationError) as exc:
        logger.warning("Malformed forecast body", extra={"error": str(exc)})
        raise TransportError() from exc
