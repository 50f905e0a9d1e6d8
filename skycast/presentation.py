"""Render a ViewState into the shape the single-page view displays."""
from __future__ import annotations

import datetime as dt
from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel

from skycast.config import Settings, settings as default_settings
from skycast.domain import QueryStatus, ViewState, WeatherSnapshot
from skycast.forecast_reducer import reduce_daily_forecast, round_half_up
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="presentation")

TEMPERATURE_UNITS = {"metric": "°C", "imperial": "°F", "standard": "K"}
WIND_SPEED_UNITS = {"metric": "m/s", "imperial": "mph", "standard": "m/s"}


class CurrentPanel(BaseModel):
    """Current-conditions panel."""
    location: str
    temperature: int
    temperature_unit: str
    humidity: int
    wind_speed: float
    wind_speed_unit: str
    condition: str
    description: str
    icon: str
    icon_url: str


class ForecastCard(BaseModel):
    """One card of the forecast strip."""
    day: str
    temperature: int
    icon: str
    icon_url: str
    description: str


class ViewModel(BaseModel):
    """Everything the page needs to draw itself."""
    status: QueryStatus
    city: str
    loading: bool
    error: Optional[str] = None
    history: List[str]
    current: Optional[CurrentPanel] = None
    forecast: List[ForecastCard] = []


def icon_url(icon: str, base_url: str) -> str:
    """Return the 2x PNG URL for a provider icon id."""
    return f"{base_url.rstrip('/')}/{icon}@2x.png"


def resolve_timezone(name: str) -> dt.tzinfo:
    """Return the configured forecast timezone, falling back to UTC."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown forecast timezone; using UTC", extra={"forecast_timezone": name})
        return dt.timezone.utc


def _current_panel(weather: WeatherSnapshot, cfg: Settings) -> CurrentPanel:
    return CurrentPanel(
        location=weather.location,
        temperature=round_half_up(weather.temperature),
        temperature_unit=TEMPERATURE_UNITS.get(cfg.units, ""),
        humidity=weather.humidity,
        wind_speed=weather.wind_speed,
        wind_speed_unit=WIND_SPEED_UNITS.get(cfg.units, ""),
        condition=weather.condition,
        description=weather.description,
        icon=weather.icon,
        icon_url=icon_url(weather.icon, cfg.openweather_icon_url),
    )


def render_view(view: ViewState, cfg: Settings | None = None) -> ViewModel:
    """
    Build the view model for ``view``.

    The daily forecast is recomputed from the committed samples on every call.
    The snapshot is hidden while the query is in FAILED so the error banner
    stands alone.
    """
    cfg = cfg or default_settings
    query = view.query

    current = None
    forecast: List[ForecastCard] = []
    if query.shows_snapshot:
        current = _current_panel(query.weather, cfg)
        days = reduce_daily_forecast(
            query.forecast,
            tz=resolve_timezone(cfg.forecast_timezone),
            limit=cfg.forecast_day_limit,
        )
        forecast = [
            ForecastCard(
                day=d.day,
                temperature=d.temperature,
                icon=d.icon,
                icon_url=icon_url(d.icon, cfg.openweather_icon_url),
                description=d.description,
            )
            for d in days
        ]

    return ViewModel(
        status=query.status,
        city=view.city,
        loading=query.is_loading,
        error=query.error,
        history=list(view.history),
        current=current,
        forecast=forecast,
    )
