"""Interfaces and helpers for weather data sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Protocol

from skycast.domain import ForecastSample, WeatherSnapshot


class WeatherDataSource(Protocol):
    """Interface for anything that can provide current conditions and forecasts by city."""

    def fetch_current_weather(self, city: str) -> WeatherSnapshot:
        """Return current conditions for ``city``."""
        ...

    def fetch_forecast(self, city: str) -> List[ForecastSample]:
        """Return the 3-hour forecast samples for ``city`` in upstream order."""
        ...


@dataclass
class CallableWeatherDataSource(WeatherDataSource):
    """Wrap two callables so tests and configuration can swap them."""

    current: Callable[[str], WeatherSnapshot]
    forecast: Callable[[str], List[ForecastSample]]

    def fetch_current_weather(self, city: str) -> WeatherSnapshot:
        """Delegate to the configured current-conditions callable."""
        return self.current(city)

    def fetch_forecast(self, city: str) -> List[ForecastSample]:
        """Delegate to the configured forecast callable."""
        return self.forecast(city)
