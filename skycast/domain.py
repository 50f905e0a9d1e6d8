"""Domain vocabulary and strict schemas for weather lookups.

This module defines the values that flow between the upstream client, the
query controller and the presentation layer: immutable snapshots parsed from
provider responses, the derived daily forecast entries, and the tagged query
state. No fetching or rendering logic lives here.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class _FrozenModel(BaseModel):
    """Base model for immutable values with strict extra handling."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class WeatherSnapshot(_FrozenModel):
    """Current conditions for one location, as returned by the provider."""
    location: str
    temperature: float
    humidity: int = Field(ge=0, le=100)
    wind_speed: float
    condition: str
    description: str
    icon: str


class ForecastSample(_FrozenModel):
    """One 3-hour forecast slot."""
    timestamp: int  # epoch seconds
    temperature: float
    condition: str
    description: str
    icon: str


class DailyForecastEntry(_FrozenModel):
    """Render-ready forecast card for a single calendar day."""
    day: str
    temperature: int
    icon: str
    description: str


class QueryStatus(str, Enum):
    """Lifecycle of the most recent query."""
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    FAILED = "failed"


class QueryState(_FrozenModel):
    """Tagged query state.

    ``weather`` and ``forecast`` always come from the same round-trip. They are
    set by a successful commit and carried unchanged through later ``LOADING``
    and ``FAILED`` states so a refresh can keep showing the previous result.
    ``error`` is only set on ``FAILED``.
    """
    status: QueryStatus = QueryStatus.IDLE
    weather: Optional[WeatherSnapshot] = None
    forecast: Tuple[ForecastSample, ...] = ()
    error: Optional[str] = None

    @classmethod
    def idle(cls) -> "QueryState":
        """Initial state before any query."""
        return cls()

    @classmethod
    def success(cls, weather: WeatherSnapshot, forecast: Tuple[ForecastSample, ...]) -> "QueryState":
        """Committed result of a joined fetch."""
        return cls(status=QueryStatus.SUCCESS, weather=weather, forecast=tuple(forecast))

    def loading(self) -> "QueryState":
        """Enter LOADING, clearing the error and keeping the displayed snapshot."""
        return QueryState(status=QueryStatus.LOADING, weather=self.weather, forecast=self.forecast)

    def failed(self, message: str) -> "QueryState":
        """Enter FAILED with ``message``, keeping the last committed snapshot."""
        return QueryState(status=QueryStatus.FAILED, weather=self.weather, forecast=self.forecast, error=message)

    @property
    def is_loading(self) -> bool:
        """True while a query is in flight."""
        return self.status is QueryStatus.LOADING

    @property
    def last_location(self) -> Optional[str]:
        """Location name of the last committed snapshot, if any."""
        return self.weather.location if self.weather else None

    @property
    def shows_snapshot(self) -> bool:
        """True when the view should render the retained snapshot."""
        return self.weather is not None and self.status in (QueryStatus.SUCCESS, QueryStatus.LOADING)


class ViewState(_FrozenModel):
    """Everything one mounted view owns: input text, query state and history."""
    city: str = ""
    query: QueryState = Field(default_factory=QueryState.idle)
    history: Tuple[str, ...] = ()
