"""Per-view controller for city weather lookups.

A ``WeatherQueryClient`` owns the state of one mounted view: the city text,
the tagged ``QueryState`` and the bounded ``SearchHistory``. User actions
(submit, history selection, refresh) move it into ``LOADING``, run the
current-conditions and forecast fetches concurrently, and commit both results
together or neither.

All state mutation happens on the thread that calls the action methods; the
worker threads only perform the two HTTP calls.
"""
from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, List, Optional, Tuple

from skycast.data_sources.base import WeatherDataSource
from skycast.domain import ForecastSample, QueryState, ViewState, WeatherSnapshot
from skycast.errors import (
    GENERIC_FAILURE_MESSAGE,
    EmptyQueryError,
    NothingToRefreshError,
    WeatherQueryError,
)
from skycast.history import DEFAULT_HISTORY_LIMIT, SearchHistory
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="query_client")

StateListener = Callable[[ViewState], None]
HistoryLoader = Callable[[], Optional[Iterable[str]]]


def fetch_joined(data_source: WeatherDataSource, city: str) -> Tuple[WeatherSnapshot, List[ForecastSample]]:
    """
    Fetch current conditions and forecast for ``city`` concurrently.

    Returns only once both calls have settled. If either raised, the
    current-conditions error takes precedence, then the forecast error; a
    successful half is discarded.
    """
    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="skycast-fetch") as pool:
        current_future = pool.submit(data_source.fetch_current_weather, city)
        forecast_future = pool.submit(data_source.fetch_forecast, city)
    # Leaving the executor waits for both futures.
    weather = current_future.result()
    forecast = forecast_future.result()
    return weather, list(forecast)


class WeatherQueryClient:
    """State machine behind a single weather view."""

    def __init__(
        self,
        data_source: WeatherDataSource,
        *,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        view: Optional[ViewState] = None,
        listener: Optional[StateListener] = None,
        history_loader: Optional[HistoryLoader] = None,
        commit_lock: Optional[threading.Lock] = None,
    ) -> None:
        view = view or ViewState()
        self.data_source = data_source
        self.city: str = view.city
        self.state: QueryState = view.query
        self.history = SearchHistory(view.history, limit=history_limit)
        self._listener = listener
        self._history_loader = history_loader
        self._commit_lock = commit_lock or threading.Lock()

    def view_state(self) -> ViewState:
        """Snapshot of everything the view renders."""
        return ViewState(city=self.city, query=self.state, history=tuple(self.history))

    def submit(self, text: Optional[str] = None) -> QueryState:
        """Query the city in ``text`` (or the current city text) after trimming."""
        if text is not None:
            self.city = text
        query = (self.city or "").strip()
        if not query:
            raise EmptyQueryError("City name is required")
        return self._run(query)

    def select_history(self, index: int) -> QueryState:
        """Re-query a history entry, copying it into the city text."""
        if not 0 <= index < len(self.history):
            raise IndexError(f"no history entry at index {index}")
        city = self.history[index]
        self.city = city
        return self._run(city)

    def refresh(self) -> QueryState:
        """Re-query the location of the last committed snapshot."""
        location = self.state.last_location
        if not location:
            raise NothingToRefreshError("No location loaded yet")
        return self._run(location)

    def _publish(self, committed: Optional[str] = None) -> None:
        """
        Notify the listener of the current view.

        With a ``history_loader`` the history is re-read first, so a commit
        from another controller on the same view is kept; ``committed`` is
        then pushed on top of it.
        """
        with self._commit_lock:
            if self._history_loader is not None:
                stored = self._history_loader()
                if stored is not None:
                    self.history = SearchHistory(stored, limit=self.history.limit)
            if committed is not None:
                self.history = self.history.push(committed)
            if self._listener is not None:
                self._listener(self.view_state())

    def _run(self, city: str) -> QueryState:
        self.state = self.state.loading()
        self._publish()
        logger.info("Querying weather", extra={"city": city})

        committed = None
        try:
            weather, forecast = fetch_joined(self.data_source, city)
        except WeatherQueryError as exc:
            logger.info("Weather query failed", extra={"city": city, "error": exc.message})
            self.state = self.state.failed(exc.message)
        except Exception:
            logger.exception("Unexpected error while querying weather for %s", city)
            self.state = self.state.failed(GENERIC_FAILURE_MESSAGE)
        else:
            self.state = QueryState.success(weather, tuple(forecast))
            committed = city
            logger.info(
                "Weather query committed",
                extra={"city": city, "location": weather.location, "samples": len(forecast)},
            )

        self._publish(committed)
        return self.state
