"""Error taxonomy for weather queries."""

GENERIC_FAILURE_MESSAGE = "Failed to fetch weather data"


class WeatherQueryError(Exception):
    """Base class for failures that end a query attempt."""

    def __init__(self, message: str = GENERIC_FAILURE_MESSAGE) -> None:
        super().__init__(message)
        self.message = message


class UpstreamError(WeatherQueryError):
    """The provider answered with a non-success status."""

    def __init__(self, status_code: int, message: str | None = None) -> None:
        super().__init__(message or GENERIC_FAILURE_MESSAGE)
        self.status_code = status_code


class TransportError(WeatherQueryError):
    """The request failed in transit or the body could not be parsed."""


class EmptyQueryError(WeatherQueryError, ValueError):
    """Blank city text; rejected before any network call."""


class NothingToRefreshError(WeatherQueryError, RuntimeError):
    """Refresh requested before any location was loaded."""
