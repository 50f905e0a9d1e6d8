"""Pass-through route that forwards a city lookup to the upstream provider."""

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse

from .config import settings
from .data_sources import get_payload, upstream_message
from .data_sources.openweather_client import CURRENT_ENDPOINT
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="app/proxy")

router = APIRouter()

MISSING_CITY_MESSAGE = "City parameter is required"
NOT_FOUND_MESSAGE = "City not found"
UNEXPECTED_FAILURE_MESSAGE = "Failed to fetch weather data. Please try again later."


@router.get("/api/weather")
def proxy_weather(city: str | None = Query(default=None)):
    """Forward ``city`` to the current-conditions endpoint and relay the answer."""
    if not city:
        return JSONResponse({"error": MISSING_CITY_MESSAGE}, status_code=status.HTTP_400_BAD_REQUEST)

    try:
        upstream_status, data = get_payload(
            CURRENT_ENDPOINT,
            city,
            api_key=settings.openweather_api_key,
            base_url=settings.openweather_base_url,
            units=settings.units,
            timeout=settings.request_timeout_seconds,
        )
    except Exception:
        logger.exception("Weather API error for %s", city)
        return JSONResponse(
            {"error": UNEXPECTED_FAILURE_MESSAGE},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if not 200 <= upstream_status < 300:
        return JSONResponse(
            {"error": upstream_message(data) or NOT_FOUND_MESSAGE},
            status_code=upstream_status,
        )

    return JSONResponse(data, status_code=upstream_status)
