import os

import uvicorn

from utils.logging_utils import get_tagged_logger, setup_logging

logger = get_tagged_logger(__name__, tag="server")


def check_upstream_credentials() -> bool:
    """
    Warn early when no OpenWeather key is configured. Controlled by:
    - SKYCAST_OPENWEATHER_API_KEY, the provider credential.
    Every query will fail with the provider's "Invalid API key" message without it.
    """
    if os.getenv("SKYCAST_OPENWEATHER_API_KEY"):
        return True
    logger.warning("SKYCAST_OPENWEATHER_API_KEY is not set; weather queries will be rejected upstream.")
    return False


if __name__ == "__main__":
    setup_logging(level=os.getenv("LOG_LEVEL", "INFO"), job_name="skycast")
    check_upstream_credentials()

    uvicorn.run(
        "skycast.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        reload=False,
    )
