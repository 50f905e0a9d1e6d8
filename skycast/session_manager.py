"""Session manager facade over pluggable backends."""
from typing import Optional

import redis

from skycast.config import settings
from skycast.domain import ViewState
from skycast.session_store import InMemorySessionStore, RedisSessionStore, SessionStore
from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag="session_manager")


def _init_store() -> SessionStore:
    """Initialize the backing session store based on configuration."""
    logger.debug(f"Initializing session store: redis_url='{mask_url(settings.session_redis_url) if settings.session_redis_url else 'None'}'")
    if settings.session_redis_url:
        try:
            client = redis.Redis.from_url(settings.session_redis_url)
            client.ping()
            logger.info("Using RedisSessionStore", extra={"redis_url": mask_url(settings.session_redis_url)})
            return RedisSessionStore(
                client,
                ttl_seconds=settings.session_ttl_seconds,
                max_age_seconds=settings.session_max_age_seconds,
            )
        except (redis.RedisError, ValueError) as exc:
            logger.warning("Falling back to InMemorySessionStore (Redis unavailable)", extra={"error": str(exc)})
    return InMemorySessionStore(
        ttl_seconds=settings.session_ttl_seconds,
        max_age_seconds=settings.session_max_age_seconds,
    )


_store: SessionStore = _init_store()


def use_in_memory_store_for_tests(ttl_seconds: int = 3600) -> None:
    """Override store for tests to ensure isolation and determinism."""
    global _store
    _store = InMemorySessionStore(ttl_seconds=ttl_seconds)


def create_session(view: Optional[ViewState] = None) -> str:
    """Create and persist a new view session, returning its ID."""
    return _store.create_session(view or ViewState())


def get_session(session_id: str) -> Optional[ViewState]:
    """Fetch a session view by ID, refreshing TTL if applicable."""
    return _store.get_session(session_id)


def update_session(session_id: str, view: ViewState) -> bool:
    """Replace the stored view for a session."""
    return _store.update_session(session_id, view)


def delete_session(session_id: str):
    """Delete a session by ID."""
    return _store.delete_session(session_id)


def clear_sessions():
    """Clear all sessions from the backing store (dev/testing)."""
    return _store.clear()
