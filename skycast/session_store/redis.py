"""Redis-backed session store with TTL."""

import json
import time
import uuid
from typing import Optional

from pydantic import ValidationError

from skycast.domain import ViewState
from skycast.session_store.base import SessionPayload, SessionStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="session_store/redis_session_store")


class RedisSessionStore(SessionStore):
    """Redis-backed sessions with TTL. Stores the view as JSON."""

    def __init__(
        self,
        client,
        ttl_seconds: int = 3600,
        max_age_seconds: int | None = None,
        prefix: str = "skycast:session:",
    ) -> None:
        """Initialize with a Redis client, TTL, and optional absolute max age."""
        logger.debug("Initializing RedisSessionStore")
        self.client = client
        self.ttl = ttl_seconds
        self.max_age = max_age_seconds
        self.prefix = prefix

    def _key(self, session_id: str) -> str:
        """Return the Redis key for a session id."""
        return f"{self.prefix}{session_id}"

    def _generate_id(self) -> str:
        """Generate a new session id."""
        return str(uuid.uuid4())

    @staticmethod
    def _dump(view: ViewState, *, created_at: float) -> bytes:
        """Serialize a view and its creation time to JSON bytes."""
        data = {
            "view": view.model_dump(mode="json"),
            "created_at": created_at,
        }
        return json.dumps(data).encode("utf-8")

    @staticmethod
    def _safe_load(raw: bytes) -> Optional[tuple[SessionPayload, float]]:
        """Deserialize JSON bytes into a view and created_at."""
        try:
            data = json.loads(raw.decode("utf-8"))
            view = ViewState.model_validate(data.get("view") or {})
            created_at = data.get("created_at") or time.time()
            return view, float(created_at)
        except (ValueError, ValidationError, AttributeError) as exc:
            logger.error("Failed to deserialize session payload: %s", exc)
            return None

    def _is_expired(self, created_at: float) -> bool:
        """Return True if the session exceeds absolute max age."""
        if self.max_age is None:
            return False
        return (time.time() - created_at) > self.max_age

    def _ttl_remaining(self, created_at: float) -> int:
        """Return TTL seconds capped by absolute max age."""
        if self.max_age is None:
            return self.ttl
        remaining = int(max(0.0, (created_at + self.max_age) - time.time()))
        return min(self.ttl, remaining)

    def create_session(self, view: Optional[ViewState] = None) -> str:
        """Create and persist a new session, returning its id."""
        sid = self._generate_id()
        created_at = time.time()
        payload = self._dump(view or ViewState(), created_at=created_at)
        ttl = self._ttl_remaining(created_at)
        if ttl <= 0:
            raise RuntimeError("Session max age expired before storage")
        try:
            self.client.setex(self._key(sid), ttl, payload)
        except Exception as exc:
            logger.error("Failed to write session to Redis: %s", exc)
            raise
        return sid

    def get_session(self, session_id: str) -> Optional[SessionPayload]:
        """Fetch a session view, refreshing TTL, or None if missing/invalid."""
        try:
            raw = self.client.get(self._key(session_id))
        except Exception as exc:  # pragma: no cover - defensive
            logger.error("Failed to read session from Redis: %s", exc)
            return None
        if not raw:
            return None
        loaded = self._safe_load(raw)
        if not loaded:
            return None
        view, created_at = loaded
        if self._is_expired(created_at):
            self.delete_session(session_id)
            return None
        try:
            ttl = self._ttl_remaining(created_at)
            if ttl > 0:
                self.client.expire(self._key(session_id), ttl)
        except Exception as exc:  # pragma: no cover - defensive
            logger.warning("Failed to refresh session TTL: %s", exc)
        return view

    def update_session(self, session_id: str, view: ViewState) -> bool:
        """Replace the stored view; False if the session is missing/invalid."""
        key = self._key(session_id)
        try:
            raw = self.client.get(key)
        except Exception as exc:  # pragma: no cover - defensive
            logger.error("Failed to read session from Redis for update: %s", exc)
            return False
        if not raw:
            return False
        loaded = self._safe_load(raw)
        if not loaded:
            return False
        _previous, created_at = loaded
        if self._is_expired(created_at):
            self.delete_session(session_id)
            return False
        ttl = self._ttl_remaining(created_at)
        if ttl <= 0:
            self.delete_session(session_id)
            return False
        try:
            self.client.setex(key, ttl, self._dump(view, created_at=created_at))
        except Exception as exc:  # pragma: no cover - defensive
            logger.error("Failed to update session in Redis: %s", exc)
            return False
        return True

    def delete_session(self, session_id: str) -> None:
        """Delete a session if present."""
        try:
            self.client.delete(self._key(session_id))
        except Exception as exc:  # pragma: no cover - defensive
            logger.error("Failed to delete session from Redis: %s", exc)

    def clear(self) -> None:
        """Best-effort clear for all sessions under the configured prefix."""
        try:
            for key in self.client.scan_iter(f"{self.prefix}*"):
                self.client.delete(key)
        except Exception as exc:  # pragma: no cover - defensive
            logger.error("Failed to clear sessions from Redis: %s", exc)
