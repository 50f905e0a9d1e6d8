"""Session storage backends."""

from .base import SessionPayload, SessionStore
from .memory import InMemorySessionStore
from .redis import RedisSessionStore

__all__ = [
    "SessionPayload",
    "SessionStore",
    "InMemorySessionStore",
    "RedisSessionStore",
]
