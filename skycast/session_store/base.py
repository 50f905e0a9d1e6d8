"""Shared protocol and types for session storage backends."""

from typing import Optional, Protocol

from skycast.domain import ViewState

SessionPayload = ViewState


class SessionStore(Protocol):
    """Protocol for per-view session storage backends."""
    def create_session(self, view: Optional[ViewState] = None) -> str:
        """Persist a new session and return its id."""

    def get_session(self, session_id: str) -> Optional[SessionPayload]:
        """Fetch a session by id, returning None if missing or expired."""

    def update_session(self, session_id: str, view: ViewState) -> bool:
        """Replace the stored view; return False for missing/expired ids."""

    def delete_session(self, session_id: str) -> None:
        """Delete a session without raising if it is absent."""

    def clear(self) -> None:
        """Clear all stored sessions."""
