"""HTTP API for the weather lookup view."""

import hmac
import threading

from fastapi import APIRouter, Depends, Header, HTTPException, status
from pydantic import BaseModel

from .config import settings
from .data_sources import build_data_source
from .domain import ViewState
from .errors import EmptyQueryError, NothingToRefreshError
from .presentation import ViewModel, render_view
from .query_client import WeatherQueryClient
from .session_manager import create_session, delete_session, get_session, update_session
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="app/api")


def require_api_key(x_api_key: str | None = Header(default=None)):
    """Validate the X-API-Key header against the configured static key."""
    # If no key is configured, allow requests (dev/default mode).
    if not settings.api_key:
        return

    if not x_api_key:
        logger.debug("No API key provided")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing API key")

    if hmac.compare_digest(str(x_api_key), str(settings.api_key)):
        return

    logger.debug("Invalid API key provided")
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


router = APIRouter(dependencies=[Depends(require_api_key)])
DATA_SOURCE = build_data_source(settings)
# Serializes history read-merge-write across overlapping requests.
_COMMIT_LOCK = threading.Lock()


class SearchRequest(BaseModel):
    """Incoming city search payload."""
    city: str


class SessionResponse(BaseModel):
    """Session id plus the rendered view."""
    session_id: str
    view: ViewModel


def _load_view(session_id: str) -> ViewState:
    """Return the stored view or raise 404."""
    view = get_session(session_id)
    if view is None:
        raise HTTPException(status_code=404, detail="Unknown session ID")
    return view


def _stored_history(session_id: str):
    """History as currently stored for a session, or None once it is gone."""
    view = get_session(session_id)
    return view.history if view is not None else None


def _client_for(session_id: str) -> WeatherQueryClient:
    """Rebuild the controller for a session; every transition is written back."""
    return WeatherQueryClient(
        DATA_SOURCE,
        history_limit=settings.history_limit,
        view=_load_view(session_id),
        listener=lambda view: update_session(session_id, view),
        history_loader=lambda: _stored_history(session_id),
        commit_lock=_COMMIT_LOCK,
    )


def _respond(session_id: str, client: WeatherQueryClient) -> SessionResponse:
    return SessionResponse(session_id=session_id, view=render_view(client.view_state(), settings))


@router.post("/session/start", response_model=SessionResponse)
def start_session():
    """Mount a new view with an idle controller."""
    view = ViewState()
    session_id = create_session(view)
    logger.info("Started view session", extra={"session_id": session_id})
    return SessionResponse(session_id=session_id, view=render_view(view, settings))


@router.get("/session/{session_id}", response_model=SessionResponse)
def get_view(session_id: str):
    """Return the current view for a session."""
    return SessionResponse(session_id=session_id, view=render_view(_load_view(session_id), settings))


@router.post("/session/{session_id}/search", response_model=SessionResponse)
def search(session_id: str, req: SearchRequest):
    """Submit the city form."""
    if len(req.city.strip()) > settings.max_city_chars:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                            detail=f"City name too long; limit {settings.max_city_chars} characters.")

    client = _client_for(session_id)
    try:
        client.submit(req.city)
    except EmptyQueryError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return _respond(session_id, client)


@router.post("/session/{session_id}/history/{index}", response_model=SessionResponse)
def select_history(session_id: str, index: int):
    """Re-run a search from the history chips."""
    client = _client_for(session_id)
    try:
        client.select_history(index)
    except IndexError:
        raise HTTPException(status_code=404, detail="Unknown history entry")
    return _respond(session_id, client)


@router.post("/session/{session_id}/refresh", response_model=SessionResponse)
def refresh(session_id: str):
    """Reload the location currently on screen."""
    client = _client_for(session_id)
    try:
        client.refresh()
    except NothingToRefreshError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return _respond(session_id, client)


@router.delete("/session/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def end_session(session_id: str):
    """Unmount a view and discard its state."""
    delete_session(session_id)
    logger.info("Ended view session", extra={"session_id": session_id})
