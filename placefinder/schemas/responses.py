from __future__ import annotations

from pydantic import BaseModel

from placefinder.schemas.location import AuthorizationStatus, LocationState
from placefinder.schemas.places import Place
from placefinder.schemas.search import ErrorKind, SearchPhase


class LocationStatusResponse(BaseModel):
    authorization: AuthorizationStatus
    prompt_pending: bool
    state: LocationState


class SearchStateResponse(BaseModel):
    query: str
    phase: SearchPhase
    is_loading: bool
    results: list[Place]
    last_error: ErrorKind | None = None
    message: str | None = None  # generic, safe to display
