from enum import StrEnum

from pydantic import BaseModel

from placefinder.schemas.places import Place


class ErrorKind(StrEnum):
    permission_denied = "permission_denied"
    position_unavailable = "position_unavailable"
    network_failure = "network_failure"
    decode_failure = "decode_failure"
    empty_result = "empty_result"  # zero matches, still a success


class SearchPhase(StrEnum):
    idle = "idle"
    debouncing = "debouncing"
    searching = "searching"
    completed = "completed"
    failed = "failed"


class SearchState(BaseModel):
    model_config = {"frozen": True}

    query: str = ""
    phase: SearchPhase = SearchPhase.idle
    is_loading: bool = False
    results: tuple[Place, ...] = ()
    last_error: ErrorKind | None = None


class SearchOutcome(BaseModel):
    sequence: int
    places: list[Place] = []
    error: ErrorKind | None = None
