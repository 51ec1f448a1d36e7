from __future__ import annotations

from datetime import datetime, timezone
from enum import StrEnum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from placefinder.schemas.search import ErrorKind


class AuthorizationStatus(StrEnum):
    not_determined = "not_determined"
    denied = "denied"
    restricted = "restricted"
    authorized_when_in_use = "authorized_when_in_use"
    authorized_always = "authorized_always"

    @property
    def is_authorized(self) -> bool:
        return self in (
            AuthorizationStatus.authorized_when_in_use,
            AuthorizationStatus.authorized_always,
        )

    @property
    def is_blocked(self) -> bool:
        return self in (AuthorizationStatus.denied, AuthorizationStatus.restricted)


class Position(BaseModel):
    model_config = {"frozen": True}

    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def coordinate_label(self) -> str:
        """Fallback display name built from the coordinates alone."""
        return f"{self.latitude:.4f}, {self.longitude:.4f}"


class UnknownLocation(BaseModel):
    model_config = {"frozen": True}

    kind: Literal["unknown"] = "unknown"


class PermissionDeniedLocation(BaseModel):
    model_config = {"frozen": True}

    kind: Literal["permission_denied"] = "permission_denied"


class ResolvingLocation(BaseModel):
    model_config = {"frozen": True}

    kind: Literal["resolving"] = "resolving"
    error: ErrorKind | None = None


class ResolvedLocation(BaseModel):
    model_config = {"frozen": True}

    kind: Literal["resolved"] = "resolved"
    position: Position
    display_name: str


LocationState = Annotated[
    Union[UnknownLocation, PermissionDeniedLocation, ResolvingLocation, ResolvedLocation],
    Field(discriminator="kind"),
]
