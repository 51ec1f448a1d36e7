from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from placefinder.exceptions.custom import RateLimitError, ReverseGeocodeError
from placefinder.observable import Observable
from placefinder.schemas.location import (
    AuthorizationStatus,
    LocationState,
    PermissionDeniedLocation,
    Position,
    ResolvedLocation,
    ResolvingLocation,
    UnknownLocation,
)
from placefinder.schemas.search import ErrorKind
from placefinder.services.geocoding import PlaceLabel

logger = logging.getLogger(__name__)


class LocationDelegate(Protocol):
    def location_did_update(self, position: Position) -> None: ...

    def location_did_fail(self, reason: str) -> None: ...

    def authorization_did_change(self, status: AuthorizationStatus) -> None: ...


class LocationService(Protocol):
    """Platform location service. Keeps only a weak reference to its delegate."""

    def set_delegate(self, delegate: LocationDelegate) -> None: ...

    def authorization_status(self) -> AuthorizationStatus: ...

    def request_authorization(self) -> None: ...

    def start_updates(self) -> None: ...

    def stop_updates(self) -> None: ...


class ReverseGeocoder(Protocol):
    async def reverse(self, latitude: float, longitude: float) -> PlaceLabel | None: ...


class PositionProvider:
    """Single-shot position acquisition on top of the platform location service.

    Each ``start_locating()`` accepts at most one fix, then stops updates. The
    fix is published right away with a coordinate label and renamed once the
    reverse lookup completes.
    """

    def __init__(
        self,
        location_service: LocationService,
        geocoder: ReverseGeocoder,
        auto_start: bool = True,
    ):
        self._service = location_service
        self._geocoder = geocoder
        self._auto_start = auto_start
        self._accepting = False
        self._last_position: Position | None = None
        self._lookup_task: asyncio.Task | None = None

        initial: LocationState = UnknownLocation()
        if location_service.authorization_status().is_blocked:
            initial = PermissionDeniedLocation()
        self.state: Observable[LocationState] = Observable(initial)

        location_service.set_delegate(self)

    @property
    def last_position(self) -> Position | None:
        """Most recent fix, kept even after access is revoked."""
        return self._last_position

    def current_authorization(self) -> AuthorizationStatus:
        return self._service.authorization_status()

    def request_permission(self) -> None:
        status = self.current_authorization()
        if status != AuthorizationStatus.not_determined:
            logger.debug("Permission already decided: %s", status)
            return
        self._service.request_authorization()

    def start_locating(self) -> None:
        status = self.current_authorization()
        if not status.is_authorized:
            logger.info("Not locating, authorization is %s", status)
            return
        self._accepting = True
        self.state.set(ResolvingLocation())
        self._service.start_updates()

    # LocationDelegate

    def location_did_update(self, position: Position) -> None:
        if not self._accepting:
            logger.debug("Ignoring extra fix %s", position.coordinate_label())
            return
        self._accepting = False
        self._service.stop_updates()

        self._last_position = position
        self.state.set(
            ResolvedLocation(position=position, display_name=position.coordinate_label())
        )
        self._cancel_lookup()
        self._lookup_task = asyncio.create_task(self._lookup_name(position))

    def location_did_fail(self, reason: str) -> None:
        logger.warning("Location update failed: %s", reason)
        if self._accepting:
            self.state.set(ResolvingLocation(error=ErrorKind.position_unavailable))

    def authorization_did_change(self, status: AuthorizationStatus) -> None:
        logger.info("Location authorization changed to %s", status)
        if status.is_blocked:
            self._accepting = False
            self._service.stop_updates()
            self._cancel_lookup()
            self.state.set(PermissionDeniedLocation())
        elif status.is_authorized:
            if isinstance(self.state.value, PermissionDeniedLocation):
                self.state.set(UnknownLocation())
            if self._auto_start and not isinstance(self.state.value, ResolvedLocation):
                self.start_locating()

    async def _lookup_name(self, position: Position) -> None:
        try:
            label = await self._geocoder.reverse(position.latitude, position.longitude)
        except (ReverseGeocodeError, RateLimitError) as exc:
            logger.warning("Reverse lookup failed for %s: %s", position.coordinate_label(), exc)
            return
        if label is None or not label.short_label:
            return

        current = self.state.value
        if isinstance(current, ResolvedLocation) and current.position == position:
            self.state.set(ResolvedLocation(position=position, display_name=label.short_label))

    def _cancel_lookup(self) -> None:
        if self._lookup_task is not None and not self._lookup_task.done():
            self._lookup_task.cancel()
        self._lookup_task = None

    async def wait_for_lookup(self) -> None:
        if self._lookup_task is not None:
            await asyncio.wait({self._lookup_task})

    async def aclose(self) -> None:
        self._cancel_lookup()
        self._service.stop_updates()
