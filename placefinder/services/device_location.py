import logging
import weakref
from datetime import datetime

from placefinder.schemas.location import AuthorizationStatus, Position
from placefinder.services.position_provider import LocationDelegate

logger = logging.getLogger(__name__)


class DeviceLocationService:
    """Location service whose events are pushed in by the device client.

    The device shows the permission prompt and reports its outcome, fixes and
    errors; this class forwards them to the registered delegate.
    """

    def __init__(self, authorization: AuthorizationStatus = AuthorizationStatus.not_determined):
        self._authorization = authorization
        self._delegate: weakref.ReferenceType | None = None
        self.prompt_pending = False
        self.updating = False

    def set_delegate(self, delegate: LocationDelegate) -> None:
        self._delegate = weakref.ref(delegate)

    def authorization_status(self) -> AuthorizationStatus:
        return self._authorization

    def request_authorization(self) -> None:
        if self._authorization == AuthorizationStatus.not_determined:
            self.prompt_pending = True

    def start_updates(self) -> None:
        self.updating = True

    def stop_updates(self) -> None:
        self.updating = False

    def _target(self) -> LocationDelegate | None:
        delegate = self._delegate() if self._delegate is not None else None
        if delegate is None:
            logger.debug("No location delegate registered, dropping event")
        return delegate

    def report_authorization(self, status: AuthorizationStatus) -> None:
        self._authorization = status
        self.prompt_pending = False
        if delegate := self._target():
            delegate.authorization_did_change(status)

    def report_position(
        self, latitude: float, longitude: float, timestamp: datetime | None = None
    ) -> Position:
        if timestamp is None:
            position = Position(latitude=latitude, longitude=longitude)
        else:
            position = Position(latitude=latitude, longitude=longitude, timestamp=timestamp)
        # Late fixes are forwarded too; the delegate decides whether to accept them
        if delegate := self._target():
            delegate.location_did_update(position)
        return position

    def report_error(self, reason: str) -> None:
        if delegate := self._target():
            delegate.location_did_fail(reason)
