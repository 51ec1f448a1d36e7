from __future__ import annotations

import logging
import weakref
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
Callback = Callable[[T], None]


class Subscription:
    """Handle returned by ``Observable.subscribe``.

    Only the observable owns the callback; the handle keeps a weak reference
    back, so holding a subscription never keeps the state alive.
    """

    def __init__(self, owner: Observable, token: int) -> None:
        self._owner = weakref.ref(owner)
        self._token = token

    @property
    def active(self) -> bool:
        owner = self._owner()
        return owner is not None and owner._has(self._token)

    def cancel(self) -> None:
        if owner := self._owner():
            owner._remove(self._token)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info) -> None:
        self.cancel()


class Observable(Generic[T]):
    def __init__(self, value: T) -> None:
        self._value = value
        self._subscribers: dict[int, Callback] = {}
        self._next_token = 0

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        if value == self._value:
            return
        self._value = value
        # Copy so callbacks may subscribe or cancel while being notified
        for callback in list(self._subscribers.values()):
            try:
                callback(value)
            except Exception:
                logger.exception("Subscriber %r failed", callback)

    def subscribe(self, callback: Callback, replay: bool = False) -> Subscription:
        token = self._next_token
        self._next_token += 1
        self._subscribers[token] = callback
        if replay:
            try:
                callback(self._value)
            except Exception:
                logger.exception("Subscriber %r failed on replay", callback)
        return Subscription(self, token)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def _has(self, token: int) -> bool:
        return token in self._subscribers

    def _remove(self, token: int) -> None:
        self._subscribers.pop(token, None)
