"""Observable holder for the session of a single auth client."""

from __future__ import annotations

import logging
import time
from enum import Enum
from itertools import count
from typing import Callable, Dict, Optional

from pointbridge.models.session import AuthSession

logger = logging.getLogger(__name__)


class AuthChangeEvent(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"


AuthStateCallback = Callable[[AuthChangeEvent, Optional[AuthSession]], None]


class Subscription:
    """Handle returned to listeners; ``unsubscribe`` may be called repeatedly."""

    def __init__(self, holder: "SessionHolder", listener_id: int) -> None:
        self._holder = holder
        self.id = listener_id

    def unsubscribe(self) -> None:
        self._holder._remove_listener(self.id)


class SessionHolder:
    """Keep the current session and notify listeners synchronously on change.

    Each auth client owns its own holder, so two clients (or two tests) never
    share state implicitly. Expiry is passive: ``current`` hides an expired
    session, and listeners hear ``SIGNED_OUT`` once the owner calls ``clear``.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._session: Optional[AuthSession] = None
        self._listeners: Dict[int, AuthStateCallback] = {}
        self._ids = count(1)

    @property
    def stored(self) -> Optional[AuthSession]:
        """Session as held, without checking expiry."""
        return self._session

    def current(self) -> Optional[AuthSession]:
        """Return the session only while it has not expired."""
        if self._session is None or self._session.is_expired(self._clock()):
            return None
        return self._session

    def set(self, session: AuthSession) -> None:
        self._session = session
        self._notify(AuthChangeEvent.SIGNED_IN, session)

    def clear(self) -> None:
        had_session = self._session is not None
        self._session = None
        if had_session:
            self._notify(AuthChangeEvent.SIGNED_OUT, None)

    def subscribe(self, callback: AuthStateCallback) -> Subscription:
        listener_id = next(self._ids)
        self._listeners[listener_id] = callback
        session = self.current()
        event = AuthChangeEvent.SIGNED_IN if session else AuthChangeEvent.SIGNED_OUT
        self._dispatch(callback, event, session)
        return Subscription(self, listener_id)

    def _remove_listener(self, listener_id: int) -> None:
        self._listeners.pop(listener_id, None)

    def _notify(self, event: AuthChangeEvent, session: Optional[AuthSession]) -> None:
        for callback in list(self._listeners.values()):
            self._dispatch(callback, event, session)

    @staticmethod
    def _dispatch(
        callback: AuthStateCallback,
        event: AuthChangeEvent,
        session: Optional[AuthSession],
    ) -> None:
        try:
            callback(event, session)
        except Exception:  # pylint: disable=broad-except
            logger.exception("Auth state listener failed for event %s", event.value)


__all__ = ["AuthChangeEvent", "AuthStateCallback", "SessionHolder", "Subscription"]
