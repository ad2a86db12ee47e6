"""
Network-free auth client for local development.

Exposes the same ``auth`` surface as the hosted Supabase backend, but accepts a
single configured admin credential and fabricates everything else. There is no
password verification against a user store: this is an explicit local-dev
bypass and must never be bound in production.
"""

from __future__ import annotations

import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from pointbridge.clients.session_storage import (
    MemorySessionStorage,
    SessionStorage,
    SessionStorageError,
)
from pointbridge.core.config import LocalAuthSettings
from pointbridge.core.security import SessionRecordCipher
from pointbridge.core.session_state import (
    AuthStateCallback,
    SessionHolder,
    Subscription,
)
from pointbridge.models.results import (
    AuthData,
    AuthResponse,
    OAuthData,
    OAuthResponse,
    SessionData,
    SessionResponse,
    SignOutResponse,
    UserData,
    UserResponse,
)
from pointbridge.models.session import AuthSession, AuthUser

logger = logging.getLogger(__name__)

SESSION_STORAGE_KEY = "local-auth-session"
OAUTH_PLACEHOLDER_EMAIL = "google.user@example.com"


class LocalAuthClient:
    """Supabase-shaped auth client backed by a session holder and local storage."""

    def __init__(
        self,
        *,
        storage: SessionStorage,
        settings: LocalAuthSettings,
        cipher: SessionRecordCipher | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._storage = storage
        self._settings = settings
        self._cipher = cipher
        self._clock = clock
        self._holder = SessionHolder(clock=clock)
        self._load_session_from_storage()

    @property
    def holder(self) -> SessionHolder:
        return self._holder

    async def sign_in_with_password(self, *, email: str, password: str) -> AuthResponse:
        if email != self._settings.admin_email or password != self._settings.admin_password:
            logger.info("Local sign-in rejected for %s", email)
            return AuthResponse.failure("Invalid credentials")

        user = self._build_user(email=email, role="admin")
        session = self._start_session(user)
        logger.info("Local admin sign-in for %s", email)
        return AuthResponse(data=AuthData(user=user, session=session))

    async def sign_up(
        self,
        *,
        email: str,
        password: str,
        options: Optional[Dict[str, Any]] = None,
    ) -> AuthResponse:
        """Simulate a successful registration; credentials are not stored."""
        user = self._build_user(email=email, role="merchant")
        profile = (options or {}).get("data")
        if profile:
            logger.debug("Discarding local sign-up profile fields: %s", sorted(profile))
        session = self._start_session(user)
        logger.info("Local sign-up simulated for %s", email)
        return AuthResponse(data=AuthData(user=user, session=session))

    async def sign_in_with_oauth(
        self,
        *,
        provider: str,
        options: Optional[Dict[str, Any]] = None,
    ) -> OAuthResponse:
        """Placeholder OAuth flow: the provider is ignored and no redirect happens."""
        user = self._build_user(email=OAUTH_PLACEHOLDER_EMAIL, role="customer")
        session = self._start_session(user)
        logger.info("Simulated %s OAuth sign-in", provider)
        return OAuthResponse(data=OAuthData(provider=provider, user=user, session=session))

    async def sign_out(self) -> SignOutResponse:
        self._clear_session()
        return SignOutResponse()

    async def get_session(self) -> SessionResponse:
        session = self._active_session()
        return SessionResponse(data=SessionData(session=session))

    async def get_user(self) -> UserResponse:
        session = self._active_session()
        return UserResponse(data=UserData(user=session.user if session else None))

    def on_auth_state_change(self, callback: AuthStateCallback) -> Subscription:
        """Invoke ``callback`` now with the derived state and on every change.

        There is no background timer: a session that expires while nobody
        touches the client is reported as ``SIGNED_OUT`` on the next
        ``get_session``, ``get_user`` or ``on_auth_state_change`` call.
        """
        if self._holder.stored is not None and self._holder.current() is None:
            self._clear_session()
        return self._holder.subscribe(callback)

    def signed_out_view(self) -> "LocalAuthClient":
        """Throwaway client with this client's settings and no session."""
        return LocalAuthClient(
            storage=MemorySessionStorage(),
            settings=self._settings,
            clock=self._clock,
        )

    def generate_tokens(self, user: AuthUser) -> AuthSession:
        now = int(self._clock())
        ttl = self._settings.session_ttl_seconds
        return AuthSession(
            access_token=f"local-token-{user.id}-{now}",
            refresh_token=f"local-refresh-{user.id}-{now}",
            expires_in=ttl,
            expires_at=now + ttl,
            token_type="bearer",
            user=user,
        )

    def _build_user(self, *, email: str, role: str) -> AuthUser:
        timestamp = datetime.fromtimestamp(self._clock(), tz=timezone.utc)
        return AuthUser(
            id=str(uuid.uuid4()),
            email=email,
            role=role,
            aud="authenticated",
            created_at=timestamp,
            updated_at=timestamp,
        )

    def _start_session(self, user: AuthUser) -> AuthSession:
        session = self.generate_tokens(user)
        self._save_session_to_storage(session)
        self._holder.set(session)
        return session

    def _active_session(self) -> Optional[AuthSession]:
        session = self._holder.current()
        if session is None:
            self._clear_session()
        return session

    def _clear_session(self) -> None:
        self._holder.clear()
        try:
            self._storage.remove_item(SESSION_STORAGE_KEY)
        except SessionStorageError:
            logger.exception("Unable to remove persisted local session")

    def _save_session_to_storage(self, session: AuthSession) -> None:
        record = session.model_dump_json()
        if self._cipher is not None:
            record = self._cipher.seal(record)
        try:
            self._storage.set_item(SESSION_STORAGE_KEY, record)
        except SessionStorageError:
            # The in-memory session keeps working for the rest of the process.
            logger.exception("Unable to persist local session")

    def _load_session_from_storage(self) -> None:
        try:
            record = self._storage.get_item(SESSION_STORAGE_KEY)
        except SessionStorageError:
            logger.exception("Unable to read persisted local session")
            return
        if record is None:
            return

        try:
            if self._cipher is not None:
                record = self._cipher.unseal(record)
            session = AuthSession.model_validate_json(record)
        except (ValueError, ValidationError):
            logger.warning("Discarding unreadable persisted local session")
            self._clear_session()
            return

        if session.is_expired(self._clock()):
            logger.info("Purging expired persisted local session")
            self._clear_session()
            return

        self._holder.set(session)
        logger.info("Restored local session for %s", session.user.email)


__all__ = ["LocalAuthClient", "OAUTH_PLACEHOLDER_EMAIL", "SESSION_STORAGE_KEY"]
