"""
Wrapper around the hosted Supabase project.

Presents the same surface as the local stub backend (``auth``, ``from_``,
``rpc``) and folds every library or transport failure into the result
envelope instead of raising.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Union

import httpx
from supabase import AsyncClient, AuthError, PostgrestAPIError, acreate_client
from supabase.lib.client_options import AsyncClientOptions

from pointbridge.core.config import SupabaseSettings
from pointbridge.core.session_state import (
    AuthStateCallback,
    SessionHolder,
    Subscription,
)
from pointbridge.models.results import (
    AuthData,
    AuthResponse,
    BackendError,
    OAuthData,
    OAuthResponse,
    QueryResult,
    SessionData,
    SessionResponse,
    SignOutResponse,
    UserData,
    UserResponse,
)
from pointbridge.models.session import AuthSession, AuthUser

logger = logging.getLogger(__name__)

Row = Dict[str, Any]
ClientProvider = Callable[[], Awaitable[AsyncClient]]

_AUTH_FAILURES = (AuthError, httpx.HTTPError)
_QUERY_FAILURES = (PostgrestAPIError, httpx.HTTPError)


def _error_from(exc: Exception) -> BackendError:
    message = getattr(exc, "message", None) or str(exc) or exc.__class__.__name__
    code = getattr(exc, "code", None)
    return BackendError(message=str(message), code=str(code) if code else None)


def _user_from_remote(user: Any) -> Optional[AuthUser]:
    if user is None:
        return None
    return AuthUser(
        id=str(user.id),
        email=user.email or "",
        role=user.role,
        aud=user.aud,
        created_at=user.created_at,
        updated_at=user.updated_at or user.created_at,
    )


def _session_from_remote(session: Any) -> Optional[AuthSession]:
    if session is None:
        return None
    expires_in = int(session.expires_in)
    expires_at = session.expires_at or int(time.time()) + expires_in
    return AuthSession(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_in=expires_in,
        expires_at=int(expires_at),
        token_type=session.token_type or "bearer",
        user=_user_from_remote(session.user),
    )


class RemoteAuth:
    """One caller's view of Supabase auth.

    An instance carries at most one session: the one it signed in, or the
    bearer tokens it was scoped to with ``SupabaseRemoteBackend.auth_for``.
    Every call runs on a fresh, non-persisting Supabase client, so nothing
    signed in here leaks into another instance or into the data client.
    """

    def __init__(
        self,
        provider: ClientProvider,
        *,
        access_token: Optional[str] = None,
        refresh_token: Optional[str] = None,
    ) -> None:
        self._provider = provider
        self._access_token = access_token
        self._refresh_token = refresh_token
        self._holder = SessionHolder()

    @property
    def holder(self) -> SessionHolder:
        return self._holder

    async def sign_in_with_password(self, *, email: str, password: str) -> AuthResponse:
        try:
            client = await self._provider()
            response = await client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except _AUTH_FAILURES as exc:
            logger.info("Supabase sign-in failed for %s: %s", email, exc)
            return AuthResponse(data=AuthData(), error=_error_from(exc))
        return self._track(response.user, response.session)

    async def sign_up(
        self,
        *,
        email: str,
        password: str,
        options: Optional[Dict[str, Any]] = None,
    ) -> AuthResponse:
        credentials: Dict[str, Any] = {"email": email, "password": password}
        if options:
            credentials["options"] = options
        try:
            client = await self._provider()
            response = await client.auth.sign_up(credentials)
        except _AUTH_FAILURES as exc:
            logger.info("Supabase sign-up failed for %s: %s", email, exc)
            return AuthResponse(data=AuthData(), error=_error_from(exc))
        return self._track(response.user, response.session)

    async def sign_in_with_oauth(
        self,
        *,
        provider: str,
        options: Optional[Dict[str, Any]] = None,
    ) -> OAuthResponse:
        """Return the provider consent URL; the session arrives after redirect."""
        credentials: Dict[str, Any] = {"provider": provider}
        if options:
            credentials["options"] = options
        try:
            client = await self._provider()
            response = await client.auth.sign_in_with_oauth(credentials)
        except _AUTH_FAILURES as exc:
            return OAuthResponse(data=OAuthData(provider=provider), error=_error_from(exc))
        return OAuthResponse(data=OAuthData(provider=provider, url=response.url))

    async def sign_out(self) -> SignOutResponse:
        """Revoke this caller's session; a caller without one has nothing to revoke."""
        access_token = self._access_token
        self._forget()
        if not access_token:
            return SignOutResponse()
        try:
            client = await self._provider()
            await client.auth.admin.sign_out(access_token)
        except _AUTH_FAILURES as exc:
            logger.warning("Supabase sign-out failed: %s", exc)
            return SignOutResponse(error=_error_from(exc))
        return SignOutResponse()

    async def get_session(self) -> SessionResponse:
        if not self._access_token:
            return SessionResponse(data=SessionData())
        try:
            client = await self._provider()
            response = await client.auth.set_session(
                self._access_token, self._refresh_token or ""
            )
        except _AUTH_FAILURES as exc:
            return SessionResponse(data=SessionData(), error=_error_from(exc))
        session = _session_from_remote(response.session if response else None)
        if session is None or session.is_expired(time.time()):
            self._forget()
            return SessionResponse(data=SessionData())
        self._adopt(session)
        return SessionResponse(data=SessionData(session=session))

    async def get_user(self) -> UserResponse:
        if not self._access_token:
            return UserResponse(data=UserData())
        try:
            client = await self._provider()
            response = await client.auth.get_user(self._access_token)
        except _AUTH_FAILURES as exc:
            return UserResponse(data=UserData(), error=_error_from(exc))
        user = _user_from_remote(response.user) if response else None
        return UserResponse(data=UserData(user=user))

    def on_auth_state_change(self, callback: AuthStateCallback) -> Subscription:
        return self._holder.subscribe(callback)

    def _track(self, remote_user: Any, remote_session: Any) -> AuthResponse:
        user = _user_from_remote(remote_user)
        session = _session_from_remote(remote_session)
        if session is not None:
            self._adopt(session)
        return AuthResponse(data=AuthData(user=user, session=session))

    def _adopt(self, session: AuthSession) -> None:
        self._access_token = session.access_token
        self._refresh_token = session.refresh_token
        if self._holder.stored != session:
            self._holder.set(session)

    def _forget(self) -> None:
        self._access_token = None
        self._refresh_token = None
        self._holder.clear()


class RemoteQueryBuilder:
    """Collects a query chain and runs it through PostgREST on a terminal call."""

    def __init__(self, provider: ClientProvider, table: str) -> None:
        self._provider = provider
        self.table = table
        self._columns = "*"
        self._filters: List[Tuple[str, Any]] = []
        self._order: Optional[Tuple[str, bool]] = None
        self._limit: Optional[int] = None

    def select(self, columns: str = "*") -> "RemoteQueryBuilder":
        self._columns = columns
        return self

    def eq(self, column: str, value: Any) -> "RemoteQueryBuilder":
        self._filters.append((column, value))
        return self

    def order(self, column: str, *, ascending: bool = True) -> "RemoteQueryBuilder":
        self._order = (column, ascending)
        return self

    def limit(self, count: int) -> "RemoteQueryBuilder":
        self._limit = count
        return self

    async def insert(self, values: Union[Row, List[Row]]) -> QueryResult:
        return await self._run(lambda table: table.insert(values))

    async def update(self, values: Row) -> QueryResult:
        return await self._run(lambda table: self._filtered(table.update(values)))

    async def delete(self) -> QueryResult:
        return await self._run(lambda table: self._filtered(table.delete()))

    async def single(self) -> QueryResult:
        return await self._run(lambda table: self._read(table).single())

    async def maybe_single(self) -> QueryResult:
        return await self._run(lambda table: self._read(table).maybe_single())

    async def execute(self) -> QueryResult:
        return await self._run(self._read)

    def _filtered(self, request: Any) -> Any:
        for column, value in self._filters:
            request = request.eq(column, value)
        return request

    def _read(self, table: Any) -> Any:
        request = self._filtered(table.select(self._columns))
        if self._order is not None:
            column, ascending = self._order
            request = request.order(column, desc=not ascending)
        if self._limit is not None:
            request = request.limit(self._limit)
        return request

    async def _run(self, build: Callable[[Any], Any]) -> QueryResult:
        try:
            client = await self._provider()
            response = await build(client.table(self.table)).execute()
        except _QUERY_FAILURES as exc:
            logger.warning("Supabase query on %s failed: %s", self.table, exc)
            return QueryResult(error=_error_from(exc))
        # maybe_single() yields no response at all when the row is missing.
        return QueryResult(data=response.data if response is not None else None)


class SupabaseRemoteBackend:
    """Backend bound to the hosted Supabase project.

    Queries and RPCs share one anon-key client that never signs in. Auth goes
    through ``RemoteAuth`` instances, each scoped to a single caller.
    """

    mode = "remote"

    def __init__(
        self,
        settings: SupabaseSettings,
        *,
        client: AsyncClient | None = None,
        auth_client_factory: ClientProvider | None = None,
    ) -> None:
        if (client is None or auth_client_factory is None) and not settings.is_configured:
            raise ValueError("SUPABASE_URL and SUPABASE_ANON_KEY are required for remote mode.")
        self._settings = settings
        self._client = client
        self._auth_client_factory = auth_client_factory or self._new_auth_client

    @property
    def auth(self) -> RemoteAuth:
        """A fresh, signed-out auth view; keep the instance to keep its session."""
        return RemoteAuth(self._auth_client_factory)

    def auth_for(
        self,
        access_token: Optional[str] = None,
        refresh_token: Optional[str] = None,
    ) -> RemoteAuth:
        return RemoteAuth(
            self._auth_client_factory,
            access_token=access_token,
            refresh_token=refresh_token,
        )

    async def _get_client(self) -> AsyncClient:
        if self._client is None:
            logger.info("Connecting to Supabase project at %s", self._settings.url)
            self._client = await acreate_client(self._settings.url, self._settings.anon_key)
        return self._client

    async def _new_auth_client(self) -> AsyncClient:
        return await acreate_client(
            self._settings.url,
            self._settings.anon_key,
            options=AsyncClientOptions(persist_session=False, auto_refresh_token=False),
        )

    def from_(self, table: str) -> RemoteQueryBuilder:
        return RemoteQueryBuilder(self._get_client, table)

    table = from_

    async def rpc(self, function_name: str, params: Optional[Dict[str, Any]] = None) -> QueryResult:
        try:
            client = await self._get_client()
            response = await client.rpc(function_name, params or {}).execute()
        except _QUERY_FAILURES as exc:
            logger.warning("Supabase RPC %s failed: %s", function_name, exc)
            return QueryResult(error=_error_from(exc))
        return QueryResult(data=response.data)


__all__ = ["RemoteAuth", "RemoteQueryBuilder", "SupabaseRemoteBackend"]
