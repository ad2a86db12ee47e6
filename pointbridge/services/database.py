"""
Database adapter selection.

``create_database_handle`` decides once, at startup, whether the application
talks to the local stub backend or to the hosted Supabase project. Everything
else imports the resulting ``DatabaseHandle`` and calls ``auth``, ``from_``
and ``rpc`` on it without knowing which backend answers.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Optional, Protocol, Union

from pointbridge.clients.local_auth import LocalAuthClient
from pointbridge.clients.local_backend import LocalStubBackend
from pointbridge.clients.query_stub import LocalQueryStub
from pointbridge.clients.session_storage import (
    SessionStorage,
    SessionStorageError,
    MemorySessionStorage,
    SQLiteSessionStorage,
)
from pointbridge.clients.supabase_remote import (
    RemoteAuth,
    RemoteQueryBuilder,
    SupabaseRemoteBackend,
)
from pointbridge.core.config import AppSettings
from pointbridge.core.security import SessionRecordCipher
from pointbridge.models.results import QueryResult

logger = logging.getLogger(__name__)


class BackendMode(str, Enum):
    LOCAL = "local"
    REMOTE = "remote"


QueryBuilder = Union[LocalQueryStub, RemoteQueryBuilder]
AuthClient = Union[LocalAuthClient, RemoteAuth]


class Backend(Protocol):
    mode: str
    auth: Any

    def auth_for(
        self,
        access_token: Optional[str] = None,
        refresh_token: Optional[str] = None,
    ) -> Any: ...

    def from_(self, table: str) -> Any: ...

    async def rpc(self, function_name: str, params: Optional[Dict[str, Any]] = None) -> QueryResult: ...


class DatabaseHandle:
    """The one database object handed to routes and services."""

    def __init__(self, backend: Backend) -> None:
        self._backend = backend

    @property
    def mode(self) -> BackendMode:
        return BackendMode(self._backend.mode)

    @property
    def auth(self) -> AuthClient:
        return self._backend.auth

    def auth_for(
        self,
        access_token: Optional[str] = None,
        refresh_token: Optional[str] = None,
    ) -> AuthClient:
        """Auth scoped to one caller: only the session their tokens identify is visible."""
        return self._backend.auth_for(access_token, refresh_token)

    def from_(self, table: str) -> QueryBuilder:
        return self._backend.from_(table)

    def table(self, table: str) -> QueryBuilder:
        return self._backend.from_(table)

    async def rpc(self, function_name: str, params: Optional[Dict[str, Any]] = None) -> QueryResult:
        return await self._backend.rpc(function_name, params)


def resolve_backend_mode(settings: AppSettings) -> BackendMode:
    """Map the configured backend ('local', 'remote', 'auto') to a concrete mode."""
    requested = settings.database.backend
    if requested == "auto":
        return BackendMode.REMOTE if settings.supabase.is_configured else BackendMode.LOCAL
    return BackendMode(requested)


def _open_session_storage(settings: AppSettings) -> SessionStorage:
    try:
        return SQLiteSessionStorage(settings.database.session_db_path)
    except SessionStorageError:
        logger.exception(
            "Session storage unavailable; local sessions will not survive a restart"
        )
        return MemorySessionStorage()


def create_backend(
    settings: AppSettings,
    *,
    storage: SessionStorage | None = None,
) -> Backend:
    mode = resolve_backend_mode(settings)
    if mode is BackendMode.REMOTE:
        if not settings.supabase.is_configured:
            raise ValueError(
                "DATABASE_BACKEND=remote requires SUPABASE_URL and SUPABASE_ANON_KEY."
            )
        logger.info("Binding database handle to Supabase")
        return SupabaseRemoteBackend(settings.supabase)

    secret = settings.local_auth.session_encryption_secret
    auth = LocalAuthClient(
        storage=storage if storage is not None else _open_session_storage(settings),
        settings=settings.local_auth,
        cipher=SessionRecordCipher(secret=secret) if secret else None,
    )
    logger.info("Binding database handle to the local stub backend")
    return LocalStubBackend(auth)


def create_database_handle(
    settings: AppSettings,
    *,
    storage: SessionStorage | None = None,
) -> DatabaseHandle:
    return DatabaseHandle(create_backend(settings, storage=storage))


__all__ = [
    "Backend",
    "BackendMode",
    "DatabaseHandle",
    "create_backend",
    "create_database_handle",
    "resolve_backend_mode",
]
