"""Backend bound when no hosted Supabase project is available."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pointbridge.clients.local_auth import LocalAuthClient
from pointbridge.clients.query_stub import LocalQueryStub
from pointbridge.models.results import QueryResult

logger = logging.getLogger(__name__)


class LocalStubBackend:
    """Local auth plus inert data access; performs no I/O beyond session storage."""

    mode = "local"

    def __init__(self, auth: LocalAuthClient) -> None:
        self.auth = auth

    def auth_for(
        self,
        access_token: Optional[str] = None,
        refresh_token: Optional[str] = None,
    ) -> LocalAuthClient:
        """Hand the local session only to the caller presenting its access token."""
        session = self.auth.holder.stored
        if session is not None and access_token == session.access_token:
            return self.auth
        return self.auth.signed_out_view()

    def from_(self, table: str) -> LocalQueryStub:
        return LocalQueryStub(table)

    table = from_

    async def rpc(self, function_name: str, params: Optional[Dict[str, Any]] = None) -> QueryResult:
        logger.warning("RPC %s requested against the local backend", function_name)
        return QueryResult.failure(
            f"RPC function {function_name} is not supported by the local backend",
            code="local_unsupported",
        )


__all__ = ["LocalStubBackend"]
