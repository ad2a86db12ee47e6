"""
Request-scoped auth dependencies.
"""

from dataclasses import dataclass
from typing import Annotated, Optional

from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from pointbridge.services import DatabaseHandle
from pointbridge.services.database import AuthClient

from .clients import get_database

_bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CallerTokens:
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None


def get_caller_tokens(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(_bearer)],
    refresh_token: Annotated[Optional[str], Header(alias="X-Refresh-Token")] = None,
) -> CallerTokens:
    """Read ``Authorization: Bearer`` and the optional ``X-Refresh-Token`` header."""
    return CallerTokens(
        access_token=credentials.credentials if credentials else None,
        refresh_token=refresh_token,
    )


def get_caller_auth(
    database: Annotated[DatabaseHandle, Depends(get_database)],
    tokens: Annotated[CallerTokens, Depends(get_caller_tokens)],
) -> AuthClient:
    """Auth client that only sees the session belonging to the calling request."""
    return database.auth_for(tokens.access_token, tokens.refresh_token)


__all__ = ["CallerTokens", "get_caller_auth", "get_caller_tokens"]
