"""
Envelope types returned by every adapter-layer call.

Backends never raise to their callers; failures travel in the ``error`` field
so calling code can check results uniformly.
"""

from typing import Any, Optional

from pydantic import BaseModel

from pointbridge.models.session import AuthSession, AuthUser


class BackendError(BaseModel):
    message: str
    code: Optional[str] = None


class AuthData(BaseModel):
    user: Optional[AuthUser] = None
    session: Optional[AuthSession] = None


class AuthResponse(BaseModel):
    data: AuthData
    error: Optional[BackendError] = None

    @classmethod
    def failure(cls, message: str, code: Optional[str] = None) -> "AuthResponse":
        return cls(data=AuthData(), error=BackendError(message=message, code=code))


class UserData(BaseModel):
    user: Optional[AuthUser] = None


class UserResponse(BaseModel):
    data: UserData
    error: Optional[BackendError] = None


class SessionData(BaseModel):
    session: Optional[AuthSession] = None


class SessionResponse(BaseModel):
    data: SessionData
    error: Optional[BackendError] = None


class SignOutResponse(BaseModel):
    error: Optional[BackendError] = None


class OAuthData(AuthData):
    provider: str
    url: Optional[str] = None


class OAuthResponse(BaseModel):
    data: OAuthData
    error: Optional[BackendError] = None


class QueryResult(BaseModel):
    data: Any = None
    error: Optional[BackendError] = None

    @classmethod
    def failure(cls, message: str, code: Optional[str] = None) -> "QueryResult":
        return cls(data=None, error=BackendError(message=message, code=code))


__all__ = [
    "AuthData",
    "AuthResponse",
    "BackendError",
    "OAuthData",
    "OAuthResponse",
    "QueryResult",
    "SessionData",
    "SessionResponse",
    "SignOutResponse",
    "UserData",
    "UserResponse",
]
