"""
Domain models for authenticated users and their sessions.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class AuthUser(BaseModel):
    """User record issued by whichever backend performed the sign-in."""

    model_config = {"frozen": True}

    id: str = Field(..., description="UUID of the user.")
    email: str
    role: Optional[str] = None
    aud: str = "authenticated"
    created_at: datetime
    updated_at: datetime


class AuthSession(BaseModel):
    """Bearer token pair plus expiry for a signed-in user."""

    access_token: str
    refresh_token: str
    expires_in: int = Field(..., description="Lifetime of the access token in seconds.")
    expires_at: int = Field(..., description="Unix timestamp after which the session is void.")
    token_type: str = "bearer"
    user: AuthUser

    def is_expired(self, now: float) -> bool:
        """Return True once the wall-clock time has reached ``expires_at``."""
        return self.expires_at <= now


__all__ = ["AuthSession", "AuthUser"]
