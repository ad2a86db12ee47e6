"""Request payloads for the auth endpoints."""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class SignInRequest(BaseModel):
    email: str = Field(..., description="Account email address.")
    password: str = Field(..., description="Account password.")


class SignUpRequest(BaseModel):
    """Registration payload; ``profile`` is forwarded as sign-up metadata."""

    email: str
    password: str
    profile: Optional[Dict[str, Any]] = Field(
        None,
        description="Optional business or contact details captured at sign-up.",
    )


class OAuthSignInRequest(BaseModel):
    provider: str = Field("google", description="Identity provider to sign in with.")
    redirect_to: Optional[str] = Field(
        None,
        description="URL the provider should send the browser back to.",
    )


__all__ = ["OAuthSignInRequest", "SignInRequest", "SignUpRequest"]
