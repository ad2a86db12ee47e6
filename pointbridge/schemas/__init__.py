"""Public schema exports."""

from .auth import OAuthSignInRequest, SignInRequest, SignUpRequest
from .cities import City, CitySearchResponse

__all__ = [
    "City",
    "CitySearchResponse",
    "OAuthSignInRequest",
    "SignInRequest",
    "SignUpRequest",
]
