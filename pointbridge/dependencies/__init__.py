"""Expose dependency helpers for FastAPI routers."""

from .auth import CallerTokens, get_caller_auth, get_caller_tokens
from .clients import get_city_search_service, get_database
from .config import get_app_settings, get_city_search_settings

__all__ = [
    "CallerTokens",
    "get_app_settings",
    "get_caller_auth",
    "get_caller_tokens",
    "get_city_search_service",
    "get_city_search_settings",
    "get_database",
]
