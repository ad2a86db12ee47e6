"""Expose constructed client wrappers."""

from .city_directory import CityApiClient, CitySearchError, StaticCityDirectory
from .local_auth import LocalAuthClient
from .local_backend import LocalStubBackend
from .query_stub import LocalQueryStub
from .session_storage import (
    MemorySessionStorage,
    SQLiteSessionStorage,
    SessionStorageError,
)
from .supabase_remote import SupabaseRemoteBackend

__all__ = [
    "CityApiClient",
    "CitySearchError",
    "LocalAuthClient",
    "LocalQueryStub",
    "LocalStubBackend",
    "MemorySessionStorage",
    "SQLiteSessionStorage",
    "SessionStorageError",
    "StaticCityDirectory",
    "SupabaseRemoteBackend",
]
