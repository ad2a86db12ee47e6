"""
Application configuration models and helpers.

Centralizes settings management so the FastAPI app, the database adapter and
the operational scripts share a consistent configuration surface.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

import os

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


class DatabaseSettings(BaseSettings):
    """Selects which backend the database handle is bound to."""

    model_config = SettingsConfigDict(populate_by_name=True)

    backend: str = Field(
        "auto",
        validation_alias="DATABASE_BACKEND",
        description=(
            "One of 'local', 'remote' or 'auto'. Auto binds to Supabase when "
            "credentials are configured and to the local stub otherwise."
        ),
    )
    session_db_path: str = Field(
        "data/local_sessions.db",
        validation_alias="SESSION_DB_PATH",
        description="SQLite file backing the persisted local session record.",
    )

    @field_validator("backend")
    @classmethod
    def _normalize_backend(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in {"local", "remote", "auto"}:
            raise ValueError("DATABASE_BACKEND must be 'local', 'remote' or 'auto'.")
        return normalized


class SupabaseSettings(BaseSettings):
    """Credentials for the hosted Supabase project."""

    model_config = SettingsConfigDict(populate_by_name=True)

    url: Optional[str] = Field(None, validation_alias="SUPABASE_URL")
    anon_key: Optional[str] = Field(None, validation_alias="SUPABASE_ANON_KEY")

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.anon_key)


class LocalAuthSettings(BaseSettings):
    """Configuration for the network-free local development auth client."""

    model_config = SettingsConfigDict(populate_by_name=True)

    admin_email: str = Field("admin@rac-rewards.com", validation_alias="LOCAL_ADMIN_EMAIL")
    admin_password: str = Field("admin123!", validation_alias="LOCAL_ADMIN_PASSWORD")
    session_ttl_seconds: int = Field(3600, validation_alias="LOCAL_SESSION_TTL")
    session_encryption_secret: Optional[str] = Field(
        None,
        validation_alias="SESSION_ENCRYPTION_SECRET",
        description=(
            "Secret used to derive the key encrypting the persisted session record. "
            "The record is stored as plain JSON when omitted."
        ),
    )


class CitySearchSettings(BaseSettings):
    """City search cache and upstream configuration."""

    model_config = SettingsConfigDict(populate_by_name=True)

    api_base_url: Optional[str] = Field(
        None,
        validation_alias="CITY_SEARCH_API_URL",
        description="Cities API server. The built-in directory is used when omitted.",
    )
    cache_ttl_seconds: int = Field(300, validation_alias="CITY_CACHE_TTL")
    max_results: int = Field(10, validation_alias="CITY_SEARCH_MAX_RESULTS")

    @field_validator("api_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: Optional[str]) -> Optional[str]:
        if not value:
            return None
        return value.rstrip("/")


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    supabase: SupabaseSettings = Field(default_factory=SupabaseSettings)
    local_auth: LocalAuthSettings = Field(default_factory=LocalAuthSettings)
    city_search: CitySearchSettings = Field(default_factory=CitySearchSettings)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()


__all__ = [
    "AppSettings",
    "CitySearchSettings",
    "DatabaseSettings",
    "LocalAuthSettings",
    "SupabaseSettings",
    "get_settings",
]
