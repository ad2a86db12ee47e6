"""
FastAPI dependencies exposing settings sections to routes and client factories.
"""

from functools import lru_cache

from pointbridge.core.config import AppSettings, CitySearchSettings, get_settings


@lru_cache()
def get_app_settings() -> AppSettings:
    """Settings resolved once per process."""
    return get_settings()


def get_city_search_settings() -> CitySearchSettings:
    return get_app_settings().city_search


__all__ = ["get_app_settings", "get_city_search_settings"]
