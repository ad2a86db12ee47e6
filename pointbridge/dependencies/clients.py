"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

from functools import lru_cache

from pointbridge.clients import CityApiClient, StaticCityDirectory
from pointbridge.services import CitySearchService, DatabaseHandle, create_database_handle

from .config import get_app_settings, get_city_search_settings


@lru_cache()
def get_database() -> DatabaseHandle:
    """Bind the database handle once per process."""
    return create_database_handle(get_app_settings())


@lru_cache()
def get_city_search_service() -> CitySearchService:
    """Provide the city search service with its process-wide cache."""
    settings = get_city_search_settings()
    if settings.api_base_url:
        source = CityApiClient(base_url=settings.api_base_url)
    else:
        source = StaticCityDirectory()
    return CitySearchService(
        source,
        ttl_seconds=settings.cache_ttl_seconds,
        max_results=settings.max_results,
    )


__all__ = ["get_city_search_service", "get_database"]
