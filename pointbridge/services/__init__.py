"""Service layer exports."""

from .city_search import CitySearchService
from .database import BackendMode, DatabaseHandle, create_database_handle

__all__ = [
    "BackendMode",
    "CitySearchService",
    "DatabaseHandle",
    "create_database_handle",
]
