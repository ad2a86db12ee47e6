"""City lookup sources: the built-in directory and the cities API server."""

from __future__ import annotations

from typing import Any, Dict, List, Protocol, Tuple

import httpx
from pydantic import ValidationError

from pointbridge.schemas.cities import City
from pointbridge.utils.http import RetryConfig, request_with_retry


class CitySearchError(Exception):
    """Raised when a city source cannot answer a query."""


class CitySource(Protocol):
    async def fetch(self, query: str, *, limit: int) -> List[City]: ...


# (name, country, country_code, state_province, population, is_capital, lat, lon)
_CityRow = Tuple[str, str, str, str, int, bool, float, float]

_BUILTIN_CITIES: Tuple[_CityRow, ...] = (
    ("New York", "United States", "US", "New York", 8336817, False, 40.7128, -74.0060),
    ("Los Angeles", "United States", "US", "California", 3979576, False, 34.0522, -118.2437),
    ("Chicago", "United States", "US", "Illinois", 2693976, False, 41.8781, -87.6298),
    ("Houston", "United States", "US", "Texas", 2320268, False, 29.7604, -95.3698),
    ("Phoenix", "United States", "US", "Arizona", 1680992, True, 33.4484, -112.0740),
    ("Philadelphia", "United States", "US", "Pennsylvania", 1584064, False, 39.9526, -75.1652),
    ("San Antonio", "United States", "US", "Texas", 1547253, False, 29.4241, -98.4936),
    ("San Diego", "United States", "US", "California", 1423851, False, 32.7157, -117.1611),
    ("Dallas", "United States", "US", "Texas", 1343573, False, 32.7767, -96.7970),
    ("San Jose", "United States", "US", "California", 1035317, False, 37.3382, -121.8863),
    ("Austin", "United States", "US", "Texas", 978908, True, 30.2672, -97.7431),
    ("Jacksonville", "United States", "US", "Florida", 949611, False, 30.3322, -81.6557),
    ("Fort Worth", "United States", "US", "Texas", 918915, False, 32.7555, -97.3308),
    ("Columbus", "United States", "US", "Ohio", 898553, True, 39.9612, -82.9988),
    ("Charlotte", "United States", "US", "North Carolina", 885708, False, 35.2271, -80.8431),
    ("Seattle", "United States", "US", "Washington", 749256, False, 47.6062, -122.3321),
    ("Denver", "United States", "US", "Colorado", 715522, True, 39.7392, -104.9903),
    ("Washington", "United States", "US", "District of Columbia", 705749, True, 38.9072, -77.0369),
    ("Boston", "United States", "US", "Massachusetts", 692600, True, 42.3601, -71.0589),
    ("El Paso", "United States", "US", "Texas", 681728, False, 31.7619, -106.4850),
    ("London", "United Kingdom", "GB", "England", 8982000, True, 51.5074, -0.1278),
    ("Paris", "France", "FR", "Île-de-France", 2161000, True, 48.8566, 2.3522),
    ("Tokyo", "Japan", "JP", "Tokyo", 13960000, True, 35.6762, 139.6503),
    ("Sydney", "Australia", "AU", "New South Wales", 5312000, False, -33.8688, 151.2093),
    ("Toronto", "Canada", "CA", "Ontario", 2930000, False, 43.6532, -79.3832),
    ("Berlin", "Germany", "DE", "Berlin", 3769000, True, 52.5200, 13.4050),
    ("Madrid", "Spain", "ES", "Madrid", 3223000, True, 40.4168, -3.7038),
    ("Rome", "Italy", "IT", "Lazio", 2873000, True, 41.9028, 12.4964),
    ("Amsterdam", "Netherlands", "NL", "North Holland", 872680, True, 52.3676, 4.9041),
    ("Vancouver", "Canada", "CA", "British Columbia", 675218, False, 49.2827, -123.1207),
    ("Manama", "Bahrain", "BH", "Capital Governorate", 200000, True, 26.0667, 50.5577),
    ("Dubai", "United Arab Emirates", "AE", "Dubai", 3400000, False, 25.2048, 55.2708),
    ("Abu Dhabi", "United Arab Emirates", "AE", "Abu Dhabi", 1450000, True, 24.4539, 54.3773),
    ("Riyadh", "Saudi Arabia", "SA", "Riyadh", 8000000, True, 24.7136, 46.6753),
    ("Doha", "Qatar", "QA", "Doha", 1200000, True, 25.2854, 51.5310),
    ("Kuwait City", "Kuwait", "KW", "Kuwait", 3000000, True, 29.3759, 47.9774),
    ("Muscat", "Oman", "OM", "Muscat", 1500000, True, 23.5880, 58.3829),
    ("Tehran", "Iran", "IR", "Tehran", 9000000, True, 35.6892, 51.3890),
    ("Istanbul", "Turkey", "TR", "Istanbul", 15500000, False, 41.0082, 28.9784),
    ("Cairo", "Egypt", "EG", "Cairo", 20000000, True, 30.0444, 31.2357),
)


class StaticCityDirectory:
    """In-process directory used when no cities API server is configured."""

    def __init__(self, cities: List[City] | None = None) -> None:
        if cities is None:
            cities = [
                City(
                    id=str(index),
                    name=name,
                    country=country,
                    country_code=code,
                    state_province=state,
                    population=population,
                    is_capital=capital,
                    latitude=lat,
                    longitude=lon,
                )
                for index, (name, country, code, state, population, capital, lat, lon)
                in enumerate(_BUILTIN_CITIES, start=1)
            ]
        self._cities = cities

    async def fetch(self, query: str, *, limit: int) -> List[City]:
        needle = query.strip().lower()
        matches = [
            city
            for city in self._cities
            if needle in city.name.lower()
            or needle in city.state_province.lower()
            or needle in city.country.lower()
        ]
        # Name prefix matches first, then the most populous.
        matches.sort(
            key=lambda city: (not city.name.lower().startswith(needle), -city.population)
        )
        return matches[:limit]


class CityApiClient:
    """Query the cities API server (``/api/cities/search``)."""

    def __init__(
        self,
        *,
        base_url: str,
        timeout: float = 10.0,
        retry_config: RetryConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._retry_config = retry_config or RetryConfig()
        self._transport = transport

    async def fetch(self, query: str, *, limit: int) -> List[City]:
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await request_with_retry(
                    client.get,
                    f"{self._base_url}/api/cities/search",
                    params={"q": query, "limit": limit},
                    retry_config=self._retry_config,
                )
            payload: Dict[str, Any] = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise CitySearchError(f"City search request failed for {query!r}") from exc

        if not payload.get("success"):
            raise CitySearchError(payload.get("message") or "City search API reported failure")

        try:
            return [City.model_validate(row) for row in payload.get("data") or []]
        except ValidationError as exc:
            raise CitySearchError("City search API returned malformed rows") from exc


__all__ = ["CityApiClient", "CitySearchError", "CitySource", "StaticCityDirectory"]
