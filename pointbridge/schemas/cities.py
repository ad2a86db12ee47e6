"""Schemas for the city lookup endpoints."""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator


class City(BaseModel):
    id: str
    name: str
    country: str
    country_code: str
    state_province: str = ""
    population: int = 0
    is_capital: bool = False
    latitude: float = 0.0
    longitude: float = 0.0

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> str:
        """The cities table uses integer keys; the API contract uses strings."""
        return str(value)


class CitySearchResponse(BaseModel):
    """Envelope returned by ``GET /api/cities/search``."""

    success: bool = True
    data: List[City] = Field(default_factory=list)
    query: Optional[str] = None
    count: int = 0
    message: Optional[str] = None


__all__ = ["City", "CitySearchResponse"]
