"""
FastAPI routes for the PointBridge backend adapter.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated, Any, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from pointbridge.core.config import AppSettings
from pointbridge.dependencies import (
    get_app_settings,
    get_caller_auth,
    get_city_search_service,
    get_database,
)
from pointbridge.schemas import (
    CitySearchResponse,
    OAuthSignInRequest,
    SignInRequest,
    SignUpRequest,
)
from pointbridge.services import CitySearchService, DatabaseHandle
from pointbridge.services.city_search import MIN_QUERY_LENGTH
from pointbridge.services.database import AuthClient

router = APIRouter()
logger = logging.getLogger(__name__)


def _envelope(result: BaseModel, failure_status: HTTPStatus) -> JSONResponse:
    """Serialize an adapter envelope, mapping a populated error to ``failure_status``."""
    error: Optional[Any] = getattr(result, "error", None)
    status_code = failure_status if error is not None else HTTPStatus.OK
    return JSONResponse(status_code=status_code, content=result.model_dump(mode="json"))


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck(
    database: Annotated[DatabaseHandle, Depends(get_database)],
    settings: Annotated[AppSettings, Depends(get_app_settings)],
) -> dict:
    """Simple health endpoint for monitoring."""
    return {
        "status": "ok",
        "backend": database.mode.value,
        "environment": settings.environment,
    }


@router.post("/auth/sign-in")
async def sign_in(
    payload: SignInRequest,
    database: Annotated[DatabaseHandle, Depends(get_database)],
) -> JSONResponse:
    result = await database.auth.sign_in_with_password(
        email=payload.email, password=payload.password
    )
    return _envelope(result, HTTPStatus.UNAUTHORIZED)


@router.post("/auth/sign-up")
async def sign_up(
    payload: SignUpRequest,
    database: Annotated[DatabaseHandle, Depends(get_database)],
) -> JSONResponse:
    options = {"data": payload.profile} if payload.profile else None
    result = await database.auth.sign_up(
        email=payload.email, password=payload.password, options=options
    )
    return _envelope(result, HTTPStatus.BAD_REQUEST)


@router.post("/auth/oauth")
async def sign_in_with_oauth(
    payload: OAuthSignInRequest,
    database: Annotated[DatabaseHandle, Depends(get_database)],
) -> JSONResponse:
    options = {"redirect_to": payload.redirect_to} if payload.redirect_to else None
    result = await database.auth.sign_in_with_oauth(
        provider=payload.provider, options=options
    )
    return _envelope(result, HTTPStatus.BAD_REQUEST)


@router.post("/auth/sign-out")
async def sign_out(
    auth: Annotated[AuthClient, Depends(get_caller_auth)],
) -> JSONResponse:
    result = await auth.sign_out()
    return _envelope(result, HTTPStatus.BAD_GATEWAY)


@router.get("/auth/session")
async def current_session(
    auth: Annotated[AuthClient, Depends(get_caller_auth)],
) -> JSONResponse:
    result = await auth.get_session()
    return _envelope(result, HTTPStatus.BAD_GATEWAY)


@router.get("/auth/user")
async def current_user(
    auth: Annotated[AuthClient, Depends(get_caller_auth)],
) -> JSONResponse:
    result = await auth.get_user()
    return _envelope(result, HTTPStatus.BAD_GATEWAY)


@router.get("/cities/search", response_model=CitySearchResponse)
async def search_cities(
    city_search: Annotated[CitySearchService, Depends(get_city_search_service)],
    q: str = Query("", description="City, region or country to look up."),
    limit: Optional[int] = Query(None, ge=1, le=50, description="Maximum rows to return."),
) -> CitySearchResponse:
    if len(q.strip()) < MIN_QUERY_LENGTH:
        return CitySearchResponse(
            query=q,
            message=f"Query must be at least {MIN_QUERY_LENGTH} characters long",
        )

    cities = await city_search.search(q, limit=limit)
    return CitySearchResponse(data=cities, query=q, count=len(cities))


@router.get("/cities/cache", status_code=HTTPStatus.OK)
async def city_cache_stats(
    city_search: Annotated[CitySearchService, Depends(get_city_search_service)],
) -> dict:
    return city_search.cache_stats()


@router.delete("/cities/cache", status_code=HTTPStatus.OK)
async def clear_city_cache(
    city_search: Annotated[CitySearchService, Depends(get_city_search_service)],
) -> dict:
    city_search.clear_cache()
    return {"status": "cleared"}
