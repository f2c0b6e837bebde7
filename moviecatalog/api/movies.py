"""Movie API endpoints."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from moviecatalog.api.auth import get_cache, get_current_user, get_optional_user, require_role
from moviecatalog.api.errors import http_error
from moviecatalog.core import get_db, settings
from moviecatalog.core.cache import CacheStore
from moviecatalog.core.exceptions import MovieCatalogError
from moviecatalog.models.user import Role
from moviecatalog.schemas.movie import (
    LikeStatusResponse,
    MovieCreate,
    MovieListResponse,
    MovieResponse,
    MovieUpdate,
)
from moviecatalog.schemas.pagination import CursorPageRequest
from moviecatalog.services.movie import MovieService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/movie", tags=["movies"])


def get_movie_service(
    db: AsyncSession = Depends(get_db),
    cache: CacheStore = Depends(get_cache),
) -> MovieService:
    """Dependency to get movie service."""
    return MovieService(db, cache)


@router.get("", response_model=MovieListResponse)
async def list_movies(
    title: str | None = Query(None, max_length=255),
    cursor: str | None = Query(None),
    order: list[str] = Query(["id_DESC"]),
    take: int = Query(settings.pagination_default_take, ge=1, le=settings.pagination_max_take),
    user: dict[str, Any] | None = Depends(get_optional_user),
    service: MovieService = Depends(get_movie_service),
) -> MovieListResponse:
    """List movies with cursor pagination; no authentication required."""
    page_request = CursorPageRequest(cursor=cursor, order=order, take=take)
    user_id = int(user["sub"]) if user else None
    try:
        page = await service.find_all(page_request, title=title, user_id=user_id)
    except MovieCatalogError as e:
        raise http_error(e) from e
    return MovieListResponse(**page)


@router.get("/recent", response_model=list[MovieResponse])
async def list_recent_movies(
    service: MovieService = Depends(get_movie_service),
) -> list[dict[str, Any]]:
    """Newest movies (cached)."""
    return await service.find_recent()


@router.get("/{movie_id}", response_model=MovieResponse)
async def get_movie(
    movie_id: int,
    service: MovieService = Depends(get_movie_service),
) -> MovieResponse:
    try:
        movie = await service.find_one(movie_id)
    except MovieCatalogError as e:
        raise http_error(e) from e
    return MovieResponse.model_validate(movie)


@router.post("", response_model=MovieResponse, status_code=status.HTTP_201_CREATED)
async def create_movie(
    data: MovieCreate,
    user: dict[str, Any] = Depends(require_role(Role.admin)),
    service: MovieService = Depends(get_movie_service),
) -> MovieResponse:
    try:
        movie = await service.create(data, creator_id=int(user["sub"]))
    except MovieCatalogError as e:
        raise http_error(e) from e
    return MovieResponse.model_validate(movie)


@router.patch("/{movie_id}", response_model=MovieResponse)
async def update_movie(
    movie_id: int,
    data: MovieUpdate,
    _: dict[str, Any] = Depends(require_role(Role.admin)),
    service: MovieService = Depends(get_movie_service),
) -> MovieResponse:
    try:
        movie = await service.update(movie_id, data)
    except MovieCatalogError as e:
        raise http_error(e) from e
    return MovieResponse.model_validate(movie)


@router.delete("/{movie_id}", response_model=int)
async def delete_movie(
    movie_id: int,
    _: dict[str, Any] = Depends(require_role(Role.admin)),
    service: MovieService = Depends(get_movie_service),
) -> int:
    try:
        return await service.remove(movie_id)
    except MovieCatalogError as e:
        raise http_error(e) from e


async def _toggle(service: MovieService, movie_id: int, user: dict[str, Any], is_like: bool):
    try:
        result = await service.toggle_like(movie_id, int(user["sub"]), is_like)
    except MovieCatalogError as e:
        raise http_error(e) from e
    return LikeStatusResponse(**result)


@router.post("/{movie_id}/like", response_model=LikeStatusResponse)
async def like_movie(
    movie_id: int,
    user: dict[str, Any] = Depends(get_current_user),
    service: MovieService = Depends(get_movie_service),
) -> LikeStatusResponse:
    return await _toggle(service, movie_id, user, True)


@router.post("/{movie_id}/dislike", response_model=LikeStatusResponse)
async def dislike_movie(
    movie_id: int,
    user: dict[str, Any] = Depends(get_current_user),
    service: MovieService = Depends(get_movie_service),
) -> LikeStatusResponse:
    return await _toggle(service, movie_id, user, False)
