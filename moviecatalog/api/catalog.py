"""Director and genre API endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from moviecatalog.api.auth import require_role
from moviecatalog.api.errors import http_error
from moviecatalog.core import get_db, settings
from moviecatalog.core.exceptions import MovieCatalogError
from moviecatalog.models.user import Role
from moviecatalog.schemas.movie import (
    DirectorCreate,
    DirectorResponse,
    DirectorUpdate,
    GenreCreate,
    GenreResponse,
    GenreUpdate,
)
from moviecatalog.services.director import DirectorService
from moviecatalog.services.genre import GenreService

director_router = APIRouter(prefix="/director", tags=["directors"])
genre_router = APIRouter(prefix="/genre", tags=["genres"])

admin_only = require_role(Role.admin)


def get_director_service(db: AsyncSession = Depends(get_db)) -> DirectorService:
    return DirectorService(db)


def get_genre_service(db: AsyncSession = Depends(get_db)) -> GenreService:
    return GenreService(db)


# --- Directors ---


@director_router.get("", response_model=list[DirectorResponse])
async def list_directors(
    page: int = Query(1, ge=1),
    take: int = Query(settings.pagination_default_take, ge=1, le=settings.pagination_max_take),
    service: DirectorService = Depends(get_director_service),
) -> list[DirectorResponse]:
    directors = await service.list(page=page, take=take)
    return [DirectorResponse.model_validate(d) for d in directors]


@director_router.get("/{director_id}", response_model=DirectorResponse)
async def get_director(
    director_id: int,
    service: DirectorService = Depends(get_director_service),
) -> DirectorResponse:
    try:
        return DirectorResponse.model_validate(await service.get(director_id))
    except MovieCatalogError as e:
        raise http_error(e) from e


@director_router.post("", response_model=DirectorResponse, status_code=status.HTTP_201_CREATED)
async def create_director(
    data: DirectorCreate,
    _: dict[str, Any] = Depends(admin_only),
    service: DirectorService = Depends(get_director_service),
) -> DirectorResponse:
    return DirectorResponse.model_validate(await service.create(data))


@director_router.patch("/{director_id}", response_model=DirectorResponse)
async def update_director(
    director_id: int,
    data: DirectorUpdate,
    _: dict[str, Any] = Depends(admin_only),
    service: DirectorService = Depends(get_director_service),
) -> DirectorResponse:
    try:
        return DirectorResponse.model_validate(await service.update(director_id, data))
    except MovieCatalogError as e:
        raise http_error(e) from e


@director_router.delete("/{director_id}", response_model=int)
async def delete_director(
    director_id: int,
    _: dict[str, Any] = Depends(admin_only),
    service: DirectorService = Depends(get_director_service),
) -> int:
    try:
        return await service.remove(director_id)
    except MovieCatalogError as e:
        raise http_error(e) from e


# --- Genres ---


@genre_router.get("", response_model=list[GenreResponse])
async def list_genres(
    page: int = Query(1, ge=1),
    take: int = Query(settings.pagination_default_take, ge=1, le=settings.pagination_max_take),
    service: GenreService = Depends(get_genre_service),
) -> list[GenreResponse]:
    genres = await service.list(page=page, take=take)
    return [GenreResponse.model_validate(g) for g in genres]


@genre_router.get("/{genre_id}", response_model=GenreResponse)
async def get_genre(
    genre_id: int,
    service: GenreService = Depends(get_genre_service),
) -> GenreResponse:
    try:
        return GenreResponse.model_validate(await service.get(genre_id))
    except MovieCatalogError as e:
        raise http_error(e) from e


@genre_router.post("", response_model=GenreResponse, status_code=status.HTTP_201_CREATED)
async def create_genre(
    data: GenreCreate,
    _: dict[str, Any] = Depends(admin_only),
    service: GenreService = Depends(get_genre_service),
) -> GenreResponse:
    try:
        return GenreResponse.model_validate(await service.create(data))
    except MovieCatalogError as e:
        raise http_error(e) from e


@genre_router.patch("/{genre_id}", response_model=GenreResponse)
async def update_genre(
    genre_id: int,
    data: GenreUpdate,
    _: dict[str, Any] = Depends(admin_only),
    service: GenreService = Depends(get_genre_service),
) -> GenreResponse:
    try:
        return GenreResponse.model_validate(await service.update(genre_id, data))
    except MovieCatalogError as e:
        raise http_error(e) from e


@genre_router.delete("/{genre_id}", response_model=int)
async def delete_genre(
    genre_id: int,
    _: dict[str, Any] = Depends(admin_only),
    service: GenreService = Depends(get_genre_service),
) -> int:
    try:
        return await service.remove(genre_id)
    except MovieCatalogError as e:
        raise http_error(e) from e
