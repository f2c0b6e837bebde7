"""MovieCatalog API Router - aggregates all API routes."""

from fastapi import APIRouter

from moviecatalog.api import auth, catalog, health, movies

api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(auth.router)
api_router.include_router(movies.router)
api_router.include_router(catalog.director_router)
api_router.include_router(catalog.genre_router)
