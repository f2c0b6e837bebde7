"""Health check endpoint: database reachability plus token cache size."""

from fastapi import APIRouter, Request, Response, status
from pydantic import BaseModel

from moviecatalog.core import check_db_connection, settings


class HealthResponse(BaseModel):
    status: str
    version: str
    database: str
    cache_entries: int | None = None


router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={status.HTTP_503_SERVICE_UNAVAILABLE: {"description": "Database unreachable"}},
)
async def health_check(request: Request, response: Response) -> HealthResponse:
    """503 when the database is unreachable; the cache never fails the check."""
    database_ok = await check_db_connection()
    if not database_ok:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    cache = getattr(request.app.state, "cache", None)
    try:
        cache_entries = len(cache) if cache is not None else None
    except TypeError:
        # Stores without __len__ (e.g. remote caches) are not sized
        cache_entries = None

    return HealthResponse(
        status="healthy" if database_ok else "unhealthy",
        version=settings.app_version,
        database="connected" if database_ok else "disconnected",
        cache_entries=cache_entries,
    )
