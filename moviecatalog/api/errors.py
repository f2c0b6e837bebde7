"""Mapping from domain errors to HTTP errors."""

from fastapi import HTTPException

from moviecatalog.core.exceptions import MovieCatalogError


def http_error(e: MovieCatalogError) -> HTTPException:
    """Build the HTTPException for a domain error; 401s advertise Bearer auth."""
    headers = {"WWW-Authenticate": "Bearer"} if e.status_code == 401 else None
    return HTTPException(status_code=e.status_code, detail=str(e), headers=headers)
