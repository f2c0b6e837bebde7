"""Domain errors shared by services and the API layer.

Every error carries the HTTP status the API layer maps it to. Services
raise these; routers convert them to ``HTTPException``.
"""


class MovieCatalogError(Exception):
    """Base error for the movie catalog."""

    status_code: int = 500


class MalformedCredentialError(MovieCatalogError):
    """Authorization header has the wrong shape, scheme or token type."""

    status_code = 400


class UnauthorizedError(MovieCatalogError):
    """Token signature invalid, expired, blocked, or credentials rejected."""

    status_code = 401


class ForbiddenError(MovieCatalogError):
    """Authenticated principal lacks the required role."""

    status_code = 403


class MalformedCursorError(MovieCatalogError):
    """Pagination cursor is not a valid encoded payload."""

    status_code = 400


class InvalidOrderDirectionError(MovieCatalogError):
    """Order token direction is not exactly ASC or DESC."""

    status_code = 400


class InvalidOrderColumnError(MovieCatalogError):
    """Order token names a column the entity does not have."""

    status_code = 400


class NotFoundError(MovieCatalogError):
    """Requested resource does not exist."""

    status_code = 404


class ConflictError(MovieCatalogError):
    """Resource already exists."""

    status_code = 409
