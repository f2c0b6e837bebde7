"""Pydantic schemas for pagination query parameters."""

from pydantic import BaseModel, Field

from moviecatalog.core.config import settings


class CursorPageRequest(BaseModel):
    """Cursor pagination parameters.

    ``order`` is ignored when ``cursor`` is present; the cursor carries its own.
    """

    cursor: str | None = Field(None, description="Opaque cursor from a previous page")
    order: list[str] = Field(
        default_factory=lambda: ["id_DESC"],
        min_length=1,
        description='Order tokens such as "like_count_DESC", primary key first',
    )
    take: int = Field(
        default=settings.pagination_default_take,
        ge=1,
        le=settings.pagination_max_take,
    )
