"""Pydantic schemas for movies, directors and genres."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field


class DirectorCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    dob: date | None = None
    nationality: str | None = Field(None, max_length=100)


class DirectorUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    dob: date | None = None
    nationality: str | None = Field(None, max_length=100)


class DirectorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    dob: date | None
    nationality: str | None


class GenreCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class GenreUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class GenreResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class MovieCreate(BaseModel):
    """Request to create a movie."""

    title: str = Field(..., min_length=1, max_length=255)
    detail: str | None = None
    director_id: int
    genre_ids: list[int] = Field(..., min_length=1)


class MovieUpdate(BaseModel):
    """Partial movie update; omitted fields are left unchanged."""

    title: str | None = Field(None, min_length=1, max_length=255)
    detail: str | None = None
    director_id: int | None = None
    genre_ids: list[int] | None = Field(None, min_length=1)


class MovieResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    detail: str | None
    like_count: int
    dislike_count: int
    director: DirectorResponse
    genres: list[GenreResponse]
    created_at: datetime
    like_status: bool | None = None


class MovieListResponse(BaseModel):
    data: list[MovieResponse]
    next_cursor: str | None
    count: int


class LikeStatusResponse(BaseModel):
    is_like: bool | None
