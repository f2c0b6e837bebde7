"""Genre model."""

from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from moviecatalog.models.base import BaseModel

if TYPE_CHECKING:
    from moviecatalog.models.movie import Movie


class Genre(BaseModel):
    __tablename__ = "genres"

    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)

    movies: Mapped[list["Movie"]] = relationship(
        secondary="movie_genres", back_populates="genres"
    )
