"""Movie model plus its genre link table and per-user like records."""

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from moviecatalog.core.database import Base
from moviecatalog.models.base import BaseModel

if TYPE_CHECKING:
    from moviecatalog.models.director import Director
    from moviecatalog.models.genre import Genre
    from moviecatalog.models.user import User

movie_genres = Table(
    "movie_genres",
    Base.metadata,
    Column("movie_id", ForeignKey("movies.id", ondelete="CASCADE"), primary_key=True),
    Column("genre_id", ForeignKey("genres.id", ondelete="CASCADE"), primary_key=True),
)


class Movie(BaseModel):
    """A catalog movie.

    ``like_count`` and ``dislike_count`` are denormalised counters kept in
    step with MovieUserLike rows by MovieService.
    """

    __tablename__ = "movies"

    title: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    detail: Mapped[str | None] = mapped_column(Text, nullable=True)
    like_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    dislike_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    creator_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    director_id: Mapped[int] = mapped_column(
        ForeignKey("directors.id", ondelete="CASCADE"), nullable=False, index=True
    )

    director: Mapped["Director"] = relationship(back_populates="movies", lazy="joined")
    genres: Mapped[list["Genre"]] = relationship(
        secondary=movie_genres, back_populates="movies", lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<Movie {self.id} {self.title!r}>"


class MovieUserLike(Base):
    """A user's like (True) or dislike (False) of a movie."""

    __tablename__ = "movie_user_likes"

    movie_id: Mapped[int] = mapped_column(
        ForeignKey("movies.id", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    is_like: Mapped[bool] = mapped_column(Boolean, nullable=False)

    movie: Mapped["Movie"] = relationship()
    user: Mapped["User"] = relationship()
