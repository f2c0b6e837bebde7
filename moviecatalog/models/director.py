"""Director model."""

from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import Date, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from moviecatalog.models.base import BaseModel

if TYPE_CHECKING:
    from moviecatalog.models.movie import Movie


class Director(BaseModel):
    __tablename__ = "directors"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    dob: Mapped[date | None] = mapped_column(Date, nullable=True)
    nationality: Mapped[str | None] = mapped_column(String(100), nullable=True)

    movies: Mapped[list["Movie"]] = relationship(
        back_populates="director", cascade="all, delete-orphan"
    )
