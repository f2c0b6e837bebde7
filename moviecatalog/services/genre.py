"""Genre Service - CRUD for genres."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from moviecatalog.core.exceptions import ConflictError, NotFoundError
from moviecatalog.core.pagination import apply_page_pagination
from moviecatalog.models.genre import Genre
from moviecatalog.schemas.movie import GenreCreate, GenreUpdate

logger = logging.getLogger(__name__)


class GenreService:
    """Service for genre records. Genre names are unique."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list(self, page: int = 1, take: int = 10) -> list[Genre]:
        stmt = apply_page_pagination(select(Genre).order_by(Genre.id), page, take)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get(self, genre_id: int) -> Genre:
        genre = await self.session.get(Genre, genre_id)
        if genre is None:
            raise NotFoundError(f"Genre {genre_id} not found")
        return genre

    async def _ensure_name_available(self, name: str) -> None:
        result = await self.session.execute(select(Genre.id).where(Genre.name == name))
        if result.first() is not None:
            raise ConflictError(f"Genre {name!r} already exists")

    async def create(self, data: GenreCreate) -> Genre:
        await self._ensure_name_available(data.name)
        genre = Genre(name=data.name)
        self.session.add(genre)
        await self.session.flush()
        await self.session.refresh(genre)
        logger.info(f"Created genre {genre.id}: {genre.name}")
        return genre

    async def update(self, genre_id: int, data: GenreUpdate) -> Genre:
        genre = await self.get(genre_id)
        if data.name != genre.name:
            await self._ensure_name_available(data.name)
        genre.name = data.name
        await self.session.flush()
        await self.session.refresh(genre)
        return genre

    async def remove(self, genre_id: int) -> int:
        genre = await self.get(genre_id)
        await self.session.delete(genre)
        await self.session.flush()
        return genre_id
