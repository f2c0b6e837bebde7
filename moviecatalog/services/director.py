"""Director Service - CRUD for directors."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from moviecatalog.core.exceptions import NotFoundError
from moviecatalog.core.pagination import apply_page_pagination
from moviecatalog.models.director import Director
from moviecatalog.schemas.movie import DirectorCreate, DirectorUpdate

logger = logging.getLogger(__name__)


class DirectorService:
    """Service for director records."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list(self, page: int = 1, take: int = 10) -> list[Director]:
        stmt = apply_page_pagination(select(Director).order_by(Director.id), page, take)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get(self, director_id: int) -> Director:
        director = await self.session.get(Director, director_id)
        if director is None:
            raise NotFoundError(f"Director {director_id} not found")
        return director

    async def create(self, data: DirectorCreate) -> Director:
        director = Director(**data.model_dump())
        self.session.add(director)
        await self.session.flush()
        await self.session.refresh(director)
        logger.info(f"Created director {director.id}: {director.name}")
        return director

    async def update(self, director_id: int, data: DirectorUpdate) -> Director:
        director = await self.get(director_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(director, field, value)
        await self.session.flush()
        await self.session.refresh(director)
        return director

    async def remove(self, director_id: int) -> int:
        director = await self.get(director_id)
        await self.session.delete(director)
        await self.session.flush()
        return director_id
