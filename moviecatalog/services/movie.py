"""Movie Service - catalog queries, mutations and like toggling."""

import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from moviecatalog.core.cache import CacheStore
from moviecatalog.core.config import settings
from moviecatalog.core.exceptions import ConflictError, NotFoundError, UnauthorizedError
from moviecatalog.core.pagination import PageRequest, paginate
from moviecatalog.models.director import Director
from moviecatalog.models.genre import Genre
from moviecatalog.models.movie import Movie, MovieUserLike
from moviecatalog.models.user import User
from moviecatalog.schemas.movie import MovieCreate, MovieResponse, MovieUpdate

logger = logging.getLogger(__name__)

RECENT_CACHE_KEY = "MOVIE_RECENT"
RECENT_LIMIT = 10


class MovieService:
    """Service for movie catalog operations."""

    def __init__(self, session: AsyncSession, cache: CacheStore):
        self.session = session
        self.cache = cache

    async def find_all(
        self,
        page_request: PageRequest,
        title: str | None = None,
        user_id: int | None = None,
    ) -> dict[str, Any]:
        """List movies with cursor pagination.

        ``count`` is the number of movies matching ``title``, independent of
        the cursor position. When ``user_id`` is given each movie carries the
        caller's ``like_status`` (True, False or None).
        """
        stmt = select(Movie)
        if title:
            stmt = stmt.where(Movie.title.like(f"%{title}%"))

        page = await paginate(self.session, stmt, Movie, page_request, with_count=True)

        likes: dict[int, bool] = {}
        if user_id is not None and page.items:
            likes = await self.get_like_statuses([m.id for m in page.items], user_id)

        data = [
            MovieResponse.model_validate(movie).model_copy(
                update={"like_status": likes.get(movie.id)}
            )
            for movie in page.items
        ]
        return {"data": data, "next_cursor": page.next_cursor, "count": page.count or 0}

    async def get_like_statuses(self, movie_ids: list[int], user_id: int) -> dict[int, bool]:
        result = await self.session.execute(
            select(MovieUserLike.movie_id, MovieUserLike.is_like).where(
                MovieUserLike.movie_id.in_(movie_ids),
                MovieUserLike.user_id == user_id,
            )
        )
        return {movie_id: is_like for movie_id, is_like in result.all()}

    async def find_recent(self) -> list[dict[str, Any]]:
        """Newest movies, served from cache when warm."""
        cached = await self.cache.get(RECENT_CACHE_KEY)
        if cached is not None:
            return cached

        result = await self.session.execute(
            select(Movie).order_by(Movie.created_at.desc(), Movie.id.desc()).limit(RECENT_LIMIT)
        )
        movies = [
            MovieResponse.model_validate(m).model_dump(mode="json")
            for m in result.scalars().unique().all()
        ]
        await self.cache.set(RECENT_CACHE_KEY, movies, settings.recent_movies_cache_ttl_ms)
        return movies

    async def find_one(self, movie_id: int) -> Movie:
        movie = await self.session.get(Movie, movie_id)
        if movie is None:
            raise NotFoundError(f"Movie {movie_id} not found")
        return movie

    async def _get_director(self, director_id: int) -> Director:
        director = await self.session.get(Director, director_id)
        if director is None:
            raise NotFoundError(f"Director {director_id} not found")
        return director

    async def _get_genres(self, genre_ids: list[int]) -> list[Genre]:
        result = await self.session.execute(select(Genre).where(Genre.id.in_(genre_ids)))
        genres = list(result.scalars().all())
        missing = set(genre_ids) - {g.id for g in genres}
        if missing:
            raise NotFoundError(f"Genres not found: {sorted(missing)}")
        return genres

    async def _ensure_title_available(self, title: str, exclude_id: int | None = None) -> None:
        stmt = select(Movie.id).where(Movie.title == title)
        if exclude_id is not None:
            stmt = stmt.where(Movie.id != exclude_id)
        if (await self.session.execute(stmt)).first() is not None:
            raise ConflictError(f"Movie titled {title!r} already exists")

    async def create(self, data: MovieCreate, creator_id: int | None = None) -> Movie:
        director = await self._get_director(data.director_id)
        genres = await self._get_genres(data.genre_ids)
        await self._ensure_title_available(data.title)

        movie = Movie(
            title=data.title,
            detail=data.detail,
            director=director,
            genres=genres,
            creator_id=creator_id,
        )
        self.session.add(movie)
        await self.session.flush()
        await self.session.refresh(movie)

        logger.info(f"Created movie {movie.id}: {movie.title}")
        return movie

    async def update(self, movie_id: int, data: MovieUpdate) -> Movie:
        movie = await self.find_one(movie_id)
        updates = data.model_dump(exclude_unset=True)

        if "director_id" in updates:
            movie.director = await self._get_director(updates.pop("director_id"))
        if "genre_ids" in updates:
            movie.genres = await self._get_genres(updates.pop("genre_ids"))
        if "title" in updates:
            await self._ensure_title_available(updates["title"], exclude_id=movie_id)

        for field, value in updates.items():
            setattr(movie, field, value)

        await self.session.flush()
        await self.session.refresh(movie)
        return movie

    async def remove(self, movie_id: int) -> int:
        movie = await self.find_one(movie_id)
        await self.session.delete(movie)
        await self.session.flush()
        logger.info(f"Deleted movie {movie_id}")
        return movie_id

    async def find_like_record(self, movie_id: int, user_id: int) -> MovieUserLike | None:
        return await self.session.get(MovieUserLike, (movie_id, user_id))

    async def toggle_like(self, movie_id: int, user_id: int, is_like: bool) -> dict[str, bool | None]:
        """Press like (True) or dislike (False).

        No record creates one; pressing the active button again clears it;
        pressing the other button flips it.
        """
        movie = await self.find_one(movie_id)
        if await self.session.get(User, user_id) is None:
            raise UnauthorizedError("User not found")

        record = await self.find_like_record(movie_id, user_id)
        if record is None:
            record = MovieUserLike(movie_id=movie_id, user_id=user_id, is_like=is_like)
            self.session.add(record)
            status: bool | None = is_like
        elif record.is_like == is_like:
            await self.session.delete(record)
            status = None
        else:
            record.is_like = is_like
            status = is_like

        await self.session.flush()
        await self._refresh_like_counts(movie)
        return {"is_like": status}

    async def _refresh_like_counts(self, movie: Movie) -> None:
        result = await self.session.execute(
            select(MovieUserLike.is_like, func.count())
            .where(MovieUserLike.movie_id == movie.id)
            .group_by(MovieUserLike.is_like)
        )
        counts = dict(result.all())
        movie.like_count = counts.get(True, 0)
        movie.dislike_count = counts.get(False, 0)
        await self.session.flush()
