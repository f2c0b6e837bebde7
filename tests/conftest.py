"""Pytest configuration and fixtures for MovieCatalog tests.

Database handling:
- Uses TEST_DATABASE_URL when set (e.g. a PostgreSQL instance)
- Otherwise an in-memory SQLite database via aiosqlite, one per test
"""

import base64
import json
import os
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Set test environment variables before importing app modules
os.environ["ACCESS_TOKEN_SECRET"] = "test-access-token-secret-0123456789abcdef"
os.environ["REFRESH_TOKEN_SECRET"] = "test-refresh-token-secret-0123456789abcdef"
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

TEST_USER_EMAIL = "test@test.com"
TEST_USER_PASSWORD = "testpassword123"


def basic_header(identifier: str, secret: str) -> str:
    """Build a ``Basic`` Authorization header value."""
    blob = base64.b64encode(f"{identifier}:{secret}".encode()).decode()
    return f"Basic {blob}"


def bearer_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def unsigned_jwt(payload: dict) -> str:
    """Assemble a JWT by hand so claims PyJWT refuses to encode can be tested."""

    def segment(part: dict) -> str:
        return base64.urlsafe_b64encode(json.dumps(part).encode()).rstrip(b"=").decode()

    header = segment({"alg": "HS256", "typ": "JWT"})
    return f"{header}.{segment(payload)}.c2ln"


# --- Cache Fixtures ---


@pytest.fixture
def cache():
    """A fresh in-memory cache store."""
    from moviecatalog.core.cache import InMemoryCacheStore

    return InMemoryCacheStore()


@pytest.fixture
def token_service(cache):
    """TokenService bound to the test cache."""
    from moviecatalog.services.auth import TokenService

    return TokenService(cache)


# --- Database Fixtures ---


@pytest_asyncio.fixture
async def db_engine():
    """Create a database engine with all tables for one test."""
    from moviecatalog.core.database import Base, engine_options, enable_sqlite_foreign_keys
    from moviecatalog.models import Director, Genre, Movie, MovieUserLike, User  # noqa: F401

    url = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite://")
    engine = create_async_engine(url, **engine_options(url))
    enable_sqlite_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for testing."""
    session_maker = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def app(cache):
    """Application instance sharing the test cache."""
    from moviecatalog.main import app

    app.state.cache = cache
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def async_client(app, db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client with database override."""
    from moviecatalog.core.database import get_db

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session
        await db_session.flush()

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# --- Test Factories ---


@pytest.fixture
def user_factory(db_session):
    """Factory for creating test users."""
    from moviecatalog.models.user import Role, User
    from moviecatalog.services.auth import hash_password

    async def _create_user(
        email: str = TEST_USER_EMAIL,
        password: str = TEST_USER_PASSWORD,
        role: Role = Role.user,
    ) -> User:
        user = User(email=email, password_hash=hash_password(password), role=role)
        db_session.add(user)
        await db_session.flush()
        await db_session.refresh(user)
        return user

    return _create_user


@pytest_asyncio.fixture
async def user(user_factory):
    return await user_factory()


@pytest_asyncio.fixture
async def admin(user_factory):
    from moviecatalog.models.user import Role

    return await user_factory(email="admin@test.com", role=Role.admin)


@pytest.fixture
def director_factory(db_session):
    from moviecatalog.models.director import Director

    async def _create_director(name: str = "Christopher Nolan", **kwargs) -> Director:
        director = Director(name=name, **kwargs)
        db_session.add(director)
        await db_session.flush()
        await db_session.refresh(director)
        return director

    return _create_director


@pytest.fixture
def genre_factory(db_session):
    from moviecatalog.models.genre import Genre

    async def _create_genre(name: str = "drama") -> Genre:
        genre = Genre(name=name)
        db_session.add(genre)
        await db_session.flush()
        await db_session.refresh(genre)
        return genre

    return _create_genre


@pytest.fixture
def movie_factory(db_session, director_factory, genre_factory):
    """Factory for creating test movies; creates a director and genre if omitted."""
    from moviecatalog.models.movie import Movie

    async def _create_movie(
        title: str = "Movie",
        director=None,
        genres=None,
        like_count: int = 0,
        **kwargs,
    ) -> Movie:
        if director is None:
            director = await director_factory()
        if genres is None:
            genres = [await genre_factory(name=f"genre-{title}")]
        movie = Movie(
            title=title,
            director=director,
            genres=genres,
            like_count=like_count,
            **kwargs,
        )
        db_session.add(movie)
        await db_session.flush()
        await db_session.refresh(movie)
        return movie

    return _create_movie


# --- Auth Helpers ---


@pytest.fixture
def user_headers(user, token_service) -> dict[str, str]:
    """Headers with an access token for the regular test user."""
    return bearer_header(token_service.issue_token(user, False))


@pytest.fixture
def admin_headers(admin, token_service) -> dict[str, str]:
    """Headers with an access token for the admin user."""
    return bearer_header(token_service.issue_token(admin, False))
