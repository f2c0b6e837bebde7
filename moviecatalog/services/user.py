"""User Service - user account persistence."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from moviecatalog.core.exceptions import ConflictError, NotFoundError
from moviecatalog.models.user import Role, User

logger = logging.getLogger(__name__)


class UserService:
    """Service for user accounts."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_email(self, email: str) -> User | None:
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get(self, user_id: int) -> User:
        user = await self.session.get(User, user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user

    async def create(self, email: str, password_hash: str, role: Role = Role.user) -> User:
        """Create a user; the caller supplies an already-hashed password."""
        if await self.get_by_email(email) is not None:
            raise ConflictError("A user with this email already exists")

        user = User(email=email, password_hash=password_hash, role=role)
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)

        logger.info(f"Created user: {email}")
        return user
