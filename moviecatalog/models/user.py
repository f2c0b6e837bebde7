"""User model for authentication and likes."""

import enum

from sqlalchemy import Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from moviecatalog.models.base import BaseModel


class Role(str, enum.Enum):
    """User roles, most privileged first."""

    admin = "admin"
    paid_user = "paid_user"
    user = "user"

    @property
    def rank(self) -> int:
        return list(Role).index(self)


class User(BaseModel):
    """Catalog user identified by e-mail.

    ``password_hash`` is an Argon2id hash; plaintext passwords are never stored.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[Role] = mapped_column(
        Enum(Role, name="user_role", native_enum=False),
        nullable=False,
        default=Role.user,
    )

    def __repr__(self) -> str:
        return f"<User {self.email}>"
