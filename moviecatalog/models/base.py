"""Declarative base model with shared id and timestamp columns."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, func
from sqlalchemy.orm import Mapped, mapped_column

from moviecatalog.core.database import Base


class BaseModel(Base):
    """Abstract base for catalog entities."""

    __abstract__ = True
    # Fetch server-generated timestamps on flush; lazy refresh is unavailable under asyncio
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
