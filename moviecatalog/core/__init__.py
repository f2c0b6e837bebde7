# MovieCatalog Core Module
from .cache import CacheStore, InMemoryCacheStore
from .config import get_settings, settings
from .database import Base, async_session_maker, check_db_connection, engine, get_db
from .logging import get_logger, setup_logging

__all__ = [
    "settings",
    "get_settings",
    "setup_logging",
    "get_logger",
    "CacheStore",
    "InMemoryCacheStore",
    "Base",
    "engine",
    "async_session_maker",
    "get_db",
    "check_db_connection",
]
