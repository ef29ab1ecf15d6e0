from common import Base, create_database_engines, make_get_db

from .config import get_settings


async_engine, SessionLocal = create_database_engines(get_settings)

get_db = make_get_db(SessionLocal)

__all__ = ["Base", "async_engine", "SessionLocal", "get_db"]
