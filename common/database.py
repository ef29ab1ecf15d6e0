"""Database helpers shared by the platform services."""
from collections.abc import AsyncIterator
from datetime import datetime, timezone
from typing import Any, Callable

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool


class Base(DeclarativeBase):
	"""Declarative base for all SQLAlchemy models."""
	pass


def utcnow() -> datetime:
	return datetime.now(timezone.utc)


def resolve_async_url(database_url: str, database_url_async: str | None) -> str:
	"""
	Turn a synchronous database URL into its async driver counterpart.

	Args:
		database_url: Synchronous database URL
		database_url_async: Optional explicit async URL (wins when set)

	Returns:
		Async database URL

	Raises:
		ValueError: If the URL belongs to an unsupported backend
	"""
	if database_url_async:
		return database_url_async
	if "+asyncpg" in database_url or "+aiosqlite" in database_url:
		return database_url
	replacements = [
		("+psycopg2", "+asyncpg"),
		("+psycopg", "+asyncpg"),
		("postgresql://", "postgresql+asyncpg://"),
		("postgres://", "postgresql+asyncpg://"),
		("sqlite://", "sqlite+aiosqlite://"),
	]
	for needle, replacement in replacements:
		if needle in database_url:
			return database_url.replace(needle, replacement, 1)
	raise ValueError(
		"Cannot derive an async database URL: set database_url_async or use PostgreSQL/SQLite"
	)


def _engine_options(url: str, settings: Any) -> dict[str, Any]:
	# SQLite files are opened per use; pool sizing only applies to server databases
	if url.startswith("sqlite"):
		return {"poolclass": NullPool}
	return {
		"pool_pre_ping": True,
		"pool_size": settings.db_pool_size,
		"max_overflow": settings.db_max_overflow,
		"pool_timeout": settings.db_pool_timeout,
		"pool_recycle": settings.db_pool_recycle,
	}


def create_database_engines(
	get_settings: Callable,
) -> tuple[AsyncEngine, async_sessionmaker]:
	"""
	Create the async engine and the session factory for a service.

	Args:
		get_settings: Settings factory (object with database_url, database_url_async
			and the db_pool_* attributes)

	Returns:
		Tuple (async_engine, SessionLocal)
	"""
	settings = get_settings()
	url = resolve_async_url(settings.database_url, settings.database_url_async)

	async_engine = create_async_engine(url, **_engine_options(url, settings))

	SessionLocal = async_sessionmaker(
		async_engine,
		expire_on_commit=False,
		autoflush=False,
		class_=AsyncSession,
	)

	return async_engine, SessionLocal


def make_get_db(SessionLocal: async_sessionmaker) -> Callable:
	"""
	Build the ``get_db`` FastAPI dependency for a session factory.

	Args:
		SessionLocal: Session factory

	Returns:
		Dependency yielding one AsyncSession per request
	"""
	async def get_db() -> AsyncIterator[AsyncSession]:
		async with SessionLocal() as session:
			yield session

	return get_db
