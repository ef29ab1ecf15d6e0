"""Base settings class shared by the platform services."""
from functools import lru_cache
from typing import Callable, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseServiceSettings(BaseSettings):
	"""Settings every service needs: database, JWT, logging and metrics."""

	app_name: str
	env: Literal["development", "test", "production"] = "development"
	database_url: str
	database_url_async: str | None = None
	jwt_secret: str
	jwt_algorithm: str = "HS256"
	metrics_enabled: bool = True
	log_level: str = "INFO"

	# Database connection pool (ignored for SQLite)
	db_pool_size: int = 10
	db_max_overflow: int = 20
	db_pool_timeout: int = 30  # seconds to wait for a free connection
	db_pool_recycle: int = 1800  # recycle connections after 30 minutes

	model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

	@property
	def is_production(self) -> bool:
		return self.env == "production"


def make_get_settings(settings_class: type[BaseServiceSettings]) -> Callable:
	"""
	Build a cached ``get_settings`` function for a concrete service.

	Args:
		settings_class: Settings class derived from BaseServiceSettings

	Returns:
		A zero-argument function returning the same settings instance on every call;
		usable directly or as a FastAPI dependency.
	"""
	@lru_cache
	def get_settings() -> BaseServiceSettings:
		return settings_class()

	return get_settings
