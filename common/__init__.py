from .observability import configure_logging, configure_observability
from .database import Base, create_database_engines, make_get_db, resolve_async_url, utcnow
from .rate_limit import InMemoryRateLimiter, make_rate_limit_dependency
from .security import (
    bearer_scheme,
    create_access_token,
    decode_access_token,
    get_password_hash,
    unauthorized,
    verify_password,
)
from .config import BaseServiceSettings, make_get_settings

__all__ = [
    "configure_logging",
    "configure_observability",
    # Database
    "Base",
    "create_database_engines",
    "make_get_db",
    "resolve_async_url",
    "utcnow",
    # Rate limiting
    "InMemoryRateLimiter",
    "make_rate_limit_dependency",
    # Security
    "bearer_scheme",
    "create_access_token",
    "decode_access_token",
    "get_password_hash",
    "unauthorized",
    "verify_password",
    # Config
    "BaseServiceSettings",
    "make_get_settings",
]
