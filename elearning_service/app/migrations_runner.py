from __future__ import annotations

from logging import getLogger
from pathlib import Path

from alembic import command
from alembic.config import Config

from .config import get_settings


logger = getLogger(__name__)


def get_alembic_config() -> Config:
    base_dir = Path(__file__).resolve().parent

    alembic_cfg = Config()
    alembic_cfg.set_main_option("script_location", str(base_dir / "migrations"))
    # Alembic runs synchronously, so it gets the plain driver URL
    alembic_cfg.set_main_option("sqlalchemy.url", get_settings().database_url.replace("%", "%%"))
    return alembic_cfg


def run_migrations() -> None:
    """Apply pending Alembic migrations."""
    cfg = get_alembic_config()
    try:
        command.upgrade(cfg, "head")
    except Exception:
        logger.exception("Failed to run migrations")
        raise
    logger.info("Alembic migrations applied")
