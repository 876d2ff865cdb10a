# src/tenxr_community/scripts/migrate.py
from __future__ import annotations

import logging
import os

from alembic import command
from alembic.config import Config

from tenxr_community.core.logging import configure_logging
from tenxr_community.core.settings import settings

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = os.path.abspath(
    os.path.join(os.path.dirname(__file__), "..", "..", "..", "migrations")
)


def build_config() -> Config:
    """Alembic config pointed at the project's migrations folder."""
    cfg = Config(os.path.join(MIGRATIONS_DIR, "alembic.ini"))
    cfg.set_main_option("script_location", MIGRATIONS_DIR)
    # Alembic runs synchronously; hand it the psycopg flavour of the URL.
    cfg.set_main_option("sqlalchemy.url", settings.database_url_sync)
    return cfg


def run_upgrade_head() -> None:
    logger.info("Upgrading database schema to head")
    command.upgrade(build_config(), "head")


def main() -> None:
    configure_logging(settings.log_level)
    run_upgrade_head()


if __name__ == "__main__":
    main()
