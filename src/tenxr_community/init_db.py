"""Create every table directly from the ORM metadata.

Development shortcut; deployed databases are managed by the Alembic scripts.
"""

import logging

from tenxr_community.core.logging import configure_logging
from tenxr_community.core.settings import settings
from tenxr_community.db.session import create_tables

logger = logging.getLogger(__name__)


def init_db() -> None:
    """Initialize the database by creating all tables."""
    create_tables()


if __name__ == "__main__":
    configure_logging(settings.log_level)
    init_db()
    logger.info("Database initialized at %s", settings.effective_database_url)
