"""Translation of database failures into service errors."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tenxr_community.core.exceptions import PersistenceError

logger = logging.getLogger(__name__)


@contextmanager
def persistence_errors(db: Session, operation: str) -> Iterator[None]:
    """Roll back and raise :class:`PersistenceError` on any database failure.

    The underlying exception is logged here and kept as ``original_error``;
    it is never part of the message shown to callers.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Database error during %s", operation, exc_info=True)
        raise PersistenceError(operation, exc) from exc
