"""Identifier helpers shared by the ORM models."""

import uuid

ID_LENGTH = 36


def new_id() -> str:
    """Return a fresh opaque identifier."""
    return str(uuid.uuid4())
