"""SQLAlchemy model for local user profiles."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from tenxr_community.db.session import Base
from tenxr_community.db.time import utcnow

from .ids import ID_LENGTH, new_id


class User(Base):
    """Profile row linked to the auth service's stable user identifier."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=new_id)
    # Subject issued by the external auth service.
    auth_user_id: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    username: Mapped[str | None] = mapped_column(String(20), unique=True, nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )
