"""
SnipNet Backend - User SQLAlchemy Model
========================================

What:  ORM model for the `users` table: the identity record every friendship,
       like, comment and tag points at.
Who:   Read by the user directory and mapped to UserSummary in every DTO.
When:  Rows are created at registration by the auth collaborator; this
       service never creates or deletes them outside of tests.

Lookup Patterns:
    - By id: primary key
    - By username, case-insensitive: WHERE lower(username) = :name
      → uses ix_users_username_lower expression index
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Index, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from snipnet.database import Base
from snipnet.time_utils import utc_now


class User(Base):
    """Registered platform user."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    username: Mapped[str] = mapped_column(String(150), nullable=False, unique=True)
    first_name: Mapped[str] = mapped_column(String(150), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(String(150), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"


# Expression index backing case-insensitive username lookups
Index("ix_users_username_lower", func.lower(User.username))
