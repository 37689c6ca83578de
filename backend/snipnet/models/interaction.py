"""
SnipNet Backend - Social Interaction Models
============================================

What:  ORM models for likes, comments and user tags.
Who:   Written and read by InteractionService.

Table Design:
    likes
        - Exactly one of code_snippet_id / page_id is set (ck_likes_one_target)
        - uq_likes_user_snippet, uq_likes_user_page: one like per user and
          target. NULLs never collide in a unique constraint, so each rule
          only bites on the column that is set.
    comments
        - content is stored trimmed; length is validated before insert
    user_tags
        - No uniqueness: the same user may be tagged on a snippet twice

Every row carries the user it belongs to as a selectin relationship, so DTO
mapping never triggers a lazy load on an async session.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from snipnet.database import Base
from snipnet.models.content import CodeSnippet
from snipnet.models.user import User
from snipnet.time_utils import utc_now


class Like(Base):
    """A user's like on either a code snippet or a page."""

    __tablename__ = "likes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    code_snippet_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("code_snippets.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    page_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("pages.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    user: Mapped[User] = relationship(lazy="selectin")

    __table_args__ = (
        CheckConstraint(
            "(code_snippet_id IS NULL) <> (page_id IS NULL)",
            name="ck_likes_one_target",
        ),
        UniqueConstraint("user_id", "code_snippet_id", name="uq_likes_user_snippet"),
        UniqueConstraint("user_id", "page_id", name="uq_likes_user_page"),
    )

    @property
    def target_id(self) -> int:
        return self.code_snippet_id if self.code_snippet_id is not None else self.page_id

    def __repr__(self) -> str:
        return f"<Like(id={self.id}, user_id={self.user_id}, target={self.target_id})>"


class Comment(Base):
    """Text a user left on a code snippet."""

    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    content: Mapped[str] = mapped_column(String(1000), nullable=False)
    created_by_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    code_snippet_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("code_snippets.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    created_by: Mapped[User] = relationship(lazy="selectin")

    __table_args__ = (
        Index("ix_comments_snippet_created", "code_snippet_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Comment(id={self.id}, snippet={self.code_snippet_id})>"


class UserTag(Base):
    """Records that `tagger` tagged `tagged_user` on a code snippet."""

    __tablename__ = "user_tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tagged_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    tagger_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    code_snippet_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("code_snippets.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    tagged_user: Mapped[User] = relationship(foreign_keys=[tagged_user_id], lazy="selectin")
    # Loaded so removal can check the snippet owner without a second query
    code_snippet: Mapped[CodeSnippet] = relationship(lazy="selectin")

    __table_args__ = (
        Index("ix_user_tags_snippet_created", "code_snippet_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<UserTag(id={self.id}, tagged={self.tagged_user_id}, "
            f"snippet={self.code_snippet_id})>"
        )
