"""
SnipNet Backend - Owned Content Models
=======================================

What:  Minimal ORM models for the two kinds of content social interactions
       attach to: code snippets and pages.
Who:   Created and edited by the content collaborator (snippet/page CRUD
       lives elsewhere). This service only reads them to check existence and
       ownership.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from snipnet.database import Base
from snipnet.time_utils import utc_now


class CodeSnippet(Base):
    """A shared piece of source code, owned by its creator."""

    __tablename__ = "code_snippets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    code_content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    programming_language: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # The owner decides which user tags stay on the snippet
    created_by_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    def __repr__(self) -> str:
        return f"<CodeSnippet(id={self.id}, title='{self.title}')>"


class Page(Base):
    """A user-owned page that can be liked."""

    __tablename__ = "pages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_by_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    def __repr__(self) -> str:
        return f"<Page(id={self.id}, title='{self.title}')>"
