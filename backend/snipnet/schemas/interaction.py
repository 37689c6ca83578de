"""
SnipNet Backend - Social Interaction Schemas
=============================================

What:  Request and response models for likes, comments, user tags and the
       per-target interaction summary.
How:   Responses are built from ORM rows with their user relationships
       already loaded (see models/interaction.py); the classmethods below do
       the flattening so route handlers stay one line long.
"""

import enum
import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from snipnet.models.interaction import Comment, Like, UserTag
from snipnet.schemas.user import UserSummary


class LikeTarget(str, enum.Enum):
    """What a like points at."""

    SNIPPET = "snippet"
    PAGE = "page"


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class CommentCreate(BaseModel):
    """
    Body of POST /api/social/snippets/{id}/comments.

    Trimming and the length limit are applied by InteractionService so the
    same rule holds for every caller, not just HTTP.
    """
    content: str = Field(description="Comment text (trimmed, 1 to 1000 characters)")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class LikeResponse(BaseModel):
    id: int = Field(description="Like identifier")
    user_id: uuid.UUID = Field(description="User who liked the target")
    user: UserSummary = Field(description="The liking user")
    target_id: int = Field(description="Snippet or page id")
    target_kind: LikeTarget = Field(description="snippet or page")
    created_at: datetime = Field(description="When the like was created (UTC)")

    @classmethod
    def from_like(cls, like: Like) -> "LikeResponse":
        return cls(
            id=like.id,
            user_id=like.user_id,
            user=UserSummary.model_validate(like.user),
            target_id=like.target_id,
            target_kind=LikeTarget.SNIPPET if like.code_snippet_id is not None else LikeTarget.PAGE,
            created_at=like.created_at,
        )


class LikeToggleResponse(BaseModel):
    """
    What:  Outcome of a like toggle.

    liked=True carries the new like. liked=False means an existing like was
    removed, and `like` is null.
    """
    liked: bool = Field(description="Whether the caller likes the target after the call")
    like: Optional[LikeResponse] = Field(default=None, description="The created like")


class CommentResponse(BaseModel):
    id: int = Field(description="Comment identifier")
    content: str = Field(description="Trimmed comment text")
    created_at: datetime = Field(description="When the comment was posted (UTC)")
    created_by: UserSummary = Field(description="Comment author")
    target_id: int = Field(description="Snippet the comment belongs to")

    @classmethod
    def from_comment(cls, comment: Comment) -> "CommentResponse":
        return cls(
            id=comment.id,
            content=comment.content,
            created_at=comment.created_at,
            created_by=UserSummary.model_validate(comment.created_by),
            target_id=comment.code_snippet_id,
        )


class UserTagResponse(BaseModel):
    id: int = Field(description="Tag identifier")
    tagged_user_id: uuid.UUID = Field(description="User who was tagged")
    tagged_user: UserSummary = Field(description="The tagged user")
    tagger_id: uuid.UUID = Field(description="User who added the tag")
    target_id: int = Field(description="Snippet the tag belongs to")
    created_at: datetime = Field(description="When the tag was added (UTC)")

    @classmethod
    def from_user_tag(cls, tag: UserTag) -> "UserTagResponse":
        return cls(
            id=tag.id,
            tagged_user_id=tag.tagged_user_id,
            tagged_user=UserSummary.model_validate(tag.tagged_user),
            tagger_id=tag.tagger_id,
            target_id=tag.code_snippet_id,
            created_at=tag.created_at,
        )


class InteractionSummary(BaseModel):
    """
    What:  Counters shown under a snippet or page.
    Who:   Returned by GET /api/social/{snippets|pages}/{id}/summary.

    Pages have no comments or user tags, so those counters are always 0 for
    target_kind=page. liked_by_viewer is false for anonymous callers.
    """
    target_id: int = Field(description="Snippet or page id")
    target_kind: LikeTarget = Field(description="snippet or page")
    likes_count: int = Field(ge=0)
    comments_count: int = Field(ge=0)
    user_tags_count: int = Field(ge=0)
    liked_by_viewer: bool = Field(default=False)
