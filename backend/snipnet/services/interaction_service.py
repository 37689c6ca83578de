"""
SnipNet Backend - Interaction Service (Likes, Comments, User Tags)
===================================================================

What:  Social interactions attached to code snippets and pages.
Who:   Called by the /api/social route handlers.

Operations:
    toggle_like        snippet or page; a second call removes the like
    add_comment        snippet only; content trimmed, 1..comment_max_length
    delete_comment     author only
    tag_user           anyone may tag a user on a snippet
    remove_user_tag    snippet owner only (not the tagger)
    comments_for / user_tags_for / likers_of_page / interaction_summary

Authorization:
    The caller id comes from the HTTP layer. Mutations check ownership
    against the stored row and raise ForbiddenError on mismatch.

Likes are unique per (user, target) through uq_likes_user_snippet and
uq_likes_user_page; a concurrent double toggle surfaces as ConflictError
instead of a duplicate row.
"""

import logging
import uuid
from typing import List, Optional, Union

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from snipnet.config import settings
from snipnet.exceptions import (
    ConflictError,
    DatabaseError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from snipnet.models.content import CodeSnippet, Page
from snipnet.models.interaction import Comment, Like, UserTag
from snipnet.models.user import User
from snipnet.schemas.common import ListOrder
from snipnet.schemas.interaction import (
    CommentResponse,
    InteractionSummary,
    LikeResponse,
    LikeTarget,
    LikeToggleResponse,
    UserTagResponse,
)
from snipnet.schemas.user import UserSummary
from snipnet.time_utils import utc_now

logger = logging.getLogger(__name__)


class InteractionService:
    """
    Likes, comments and user tags.

    Error Handling Strategy:
        Missing targets raise NotFoundError, ownership violations raise
        ForbiddenError, bad comment content raises ValidationError. Other
        SQLAlchemyErrors are wrapped in DatabaseError.
    """

    # ── Likes ─────────────────────────────────────────────────────────────

    async def toggle_like(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        target_id: int,
        target_kind: LikeTarget,
    ) -> LikeToggleResponse:
        """
        Like the target, or remove the caller's existing like.

        Returns:
            liked=True with the new like, or liked=False with no payload

        Raises:
            NotFoundError: target or user does not exist
            ConflictError: a concurrent toggle inserted the same like first
        """
        try:
            await self._require_target(db, target_id, target_kind)
            target_column = self._like_column(target_kind)

            result = await db.execute(
                select(Like).where(Like.user_id == user_id, target_column == target_id)
            )
            existing = result.scalar_one_or_none()

            if existing is not None:
                await db.delete(existing)
                await db.flush()
                logger.info("User %s unliked %s %s", user_id, target_kind.value, target_id)
                return LikeToggleResponse(liked=False)

            user = await self._require_user(db, user_id)
            like = Like(user=user, user_id=user_id, created_at=utc_now())
            if target_kind is LikeTarget.SNIPPET:
                like.code_snippet_id = target_id
            else:
                like.page_id = target_id
            db.add(like)

            try:
                await db.flush()
            except IntegrityError:
                await db.rollback()
                logger.warning(
                    "Concurrent like by %s on %s %s hit the uniqueness constraint",
                    user_id, target_kind.value, target_id,
                )
                raise ConflictError("You have already liked this item")

            logger.info("User %s liked %s %s", user_id, target_kind.value, target_id)
            return LikeToggleResponse(liked=True, like=LikeResponse.from_like(like))

        except SQLAlchemyError as e:
            raise self._database_error("toggle_like", e)

    async def likers_of_page(self, db: AsyncSession, page_id: int) -> List[UserSummary]:
        """Users who like the page, most recent like first."""
        try:
            await self._require_target(db, page_id, LikeTarget.PAGE)
            result = await db.execute(
                select(Like)
                .where(Like.page_id == page_id)
                .order_by(*ListOrder.CREATED_AT_DESC.clauses(Like.created_at, Like.id))
            )
            return [UserSummary.model_validate(like.user) for like in result.scalars().all()]
        except SQLAlchemyError as e:
            raise self._database_error("likers_of_page", e)

    async def interaction_summary(
        self,
        db: AsyncSession,
        target_id: int,
        target_kind: LikeTarget,
        viewer_id: Optional[uuid.UUID] = None,
    ) -> InteractionSummary:
        """
        Counters for a snippet or page, plus whether `viewer_id` likes it.

        Comments and user tags only exist on snippets; for pages both
        counters are 0.
        """
        try:
            await self._require_target(db, target_id, target_kind)
            target_column = self._like_column(target_kind)

            likes_count = await self._count(db, select(func.count(Like.id)).where(target_column == target_id))

            comments_count = 0
            user_tags_count = 0
            if target_kind is LikeTarget.SNIPPET:
                comments_count = await self._count(
                    db, select(func.count(Comment.id)).where(Comment.code_snippet_id == target_id)
                )
                user_tags_count = await self._count(
                    db, select(func.count(UserTag.id)).where(UserTag.code_snippet_id == target_id)
                )

            liked_by_viewer = False
            if viewer_id is not None:
                liked_by_viewer = await self._count(
                    db,
                    select(func.count(Like.id)).where(
                        target_column == target_id, Like.user_id == viewer_id
                    ),
                ) > 0

            return InteractionSummary(
                target_id=target_id,
                target_kind=target_kind,
                likes_count=likes_count,
                comments_count=comments_count,
                user_tags_count=user_tags_count,
                liked_by_viewer=liked_by_viewer,
            )
        except SQLAlchemyError as e:
            raise self._database_error("interaction_summary", e)

    # ── Comments ──────────────────────────────────────────────────────────

    async def add_comment(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        snippet_id: int,
        content: str,
    ) -> CommentResponse:
        """
        Post a comment on a snippet.

        Raises:
            NotFoundError: snippet (checked first) or author does not exist
            ValidationError: content is empty after trimming, or too long
        """
        try:
            await self._require_target(db, snippet_id, LikeTarget.SNIPPET)

            content = (content or "").strip()
            if not content:
                raise ValidationError("Comment content cannot be empty", field="content")
            if len(content) > settings.comment_max_length:
                raise ValidationError(
                    f"Comment content cannot exceed {settings.comment_max_length} characters",
                    field="content",
                    context={"length": len(content)},
                )

            author = await self._require_user(db, user_id)
            comment = Comment(
                content=content,
                created_by=author,
                created_by_id=user_id,
                code_snippet_id=snippet_id,
                created_at=utc_now(),
            )
            db.add(comment)
            await db.flush()

            logger.info("User %s commented on snippet %s (comment %s)", user_id, snippet_id, comment.id)
            return CommentResponse.from_comment(comment)

        except SQLAlchemyError as e:
            raise self._database_error("add_comment", e)

    async def delete_comment(self, db: AsyncSession, user_id: uuid.UUID, comment_id: int) -> None:
        """
        Raises:
            NotFoundError: comment does not exist
            ForbiddenError: caller is not the comment's author
        """
        try:
            comment = await db.get(Comment, comment_id)
            if comment is None:
                raise NotFoundError(resource="comment", resource_id=str(comment_id))

            if comment.created_by_id != user_id:
                logger.warning("User %s tried to delete comment %s by %s", user_id, comment_id, comment.created_by_id)
                raise ForbiddenError("You can only delete your own comments")

            await db.delete(comment)
            await db.flush()
            logger.info("User %s deleted comment %s", user_id, comment_id)

        except SQLAlchemyError as e:
            raise self._database_error("delete_comment", e)

    async def comments_for(
        self,
        db: AsyncSession,
        snippet_id: int,
        order: ListOrder = ListOrder.CREATED_AT_DESC,
    ) -> List[CommentResponse]:
        """Comments on a snippet with their authors, newest first by default."""
        try:
            await self._require_target(db, snippet_id, LikeTarget.SNIPPET)
            result = await db.execute(
                select(Comment)
                .where(Comment.code_snippet_id == snippet_id)
                .order_by(*order.clauses(Comment.created_at, Comment.id))
            )
            return [CommentResponse.from_comment(c) for c in result.scalars().all()]
        except SQLAlchemyError as e:
            raise self._database_error("comments_for", e)

    # ── User Tags ─────────────────────────────────────────────────────────

    async def tag_user(
        self,
        db: AsyncSession,
        tagger_id: uuid.UUID,
        tagged_user_id: uuid.UUID,
        snippet_id: int,
    ) -> UserTagResponse:
        """
        Tag `tagged_user_id` on a snippet. Repeated tags are kept as separate rows.

        Raises:
            NotFoundError: tagged user or snippet does not exist
        """
        try:
            tagged_user = await self._require_user(db, tagged_user_id)
            snippet = await self._require_target(db, snippet_id, LikeTarget.SNIPPET)

            tag = UserTag(
                tagged_user=tagged_user,
                tagged_user_id=tagged_user_id,
                tagger_id=tagger_id,
                code_snippet=snippet,
                code_snippet_id=snippet_id,
                created_at=utc_now(),
            )
            db.add(tag)
            await db.flush()

            logger.info("User %s tagged %s on snippet %s", tagger_id, tagged_user_id, snippet_id)
            return UserTagResponse.from_user_tag(tag)

        except SQLAlchemyError as e:
            raise self._database_error("tag_user", e)

    async def remove_user_tag(self, db: AsyncSession, requester_id: uuid.UUID, tag_id: int) -> None:
        """
        Only the owner of the snippet may remove tags from it. The tagger and
        the tagged user may not.

        Raises:
            NotFoundError: tag does not exist
            ForbiddenError: caller does not own the snippet
        """
        try:
            tag = await db.get(UserTag, tag_id)
            if tag is None:
                raise NotFoundError(resource="user tag", resource_id=str(tag_id))

            if tag.code_snippet.created_by_id != requester_id:
                logger.warning(
                    "User %s tried to remove tag %s from snippet %s owned by %s",
                    requester_id, tag_id, tag.code_snippet_id, tag.code_snippet.created_by_id,
                )
                raise ForbiddenError("You can only remove tags from your own code snippets")

            await db.delete(tag)
            await db.flush()
            logger.info("User %s removed tag %s from snippet %s", requester_id, tag_id, tag.code_snippet_id)

        except SQLAlchemyError as e:
            raise self._database_error("remove_user_tag", e)

    async def user_tags_for(
        self,
        db: AsyncSession,
        snippet_id: int,
        order: ListOrder = ListOrder.CREATED_AT_DESC,
    ) -> List[UserTagResponse]:
        """Tags on a snippet with the tagged users, newest first by default."""
        try:
            await self._require_target(db, snippet_id, LikeTarget.SNIPPET)
            result = await db.execute(
                select(UserTag)
                .where(UserTag.code_snippet_id == snippet_id)
                .order_by(*order.clauses(UserTag.created_at, UserTag.id))
            )
            return [UserTagResponse.from_user_tag(t) for t in result.scalars().all()]
        except SQLAlchemyError as e:
            raise self._database_error("user_tags_for", e)

    # ── Internals ─────────────────────────────────────────────────────────

    @staticmethod
    def _like_column(target_kind: LikeTarget):
        return Like.code_snippet_id if target_kind is LikeTarget.SNIPPET else Like.page_id

    async def _require_target(
        self,
        db: AsyncSession,
        target_id: int,
        target_kind: LikeTarget,
    ) -> Union[CodeSnippet, Page]:
        model = CodeSnippet if target_kind is LikeTarget.SNIPPET else Page
        target = await db.get(model, target_id)
        if target is None:
            resource = "code snippet" if target_kind is LikeTarget.SNIPPET else "page"
            raise NotFoundError(resource=resource, resource_id=str(target_id))
        return target

    async def _require_user(self, db: AsyncSession, user_id: uuid.UUID) -> User:
        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=str(user_id))
        return user

    async def _count(self, db: AsyncSession, query) -> int:
        result = await db.execute(query)
        return result.scalar() or 0

    def _database_error(self, operation: str, error: SQLAlchemyError) -> DatabaseError:
        logger.error("Database error in %s: %s", operation, error, exc_info=True)
        return DatabaseError(
            message="Could not complete the interaction. Please try again.",
            context={"operation": operation, "error_type": type(error).__name__},
        )


# ── Singleton Instance ────────────────────────────────────────────────────
interaction_service = InteractionService()
