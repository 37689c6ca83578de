"""
SnipNet Backend - Social Graph Reader
======================================

What:  Read-only views derived from friendship edges: a user's incoming
       friend requests and their friends list.
Who:   Called by GET /api/friendships/requests and /friends.

Friends Derivation:
    An ACCEPTED edge is undirected for this purpose. A user's friends are the
    other party of every accepted edge the user sits on, whichever side that
    is.
"""

import logging
import uuid
from typing import List

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from snipnet.exceptions import DatabaseError
from snipnet.models.friendship import Friendship, FriendshipStatus
from snipnet.schemas.common import ListOrder
from snipnet.schemas.friendship import FriendshipResponse
from snipnet.schemas.user import UserSummary

logger = logging.getLogger(__name__)


class SocialGraphService:

    async def friend_requests_for(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        order: ListOrder = ListOrder.CREATED_AT_DESC,
    ) -> List[FriendshipResponse]:
        """PENDING edges addressed to `user_id`, newest first by default."""
        query = (
            select(Friendship)
            .where(
                Friendship.addressee_id == user_id,
                Friendship.status == FriendshipStatus.PENDING,
            )
            .order_by(*order.clauses(Friendship.created_at, Friendship.requester_id))
        )
        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            logger.error("Database error listing friend requests for %s: %s", user_id, e, exc_info=True)
            raise DatabaseError(
                message="Could not retrieve friend requests. Please try again.",
                context={"error_type": type(e).__name__},
            )

        return [FriendshipResponse.from_friendship(f) for f in result.scalars().all()]

    async def friends_of(self, db: AsyncSession, user_id: uuid.UUID) -> List[UserSummary]:
        """
        The other party of every ACCEPTED edge touching `user_id`.

        Ordered by when the friendship was created, most recent first.
        """
        query = (
            select(Friendship)
            .where(
                or_(
                    Friendship.requester_id == user_id,
                    Friendship.addressee_id == user_id,
                ),
                Friendship.status == FriendshipStatus.ACCEPTED,
            )
            .order_by(*ListOrder.CREATED_AT_DESC.clauses(Friendship.created_at, Friendship.requester_id))
        )
        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            logger.error("Database error listing friends of %s: %s", user_id, e, exc_info=True)
            raise DatabaseError(
                message="Could not retrieve friends. Please try again.",
                context={"error_type": type(e).__name__},
            )

        return [
            UserSummary.model_validate(f.other_party(user_id))
            for f in result.scalars().all()
        ]


# ── Singleton Instance ────────────────────────────────────────────────────
social_graph = SocialGraphService()
