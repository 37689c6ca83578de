"""
SnipNet Backend - Friendship Service (Relationship Store)
==========================================================

What:  Owns every write to the friendships table and enforces the
       relationship state machine.
Who:   Called by the /api/friendships route handlers; SocialGraphService reads
       the same table for its views.
When:  Once per friend request, accept, decline, block or status lookup.

State Machine (per unordered user pair):
                 send_request(A,B)
    (none) ─────────────────────────▶ PENDING(A→B)
    PENDING(A→B) ──accept(A,B)──────▶ ACCEPTED
    PENDING(A→B) ──decline(A,B)─────▶ DECLINED
    (any|none)   ──block(A,B)───────▶ BLOCKED(A→B)   prior edge removed

    accept/decline take (requester, addressee) in that order. The caller is
    always the addressee, so a requester can never accept their own request.

Uniqueness:
    The service checks both orderings before inserting. Under concurrent
    duplicate requests the check can pass twice; uq_friendships_pair then
    rejects the second insert at flush time and the IntegrityError is
    reported as ConflictError.

Design Decision:
    FriendshipService is stateless. Each method receives the request's
    AsyncSession and only flushes; get_db_session commits or rolls back.
"""

import logging
import uuid
from typing import Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from snipnet.exceptions import ConflictError, DatabaseError, NotFoundError, ValidationError
from snipnet.models.friendship import Friendship, FriendshipStatus
from snipnet.models.user import User
from snipnet.schemas.friendship import FriendshipResponse
from snipnet.time_utils import utc_now

logger = logging.getLogger(__name__)


class FriendshipService:
    """
    Relationship state transitions.

    Error Handling Strategy:
        Rule violations raise ValidationError, NotFoundError or ConflictError
        directly. Any other SQLAlchemyError is logged and wrapped in
        DatabaseError so persistence details never reach the client.
    """

    async def send_request(
        self,
        db: AsyncSession,
        requester_id: uuid.UUID,
        addressee_id: uuid.UUID,
    ) -> FriendshipResponse:
        """
        Create a PENDING edge requester → addressee.

        Raises:
            ValidationError: same user on both sides, or either id is unknown
            ConflictError: any edge already exists between the pair, in either
                direction and with any status (declined and blocked included)
            DatabaseError: unexpected persistence failure
        """
        if requester_id == addressee_id:
            logger.warning("User %s tried to send a friend request to themselves", requester_id)
            raise ValidationError(
                "You cannot send a friend request to yourself",
                field="addressee_id",
            )

        try:
            requester, addressee = await self._load_pair(db, requester_id, addressee_id)

            existing = await self._edge_between(db, requester_id, addressee_id)
            if existing is not None:
                logger.warning(
                    "Friend request %s -> %s rejected: edge already exists (%s)",
                    requester_id, addressee_id, existing.status.value,
                )
                raise ConflictError(
                    "A relationship already exists between these users",
                    context={"status": existing.status.value},
                )

            friendship = Friendship.between(requester, addressee)
            db.add(friendship)
            await self._flush_edge(db, requester_id, addressee_id)

            logger.info("Friend request sent: %s -> %s", requester_id, addressee_id)
            return FriendshipResponse.from_friendship(friendship)

        except SQLAlchemyError as e:
            raise self._database_error("send_request", e)

    async def accept(
        self,
        db: AsyncSession,
        requester_id: uuid.UUID,
        addressee_id: uuid.UUID,
    ) -> FriendshipResponse:
        """
        PENDING(requester → addressee) becomes ACCEPTED.

        Raises:
            NotFoundError: no pending edge in exactly that direction. A pending
                edge the other way round does not count.
        """
        return await self._resolve_pending(
            db, requester_id, addressee_id, FriendshipStatus.ACCEPTED
        )

    async def decline(
        self,
        db: AsyncSession,
        requester_id: uuid.UUID,
        addressee_id: uuid.UUID,
    ) -> FriendshipResponse:
        """PENDING(requester → addressee) becomes DECLINED. Same lookup as accept."""
        return await self._resolve_pending(
            db, requester_id, addressee_id, FriendshipStatus.DECLINED
        )

    async def block(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        blocked_user_id: uuid.UUID,
    ) -> FriendshipResponse:
        """
        Replace whatever edge exists between the pair with BLOCKED(user → blocked).

        Raises:
            ValidationError: same user on both sides, or either id is unknown
        """
        if user_id == blocked_user_id:
            logger.warning("User %s tried to block themselves", user_id)
            raise ValidationError("You cannot block yourself", field="blocked_user_id")

        try:
            blocker, blocked = await self._load_pair(db, user_id, blocked_user_id)

            existing = await self._edge_between(db, user_id, blocked_user_id)
            if existing is not None:
                # The unit of work inserts before it deletes, so the old edge
                # has to be gone before the new one is added.
                await db.delete(existing)
                await db.flush()

            friendship = Friendship.between(blocker, blocked, FriendshipStatus.BLOCKED)
            db.add(friendship)
            await self._flush_edge(db, user_id, blocked_user_id)

            logger.info(
                "User %s blocked %s (replaced: %s)",
                user_id, blocked_user_id,
                existing.status.value if existing is not None else "none",
            )
            return FriendshipResponse.from_friendship(friendship)

        except SQLAlchemyError as e:
            raise self._database_error("block", e)

    async def status_between(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        other_id: uuid.UUID,
    ) -> Optional[FriendshipResponse]:
        """The single edge between the pair in either direction, or None."""
        try:
            friendship = await self._edge_between(db, user_id, other_id)
        except SQLAlchemyError as e:
            raise self._database_error("status_between", e)

        if friendship is None:
            return None
        return FriendshipResponse.from_friendship(friendship)

    # ── Internals ─────────────────────────────────────────────────────────

    async def _resolve_pending(
        self,
        db: AsyncSession,
        requester_id: uuid.UUID,
        addressee_id: uuid.UUID,
        new_status: FriendshipStatus,
    ) -> FriendshipResponse:
        try:
            result = await db.execute(
                select(Friendship).where(
                    Friendship.requester_id == requester_id,
                    Friendship.addressee_id == addressee_id,
                    Friendship.status == FriendshipStatus.PENDING,
                )
            )
            friendship = result.scalar_one_or_none()

            if friendship is None:
                logger.warning(
                    "No pending friend request %s -> %s to mark %s",
                    requester_id, addressee_id, new_status.value,
                )
                raise NotFoundError(
                    resource="friend request",
                    message="No pending friend request from this user was found",
                    context={"requester_id": str(requester_id)},
                )

            friendship.status = new_status
            friendship.updated_at = utc_now()
            await db.flush()

            logger.info(
                "Friend request %s -> %s %s",
                requester_id, addressee_id, new_status.value,
            )
            return FriendshipResponse.from_friendship(friendship)

        except SQLAlchemyError as e:
            raise self._database_error(f"mark {new_status.value}", e)

    async def _load_pair(
        self,
        db: AsyncSession,
        first_id: uuid.UUID,
        second_id: uuid.UUID,
    ) -> Tuple[User, User]:
        first = await db.get(User, first_id)
        second = await db.get(User, second_id)
        missing = [str(uid) for uid, user in ((first_id, first), (second_id, second)) if user is None]
        if missing:
            logger.warning("Friendship operation referenced unknown user(s): %s", missing)
            raise ValidationError(
                "Both users must exist",
                field="user_id",
                context={"unknown_user_ids": missing},
            )
        return first, second

    async def _edge_between(
        self,
        db: AsyncSession,
        a: uuid.UUID,
        b: uuid.UUID,
    ) -> Optional[Friendship]:
        # The normalized pair key matches both A→B and B→A in one probe
        low, high = Friendship.pair_key(a, b)
        result = await db.execute(
            select(Friendship).where(
                Friendship.user_low_id == low,
                Friendship.user_high_id == high,
            )
        )
        return result.scalar_one_or_none()

    async def _flush_edge(
        self,
        db: AsyncSession,
        requester_id: uuid.UUID,
        addressee_id: uuid.UUID,
    ) -> None:
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            logger.warning(
                "Concurrent insert for pair %s / %s hit the uniqueness constraint",
                requester_id, addressee_id,
            )
            raise ConflictError("A relationship already exists between these users")

    def _database_error(self, operation: str, error: SQLAlchemyError) -> DatabaseError:
        logger.error("Database error in %s: %s", operation, error, exc_info=True)
        return DatabaseError(
            message="Could not update the relationship. Please try again.",
            context={"operation": operation, "error_type": type(error).__name__},
        )


# ── Singleton Instance ────────────────────────────────────────────────────
friendship_service = FriendshipService()
