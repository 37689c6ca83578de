"""
SnipNet Backend - Friendship Service Tests
===========================================

What:  The relationship state machine against a real (SQLite) database.

What we test:
    ✅ send_request creates exactly one PENDING edge
    ✅ Duplicate requests conflict in both directions, whatever the status
    ✅ Self-requests and unknown users are invalid
    ✅ accept/decline only find PENDING edges in the exact direction
    ✅ block replaces any prior edge with one BLOCKED edge
    ✅ Uniqueness violations at flush time surface as ConflictError
    ✅ The pair key must be sorted and name the edge's own users
"""

import uuid
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, OperationalError

from snipnet.exceptions import ConflictError, DatabaseError, NotFoundError, ValidationError
from snipnet.models import Friendship, FriendshipStatus
from snipnet.services.friendship_service import FriendshipService


async def edge_count(db, a, b) -> int:
    low, high = Friendship.pair_key(a.id, b.id)
    result = await db.execute(
        select(func.count()).select_from(Friendship).where(
            Friendship.user_low_id == low, Friendship.user_high_id == high
        )
    )
    return result.scalar()


class TestSendRequest:

    def setup_method(self):
        self.service = FriendshipService()

    @pytest.mark.asyncio
    async def test_creates_pending_edge(self, db, alice, bob):
        response = await self.service.send_request(db, alice.id, bob.id)

        assert response.requester_id == alice.id
        assert response.requester_name == "alice"
        assert response.addressee_id == bob.id
        assert response.addressee_name == "bob"
        assert response.status == FriendshipStatus.PENDING
        assert response.updated_at is None

        status = await self.service.status_between(db, alice.id, bob.id)
        assert status.status == FriendshipStatus.PENDING
        assert await edge_count(db, alice, bob) == 1

    @pytest.mark.asyncio
    async def test_repeat_request_conflicts(self, db, alice, bob):
        await self.service.send_request(db, alice.id, bob.id)
        with pytest.raises(ConflictError):
            await self.service.send_request(db, alice.id, bob.id)

    @pytest.mark.asyncio
    async def test_reverse_request_conflicts(self, db, alice, bob):
        await self.service.send_request(db, alice.id, bob.id)
        with pytest.raises(ConflictError):
            await self.service.send_request(db, bob.id, alice.id)
        assert await edge_count(db, alice, bob) == 1

    @pytest.mark.asyncio
    async def test_request_after_decline_conflicts(self, db, alice, bob):
        await self.service.send_request(db, alice.id, bob.id)
        await self.service.decline(db, alice.id, bob.id)
        with pytest.raises(ConflictError) as exc_info:
            await self.service.send_request(db, alice.id, bob.id)
        assert exc_info.value.context["status"] == "declined"

    @pytest.mark.asyncio
    async def test_request_to_blocker_conflicts(self, db, alice, bob):
        await self.service.block(db, bob.id, alice.id)
        with pytest.raises(ConflictError):
            await self.service.send_request(db, alice.id, bob.id)

    @pytest.mark.asyncio
    async def test_self_request_is_invalid(self, db, alice):
        with pytest.raises(ValidationError):
            await self.service.send_request(db, alice.id, alice.id)

    @pytest.mark.asyncio
    async def test_unknown_user_is_invalid(self, db, alice):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.send_request(db, alice.id, uuid.uuid4())
        assert len(exc_info.value.context["unknown_user_ids"]) == 1

    @pytest.mark.asyncio
    async def test_constraint_violation_reports_conflict(self, db, alice, bob):
        """Two requests racing past the existence check: the pair constraint decides."""
        await self.service.send_request(db, alice.id, bob.id)

        with patch.object(FriendshipService, "_edge_between", AsyncMock(return_value=None)):
            with pytest.raises(ConflictError):
                await self.service.send_request(db, bob.id, alice.id)


class TestAcceptDecline:

    def setup_method(self):
        self.service = FriendshipService()

    @pytest.mark.asyncio
    async def test_accept_sets_status_and_timestamp(self, db, alice, bob):
        await self.service.send_request(db, alice.id, bob.id)
        response = await self.service.accept(db, alice.id, bob.id)

        assert response.status == FriendshipStatus.ACCEPTED
        assert response.updated_at is not None

    @pytest.mark.asyncio
    async def test_accept_without_request_is_not_found(self, db, alice, bob):
        with pytest.raises(NotFoundError):
            await self.service.accept(db, alice.id, bob.id)

    @pytest.mark.asyncio
    async def test_accept_with_swapped_direction_is_not_found(self, db, alice, bob):
        await self.service.send_request(db, bob.id, alice.id)
        with pytest.raises(NotFoundError):
            await self.service.accept(db, alice.id, bob.id)

    @pytest.mark.asyncio
    async def test_accept_twice_is_not_found(self, db, alice, bob):
        await self.service.send_request(db, alice.id, bob.id)
        await self.service.accept(db, alice.id, bob.id)
        with pytest.raises(NotFoundError):
            await self.service.accept(db, alice.id, bob.id)

    @pytest.mark.asyncio
    async def test_decline_sets_status(self, db, alice, bob):
        await self.service.send_request(db, alice.id, bob.id)
        response = await self.service.decline(db, alice.id, bob.id)

        assert response.status == FriendshipStatus.DECLINED
        status = await self.service.status_between(db, bob.id, alice.id)
        assert status.status == FriendshipStatus.DECLINED

    @pytest.mark.asyncio
    async def test_decline_accepted_edge_is_not_found(self, db, alice, bob):
        await self.service.send_request(db, alice.id, bob.id)
        await self.service.accept(db, alice.id, bob.id)
        with pytest.raises(NotFoundError):
            await self.service.decline(db, alice.id, bob.id)


class TestBlock:

    def setup_method(self):
        self.service = FriendshipService()

    @pytest.mark.asyncio
    async def test_block_without_prior_edge(self, db, alice, bob):
        response = await self.service.block(db, alice.id, bob.id)

        assert response.status == FriendshipStatus.BLOCKED
        assert response.requester_id == alice.id
        assert response.addressee_id == bob.id
        assert await edge_count(db, alice, bob) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("accept", [False, True])
    async def test_block_replaces_edge_in_same_direction(self, db, alice, bob, accept):
        await self.service.send_request(db, alice.id, bob.id)
        if accept:
            await self.service.accept(db, alice.id, bob.id)

        await self.service.block(db, alice.id, bob.id)

        status = await self.service.status_between(db, alice.id, bob.id)
        assert status.status == FriendshipStatus.BLOCKED
        assert await edge_count(db, alice, bob) == 1

    @pytest.mark.asyncio
    async def test_block_replaces_edge_in_other_direction(self, db, alice, bob):
        await self.service.send_request(db, alice.id, bob.id)
        await self.service.accept(db, alice.id, bob.id)

        await self.service.block(db, bob.id, alice.id)

        status = await self.service.status_between(db, alice.id, bob.id)
        assert status.status == FriendshipStatus.BLOCKED
        assert status.requester_id == bob.id
        assert status.addressee_id == alice.id
        assert await edge_count(db, alice, bob) == 1

    @pytest.mark.asyncio
    async def test_self_block_is_invalid(self, db, alice):
        with pytest.raises(ValidationError):
            await self.service.block(db, alice.id, alice.id)

    @pytest.mark.asyncio
    async def test_block_unknown_user_is_invalid(self, db, alice):
        with pytest.raises(ValidationError):
            await self.service.block(db, alice.id, uuid.uuid4())


class TestStatusBetween:

    def setup_method(self):
        self.service = FriendshipService()

    @pytest.mark.asyncio
    async def test_none_without_edge(self, db, alice, bob):
        assert await self.service.status_between(db, alice.id, bob.id) is None

    @pytest.mark.asyncio
    async def test_same_edge_from_either_side(self, db, alice, bob):
        await self.service.send_request(db, alice.id, bob.id)

        forward = await self.service.status_between(db, alice.id, bob.id)
        backward = await self.service.status_between(db, bob.id, alice.id)
        assert forward == backward

    @pytest.mark.asyncio
    async def test_database_failure_is_wrapped(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("db down"))

        with pytest.raises(DatabaseError) as exc_info:
            await self.service.status_between(mock_db_session, uuid.uuid4(), uuid.uuid4())
        assert "db down" not in exc_info.value.message


class TestPairKeyConstraints:
    """Rows written without Friendship.between still cannot dodge the pair key."""

    @pytest.mark.asyncio
    async def test_unsorted_pair_key_is_rejected(self, db, alice, bob):
        low, high = Friendship.pair_key(alice.id, bob.id)
        db.add(Friendship(
            requester_id=alice.id,
            addressee_id=bob.id,
            user_low_id=high,
            user_high_id=low,
            status=FriendshipStatus.PENDING,
        ))

        with pytest.raises(IntegrityError):
            await db.flush()

    @pytest.mark.asyncio
    async def test_pair_key_of_other_users_is_rejected(self, db, alice, bob, carol):
        low, high = Friendship.pair_key(alice.id, carol.id)
        db.add(Friendship(
            requester_id=alice.id,
            addressee_id=bob.id,
            user_low_id=low,
            user_high_id=high,
            status=FriendshipStatus.PENDING,
        ))

        with pytest.raises(IntegrityError):
            await db.flush()
