"""
SnipNet Backend - Social Graph Tests
=====================================

What we test:
    ✅ Incoming pending requests only, in the requested order
    ✅ Friends derivation is symmetric and picks the other party
    ✅ Declined, pending and blocked edges never produce friends
    ✅ The alice/bob request → accept scenario end to end
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import OperationalError

from snipnet.exceptions import DatabaseError
from snipnet.models import Friendship
from snipnet.schemas.common import ListOrder
from snipnet.services.friendship_service import FriendshipService
from snipnet.services.social_graph import SocialGraphService


def usernames(summaries):
    return sorted(s.username for s in summaries)


class TestFriendRequests:

    def setup_method(self):
        self.friendships = FriendshipService()
        self.graph = SocialGraphService()

    @pytest.mark.asyncio
    async def test_only_incoming_pending_requests(self, db, alice, bob, carol, make_user):
        dave = await make_user("dave")
        await self.friendships.send_request(db, bob.id, alice.id)
        await self.friendships.send_request(db, alice.id, carol.id)  # outgoing
        await self.friendships.send_request(db, dave.id, alice.id)
        await self.friendships.decline(db, dave.id, alice.id)        # no longer pending

        requests = await self.graph.friend_requests_for(db, alice.id)

        assert [r.requester_name for r in requests] == ["bob"]
        assert all(r.addressee_id == alice.id for r in requests)

    @pytest.mark.asyncio
    async def test_ordering(self, db, alice, bob, carol):
        await self.friendships.send_request(db, bob.id, alice.id)
        await self.friendships.send_request(db, carol.id, alice.id)

        base = datetime(2026, 1, 1, tzinfo=timezone.utc)
        (await db.get(Friendship, (bob.id, alice.id))).created_at = base
        (await db.get(Friendship, (carol.id, alice.id))).created_at = base + timedelta(hours=1)
        await db.flush()

        newest_first = await self.graph.friend_requests_for(db, alice.id)
        oldest_first = await self.graph.friend_requests_for(db, alice.id, ListOrder.CREATED_AT_ASC)

        assert [r.requester_name for r in newest_first] == ["carol", "bob"]
        assert [r.requester_name for r in oldest_first] == ["bob", "carol"]

    @pytest.mark.asyncio
    async def test_no_requests(self, db, alice):
        assert await self.graph.friend_requests_for(db, alice.id) == []


class TestFriendsOf:

    def setup_method(self):
        self.friendships = FriendshipService()
        self.graph = SocialGraphService()

    @pytest.mark.asyncio
    async def test_accepted_edge_is_symmetric(self, db, alice, bob):
        await self.friendships.send_request(db, alice.id, bob.id)
        await self.friendships.accept(db, alice.id, bob.id)

        assert usernames(await self.graph.friends_of(db, alice.id)) == ["bob"]
        assert usernames(await self.graph.friends_of(db, bob.id)) == ["alice"]

    @pytest.mark.asyncio
    async def test_other_party_picked_regardless_of_role(self, db, alice, bob, carol):
        # alice is requester towards bob and addressee from carol
        await self.friendships.send_request(db, alice.id, bob.id)
        await self.friendships.accept(db, alice.id, bob.id)
        await self.friendships.send_request(db, carol.id, alice.id)
        await self.friendships.accept(db, carol.id, alice.id)

        friends = await self.graph.friends_of(db, alice.id)

        assert usernames(friends) == ["bob", "carol"]
        assert alice.id not in {f.id for f in friends}

    @pytest.mark.asyncio
    async def test_declined_edge_is_not_a_friendship(self, db, alice, bob):
        await self.friendships.send_request(db, alice.id, bob.id)
        await self.friendships.decline(db, alice.id, bob.id)

        assert await self.graph.friends_of(db, alice.id) == []
        assert await self.graph.friends_of(db, bob.id) == []

    @pytest.mark.asyncio
    async def test_pending_and_blocked_edges_are_not_friendships(self, db, alice, bob, carol):
        await self.friendships.send_request(db, alice.id, bob.id)
        await self.friendships.block(db, alice.id, carol.id)

        assert await self.graph.friends_of(db, alice.id) == []

    @pytest.mark.asyncio
    async def test_block_ends_friendship(self, db, alice, bob):
        await self.friendships.send_request(db, alice.id, bob.id)
        await self.friendships.accept(db, alice.id, bob.id)
        await self.friendships.block(db, bob.id, alice.id)

        assert await self.graph.friends_of(db, alice.id) == []
        assert await self.graph.friends_of(db, bob.id) == []

    @pytest.mark.asyncio
    async def test_database_failure_is_wrapped(self, mock_db_session, alice):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("db down"))
        with pytest.raises(DatabaseError):
            await self.graph.friends_of(mock_db_session, alice.id)


class TestAliceAndBob:
    """alice asks bob, bob sees the request, accepts, and both are friends."""

    @pytest.mark.asyncio
    async def test_request_accept_scenario(self, db, alice, bob):
        friendships = FriendshipService()
        graph = SocialGraphService()

        await friendships.send_request(db, alice.id, bob.id)

        pending = await graph.friend_requests_for(db, bob.id)
        assert len(pending) == 1
        assert pending[0].requester_name == "alice"
        assert pending[0].status.value == "pending"

        await friendships.accept(db, alice.id, bob.id)

        assert usernames(await graph.friends_of(db, alice.id)) == ["bob"]
        assert usernames(await graph.friends_of(db, bob.id)) == ["alice"]
        assert await graph.friend_requests_for(db, bob.id) == []
