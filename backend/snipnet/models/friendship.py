"""
SnipNet Backend - Friendship SQLAlchemy Model
==============================================

What:  ORM model for the `friendships` table, one directed edge per user pair.
Who:   Written by FriendshipService (the relationship store), read by
       SocialGraphService.

Table Design:
    - Composite primary key (requester_id, addressee_id): the edge is stored
      directionally because accept/decline depend on who asked whom.
    - user_low_id / user_high_id: the same two ids in sorted order. The unique
      constraint on this pair allows at most one edge per UNORDERED pair, so
      A→B and B→A can never coexist even under concurrent inserts.
    - ck_friendships_not_self: requester_id <> addressee_id.
    - ck_friendships_pair_order / ck_friendships_pair_matches: the pair key is
      sorted and holds exactly the edge's two users, so no row can slip
      past uq_friendships_pair.

State Machine:
    (none)       --send_request(A,B)-->  PENDING(A→B)
    PENDING(A→B) --accept (by B)------>  ACCEPTED
    PENDING(A→B) --decline (by B)----->  DECLINED
    (anything)   --block (by A or B)-->  BLOCKED(blocker→blocked), terminal
"""

import enum
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from snipnet.database import Base
from snipnet.models.user import User
from snipnet.time_utils import utc_now


class FriendshipStatus(str, enum.Enum):
    """Status of a friendship edge."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    BLOCKED = "blocked"


class Friendship(Base):
    """A directed relationship edge between two users."""

    __tablename__ = "friendships"

    requester_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    addressee_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )

    # Normalized pair key, always (min, max) of the two ids
    user_low_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    user_high_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)

    status: Mapped[FriendshipStatus] = mapped_column(
        Enum(
            FriendshipStatus,
            name="friendship_status",
            native_enum=False,
            length=20,
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        nullable=False,
        default=FriendshipStatus.PENDING,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # selectin: both users are loaded together with the edge, which keeps
    # attribute access safe inside an async session
    requester: Mapped[User] = relationship(foreign_keys=[requester_id], lazy="selectin")
    addressee: Mapped[User] = relationship(foreign_keys=[addressee_id], lazy="selectin")

    __table_args__ = (
        UniqueConstraint("user_low_id", "user_high_id", name="uq_friendships_pair"),
        CheckConstraint("requester_id <> addressee_id", name="ck_friendships_not_self"),
        CheckConstraint("user_low_id < user_high_id", name="ck_friendships_pair_order"),
        CheckConstraint(
            "(user_low_id = requester_id AND user_high_id = addressee_id)"
            " OR (user_low_id = addressee_id AND user_high_id = requester_id)",
            name="ck_friendships_pair_matches",
        ),
        Index("ix_friendships_addressee_status", "addressee_id", "status"),
    )

    @staticmethod
    def pair_key(a: uuid.UUID, b: uuid.UUID) -> tuple[uuid.UUID, uuid.UUID]:
        """Canonical (low, high) ordering of an unordered user pair."""
        return (a, b) if a < b else (b, a)

    @classmethod
    def between(
        cls,
        requester: User,
        addressee: User,
        status: FriendshipStatus = FriendshipStatus.PENDING,
    ) -> "Friendship":
        """Build a new edge with its pair key filled in."""
        low, high = cls.pair_key(requester.id, addressee.id)
        return cls(
            requester_id=requester.id,
            addressee_id=addressee.id,
            requester=requester,
            addressee=addressee,
            user_low_id=low,
            user_high_id=high,
            status=status,
            created_at=utc_now(),
        )

    def other_party(self, user_id: uuid.UUID) -> User:
        """The user on the opposite end of this edge from `user_id`."""
        return self.addressee if self.requester_id == user_id else self.requester

    def __repr__(self) -> str:
        return (
            f"<Friendship({self.requester_id} -> {self.addressee_id}, "
            f"status='{self.status.value}')>"
        )
