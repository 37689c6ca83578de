"""
SnipNet Backend - Friendship Schemas
=====================================

What:  The response shape of a friendship edge.
How:   Built from a Friendship row whose requester and addressee are already
       loaded; both parties' usernames are flattened into the response.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from snipnet.models.friendship import Friendship, FriendshipStatus


class FriendshipResponse(BaseModel):
    """
    What:  One directed relationship edge.
    Who:   Returned by every /api/friendships mutation, by GET /status/{user}
           and as the items of GET /requests.
    """
    requester_id: uuid.UUID = Field(description="User who created the edge")
    requester_name: str = Field(description="Requester's username")
    addressee_id: uuid.UUID = Field(description="User the edge points at")
    addressee_name: str = Field(description="Addressee's username")
    status: FriendshipStatus = Field(description="pending, accepted, declined or blocked")
    created_at: datetime = Field(description="When the edge was created (UTC)")
    updated_at: Optional[datetime] = Field(
        default=None,
        description="Last status transition (null until accepted or declined)",
    )

    @classmethod
    def from_friendship(cls, friendship: Friendship) -> "FriendshipResponse":
        return cls(
            requester_id=friendship.requester_id,
            requester_name=friendship.requester.username,
            addressee_id=friendship.addressee_id,
            addressee_name=friendship.addressee.username,
            status=friendship.status,
            created_at=friendship.created_at,
            updated_at=friendship.updated_at,
        )
