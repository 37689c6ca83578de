"""
SnipNet Backend - User Schemas
===============================

What:  The public projection of a user that every social DTO embeds.
Why:   Only identity and display fields leave the service; nothing else on
       the users row is exposed.
"""

import uuid

from pydantic import BaseModel, Field


class UserSummary(BaseModel):
    """
    What:  Compact user representation.
    Who:   Returned by /api/users/resolve and the friends/likers listings, and
           nested in like, comment and tag responses.
    """
    id: uuid.UUID = Field(description="Canonical user id")
    username: str = Field(description="Unique handle")
    first_name: str = Field(default="", description="Given name")
    last_name: str = Field(default="", description="Family name")
    email: str = Field(description="Contact email")

    model_config = {"from_attributes": True}
