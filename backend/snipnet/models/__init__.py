"""ORM models. Importing this package registers every table on Base.metadata."""

from snipnet.models.content import CodeSnippet, Page
from snipnet.models.friendship import Friendship, FriendshipStatus
from snipnet.models.interaction import Comment, Like, UserTag
from snipnet.models.user import User

__all__ = [
    "CodeSnippet",
    "Comment",
    "Friendship",
    "FriendshipStatus",
    "Like",
    "Page",
    "User",
    "UserTag",
]
