"""
SnipNet Backend - User Directory
=================================

What:  Resolves whatever a caller uses to name a user (canonical id or
       username) to the canonical user id.
Who:   Called by the caller-identity dependency and by every route that
       takes a user in its path, before any friendship or interaction work.

Resolution Order:
    1. If the identifier parses as a UUID and a user has that id → that user
    2. Otherwise a case-insensitive exact match on username
       → uses ix_users_username_lower
"""

import logging
import uuid
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from snipnet.exceptions import DatabaseError, NotFoundError, ValidationError
from snipnet.models.user import User
from snipnet.schemas.user import UserSummary

logger = logging.getLogger(__name__)


class UserDirectory:
    """Read-only lookups against the users table."""

    async def find(self, db: AsyncSession, identifier: str) -> Optional[User]:
        """Returns the matching user, or None. `identifier` must be non-blank."""
        try:
            try:
                user_id = uuid.UUID(identifier)
            except ValueError:
                user_id = None

            if user_id is not None:
                user = await db.get(User, user_id)
                if user is not None:
                    return user

            result = await db.execute(
                select(User).where(func.lower(User.username) == identifier.lower())
            )
            return result.scalar_one_or_none()

        except SQLAlchemyError as e:
            logger.error("Database error resolving user '%s': %s", identifier, e, exc_info=True)
            raise DatabaseError(
                message="Could not look up the user. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def resolve(self, db: AsyncSession, identifier: Optional[str]) -> uuid.UUID:
        """
        Resolve a user id or username to the canonical user id.

        Raises:
            ValidationError: identifier is missing or blank (→ 400)
            NotFoundError: no user has that id or username (→ 404)
        """
        user = await self._require(db, identifier)
        return user.id

    async def get_summary(self, db: AsyncSession, identifier: Optional[str]) -> UserSummary:
        """Public lookup used by GET /api/users/resolve."""
        user = await self._require(db, identifier)
        return UserSummary.model_validate(user)

    async def _require(self, db: AsyncSession, identifier: Optional[str]) -> User:
        if identifier is None or not identifier.strip():
            raise ValidationError("A user id or username is required", field="identifier")

        identifier = identifier.strip()
        user = await self.find(db, identifier)
        if user is None:
            logger.warning("User lookup failed for '%s'", identifier)
            raise NotFoundError(resource="user", resource_id=identifier)
        return user


# ── Singleton Instance ────────────────────────────────────────────────────
user_directory = UserDirectory()
