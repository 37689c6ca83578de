"""
SnipNet Backend - Caller Identity Dependencies
===============================================

What:  FastAPI dependencies that turn the gateway's identity header into a
       canonical user id.
How:   The authenticating gateway in front of this service validates the
       token and forwards the user's id (or username) in
       settings.user_id_header. The value is resolved through the user
       directory on every request.

    get_current_user_id:
        Header missing        → AuthenticationError (401)
        Header names nobody   → NotFoundError (404)
    get_optional_user_id:
        Either case           → None (anonymous viewer)
"""

import uuid
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from snipnet.config import settings
from snipnet.database import get_db_session
from snipnet.exceptions import AuthenticationError
from snipnet.services.user_directory import user_directory


def _identity_header(request: Request) -> Optional[str]:
    value = request.headers.get(settings.user_id_header)
    if value is None or not value.strip():
        return None
    return value.strip()


async def get_current_user_id(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> uuid.UUID:
    """Canonical id of the authenticated caller; 401 when there is none."""
    identifier = _identity_header(request)
    if identifier is None:
        raise AuthenticationError(
            f"Missing caller identity header '{settings.user_id_header}'"
        )
    return await user_directory.resolve(db, identifier)


async def get_optional_user_id(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> Optional[uuid.UUID]:
    """Caller id for public endpoints; a missing or unknown caller is anonymous."""
    identifier = _identity_header(request)
    if identifier is None:
        return None
    user = await user_directory.find(db, identifier)
    return user.id if user is not None else None
