"""
SnipNet Backend - User Lookup Route
====================================

What:  GET /api/users/resolve: public lookup of a user by id or username.
Who:   Frontends turning a handle typed by a person into a profile card.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from snipnet.database import get_db_session
from snipnet.schemas.common import ErrorResponse
from snipnet.schemas.user import UserSummary
from snipnet.services.user_directory import user_directory

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get(
    "/resolve",
    response_model=UserSummary,
    responses={
        400: {"description": "Blank identifier", "model": ErrorResponse},
        404: {"description": "No such user", "model": ErrorResponse},
    },
    summary="Look up a user by id or username",
)
async def resolve_user(
    identifier: str = Query(default="", description="User id (UUID) or username, case-insensitive"),
    db: AsyncSession = Depends(get_db_session),
) -> UserSummary:
    return await user_directory.get_summary(db, identifier)
