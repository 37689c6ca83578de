"""
SnipNet Backend - Friendship Route Handlers
============================================

What:  /api/friendships: friend requests, accept/decline, block, status and
       friends lists.
How:   The caller comes from get_current_user_id; the other user is named in
       the path by id or username and resolved through the user directory.

Direction:
    POST /send-request/{addressee}      caller → addressee
    POST /accept-request/{requester}    requester → caller must be pending
    POST /decline-request/{requester}   same lookup as accept
    POST /block/{user}                  caller blocks user
"""

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from snipnet.database import get_db_session
from snipnet.dependencies import get_current_user_id
from snipnet.schemas.common import ErrorResponse, ListOrder
from snipnet.schemas.friendship import FriendshipResponse
from snipnet.schemas.user import UserSummary
from snipnet.services.friendship_service import friendship_service
from snipnet.services.social_graph import social_graph
from snipnet.services.user_directory import user_directory

logger = logging.getLogger(__name__)

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/api/friendships", tags=["Friendships"])

_ERRORS = {
    400: {"description": "Invalid user or self-reference", "model": ErrorResponse},
    401: {"description": "Missing caller identity", "model": ErrorResponse},
    404: {"description": "User or pending request not found", "model": ErrorResponse},
}


@router.post(
    "/send-request/{addressee}",
    response_model=FriendshipResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**_ERRORS, 409: {"description": "Relationship already exists", "model": ErrorResponse}},
    summary="Send a friend request",
)
async def send_friend_request(
    addressee: str,
    caller_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> FriendshipResponse:
    addressee_id = await user_directory.resolve(db, addressee)
    return await friendship_service.send_request(db, caller_id, addressee_id)


@router.post(
    "/accept-request/{requester}",
    response_model=FriendshipResponse,
    responses=_ERRORS,
    summary="Accept a pending friend request sent to the caller",
)
async def accept_friend_request(
    requester: str,
    caller_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> FriendshipResponse:
    requester_id = await user_directory.resolve(db, requester)
    return await friendship_service.accept(db, requester_id, caller_id)


@router.post(
    "/decline-request/{requester}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=_ERRORS,
    summary="Decline a pending friend request sent to the caller",
)
async def decline_friend_request(
    requester: str,
    caller_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    requester_id = await user_directory.resolve(db, requester)
    await friendship_service.decline(db, requester_id, caller_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/block/{user}",
    response_model=FriendshipResponse,
    responses=_ERRORS,
    summary="Block a user, replacing any existing relationship",
)
async def block_user(
    user: str,
    caller_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> FriendshipResponse:
    blocked_id = await user_directory.resolve(db, user)
    return await friendship_service.block(db, caller_id, blocked_id)


@router.get(
    "/status/{user}",
    response_model=Optional[FriendshipResponse],
    responses=_ERRORS,
    summary="Relationship between the caller and a user (null when none)",
)
async def friendship_status(
    user: str,
    caller_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> Optional[FriendshipResponse]:
    other_id = await user_directory.resolve(db, user)
    return await friendship_service.status_between(db, caller_id, other_id)


@router.get(
    "/requests",
    response_model=List[FriendshipResponse],
    responses=_ERRORS,
    summary="Pending friend requests addressed to the caller",
)
async def list_friend_requests(
    order: ListOrder = Query(
        default=ListOrder.CREATED_AT_DESC,
        description="created_at_desc (newest first) or created_at_asc",
    ),
    caller_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> List[FriendshipResponse]:
    return await social_graph.friend_requests_for(db, caller_id, order)


@router.get(
    "/friends",
    response_model=List[UserSummary],
    responses=_ERRORS,
    summary="The caller's friends",
)
async def list_my_friends(
    caller_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> List[UserSummary]:
    return await social_graph.friends_of(db, caller_id)


@router.get(
    "/friends/{user}",
    response_model=List[UserSummary],
    responses=_ERRORS,
    summary="Another user's friends",
)
async def list_friends_of(
    user: str,
    caller_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> List[UserSummary]:
    user_id = await user_directory.resolve(db, user)
    return await social_graph.friends_of(db, user_id)
