"""
SnipNet Backend - Social Interaction Route Handlers
====================================================

What:  /api/social: likes on snippets and pages, comments and user tags on
       snippets, and per-target counters.
Who:   Mutations need a caller (get_current_user_id). Listings and counters
       are public; the summary uses the caller only for liked_by_viewer.
"""

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from snipnet.database import get_db_session
from snipnet.dependencies import get_current_user_id, get_optional_user_id
from snipnet.schemas.common import ErrorResponse, ListOrder
from snipnet.schemas.interaction import (
    CommentCreate,
    CommentResponse,
    InteractionSummary,
    LikeTarget,
    LikeToggleResponse,
    UserTagResponse,
)
from snipnet.schemas.user import UserSummary
from snipnet.services.interaction_service import interaction_service
from snipnet.services.user_directory import user_directory

logger = logging.getLogger(__name__)

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/api/social", tags=["Social"])

_NOT_FOUND = {404: {"description": "Target not found", "model": ErrorResponse}}
_AUTH = {401: {"description": "Missing caller identity", "model": ErrorResponse}}
_FORBIDDEN = {403: {"description": "Caller does not own the resource", "model": ErrorResponse}}

_ORDER_QUERY = Query(
    default=ListOrder.CREATED_AT_DESC,
    description="created_at_desc (newest first) or created_at_asc",
)


# ── Likes ─────────────────────────────────────────────────────────────────

@router.post(
    "/snippets/{snippet_id}/like",
    response_model=LikeToggleResponse,
    responses={**_AUTH, **_NOT_FOUND},
    summary="Like a code snippet, or remove the caller's like",
)
async def toggle_snippet_like(
    snippet_id: int,
    caller_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> LikeToggleResponse:
    return await interaction_service.toggle_like(db, caller_id, snippet_id, LikeTarget.SNIPPET)


@router.post(
    "/pages/{page_id}/like",
    response_model=LikeToggleResponse,
    responses={**_AUTH, **_NOT_FOUND},
    summary="Like a page, or remove the caller's like",
)
async def toggle_page_like(
    page_id: int,
    caller_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> LikeToggleResponse:
    return await interaction_service.toggle_like(db, caller_id, page_id, LikeTarget.PAGE)


@router.get(
    "/pages/{page_id}/likers",
    response_model=List[UserSummary],
    responses=_NOT_FOUND,
    summary="Users who like a page",
)
async def list_page_likers(
    page_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> List[UserSummary]:
    return await interaction_service.likers_of_page(db, page_id)


@router.get(
    "/snippets/{snippet_id}/summary",
    response_model=InteractionSummary,
    responses=_NOT_FOUND,
    summary="Like, comment and tag counters for a code snippet",
)
async def snippet_summary(
    snippet_id: int,
    viewer_id: Optional[uuid.UUID] = Depends(get_optional_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> InteractionSummary:
    return await interaction_service.interaction_summary(
        db, snippet_id, LikeTarget.SNIPPET, viewer_id
    )


@router.get(
    "/pages/{page_id}/summary",
    response_model=InteractionSummary,
    responses=_NOT_FOUND,
    summary="Like counter for a page",
)
async def page_summary(
    page_id: int,
    viewer_id: Optional[uuid.UUID] = Depends(get_optional_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> InteractionSummary:
    return await interaction_service.interaction_summary(
        db, page_id, LikeTarget.PAGE, viewer_id
    )


# ── Comments ──────────────────────────────────────────────────────────────

@router.post(
    "/snippets/{snippet_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Empty or oversized content", "model": ErrorResponse},
        **_AUTH,
        **_NOT_FOUND,
    },
    summary="Comment on a code snippet",
)
async def add_comment(
    snippet_id: int,
    body: CommentCreate,
    caller_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> CommentResponse:
    return await interaction_service.add_comment(db, caller_id, snippet_id, body.content)


@router.delete(
    "/comments/{comment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**_AUTH, **_FORBIDDEN, **_NOT_FOUND},
    summary="Delete one of the caller's comments",
)
async def delete_comment(
    comment_id: int,
    caller_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await interaction_service.delete_comment(db, caller_id, comment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/snippets/{snippet_id}/comments",
    response_model=List[CommentResponse],
    responses=_NOT_FOUND,
    summary="Comments on a code snippet",
)
async def list_comments(
    snippet_id: int,
    order: ListOrder = _ORDER_QUERY,
    db: AsyncSession = Depends(get_db_session),
) -> List[CommentResponse]:
    return await interaction_service.comments_for(db, snippet_id, order)


# ── User Tags ─────────────────────────────────────────────────────────────

@router.post(
    "/snippets/{snippet_id}/tags/{user}",
    response_model=UserTagResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**_AUTH, **_NOT_FOUND},
    summary="Tag a user on a code snippet",
)
async def tag_user(
    snippet_id: int,
    user: str,
    caller_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> UserTagResponse:
    tagged_user_id = await user_directory.resolve(db, user)
    return await interaction_service.tag_user(db, caller_id, tagged_user_id, snippet_id)


@router.delete(
    "/tags/{tag_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**_AUTH, **_FORBIDDEN, **_NOT_FOUND},
    summary="Remove a user tag from one of the caller's snippets",
)
async def remove_user_tag(
    tag_id: int,
    caller_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await interaction_service.remove_user_tag(db, caller_id, tag_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/snippets/{snippet_id}/tags",
    response_model=List[UserTagResponse],
    responses=_NOT_FOUND,
    summary="User tags on a code snippet",
)
async def list_user_tags(
    snippet_id: int,
    order: ListOrder = _ORDER_QUERY,
    db: AsyncSession = Depends(get_db_session),
) -> List[UserTagResponse]:
    return await interaction_service.user_tags_for(db, snippet_id, order)
