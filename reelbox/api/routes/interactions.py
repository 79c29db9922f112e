"""
Reelbox API: likes and comments.

Video keys are path-like (``folder/clip.mp4``) so they are matched with the
``path`` converter.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from reelbox.api.deps import get_interaction_service, get_user_id
from reelbox.schemas.schemas import (
    CommentCreate,
    CommentCreateResponse,
    CommentListResponse,
    LikeActionRequest,
    LikeState,
)
from reelbox.services.interactions.interaction_service import InteractionService

router = APIRouter(prefix="/videos", tags=["Interactions"])


# ── Likes ────────────────────────────────────────────────────────────────

@router.get("/{key:path}/likes", response_model=LikeState)
async def get_likes(
    key: str,
    user_id: str = Depends(get_user_id),
    interactions: InteractionService = Depends(get_interaction_service),
):
    return await interactions.get_like_state(key, user_id)


@router.post("/{key:path}/likes", response_model=LikeState)
async def toggle_like(
    key: str,
    body: Optional[LikeActionRequest] = None,
    user_id: str = Depends(get_user_id),
    interactions: InteractionService = Depends(get_interaction_service),
):
    """Toggle the caller's like; ``{"action": "get"}`` only reads."""
    if body is not None and body.action == "get":
        return await interactions.get_like_state(key, user_id)
    return await interactions.toggle_like(key, user_id)


# ── Comments ─────────────────────────────────────────────────────────────

@router.get("/{key:path}/comments", response_model=CommentListResponse)
async def list_comments(
    key: str,
    limit: Optional[int] = Query(None, ge=1, le=100),
    offset: Optional[int] = Query(None, ge=0),
    interactions: InteractionService = Depends(get_interaction_service),
):
    """Comments for a video, newest first. ``limit`` is echoed as ``null`` when not given."""
    comments = await interactions.get_comments(key, limit, offset)
    total = await interactions.get_comment_count(key)
    return CommentListResponse(
        comments=comments,
        total=total,
        limit=limit,
        offset=offset or 0,
    )


@router.post("/{key:path}/comments", response_model=CommentCreateResponse)
async def add_comment(
    key: str,
    data: CommentCreate,
    user_id: str = Depends(get_user_id),
    interactions: InteractionService = Depends(get_interaction_service),
):
    comment = await interactions.add_comment(key, user_id, data.username, data.content)
    return CommentCreateResponse(comment=comment)
