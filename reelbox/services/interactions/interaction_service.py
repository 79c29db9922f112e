"""
Reelbox Interaction Service: likes and comments per video.

Users are pseudo-identities (see ``user_id.derive_user_id``); the service
treats them as opaque strings.
"""
from __future__ import annotations

import logging
import time
import uuid
from typing import List, Optional

from reelbox.core import metrics
from reelbox.schemas.schemas import CommentRecord, LikeState
from reelbox.services.interactions.repositories import CommentRepository, LikeRepository

logger = logging.getLogger(__name__)

ANONYMOUS_USERNAME = "Anonymous"


class InteractionService:

    def __init__(self, likes: LikeRepository, comments: CommentRepository):
        self._likes = likes
        self._comments = comments
        self._last_timestamp = 0

    # ── Likes ────────────────────────────────────────────────────────────

    async def toggle_like(self, video_key: str, user_id: str) -> LikeState:
        liked, count = await self._likes.toggle(video_key, user_id)
        metrics.like_toggles.labels(liked=str(liked).lower()).inc()
        return LikeState(liked=liked, count=count)

    async def get_like_count(self, video_key: str) -> int:
        return await self._likes.count(video_key)

    async def has_user_liked(self, video_key: str, user_id: str) -> bool:
        return await self._likes.contains(video_key, user_id)

    async def get_like_state(self, video_key: str, user_id: str) -> LikeState:
        return LikeState(
            liked=await self.has_user_liked(video_key, user_id),
            count=await self.get_like_count(video_key),
        )

    # ── Comments ─────────────────────────────────────────────────────────

    def _next_timestamp(self) -> int:
        # Strictly increasing so newest-first ordering is total
        now = int(time.time() * 1000)
        if now <= self._last_timestamp:
            now = self._last_timestamp + 1
        self._last_timestamp = now
        return now

    async def add_comment(
        self, video_key: str, user_id: str, username: Optional[str], content: str
    ) -> CommentRecord:
        """Append a comment. Non-blank ``content`` is the caller's responsibility."""
        comment = CommentRecord(
            id=uuid.uuid4().hex,
            video_key=video_key,
            user_id=user_id,
            username=(username or "").strip() or ANONYMOUS_USERNAME,
            content=content.strip(),
            timestamp=self._next_timestamp(),
        )
        await self._comments.append(comment)
        metrics.comments_added.inc()
        logger.info(f"Comment {comment.id} added to {video_key}")
        return comment

    async def get_comments(
        self, video_key: str, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> List[CommentRecord]:
        """Newest first; ``offset``/``limit`` apply after sorting."""
        comments = sorted(
            await self._comments.list_for_video(video_key),
            key=lambda c: c.timestamp,
            reverse=True,
        )
        start = offset or 0
        end = start + limit if limit is not None else None
        return comments[start:end]

    async def get_comment_count(self, video_key: str) -> int:
        return await self._comments.count(video_key)
