"""
Storage seams for likes and comments.

The in-memory implementations are process-local and lost on restart; a
persistent backend only needs to implement the two abstract classes.
"""
from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Dict, List, Set, Tuple

from reelbox.schemas.schemas import CommentRecord


class LikeRepository(ABC):

    @abstractmethod
    async def toggle(self, video_key: str, user_id: str) -> Tuple[bool, int]:
        """Flip membership atomically; returns the new membership and like count."""

    @abstractmethod
    async def count(self, video_key: str) -> int: ...

    @abstractmethod
    async def contains(self, video_key: str, user_id: str) -> bool: ...


class CommentRepository(ABC):

    @abstractmethod
    async def append(self, comment: CommentRecord) -> None: ...

    @abstractmethod
    async def list_for_video(self, video_key: str) -> List[CommentRecord]:
        """All comments of a video, in insertion order."""

    @abstractmethod
    async def count(self, video_key: str) -> int: ...


class InMemoryLikeRepository(LikeRepository):

    def __init__(self):
        self._likes: Dict[str, Set[str]] = defaultdict(set)
        self._lock = asyncio.Lock()

    async def toggle(self, video_key: str, user_id: str) -> Tuple[bool, int]:
        async with self._lock:
            users = self._likes[video_key]
            if user_id in users:
                users.discard(user_id)
                return False, len(users)
            users.add(user_id)
            return True, len(users)

    async def count(self, video_key: str) -> int:
        return len(self._likes.get(video_key, ()))

    async def contains(self, video_key: str, user_id: str) -> bool:
        return user_id in self._likes.get(video_key, ())


class InMemoryCommentRepository(CommentRepository):

    def __init__(self):
        self._comments: Dict[str, List[CommentRecord]] = defaultdict(list)
        self._lock = asyncio.Lock()

    async def append(self, comment: CommentRecord) -> None:
        async with self._lock:
            self._comments[comment.video_key].append(comment)

    async def list_for_video(self, video_key: str) -> List[CommentRecord]:
        return list(self._comments.get(video_key, ()))

    async def count(self, video_key: str) -> int:
        return len(self._comments.get(video_key, ()))
