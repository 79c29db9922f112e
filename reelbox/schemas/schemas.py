"""
Reelbox Schemas: Pydantic v2 models for request/response validation.

Field names are snake_case in Python and camelCase on the wire (and in the
metadata sidecar blobs), so payloads stay compatible with the web front-end.
"""
from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from reelbox.core.locales import SUPPORTED_LOCALES

AdPosition = Literal["pre-roll", "mid-roll", "post-roll"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _check_locale(value: str) -> str:
    if value not in SUPPORTED_LOCALES:
        raise ValueError(f"unsupported locale {value!r}, expected one of {', '.join(SUPPORTED_LOCALES)}")
    return value


# ═══════════════════════════════════════════════════════════════════════
# Metadata sidecar
# ═══════════════════════════════════════════════════════════════════════

class LocaleEntry(CamelModel):
    title: str = ""
    description: str = ""
    cover_url: Optional[str] = None

    @property
    def has_title(self) -> bool:
        return bool(self.title and self.title.strip())


class VideoMetadataRecord(CamelModel):
    """Content of ``<videoKey>.metadata.json``."""

    video_key: str
    locales: Dict[str, LocaleEntry] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime

    def available_locales(self) -> List[str]:
        """Supported locales with a non-empty title, in declaration order."""
        return [
            loc for loc in SUPPORTED_LOCALES
            if loc in self.locales and self.locales[loc].has_title
        ]


# ═══════════════════════════════════════════════════════════════════════
# Catalog listing
# ═══════════════════════════════════════════════════════════════════════

class VideoListQuery(CamelModel):
    """Listing query as received; range and locale checks happen in the aggregator."""

    prefix: Optional[str] = None
    title: Optional[str] = None
    max_keys: int = 100
    continuation_token: Optional[str] = None
    locale: Optional[str] = None


class ResolvedVideoView(CamelModel):
    key: str
    size: int
    last_modified: datetime
    title: str
    description: str = ""
    cover_url: Optional[str] = None
    available_locales: List[str] = Field(default_factory=list)


class PagedResult(CamelModel):
    videos: List[ResolvedVideoView]
    is_truncated: bool = False
    next_continuation_token: Optional[str] = None
    key_count: int = 0


class PresignPlayResponse(CamelModel):
    url: str
    expires_in: int


class PresignUploadRequest(CamelModel):
    key: str = Field(..., min_length=1)
    content_type: str = Field("video/mp4", min_length=1)
    expires: int = Field(15 * 60, ge=60, le=60 * 60)


class PresignUploadResponse(CamelModel):
    url: str
    expires_in: int
    key: str


# ═══════════════════════════════════════════════════════════════════════
# Likes & comments
# ═══════════════════════════════════════════════════════════════════════

class LikeState(CamelModel):
    liked: bool
    count: int


class LikeActionRequest(CamelModel):
    action: Literal["get", "toggle"] = "toggle"


class CommentRecord(CamelModel):
    id: str
    video_key: str
    user_id: str
    username: str
    content: str
    timestamp: int  # epoch milliseconds


class CommentCreate(CamelModel):
    username: Optional[str] = Field(None, max_length=50)
    content: str = Field(..., min_length=1, max_length=1000)

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("content must not be blank")
        return value


class CommentCreateResponse(CamelModel):
    comment: CommentRecord
    success: bool = True


class CommentListResponse(CamelModel):
    comments: List[CommentRecord]
    total: int
    limit: Optional[int] = None
    offset: int


# ═══════════════════════════════════════════════════════════════════════
# Admin
# ═══════════════════════════════════════════════════════════════════════

class LoginRequest(CamelModel):
    password: str = Field(..., min_length=1)


class AuthStatus(CamelModel):
    authenticated: bool


class ActionResponse(CamelModel):
    success: bool = True
    message: str


class MetadataUpdateRequest(CamelModel):
    locale: str
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=2000)
    cover_url: Optional[str] = None

    @field_validator("locale")
    @classmethod
    def locale_supported(cls, value: str) -> str:
        return _check_locale(value)


class CoverUploadRequest(CamelModel):
    locale: str
    cover_data: str = Field(..., min_length=1, description="Base64 image data, optionally a data: URL")
    content_type: str = "image/jpeg"

    @field_validator("locale")
    @classmethod
    def locale_supported(cls, value: str) -> str:
        return _check_locale(value)


class CoverUploadResponse(CamelModel):
    cover_url: str
    cover_key: str


class DeleteVideoRequest(CamelModel):
    key: str = Field(..., min_length=1)


class DeleteVideoResponse(ActionResponse):
    key: str


# ═══════════════════════════════════════════════════════════════════════
# Ads
# ═══════════════════════════════════════════════════════════════════════

class AdPositions(CamelModel):
    pre_roll: bool = False
    mid_roll: bool = False
    post_roll: bool = False


class AdConfigResponse(CamelModel):
    enabled: bool
    positions: AdPositions


class VastResponse(CamelModel):
    vast_url: Optional[str] = None
    enabled: bool = False
