"""
Reelbox API: catalog routes.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from reelbox.api.deps import get_gateway, get_video_aggregator
from reelbox.core.config import Settings, get_settings
from reelbox.schemas.schemas import PagedResult, PresignPlayResponse, VideoListQuery
from reelbox.services.catalog.video_aggregator import VideoAggregator
from reelbox.storage.gateway import ObjectStoreGateway, PresignDirection

router = APIRouter(prefix="/videos", tags=["Videos"])


@router.get("", response_model=PagedResult)
async def list_videos(
    locale: Optional[str] = None,
    title: Optional[str] = None,
    prefix: Optional[str] = None,
    max_keys: int = Query(100, alias="maxKeys"),
    continuation_token: Optional[str] = Query(None, alias="continuationToken"),
    aggregator: VideoAggregator = Depends(get_video_aggregator),
):
    """List playable videos with locale-resolved titles, optionally searched by title."""
    query = VideoListQuery(
        prefix=prefix,
        title=title,
        max_keys=max_keys,
        continuation_token=continuation_token,
        locale=locale,
    )
    return await aggregator.list_videos(query)


@router.get("/presign-play", response_model=PresignPlayResponse)
async def presign_play(
    key: str = Query(..., min_length=1),
    expires: int = Query(15 * 60, ge=60, le=60 * 60),
    gateway: ObjectStoreGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
):
    """Short-lived GET URL for a video or cover object."""
    url = await gateway.presign(key, expires, PresignDirection.GET)
    return PresignPlayResponse(url=url, expires_in=settings.clamp_ttl(expires))
