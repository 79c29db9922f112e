"""
Reelbox API: ad slot configuration for the player.

``/ads/config`` only says which slots are filled; the VAST tag itself is
handed out per slot by ``/ads/vast``.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from reelbox.core.config import Settings, get_settings
from reelbox.schemas.schemas import AdConfigResponse, AdPosition, AdPositions, VastResponse
from reelbox.services.ads.ad_config import has_ads, resolve_ad_config, slot_url

router = APIRouter(prefix="/ads", tags=["Ads"])


@router.get("/config", response_model=AdConfigResponse)
async def get_ad_config(settings: Settings = Depends(get_settings)):
    config = resolve_ad_config(settings)
    return AdConfigResponse(
        enabled=has_ads(settings),
        positions=AdPositions(
            pre_roll=bool(config and config.pre_roll),
            mid_roll=bool(config and config.mid_roll),
            post_roll=bool(config and config.post_roll),
        ),
    )


@router.get("/vast", response_model=VastResponse)
async def get_vast_url(
    position: AdPosition = Query(...),
    settings: Settings = Depends(get_settings),
):
    vast_url = slot_url(resolve_ad_config(settings), position)
    return VastResponse(vast_url=vast_url, enabled=bool(vast_url))
