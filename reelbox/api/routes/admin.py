"""
Reelbox API: admin routes (session, metadata editing, covers, uploads).
"""
from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Response

from reelbox.api.deps import get_cover_service, get_gateway, get_metadata_store
from reelbox.core.config import Settings, get_settings
from reelbox.core.errors import NotFound, Unauthorized
from reelbox.core.security import (
    clear_admin_session_cookie,
    create_admin_session,
    get_admin_session,
    require_admin,
    set_admin_session_cookie,
    verify_admin_password,
    verify_admin_session,
)
from reelbox.schemas.schemas import (
    ActionResponse,
    AuthStatus,
    CoverUploadRequest,
    CoverUploadResponse,
    DeleteVideoRequest,
    DeleteVideoResponse,
    LoginRequest,
    MetadataUpdateRequest,
    PresignUploadRequest,
    PresignUploadResponse,
    VideoMetadataRecord,
)
from reelbox.services.media.cover_service import CoverService
from reelbox.services.metadata.metadata_store import MetadataStore
from reelbox.storage.gateway import ObjectStoreGateway, PresignDirection

logger = structlog.get_logger()
router = APIRouter(prefix="/admin", tags=["Admin"])


# ── Session ──────────────────────────────────────────────────────────────

@router.post("/login", response_model=ActionResponse)
async def login(
    data: LoginRequest,
    response: Response,
    settings: Settings = Depends(get_settings),
):
    if not verify_admin_password(data.password, settings):
        logger.warning("Admin login rejected")
        raise Unauthorized("Invalid password")
    set_admin_session_cookie(response, create_admin_session(), settings)
    logger.info("Admin logged in")
    return ActionResponse(message="Login successful")


@router.post("/logout", response_model=ActionResponse)
async def logout(response: Response, settings: Settings = Depends(get_settings)):
    clear_admin_session_cookie(response, settings)
    return ActionResponse(message="Logout successful")


@router.get("/auth", response_model=AuthStatus)
async def auth_status(session: str | None = Depends(get_admin_session)):
    return AuthStatus(authenticated=verify_admin_session(session))


# ── Metadata ─────────────────────────────────────────────────────────────

@router.get("/videos/{key:path}/metadata", response_model=VideoMetadataRecord)
async def get_metadata(key: str, store: MetadataStore = Depends(get_metadata_store)):
    record = await store.get(key)
    if record is None:
        raise NotFound("Metadata not found")
    return record


@router.put(
    "/videos/{key:path}/metadata",
    response_model=VideoMetadataRecord,
    dependencies=[Depends(require_admin)],
)
async def update_metadata(
    key: str,
    data: MetadataUpdateRequest,
    store: MetadataStore = Depends(get_metadata_store),
):
    """Upsert one locale's title/description (and optionally cover)."""
    record = await store.upsert(
        key, data.locale,
        title=data.title, description=data.description, cover_url=data.cover_url,
    )
    logger.info("Metadata updated", video_key=key, locale=data.locale)
    return record


@router.post(
    "/videos/{key:path}/cover",
    response_model=CoverUploadResponse,
    dependencies=[Depends(require_admin)],
)
async def upload_cover(
    key: str,
    data: CoverUploadRequest,
    covers: CoverService = Depends(get_cover_service),
):
    cover_url, cover_key = await covers.upload_cover(
        key, data.locale, data.cover_data, data.content_type,
    )
    return CoverUploadResponse(cover_url=cover_url, cover_key=cover_key)


# ── Uploads & deletion ───────────────────────────────────────────────────

@router.post(
    "/videos/presign-upload",
    response_model=PresignUploadResponse,
    dependencies=[Depends(require_admin)],
)
async def presign_upload(
    data: PresignUploadRequest,
    gateway: ObjectStoreGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
):
    """Short-lived PUT URL the browser uploads the video file to."""
    url = await gateway.presign(
        data.key, data.expires, PresignDirection.PUT, content_type=data.content_type,
    )
    return PresignUploadResponse(url=url, expires_in=settings.clamp_ttl(data.expires), key=data.key)


@router.delete("/videos", response_model=DeleteVideoResponse, dependencies=[Depends(require_admin)])
async def delete_video(data: DeleteVideoRequest, gateway: ObjectStoreGateway = Depends(get_gateway)):
    """Delete the video object. Its metadata sidecar is left in place."""
    await gateway.delete_object(data.key)
    logger.info("Video deleted", video_key=data.key)
    return DeleteVideoResponse(message="Video deleted successfully", key=data.key)
