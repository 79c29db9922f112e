"""
Reelbox Video Aggregator: the catalog listing behind ``GET /videos``.

Pipeline (single pass over one gateway page):
  1. Validate the query (page size, locale)
  2. List one page of raw objects from the store
  3. Keep only video containers; metadata sidecars share the namespace
  4. Batch-load metadata sidecars for the survivors
  5. Resolve display fields per video
       - locale given: that locale's entry, videos without a title there are dropped
       - no locale: first locale in declaration order with a title, else the filename
  6. Optional case-insensitive substring search over titles and keys

Pagination is the gateway's: ``isTruncated`` and the continuation token are
passed through untouched, even when the search filtered the page down.
"""
from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional

from reelbox.core import metrics
from reelbox.core.errors import MetadataUnavailable, ValidationError
from reelbox.core.locales import SUPPORTED_LOCALES
from reelbox.schemas.schemas import (
    PagedResult,
    ResolvedVideoView,
    VideoListQuery,
    VideoMetadataRecord,
)
from reelbox.services.metadata.metadata_store import MetadataStore
from reelbox.storage.gateway import ObjectStoreGateway, VideoObject

logger = logging.getLogger(__name__)

VIDEO_EXTENSIONS = (".mp4", ".webm", ".ogg", ".mov", ".avi", ".mkv", ".m3u8")
UNTITLED_PLACEHOLDER = "Unknown video"
MIN_MAX_KEYS = 1
MAX_MAX_KEYS = 1000

_EXTENSION_RE = re.compile(r"\.[^.]+$")


def is_video_file(key: str) -> bool:
    if not key:
        return False
    return key.lower().endswith(VIDEO_EXTENSIONS)


def title_from_key(key: str) -> str:
    """``folder/My Clip.mp4`` -> ``My Clip``."""
    basename = key.rsplit("/", 1)[-1]
    stem = _EXTENSION_RE.sub("", basename)
    return stem or UNTITLED_PLACEHOLDER


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value


def validate_query(query: VideoListQuery) -> VideoListQuery:
    if not MIN_MAX_KEYS <= query.max_keys <= MAX_MAX_KEYS:
        raise ValidationError(
            "maxKeys", f"maxKeys must be between {MIN_MAX_KEYS} and {MAX_MAX_KEYS}",
        )
    locale = _blank_to_none(query.locale)
    if locale is not None and locale not in SUPPORTED_LOCALES:
        raise ValidationError(
            "locale", f"locale must be one of {', '.join(SUPPORTED_LOCALES)}",
        )
    return query.model_copy(update={
        "locale": locale,
        "title": _blank_to_none(query.title),
        "prefix": query.prefix or None,
        "continuation_token": query.continuation_token or None,
    })


def resolve_video(
    obj: VideoObject,
    record: Optional[VideoMetadataRecord],
    locale: Optional[str] = None,
) -> Optional[ResolvedVideoView]:
    """Display fields for one object, or ``None`` if it is not in ``locale``'s catalog."""
    available = record.available_locales() if record else []

    entry = None
    if locale is not None:
        entry = record.locales.get(locale) if record else None
        if entry is None or not entry.has_title:
            return None
    elif available:
        entry = record.locales[available[0]]

    if entry is not None:
        title = entry.title.strip()
        description = (entry.description or "").strip()
        cover_url = entry.cover_url
    else:
        title = title_from_key(obj.key)
        description = ""
        cover_url = None

    return ResolvedVideoView(
        key=obj.key,
        size=obj.size,
        last_modified=obj.last_modified,
        title=title,
        description=description,
        cover_url=cover_url,
        available_locales=available,
    )


def matches_search(
    video: ResolvedVideoView,
    record: Optional[VideoMetadataRecord],
    term: str,
) -> bool:
    needle = term.strip().lower()
    if record is not None:
        for loc in video.available_locales:
            if needle in record.locales[loc].title.lower():
                return True
    return needle in video.title.lower() or needle in video.key.lower()


class VideoAggregator:
    """Joins the raw object listing with per-locale metadata."""

    def __init__(self, gateway: ObjectStoreGateway, metadata_store: MetadataStore):
        self._gateway = gateway
        self._metadata = metadata_store

    async def _load_metadata(self, keys: List[str]) -> Dict[str, VideoMetadataRecord]:
        try:
            return await self._metadata.get_batch(keys)
        except MetadataUnavailable as e:
            # Cosmetic degradation: titles fall back to filenames
            logger.warning(f"Metadata unavailable for listing, using filenames: {e.message}")
            return {}

    async def list_videos(self, query: VideoListQuery) -> PagedResult:
        query = validate_query(query)

        page = await self._gateway.list_objects(
            prefix=query.prefix,
            max_keys=query.max_keys,
            continuation_token=query.continuation_token,
        )

        objects = [obj for obj in page.entries if is_video_file(obj.key)]
        records = await self._load_metadata([obj.key for obj in objects])

        videos: List[ResolvedVideoView] = []
        for obj in objects:
            view = resolve_video(obj, records.get(obj.key), query.locale)
            if view is None:
                continue
            if query.title and not matches_search(view, records.get(obj.key), query.title):
                continue
            videos.append(view)

        logger.info(
            f"Listed {len(videos)} videos "
            f"(raw={len(page.entries)}, playable={len(objects)}, metadata={len(records)}, "
            f"locale={query.locale or '*'}, search={query.title!r})"
        )
        metrics.videos_listed.labels(locale=query.locale or "any").inc(len(videos))

        return PagedResult(
            videos=videos,
            is_truncated=page.is_truncated,
            next_continuation_token=page.next_token,
            key_count=len(videos),
        )
