"""
Reelbox Metadata Store: one JSON sidecar per video, kept in the same bucket.

The sidecar for ``folder/clip.mp4`` lives at ``folder/clip.mp4.metadata.json``
and holds the whole ``VideoMetadataRecord``. Once a record exists it carries
an entry for every supported locale; an empty title means "no content in this
locale yet".

Upserts are read-modify-write against the object store, serialized per video
key with an ``asyncio.Lock`` so two concurrent edits of the same video cannot
overwrite each other's locale.
"""
from __future__ import annotations

import asyncio
import json
import logging
import weakref
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, Optional

from pydantic import ValidationError as PydanticValidationError

from reelbox.core import metrics
from reelbox.core.errors import MetadataUnavailable, ObjectNotFound, UpstreamUnavailable
from reelbox.core.locales import SUPPORTED_LOCALES
from reelbox.schemas.schemas import LocaleEntry, VideoMetadataRecord
from reelbox.storage.gateway import ObjectStoreGateway

logger = logging.getLogger(__name__)

METADATA_SUFFIX = ".metadata.json"


def metadata_key(video_key: str) -> str:
    return f"{video_key}{METADATA_SUFFIX}"


def _next_timestamp(previous: Optional[datetime] = None) -> datetime:
    now = datetime.now(timezone.utc)
    # updatedAt must move forward even when two edits land in the same tick
    if previous is not None and now <= previous:
        now = previous + timedelta(microseconds=1)
    return now


def _fill_locales(locales: Dict[str, LocaleEntry]) -> Dict[str, LocaleEntry]:
    filled = dict(locales)
    for loc in SUPPORTED_LOCALES:
        filled.setdefault(loc, LocaleEntry())
    return filled


class MetadataStore:
    """Per-video, per-locale title/description/cover storage."""

    def __init__(self, gateway: ObjectStoreGateway):
        self._gateway = gateway
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def _lock_for(self, video_key: str) -> asyncio.Lock:
        lock = self._locks.get(video_key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[video_key] = lock
        return lock

    # ── Reads ────────────────────────────────────────────────────────────

    async def get(self, video_key: str) -> Optional[VideoMetadataRecord]:
        """Load the record, or ``None`` when the video was never edited."""
        try:
            raw = await self._gateway.get_object(metadata_key(video_key))
        except ObjectNotFound:
            logger.debug(f"No metadata for {video_key}")
            return None
        except UpstreamUnavailable as e:
            raise MetadataUnavailable(video_key) from e

        if not raw:
            return None

        try:
            return VideoMetadataRecord.model_validate_json(raw)
        except PydanticValidationError as e:
            logger.warning(f"Corrupt metadata sidecar for {video_key}: {e.error_count()} errors")
            raise MetadataUnavailable(video_key, "Video metadata is unreadable") from e

    async def get_batch(self, video_keys: Iterable[str]) -> Dict[str, VideoMetadataRecord]:
        """
        Fetch many records concurrently.

        Keys without a record, and keys whose fetch failed, are absent from
        the result; one bad sidecar never fails the batch.
        """
        keys = list(dict.fromkeys(video_keys))
        if not keys:
            return {}

        results = await asyncio.gather(
            *(self.get(key) for key in keys), return_exceptions=True
        )

        records: Dict[str, VideoMetadataRecord] = {}
        failed = 0
        for key, result in zip(keys, results):
            if isinstance(result, MetadataUnavailable):
                failed += 1
                metrics.metadata_fetch_failures.inc()
                continue
            if isinstance(result, Exception):
                failed += 1
                metrics.metadata_fetch_failures.inc()
                logger.error(f"Unexpected error fetching metadata for {key}: {result!r}")
                continue
            if isinstance(result, BaseException):
                # Cancellation and interpreter exits are not per-key failures
                raise result
            if result is not None:
                records[key] = result

        if failed:
            logger.warning(f"Metadata batch: {failed}/{len(keys)} fetches failed, treated as absent")
        return records

    # ── Writes ───────────────────────────────────────────────────────────

    async def save(self, record: VideoMetadataRecord) -> None:
        body = json.dumps(record.model_dump(mode="json", by_alias=True), ensure_ascii=False, indent=2)
        await self._gateway.put_object(
            metadata_key(record.video_key), body.encode("utf-8"), "application/json"
        )
        logger.info(
            f"Saved metadata {metadata_key(record.video_key)} "
            f"(locales with title: {record.available_locales()})"
        )

    async def upsert(
        self,
        video_key: str,
        locale: str,
        title: str,
        description: str = "",
        cover_url: Optional[str] = None,
    ) -> VideoMetadataRecord:
        """
        Create or update one locale of a video's metadata.

        A new record gets an empty entry for every supported locale before
        ``locale`` is written. On an existing record only ``locale`` changes;
        a missing ``cover_url`` keeps the stored cover.
        """
        if locale not in SUPPORTED_LOCALES:
            raise ValueError(f"unsupported locale {locale!r}")

        async with self._lock_for(video_key):
            existing = await self.get(video_key)
            record = _merge(existing, video_key, locale, title, description, cover_url)
            await self.save(record)

        metrics.metadata_upserts.labels(locale=locale, created=str(existing is None).lower()).inc()
        return record

    async def set_cover(self, video_key: str, locale: str, cover_url: str) -> VideoMetadataRecord:
        """
        Point ``locale`` at a new cover, keeping its stored title and description.

        A video without a record gets one whose ``locale`` title is the video
        key. Read and write happen under the same per-key lock as ``upsert``.
        """
        if locale not in SUPPORTED_LOCALES:
            raise ValueError(f"unsupported locale {locale!r}")

        async with self._lock_for(video_key):
            existing = await self.get(video_key)
            if existing is not None:
                entry = existing.locales.get(locale) or LocaleEntry()
                title, description = entry.title, entry.description
            else:
                title, description = video_key, ""
            record = _merge(existing, video_key, locale, title, description, cover_url)
            await self.save(record)

        metrics.metadata_upserts.labels(locale=locale, created=str(existing is None).lower()).inc()
        return record


def _merge(
    existing: Optional[VideoMetadataRecord],
    video_key: str,
    locale: str,
    title: str,
    description: str,
    cover_url: Optional[str],
) -> VideoMetadataRecord:
    if existing is None:
        now = _next_timestamp()
        locales = _fill_locales({})
        locales[locale] = LocaleEntry(title=title, description=description, cover_url=cover_url)
        return VideoMetadataRecord(
            video_key=video_key, locales=locales, created_at=now, updated_at=now,
        )

    locales = _fill_locales(existing.locales)
    previous = locales[locale]
    locales[locale] = LocaleEntry(
        title=title,
        description=description,
        cover_url=cover_url or previous.cover_url,
    )
    return existing.model_copy(update={
        "locales": locales,
        "updated_at": _next_timestamp(existing.updated_at),
    })
