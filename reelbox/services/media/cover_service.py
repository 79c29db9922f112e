"""
Reelbox Cover Service: stores per-locale cover images uploaded from the admin
panel and points the locale's metadata at them.

Covers live at ``covers/<videoKey>-<locale>.<ext>``; the stored ``coverUrl`` is
that object key, which the player resolves through a presigned URL.
"""
from __future__ import annotations

import base64
import binascii
import logging
import re
from typing import Tuple

from reelbox.core.errors import ValidationError
from reelbox.services.metadata.metadata_store import MetadataStore
from reelbox.storage.gateway import ObjectStoreGateway

logger = logging.getLogger(__name__)

_DATA_URL_PREFIX = re.compile(r"^data:image/\w+;base64,")


def cover_extension(content_type: str) -> str:
    if "png" in content_type:
        return "png"
    if "webp" in content_type:
        return "webp"
    return "jpg"


def cover_key(video_key: str, locale: str, content_type: str) -> str:
    return f"covers/{video_key}-{locale}.{cover_extension(content_type)}"


def decode_cover_data(cover_data: str) -> bytes:
    payload = _DATA_URL_PREFIX.sub("", cover_data.strip())
    try:
        image = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError("coverData", "coverData is not valid base64") from e
    if not image:
        raise ValidationError("coverData", "coverData is empty")
    return image


class CoverService:

    def __init__(self, gateway: ObjectStoreGateway, metadata_store: MetadataStore):
        self._gateway = gateway
        self._metadata = metadata_store

    async def upload_cover(
        self, video_key: str, locale: str, cover_data: str, content_type: str = "image/jpeg"
    ) -> Tuple[str, str]:
        """Store the image and record it on ``locale``. Returns ``(cover_url, cover_key)``."""
        image = decode_cover_data(cover_data)
        key = cover_key(video_key, locale, content_type)

        await self._gateway.put_object(key, image, content_type)
        logger.info(f"Uploaded cover {key} ({len(image)} bytes)")

        await self._metadata.set_cover(video_key, locale, key)
        return key, key
