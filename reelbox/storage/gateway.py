"""
Reelbox Object Store Gateway: boto3 adapter for R2 / S3 / MinIO.

The only module that talks to the object store. boto3 is synchronous, so
every call is moved to a worker thread with ``asyncio.to_thread``; the
client itself is thread-safe and shared across requests.

List responses are accepted in exactly one shape (``ListObjectsV2``).
Anything else raises ``GatewayResponseError`` instead of being guessed at.
"""
from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from reelbox.core import metrics
from reelbox.core.config import Settings, get_settings
from reelbox.core.errors import (
    GatewayResponseError,
    ObjectNotFound,
    StorageNotConfigured,
    UpstreamUnavailable,
)

logger = logging.getLogger(__name__)

_MISSING_CODES = {"NoSuchKey", "NotFound", "404"}


class PresignDirection(str, Enum):
    GET = "get"
    PUT = "put"


@dataclass(frozen=True)
class VideoObject:
    key: str
    size: int
    last_modified: datetime


@dataclass
class ListPage:
    entries: List[VideoObject] = field(default_factory=list)
    is_truncated: bool = False
    next_token: Optional[str] = None


def parse_list_response(response: Any) -> ListPage:
    """Convert a ``ListObjectsV2`` response into a ``ListPage``."""
    if not isinstance(response, dict):
        raise GatewayResponseError("list", f"expected a mapping, got {type(response).__name__}")

    is_truncated = response.get("IsTruncated", False)
    if not isinstance(is_truncated, bool):
        raise GatewayResponseError("list", "IsTruncated is not a boolean")

    # S3 omits Contents entirely for an empty page
    contents = response.get("Contents", [])
    if not isinstance(contents, list):
        raise GatewayResponseError("list", "Contents is not a list")

    entries: List[VideoObject] = []
    for item in contents:
        if not isinstance(item, dict):
            raise GatewayResponseError("list", "Contents entry is not a mapping")
        key = item.get("Key")
        size = item.get("Size")
        last_modified = item.get("LastModified")
        if not isinstance(key, str) or not key:
            raise GatewayResponseError("list", "Contents entry without a Key")
        if not isinstance(size, int) or isinstance(size, bool):
            raise GatewayResponseError("list", f"entry {key!r} has no integer Size")
        if not isinstance(last_modified, datetime):
            raise GatewayResponseError("list", f"entry {key!r} has no LastModified")
        entries.append(VideoObject(key=key, size=size, last_modified=last_modified))

    next_token = response.get("NextContinuationToken")
    if next_token is not None and not isinstance(next_token, str):
        raise GatewayResponseError("list", "NextContinuationToken is not a string")

    return ListPage(entries=entries, is_truncated=is_truncated, next_token=next_token)


class ObjectStoreGateway:
    """Async facade over a single bucket."""

    def __init__(self, settings: Settings, client: Any = None):
        self._settings = settings
        self._client = client
        self._client_lock = threading.Lock()

    # ── Client ───────────────────────────────────────────────────────────

    @property
    def bucket(self) -> str:
        if not self._settings.r2_bucket:
            raise StorageNotConfigured("R2_BUCKET")
        return self._settings.r2_bucket

    def _get_client(self):
        if self._client is not None:
            return self._client
        with self._client_lock:
            if self._client is None:
                s = self._settings
                endpoint_url = s.r2_endpoint_url
                if not endpoint_url:
                    raise StorageNotConfigured("R2_ACCOUNT_ID or R2_ENDPOINT")
                if not (s.r2_access_key_id and s.r2_secret_access_key):
                    raise StorageNotConfigured("R2_ACCESS_KEY_ID/R2_SECRET_ACCESS_KEY")
                self._client = boto3.client(
                    "s3",
                    aws_access_key_id=s.r2_access_key_id,
                    aws_secret_access_key=s.r2_secret_access_key,
                    region_name=s.r2_region,
                    endpoint_url=endpoint_url,
                    config=Config(s3={"addressing_style": "path"}),
                )
        return self._client

    async def _call(self, operation: str, fn, *args, missing_key: Optional[str] = None, **kwargs):
        try:
            return await asyncio.to_thread(fn, *args, **kwargs)
        except ClientError as e:
            code = str(e.response.get("Error", {}).get("Code", ""))
            if missing_key is not None and code in _MISSING_CODES:
                raise ObjectNotFound(missing_key) from e
            metrics.upstream_failures.labels(operation=operation).inc()
            logger.error(f"Object store {operation} failed: {code} {e}")
            raise UpstreamUnavailable(operation=operation) from e
        except BotoCoreError as e:
            metrics.upstream_failures.labels(operation=operation).inc()
            logger.error(f"Object store {operation} unreachable: {e}")
            raise UpstreamUnavailable(operation=operation) from e

    # ── Operations ───────────────────────────────────────────────────────

    async def list_objects(
        self,
        prefix: Optional[str] = None,
        max_keys: int = 100,
        continuation_token: Optional[str] = None,
    ) -> ListPage:
        params: Dict[str, Any] = {"Bucket": self.bucket, "MaxKeys": max_keys}
        if prefix:
            params["Prefix"] = prefix
        if continuation_token:
            params["ContinuationToken"] = continuation_token

        client = self._get_client()
        response = await self._call("list", client.list_objects_v2, **params)
        try:
            return parse_list_response(response)
        except GatewayResponseError as e:
            metrics.upstream_failures.labels(operation="list").inc()
            logger.error(f"Unexpected list response shape: {e.reason}")
            raise

    async def get_object(self, key: str) -> bytes:
        client = self._get_client()
        bucket = self.bucket

        def _read() -> bytes:
            response = client.get_object(Bucket=bucket, Key=key)
            return response["Body"].read()

        return await self._call("get", _read, missing_key=key)

    async def put_object(self, key: str, body: bytes, content_type: str) -> None:
        client = self._get_client()
        await self._call(
            "put", client.put_object,
            Bucket=self.bucket, Key=key, Body=body, ContentType=content_type,
        )

    async def delete_object(self, key: str) -> None:
        client = self._get_client()
        await self._call("delete", client.delete_object, Bucket=self.bucket, Key=key)

    async def presign(
        self,
        key: str,
        ttl: Optional[int] = None,
        direction: PresignDirection = PresignDirection.GET,
        content_type: Optional[str] = None,
    ) -> str:
        """Time-limited URL for one object; ``ttl`` is clamped to the configured range."""
        expires = self._settings.clamp_ttl(ttl)
        params: Dict[str, Any] = {"Bucket": self.bucket, "Key": key}
        if direction == PresignDirection.PUT:
            method = "put_object"
            if content_type:
                params["ContentType"] = content_type
        else:
            method = "get_object"

        client = self._get_client()
        return await self._call(
            "presign", client.generate_presigned_url,
            method, Params=params, ExpiresIn=expires,
        )


def build_gateway(settings: Optional[Settings] = None) -> ObjectStoreGateway:
    return ObjectStoreGateway(settings or get_settings())
