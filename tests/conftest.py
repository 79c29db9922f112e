"""Pytest configuration and shared fixtures for Reelbox tests."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Optional, Set, Tuple

import pytest
from httpx import ASGITransport, AsyncClient

from reelbox.api import deps
from reelbox.core.config import Settings, get_settings
from reelbox.core.errors import ObjectNotFound, UpstreamUnavailable
from reelbox.services.catalog.video_aggregator import VideoAggregator
from reelbox.services.interactions.interaction_service import InteractionService
from reelbox.services.interactions.repositories import (
    InMemoryCommentRepository,
    InMemoryLikeRepository,
)
from reelbox.services.metadata.metadata_store import MetadataStore
from reelbox.storage.gateway import ListPage, PresignDirection, VideoObject

FIXED_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class InMemoryObjectStore:
    """Object store double with the same async surface as ``ObjectStoreGateway``."""

    def __init__(self):
        self.objects: Dict[str, Tuple[bytes, str]] = {}
        self.fail_list = False
        self.fail_get_keys: Set[str] = set()
        self.list_calls = []
        self.is_truncated = False
        self.next_token: Optional[str] = None

    def add(self, key: str, body: bytes = b"\x00" * 16, content_type: str = "video/mp4"):
        self.objects[key] = (body, content_type)

    async def list_objects(self, prefix=None, max_keys=100, continuation_token=None) -> ListPage:
        self.list_calls.append((prefix, max_keys, continuation_token))
        if self.fail_list:
            raise UpstreamUnavailable(operation="list")
        keys = sorted(k for k in self.objects if not prefix or k.startswith(prefix))
        entries = [
            VideoObject(key=k, size=len(self.objects[k][0]), last_modified=FIXED_TIME)
            for k in keys[:max_keys]
        ]
        return ListPage(entries=entries, is_truncated=self.is_truncated, next_token=self.next_token)

    async def get_object(self, key: str) -> bytes:
        if key in self.fail_get_keys:
            raise UpstreamUnavailable(operation="get")
        if key not in self.objects:
            raise ObjectNotFound(key)
        return self.objects[key][0]

    async def put_object(self, key: str, body: bytes, content_type: str) -> None:
        self.objects[key] = (body, content_type)

    async def delete_object(self, key: str) -> None:
        self.objects.pop(key, None)

    async def presign(self, key, ttl=None, direction=PresignDirection.GET, content_type=None) -> str:
        return f"https://signed.example/{direction.value}/{key}?ttl={ttl}"


@pytest.fixture
def settings():
    return Settings(
        r2_bucket="test-bucket",
        admin_password="letmein",
        ads_enabled=False,
        _env_file=None,
    )


@pytest.fixture
def object_store():
    return InMemoryObjectStore()


@pytest.fixture
def metadata_store(object_store):
    return MetadataStore(object_store)


@pytest.fixture
def aggregator(object_store, metadata_store):
    return VideoAggregator(object_store, metadata_store)


@pytest.fixture
def interactions():
    return InteractionService(InMemoryLikeRepository(), InMemoryCommentRepository())


@pytest.fixture
async def client(settings, object_store, metadata_store, interactions):
    from reelbox.main import app

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[deps.get_gateway] = lambda: object_store
    app.dependency_overrides[deps.get_metadata_store] = lambda: metadata_store
    app.dependency_overrides[deps.get_interaction_service] = lambda: interactions

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def admin_client(client):
    response = await client.post("/api/admin/login", json={"password": "letmein"})
    assert response.status_code == 200
    return client
