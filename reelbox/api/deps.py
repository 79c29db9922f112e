"""
FastAPI dependency providers.

Long-lived collaborators (object store client, metadata lock registry,
interaction repositories) are built once per process; request-scoped
services are cheap wrappers around them. Tests swap any of these through
``app.dependency_overrides``.
"""
from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, Request

from reelbox.services.catalog.video_aggregator import VideoAggregator
from reelbox.services.interactions.interaction_service import InteractionService
from reelbox.services.interactions.repositories import (
    InMemoryCommentRepository,
    InMemoryLikeRepository,
)
from reelbox.services.interactions.user_id import derive_user_id
from reelbox.services.media.cover_service import CoverService
from reelbox.services.metadata.metadata_store import MetadataStore
from reelbox.storage.gateway import ObjectStoreGateway, build_gateway


@lru_cache()
def get_gateway() -> ObjectStoreGateway:
    return build_gateway()


@lru_cache()
def get_metadata_store() -> MetadataStore:
    return MetadataStore(get_gateway())


@lru_cache()
def get_interaction_service() -> InteractionService:
    return InteractionService(InMemoryLikeRepository(), InMemoryCommentRepository())


def get_video_aggregator(
    gateway: ObjectStoreGateway = Depends(get_gateway),
    metadata_store: MetadataStore = Depends(get_metadata_store),
) -> VideoAggregator:
    return VideoAggregator(gateway, metadata_store)


def get_cover_service(
    gateway: ObjectStoreGateway = Depends(get_gateway),
    metadata_store: MetadataStore = Depends(get_metadata_store),
) -> CoverService:
    return CoverService(gateway, metadata_store)


def get_user_id(request: Request) -> str:
    client_host = request.client.host if request.client else None
    return derive_user_id(request.headers, client_host)
