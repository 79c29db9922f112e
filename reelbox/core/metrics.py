"""Prometheus counters for the catalog, metadata and interaction paths."""
from __future__ import annotations

from prometheus_client import Counter

videos_listed = Counter(
    "reelbox_videos_listed_total",
    "Videos returned by catalog listings",
    ["locale"],
)
upstream_failures = Counter(
    "reelbox_upstream_failures_total",
    "Object storage operations that failed",
    ["operation"],
)
metadata_fetch_failures = Counter(
    "reelbox_metadata_fetch_failures_total",
    "Metadata sidecar reads that failed and were treated as absent",
)
metadata_upserts = Counter(
    "reelbox_metadata_upserts_total",
    "Metadata upserts",
    ["locale", "created"],
)
like_toggles = Counter(
    "reelbox_like_toggles_total",
    "Like toggles",
    ["liked"],
)
comments_added = Counter(
    "reelbox_comments_added_total",
    "Comments added",
)
