"""
Reelbox error taxonomy.

Every error raised on purpose by the services derives from ``ReelboxError``.
The HTTP layer turns them into ``{"error", "message", "details"}`` payloads
using ``status_code`` and ``code``; ``message`` is always safe to show.
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class ReelboxError(Exception):
    """Base exception for all Reelbox errors."""

    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(ReelboxError):
    """Malformed query or body. Names the offending field."""

    status_code = 400
    code = "validation_error"

    def __init__(self, field: str, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.field = field
        super().__init__(message, details or {"fields": {field: message}})


class Unauthorized(ReelboxError):
    status_code = 401
    code = "unauthorized"

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class NotFound(ReelboxError):
    """Expected absence (never-edited metadata, missing object)."""

    status_code = 404
    code = "not_found"


class ObjectNotFound(NotFound):
    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Object '{key}' not found")


class UpstreamUnavailable(ReelboxError):
    """The object store could not be reached or answered with an error."""

    status_code = 502
    code = "upstream_unavailable"

    def __init__(self, message: str = "Object storage is unavailable", operation: Optional[str] = None) -> None:
        self.operation = operation
        super().__init__(message, {"operation": operation} if operation else None)


class StorageNotConfigured(UpstreamUnavailable):
    code = "storage_not_configured"

    def __init__(self, missing: str) -> None:
        self.missing = missing
        super().__init__(f"Object storage is not configured ({missing} missing)")


class GatewayResponseError(UpstreamUnavailable):
    """The object store answered with a response shape we do not understand."""

    code = "upstream_bad_response"

    def __init__(self, operation: str, reason: str) -> None:
        self.reason = reason
        super().__init__("Object storage returned an unexpected response", operation=operation)


class MetadataUnavailable(ReelboxError):
    """Metadata could not be loaded. Listings degrade instead of failing."""

    status_code = 503
    code = "metadata_unavailable"

    def __init__(self, video_key: Optional[str] = None, message: str = "Video metadata is unavailable") -> None:
        self.video_key = video_key
        super().__init__(message, {"videoKey": video_key} if video_key else None)
