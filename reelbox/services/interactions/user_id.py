"""Pseudo-user identity for likes and comments: client IP + truncated User-Agent."""
from __future__ import annotations

import re
from typing import Mapping

_UNSAFE = re.compile(r"[^a-zA-Z0-9-]")
USER_AGENT_PREFIX = 20


def derive_user_id(headers: Mapping[str, str], client_host: str | None = None) -> str:
    """
    Not an authentication mechanism: anyone can spoof both inputs. It only
    scopes likes to a visitor well enough for a public counter.
    """
    forwarded = headers.get("x-forwarded-for")
    ip = (forwarded.split(",")[0].strip() if forwarded else "") or headers.get("x-real-ip") or client_host or "unknown"
    user_agent = headers.get("user-agent") or "unknown"
    return _UNSAFE.sub("-", f"{ip}-{user_agent[:USER_AGENT_PREFIX]}")
