"""
Admin session handling.

A single shared password and an unsigned opaque session token kept in an
httpOnly cookie. Anything holding a well-formed token is treated as an admin.
"""
from __future__ import annotations

import hmac
import secrets
import time
from typing import Optional

from fastapi import Depends, Request, Response

from reelbox.core.config import Settings, get_settings
from reelbox.core.errors import Unauthorized


def verify_admin_password(password: str, settings: Settings) -> bool:
    # No configured password means nobody can log in
    if not settings.admin_password:
        return False
    return hmac.compare_digest(password.encode(), settings.admin_password.encode())


def create_admin_session() -> str:
    return f"{int(time.time() * 1000)}-{secrets.token_urlsafe(12)}"


def verify_admin_session(token: Optional[str]) -> bool:
    if not token:
        return False
    return "-" in token and len(token) > 10


def set_admin_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        settings.admin_session_cookie,
        token,
        max_age=settings.admin_session_max_age,
        httponly=True,
        secure=settings.admin_cookie_secure,
        samesite="lax",
    )


def clear_admin_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(settings.admin_session_cookie)


def get_admin_session(request: Request, settings: Settings = Depends(get_settings)) -> Optional[str]:
    return request.cookies.get(settings.admin_session_cookie)


def require_admin(session: Optional[str] = Depends(get_admin_session)) -> str:
    """FastAPI dependency guarding admin writes."""
    if not verify_admin_session(session):
        raise Unauthorized()
    return session
