"""
Reelbox Core Settings.

Everything is read from the environment (or a local ``.env``). Variable names
follow the deployment conventions of the site: ``R2_*`` for the object store,
``VAST_*`` / ``AD_PROVIDER`` / ``ADS_ENABLED`` for the player ads and
``ADMIN_PASSWORD`` for the admin panel.
"""
from __future__ import annotations

from functools import lru_cache
from typing import List, Literal, Optional
from urllib.parse import urlparse

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

AdProvider = Literal["exoclick", "adsterra", "both", "none"]


def is_valid_vast_url(url: str) -> bool:
    """VAST tags must be absolute http(s) URLs."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8",
        case_sensitive=False, extra="ignore",
    )

    # ── App ──────────────────────────────────────────────────────────────
    app_name: str = "Reelbox"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    api_prefix: str = "/api"
    cors_origins: List[str] = ["*"]

    # ── Cloudflare R2 (S3-compatible) ────────────────────────────────────
    r2_account_id: Optional[str] = None
    r2_access_key_id: Optional[str] = None
    r2_secret_access_key: Optional[str] = None
    r2_bucket: Optional[str] = None
    # Full endpoint URL, overrides the account-derived R2 endpoint (MinIO, S3)
    r2_endpoint: Optional[str] = None
    r2_region: str = "auto"
    public_cdn_base_url: Optional[str] = None

    # ── Presigned URLs (seconds) ─────────────────────────────────────────
    presign_default_ttl: int = 15 * 60
    presign_min_ttl: int = 60
    presign_max_ttl: int = 60 * 60

    # ── Listing ──────────────────────────────────────────────────────────
    list_default_max_keys: int = 100
    list_max_keys_limit: int = 1000

    # ── Ads ──────────────────────────────────────────────────────────────
    ads_enabled: bool = False
    ad_provider: AdProvider = "none"
    vast_exoclick_pre_roll: Optional[str] = None
    vast_exoclick_mid_roll: Optional[str] = None
    vast_exoclick_post_roll: Optional[str] = None
    vast_adsterra_pre_roll: Optional[str] = None
    vast_adsterra_mid_roll: Optional[str] = None
    vast_adsterra_post_roll: Optional[str] = None

    # ── Admin ────────────────────────────────────────────────────────────
    admin_password: Optional[str] = None
    admin_session_cookie: str = "admin_session"
    admin_session_max_age: int = 60 * 60 * 24 * 7
    admin_cookie_secure: bool = False

    @field_validator("r2_access_key_id")
    @classmethod
    def check_access_key(cls, value: Optional[str]) -> Optional[str]:
        if value and len(value) != 32:
            raise ValueError(
                "R2_ACCESS_KEY_ID must be exactly 32 characters "
                "(S3-compatible access key, not a Cloudflare API token)"
            )
        return value

    @field_validator(
        "vast_exoclick_pre_roll", "vast_exoclick_mid_roll", "vast_exoclick_post_roll",
        "vast_adsterra_pre_roll", "vast_adsterra_mid_roll", "vast_adsterra_post_roll",
    )
    @classmethod
    def check_vast_url(cls, value: Optional[str]) -> Optional[str]:
        if not value:
            return None
        if not is_valid_vast_url(value):
            raise ValueError(f"not a valid VAST URL: {value!r}")
        return value

    @property
    def r2_endpoint_url(self) -> Optional[str]:
        if self.r2_endpoint:
            return self.r2_endpoint
        if self.r2_account_id:
            return f"https://{self.r2_account_id}.r2.cloudflarestorage.com"
        return None

    def clamp_ttl(self, ttl: Optional[int]) -> int:
        if ttl is None:
            ttl = self.presign_default_ttl
        return max(self.presign_min_ttl, min(int(ttl), self.presign_max_ttl))


@lru_cache()
def get_settings() -> Settings:
    return Settings()
