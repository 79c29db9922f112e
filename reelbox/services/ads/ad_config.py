"""
Reelbox Ad Config: which VAST tag (if any) plays at each slot.

Providers: ``exoclick``, ``adsterra``, ``both`` (ExoClick first, Adsterra
fills the slots ExoClick leaves empty) or ``none``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

SLOTS = ("pre_roll", "mid_roll", "post_roll")
POSITION_TO_SLOT: Dict[str, str] = {
    "pre-roll": "pre_roll",
    "mid-roll": "mid_roll",
    "post-roll": "post_roll",
}


@dataclass(frozen=True)
class AdConfig:
    pre_roll: Optional[str] = None
    mid_roll: Optional[str] = None
    post_roll: Optional[str] = None

    def is_empty(self) -> bool:
        return not (self.pre_roll or self.mid_roll or self.post_roll)


def _provider_slots(env: Any, provider: str) -> Dict[str, Optional[str]]:
    return {
        slot: getattr(env, f"vast_{provider}_{slot}", None) or None
        for slot in SLOTS
    }


def resolve_ad_config(env: Any) -> Optional[AdConfig]:
    """``None`` when ads are off, no provider is selected, or every slot is empty."""
    if not getattr(env, "ads_enabled", False):
        return None

    provider = getattr(env, "ad_provider", None) or "none"
    if provider == "none":
        return None

    if provider == "both":
        exo = _provider_slots(env, "exoclick")
        adsterra = _provider_slots(env, "adsterra")
        slots = {slot: exo[slot] or adsterra[slot] for slot in SLOTS}
    elif provider in ("exoclick", "adsterra"):
        slots = _provider_slots(env, provider)
    else:
        return None

    config = AdConfig(**slots)
    return None if config.is_empty() else config


def has_ads(env: Any) -> bool:
    return resolve_ad_config(env) is not None


def slot_url(config: Optional[AdConfig], position: str) -> Optional[str]:
    """VAST URL for ``pre-roll`` / ``mid-roll`` / ``post-roll``."""
    if config is None:
        return None
    return getattr(config, POSITION_TO_SLOT[position])
