"""
Supported catalog locales.

Declaration order matters: when a listing is not scoped to a locale, the
first locale in this order with a non-empty title provides the display
fields.
"""
from __future__ import annotations

from typing import Optional, Tuple

SUPPORTED_LOCALES: Tuple[str, ...] = ("zh", "en", "es", "ko", "ja", "fr", "ar")
DEFAULT_LOCALE = "en"


def is_supported_locale(locale: Optional[str]) -> bool:
    return locale in SUPPORTED_LOCALES
