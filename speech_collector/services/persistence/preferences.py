"""Persistent light/dark presentation preference."""

import logging
from enum import Enum
from typing import Optional

from speech_collector.lib.config import get_storage_config
from speech_collector.lib.exceptions import DecodeFailure, ValidationError
from speech_collector.services.persistence.kv_store import FileKeyValueStore

logger = logging.getLogger(__name__)


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


class ThemePreferenceStore:
    """Reads and writes the theme slot. Unreadable values fall back to light."""

    def __init__(self, kv: FileKeyValueStore, slot: Optional[str] = None):
        self._kv = kv
        self._slot = slot or get_storage_config().theme_slot

    def get(self) -> Theme:
        try:
            raw = self._kv.get(self._slot)
        except DecodeFailure:
            logger.warning("Theme preference unreadable, using light")
            return Theme.LIGHT
        try:
            return Theme(raw) if raw is not None else Theme.LIGHT
        except ValueError:
            logger.warning(f"Unknown theme {raw!r}, using light")
            return Theme.LIGHT

    def set(self, value: str) -> Theme:
        try:
            theme = Theme(value.lower())
        except ValueError as e:
            raise ValidationError(f"Theme must be 'light' or 'dark', got {value!r}", field="theme") from e
        self._kv.set(self._slot, theme.value)
        return theme
