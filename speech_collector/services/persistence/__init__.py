"""Durable storage for the collection and preferences."""

from speech_collector.services.persistence.kv_store import FileKeyValueStore
from speech_collector.services.persistence.bridge import PersistenceBridge
from speech_collector.services.persistence.preferences import Theme, ThemePreferenceStore

__all__ = ["FileKeyValueStore", "PersistenceBridge", "Theme", "ThemePreferenceStore"]
