"""Shared utilities and configuration."""

from speech_collector.lib.config import (
    PersistenceConfig,
    RecordingConfig,
    StorageConfig,
    VerificationConfig,
    reset_all_configs,
)
from speech_collector.lib.timestamps import generate_chunk_id, generate_timestamp
from speech_collector.lib.exceptions import (
    CollectorError,
    ConfigError,
    ValidationError,
    DeviceUnavailable,
    PersistenceError,
)

__all__ = [
    "PersistenceConfig",
    "RecordingConfig",
    "StorageConfig",
    "VerificationConfig",
    "reset_all_configs",
    "generate_chunk_id",
    "generate_timestamp",
    "CollectorError",
    "ConfigError",
    "ValidationError",
    "DeviceUnavailable",
    "PersistenceError",
]
