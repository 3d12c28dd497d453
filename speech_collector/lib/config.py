"""Configuration management via environment variables and pydantic-settings."""

from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings


class StorageConfig(BaseSettings):
    """Configuration for durable storage and export locations."""

    data_dir: str = Field(
        default="./collector_data",
        alias="COLLECTOR_DATA_DIR",
        description="Directory holding the durable key-value slots",
    )

    chunks_slot: str = Field(
        default="chunks",
        alias="COLLECTOR_CHUNKS_SLOT",
        description="Slot name for the serialized chunk collection",
    )

    theme_slot: str = Field(
        default="theme",
        alias="COLLECTOR_THEME_SLOT",
        description="Slot name for the light/dark presentation preference",
    )

    export_dir: str = Field(
        default="./exports",
        alias="COLLECTOR_EXPORT_DIR",
        description="Default directory for metadata tables and archives",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }

    @property
    def data_path(self) -> Path:
        """Get data directory as Path."""
        return Path(self.data_dir)

    @property
    def export_path(self) -> Path:
        """Get export directory as Path."""
        return Path(self.export_dir)


class RecordingConfig(BaseSettings):
    """Configuration for microphone capture and the duration window."""

    min_seconds: float = Field(
        default=15.0,
        alias="RECORDING_MIN_SECONDS",
        description="Shortest recording that raises no advisory (inclusive)",
    )

    max_seconds: float = Field(
        default=20.0,
        alias="RECORDING_MAX_SECONDS",
        description="Longest recording that raises no advisory (inclusive)",
    )

    sample_rate: int = Field(
        default=16000,
        alias="RECORDING_SAMPLE_RATE",
        description="Capture sample rate in Hz",
    )

    channels: int = Field(
        default=1,
        alias="RECORDING_CHANNELS",
        description="Number of capture channels",
    )

    device: str | None = Field(
        default=None,
        alias="RECORDING_DEVICE",
        description="sounddevice input device name or index (None = system default)",
    )

    tick_seconds: float = Field(
        default=1.0,
        alias="RECORDING_TICK_SECONDS",
        description="Interval of the live elapsed-time counter",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }

    @model_validator(mode="after")
    def check_window(self) -> "RecordingConfig":
        """Validate that the target window is well formed."""
        if self.min_seconds > self.max_seconds:
            raise ValueError(
                f"RECORDING_MIN_SECONDS ({self.min_seconds}) must not exceed "
                f"RECORDING_MAX_SECONDS ({self.max_seconds})"
            )
        return self

    @property
    def device_id(self) -> str | int | None:
        """Device as sounddevice expects it: numeric strings become indexes."""
        if self.device is None or self.device == "":
            return None
        if self.device.isdigit():
            return int(self.device)
        return self.device


class PersistenceConfig(BaseSettings):
    """Configuration for debounced persistence."""

    debounce_seconds: float = Field(
        default=0.5,
        alias="PERSIST_DEBOUNCE_SECONDS",
        description="Quiet period before a burst of edits is written",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }


class VerificationConfig(BaseSettings):
    """Keyboard bindings for the verification cycle."""

    key_toggle: str = Field(
        default="p",
        alias="VERIFY_KEY_TOGGLE",
        description="Key that toggles playback of the active item",
    )

    key_approve: str = Field(
        default="a",
        alias="VERIFY_KEY_APPROVE",
        description="Key that approves the active item",
    )

    key_reject: str = Field(
        default="r",
        alias="VERIFY_KEY_REJECT",
        description="Key that rejects the active item",
    )

    autoplay: bool = Field(
        default=True,
        alias="VERIFY_AUTOPLAY",
        description="Start playback when an item becomes active",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }


# Config instances (lazy loaded)
_storage_config: StorageConfig | None = None
_recording_config: RecordingConfig | None = None
_persistence_config: PersistenceConfig | None = None
_verification_config: VerificationConfig | None = None


def get_storage_config() -> StorageConfig:
    """Get the storage configuration instance."""
    global _storage_config
    if _storage_config is None:
        _storage_config = StorageConfig()
    return _storage_config


def get_recording_config() -> RecordingConfig:
    """Get the recording configuration instance."""
    global _recording_config
    if _recording_config is None:
        _recording_config = RecordingConfig()
    return _recording_config


def get_persistence_config() -> PersistenceConfig:
    """Get the persistence configuration instance."""
    global _persistence_config
    if _persistence_config is None:
        _persistence_config = PersistenceConfig()
    return _persistence_config


def get_verification_config() -> VerificationConfig:
    """Get the verification configuration instance."""
    global _verification_config
    if _verification_config is None:
        _verification_config = VerificationConfig()
    return _verification_config


def reset_all_configs() -> None:
    """Reset all configuration instances (useful for testing)."""
    global _storage_config, _recording_config, _persistence_config, _verification_config
    _storage_config = None
    _recording_config = None
    _persistence_config = None
    _verification_config = None
