"""Domain models for the speech dataset collector."""

from speech_collector.models.chunk import (
    AudioClip,
    Chunk,
    ChunkStatus,
    CollectionStats,
    PlaybackReference,
)
from speech_collector.models.recording import CaptureResult, DurationAdvisory, RecorderState
from speech_collector.models.stored import StoredChunk, StoredCollection

__all__ = [
    "AudioClip",
    "Chunk",
    "ChunkStatus",
    "CollectionStats",
    "PlaybackReference",
    "CaptureResult",
    "DurationAdvisory",
    "RecorderState",
    "StoredChunk",
    "StoredCollection",
]
