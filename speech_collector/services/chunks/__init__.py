"""Chunk collection store."""

from speech_collector.services.chunks.store import ChunkStore

__all__ = ["ChunkStore"]
