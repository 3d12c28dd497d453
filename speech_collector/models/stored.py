"""Durable representation of the chunk collection.

These models describe the JSON document kept in the chunks slot. They
perform structural validation only; audio payloads stay encoded here
and are decoded chunk by chunk during hydration.
"""

from pydantic import BaseModel, Field, model_validator

from speech_collector.models.chunk import ChunkStatus

STORED_FORMAT_VERSION = 1


class StoredChunk(BaseModel):
    """One chunk as written to durable storage."""

    id: str = Field(..., min_length=1, description="Chunk identifier")
    text: str = Field(..., description="Sentence text")
    status: ChunkStatus = Field(..., description="Lifecycle status")
    audio: str | None = Field(default=None, description="Audio as a base64 data URL")
    audio_checksum: str | None = Field(default=None, description="sha256 of the decoded audio")

    model_config = {"extra": "ignore"}


class StoredCollection(BaseModel):
    """The whole chunk collection, in canonical order."""

    version: int = Field(default=STORED_FORMAT_VERSION, description="Document format version")
    chunks: list[StoredChunk] = Field(default_factory=list)

    model_config = {"extra": "ignore"}

    @model_validator(mode="after")
    def ids_unique(self) -> "StoredCollection":
        """Reject documents that repeat a chunk id."""
        seen: set[str] = set()
        for chunk in self.chunks:
            if chunk.id in seen:
                raise ValueError(f"Duplicate chunk id: {chunk.id}")
            seen.add(chunk.id)
        return self
