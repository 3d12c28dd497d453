"""Chunk models for the speech dataset collector.

A chunk is one sentence plus its recording status and optional audio
payload. Chunks are immutable: every lifecycle step returns a new
instance, and the constructor rejects any combination of status and
audio that breaks the lifecycle rules.

State transitions:
    Unrecorded → Recorded (attach recording)
    Recorded → Verified (approve, optional text correction)
    Recorded → Unrecorded (reject, audio cleared)
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional
from uuid import uuid4

from speech_collector.lib.exceptions import InvalidTransitionError
from speech_collector.lib.timestamps import generate_chunk_id

WAV_MIME_TYPE = "audio/wav"


class ChunkStatus(str, Enum):
    """
    Chunk lifecycle states.

    Values are the persisted spelling.
    """

    UNRECORDED = "Unrecorded"  # Waiting for a recording
    RECORDED = "Recorded"  # Audio attached, awaiting review
    VERIFIED = "Verified"  # Approved, part of the export set

    @property
    def carries_audio(self) -> bool:
        """Whether chunks in this state must hold an audio payload."""
        return self is not ChunkStatus.UNRECORDED


@dataclass(frozen=True)
class AudioClip:
    """
    Finalized binary audio payload.

    Attributes:
        data: Complete audio file bytes (WAV container for captured audio)
        mime_type: Media type of the payload
    """

    data: bytes
    mime_type: str = WAV_MIME_TYPE

    @property
    def size_bytes(self) -> int:
        return len(self.data)


@dataclass(frozen=True, eq=False)
class PlaybackReference:
    """
    Ephemeral, process-local handle used by players.

    Derived from an AudioClip and never persisted. Each derivation gets
    a fresh token, so a handle from a replaced clip never matches the
    current one.
    """

    clip: AudioClip
    token: str = field(default_factory=lambda: uuid4().hex)

    @classmethod
    def derive(cls, clip: AudioClip) -> "PlaybackReference":
        return cls(clip=clip)


@dataclass(frozen=True)
class Chunk:
    """
    One unit of recording work.

    Attributes:
        id: Unique identifier, stable for the chunk's lifetime
        text: Sentence to be read aloud
        status: Current lifecycle state
        audio: Attached recording (present iff status is Recorded/Verified)
        playback: Handle derived from audio (present iff audio is present)
    """

    id: str
    text: str
    status: ChunkStatus = ChunkStatus.UNRECORDED
    audio: Optional[AudioClip] = None
    playback: Optional[PlaybackReference] = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.status.carries_audio != (self.audio is not None):
            raise ValueError(
                f"Chunk '{self.id}': status {self.status.value} "
                f"{'requires' if self.status.carries_audio else 'forbids'} audio"
            )
        if (self.playback is None) != (self.audio is None):
            raise ValueError(f"Chunk '{self.id}': playback must accompany audio")
        if self.playback is not None and self.playback.clip is not self.audio:
            raise ValueError(f"Chunk '{self.id}': playback derived from a different clip")

    @classmethod
    def create(cls, text: str) -> "Chunk":
        """Create a fresh Unrecorded chunk with a new id."""
        return cls(id=generate_chunk_id(), text=text)

    def with_recording(self, clip: AudioClip) -> "Chunk":
        """Unrecorded → Recorded, attaching clip and a fresh playback handle."""
        self._require(ChunkStatus.UNRECORDED, ChunkStatus.RECORDED)
        return replace(
            self,
            status=ChunkStatus.RECORDED,
            audio=clip,
            playback=PlaybackReference.derive(clip),
        )

    def approved(self, text: Optional[str] = None) -> "Chunk":
        """Recorded → Verified, optionally correcting the text."""
        self._require(ChunkStatus.RECORDED, ChunkStatus.VERIFIED)
        new_text = self.text
        if text is not None and text.strip():
            new_text = text.strip()
        return replace(self, status=ChunkStatus.VERIFIED, text=new_text)

    def rejected(self) -> "Chunk":
        """Recorded → Unrecorded, clearing audio and playback together."""
        self._require(ChunkStatus.RECORDED, ChunkStatus.UNRECORDED)
        return self.without_audio()

    def without_audio(self) -> "Chunk":
        """Drop any payload; the chunk returns to Unrecorded."""
        return replace(self, status=ChunkStatus.UNRECORDED, audio=None, playback=None)

    def _require(self, expected: ChunkStatus, requested: ChunkStatus) -> None:
        if self.status is not expected:
            raise InvalidTransitionError(self.id, self.status.value, requested.value)


@dataclass(frozen=True)
class CollectionStats:
    """Progress counters shown to the operator."""

    total: int = 0
    recorded: int = 0  # Recorded + Verified
    verified: int = 0
