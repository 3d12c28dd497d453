"""Shared pytest fixtures for all test types."""

from pathlib import Path
from typing import Callable, Optional

import numpy as np
import pytest

from speech_collector.lib.config import RecordingConfig, reset_all_configs
from speech_collector.lib.exceptions import DecodeFailure, DeviceUnavailable, PlaybackRefused
from speech_collector.models.chunk import AudioClip, PlaybackReference
from speech_collector.services.audio.capture import CaptureDevice, CaptureHandle
from speech_collector.services.audio.codec import write_wav
from speech_collector.services.audio.playback import AudioPlayer
from speech_collector.services.chunks.store import ChunkStore
from speech_collector.services.persistence.kv_store import FileKeyValueStore

SAMPLE_RATE = 16000


def make_clip(seconds: float, sample_rate: int = SAMPLE_RATE) -> AudioClip:
    """Build a real 16-bit PCM WAV clip holding a tone of the given length."""
    frames = int(seconds * sample_rate)
    t = np.arange(frames) / sample_rate
    samples = (np.sin(2 * np.pi * 440 * t) * 8000).astype(np.int16).reshape(-1, 1)
    return write_wav(samples, sample_rate)


class FakeCaptureHandle(CaptureHandle):
    """Capture handle pre-filled with a fixed amount of audio."""

    def __init__(self, seconds: float, sample_rate: int = SAMPLE_RATE, channels: int = 1):
        super().__init__(sample_rate, channels)
        self.halt_calls = 0
        self.release_calls = 0
        frames = int(seconds * sample_rate)
        if frames:
            self.append_fragment(np.full((frames, channels), 1000, dtype=np.int16))

    def _halt(self) -> None:
        self.halt_calls += 1

    def _release(self) -> None:
        self.release_calls += 1


class FakeCaptureDevice(CaptureDevice):
    """Capture device that never touches hardware."""

    def __init__(self, seconds: float = 17.0, fail: bool = False):
        self.seconds = seconds
        self.fail = fail
        self.handles: list[FakeCaptureHandle] = []

    async def open(self) -> CaptureHandle:
        if self.fail:
            raise DeviceUnavailable("Permission denied", device="fake")
        handle = FakeCaptureHandle(self.seconds)
        self.handles.append(handle)
        return handle


class FakePlayer(AudioPlayer):
    """Player that records calls instead of producing sound."""

    def __init__(self, refuse: bool = False, undecodable: bool = False):
        self.refuse = refuse
        self.undecodable = undecodable
        self.calls: list[tuple[str, Optional[PlaybackReference]]] = []
        self._on_finished: Optional[Callable[[], None]] = None

    def play(self, reference: PlaybackReference, on_finished: Callable[[], None]) -> None:
        if self.refuse:
            raise PlaybackRefused("Playback blocked")
        if self.undecodable:
            raise DecodeFailure("Unreadable audio container: Format not recognised")
        self.calls.append(("play", reference))
        self._on_finished = on_finished

    def pause(self) -> None:
        self.calls.append(("pause", None))

    def stop(self) -> None:
        self.calls.append(("stop", None))

    def finish(self) -> None:
        """Simulate the clip playing to its end."""
        if self._on_finished is not None:
            self._on_finished()

    @property
    def played(self) -> list[PlaybackReference]:
        return [ref for name, ref in self.calls if name == "play"]


@pytest.fixture(autouse=True)
def fresh_configs():
    """Rebuild configuration from the environment for every test."""
    reset_all_configs()
    yield
    reset_all_configs()


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Temporary durable storage directory."""
    path = tmp_path / "collector_data"
    path.mkdir()
    return path


@pytest.fixture
def kv(data_dir: Path) -> FileKeyValueStore:
    return FileKeyValueStore(data_dir)


@pytest.fixture
def store() -> ChunkStore:
    return ChunkStore()


@pytest.fixture
def clip() -> AudioClip:
    """A valid 17 second recording."""
    return make_clip(17.0)


@pytest.fixture
def recorded_store(store: ChunkStore) -> ChunkStore:
    """Store with three Recorded chunks."""
    chunks = store.create_batch(["First sentence.", "Second sentence.", "Third sentence."])
    for chunk in chunks:
        store.attach_recording(chunk.id, make_clip(1.0))
    return store


@pytest.fixture
def recording_config() -> RecordingConfig:
    """Recording window 15-20s with a fast ticker."""
    return RecordingConfig(min_seconds=15.0, max_seconds=20.0, tick_seconds=0.01)


@pytest.fixture
def device() -> FakeCaptureDevice:
    return FakeCaptureDevice()


@pytest.fixture
def player() -> FakePlayer:
    return FakePlayer()


@pytest.fixture
def clip_factory() -> Callable[..., AudioClip]:
    """Build WAV clips of arbitrary length."""
    return make_clip


@pytest.fixture
def device_factory() -> type[FakeCaptureDevice]:
    return FakeCaptureDevice


@pytest.fixture
def player_factory() -> type[FakePlayer]:
    return FakePlayer
