"""Microphone capture adapter.

Wraps the host's input device behind a small contract:

    handle = await device.open()      # DeviceUnavailable on failure
    ...                               # backend appends raw fragments
    clip = handle.stop()              # finalize into one WAV clip
    handle.close()                    # release channel (idempotent)

The hardware channel is released exactly once on every path: stop(),
discard(), close(), context-manager exit, or a failed open.
"""

import asyncio
import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Optional

import numpy as np

from speech_collector.lib.config import RecordingConfig, get_recording_config
from speech_collector.lib.exceptions import DeviceUnavailable
from speech_collector.models.chunk import AudioClip
from speech_collector.services.audio.codec import write_wav

logger = logging.getLogger(__name__)


class CaptureHandle(ABC):
    """An open capture session.

    Collects fragments until stop() finalizes them. stop() is
    idempotent and returns the same clip object on every call.
    """

    def __init__(self, sample_rate: int, channels: int) -> None:
        self.sample_rate = sample_rate
        self.channels = channels
        self.started_at = time.monotonic()
        self._fragments: list[np.ndarray] = []
        self._lock = threading.Lock()
        self._clip: Optional[AudioClip] = None
        self._released = False

    @property
    def is_open(self) -> bool:
        """Whether the hardware channel is still held."""
        return not self._released

    @property
    def is_finalized(self) -> bool:
        return self._clip is not None

    @property
    def fragment_count(self) -> int:
        with self._lock:
            return len(self._fragments)

    @property
    def elapsed_seconds(self) -> float:
        """Wall-clock time since the handle opened (coarse)."""
        return time.monotonic() - self.started_at

    def append_fragment(self, block: np.ndarray) -> None:
        """Store a copy of one raw block. Ignored once finalized or released."""
        with self._lock:
            if self._clip is not None or self._released:
                return
            self._fragments.append(np.array(block, dtype=np.int16, copy=True))

    def stop(self) -> AudioClip:
        """Finalize fragments into one clip and release the channel."""
        if self._clip is not None:
            return self._clip
        try:
            if not self._released:
                self._halt()
            self._clip = write_wav(self._drain(), self.sample_rate)
        finally:
            self.close()
        logger.debug(f"Capture finalized: {self._clip.size_bytes} bytes")
        return self._clip

    def discard(self) -> None:
        """Drop in-flight fragments and release the channel."""
        with self._lock:
            self._fragments.clear()
        self.close()

    def close(self) -> None:
        """Release the hardware channel. Safe to call any number of times."""
        if self._released:
            return
        self._released = True
        try:
            self._release()
        finally:
            logger.debug("Capture channel released")

    def _drain(self) -> np.ndarray:
        with self._lock:
            fragments, self._fragments = self._fragments, []
        if not fragments:
            return np.zeros((0, self.channels), dtype=np.int16)
        return np.concatenate(fragments, axis=0)

    @abstractmethod
    def _halt(self) -> None:
        """Stop the backend from delivering more fragments."""
        pass

    @abstractmethod
    def _release(self) -> None:
        """Free the backend resource. Called exactly once."""
        pass

    def __enter__(self) -> "CaptureHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    async def __aenter__(self) -> "CaptureHandle":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()


class CaptureDevice(ABC):
    """Source of capture handles."""

    @abstractmethod
    async def open(self) -> CaptureHandle:
        """Open the input channel.

        Raises:
            DeviceUnavailable: Permission denied or no hardware
        """
        pass


class SoundDeviceCaptureHandle(CaptureHandle):
    """Capture handle backed by a sounddevice InputStream."""

    def __init__(self, sample_rate: int, channels: int) -> None:
        super().__init__(sample_rate, channels)
        self._stream: Any = None

    def attach(self, stream: Any) -> None:
        self._stream = stream

    def on_block(self, indata: np.ndarray, frames: int, time_info: Any, status: Any) -> None:
        """sounddevice callback; runs on the audio thread."""
        if status:
            logger.debug(f"Input stream status: {status}")
        self.append_fragment(indata)

    def _halt(self) -> None:
        if self._stream is not None and self._stream.active:
            self._stream.stop()

    def _release(self) -> None:
        if self._stream is None:
            return
        stream, self._stream = self._stream, None
        try:
            if stream.active:
                stream.stop()
        finally:
            stream.close()


def load_sounddevice():
    """Import sounddevice, mapping a missing PortAudio library to DeviceUnavailable."""
    try:
        import sounddevice as sd
    except OSError as e:
        raise DeviceUnavailable("Audio backend (PortAudio) is not available", original_error=e) from e
    return sd


def _close_abandoned(opening: "asyncio.Future[CaptureHandle]") -> None:
    if opening.cancelled() or opening.exception() is not None:
        return
    opening.result().close()
    logger.debug("Closed microphone opened after the caller gave up")


class SoundDeviceCapture(CaptureDevice):
    """Microphone capture through sounddevice (PortAudio)."""

    def __init__(self, config: Optional[RecordingConfig] = None) -> None:
        self._config = config or get_recording_config()

    async def open(self) -> CaptureHandle:
        opening = asyncio.ensure_future(asyncio.to_thread(self._open_blocking))
        try:
            return await asyncio.shield(opening)
        except asyncio.CancelledError:
            # The worker thread keeps going; release whatever it opens
            opening.add_done_callback(_close_abandoned)
            raise

    def _open_blocking(self) -> CaptureHandle:
        sd = load_sounddevice()
        device = self._config.device_id
        handle = SoundDeviceCaptureHandle(self._config.sample_rate, self._config.channels)
        stream = None
        try:
            stream = sd.InputStream(
                samplerate=self._config.sample_rate,
                channels=self._config.channels,
                dtype="int16",
                device=device,
                callback=handle.on_block,
            )
            stream.start()
        except (sd.PortAudioError, ValueError) as e:
            if stream is not None:
                stream.close()
            logger.warning(f"Microphone unavailable: {e}")
            raise DeviceUnavailable(
                f"Could not open microphone: {e}", device=device, original_error=e
            ) from e
        handle.attach(stream)
        logger.debug(f"Capture opened on device {device if device is not None else 'default'}")
        return handle
