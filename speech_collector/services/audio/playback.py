"""Audio playback for review.

AudioPlayer renders a PlaybackReference on the output device.
PlaybackToggle holds the playing/paused flag the operator sees and
drops back to paused when the clip reaches its end.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

import numpy as np

from speech_collector.lib.exceptions import DeviceUnavailable, PlaybackRefused
from speech_collector.models.chunk import PlaybackReference
from speech_collector.services.audio.capture import load_sounddevice
from speech_collector.services.audio.codec import read_samples

logger = logging.getLogger(__name__)


class AudioPlayer(ABC):
    """Output device abstraction."""

    @abstractmethod
    def play(self, reference: PlaybackReference, on_finished: Callable[[], None]) -> None:
        """Start or resume playback of reference.

        on_finished is invoked when the clip plays through to the end.

        Raises:
            PlaybackRefused: The player declined to start
            DeviceUnavailable: No output device
        """
        pass

    @abstractmethod
    def pause(self) -> None:
        """Pause, keeping the position."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop and forget the current reference."""
        pass


class SoundDevicePlayer(AudioPlayer):
    """Player backed by a sounddevice OutputStream with pause/resume."""

    def __init__(self, device: str | int | None = None) -> None:
        self._device = device
        self._reference: Optional[PlaybackReference] = None
        self._samples: Optional[np.ndarray] = None
        self._sample_rate = 0
        self._position = 0
        self._stream: Any = None
        self._on_finished: Optional[Callable[[], None]] = None
        self._lock = threading.Lock()
        self._sd: Any = None

    def play(self, reference: PlaybackReference, on_finished: Callable[[], None]) -> None:
        sd = self._sd = load_sounddevice()
        if reference is not self._reference:
            self.stop()
            samples, sample_rate = read_samples(reference.clip)
            if samples.ndim == 1:
                samples = samples.reshape(-1, 1)
            self._reference = reference
            self._samples = samples
            self._sample_rate = sample_rate
            self._position = 0
        elif self._stream is not None:
            if self._stream.active:
                return
            # Played through to the end; start over on a fresh stream
            self._close_stream()

        self._on_finished = on_finished
        stream = None
        try:
            stream = sd.OutputStream(
                samplerate=self._sample_rate,
                channels=self._samples.shape[1],
                dtype="int16",
                device=self._device,
                callback=self._fill,
                finished_callback=self._stream_finished,
            )
            stream.start()
        except sd.PortAudioError as e:
            if stream is not None:
                stream.close()
            raise PlaybackRefused(f"Playback refused: {e}", device=self._device, original_error=e) from e
        except ValueError as e:
            if stream is not None:
                stream.close()
            raise DeviceUnavailable(f"No output device: {e}", device=self._device, original_error=e) from e
        self._stream = stream

    def pause(self) -> None:
        self._close_stream()

    def stop(self) -> None:
        self._close_stream()
        self._reference = None
        self._samples = None
        self._position = 0

    def _fill(self, outdata: np.ndarray, frames: int, time_info: Any, status: Any) -> None:
        with self._lock:
            start = self._position
            block = self._samples[start : start + frames]
            self._position = start + len(block)
        outdata[: len(block)] = block
        outdata[len(block) :] = 0
        if len(block) < frames:
            raise self._sd.CallbackStop

    def _stream_finished(self) -> None:
        with self._lock:
            reached_end = self._samples is not None and self._position >= len(self._samples)
            if reached_end:
                self._position = 0
        if reached_end and self._on_finished is not None:
            self._on_finished()

    def _close_stream(self) -> None:
        stream, self._stream = self._stream, None
        if stream is None:
            return
        try:
            stream.stop()
        finally:
            stream.close()


class PlaybackToggle:
    """Playing/paused flag for one reference.

    Example:
        toggle = PlaybackToggle(player)
        toggle.load(chunk.playback)
        toggle.toggle()   # playing
        toggle.toggle()   # paused
    """

    def __init__(self, player: AudioPlayer) -> None:
        self._player = player
        self.reference: Optional[PlaybackReference] = None
        self.is_playing = False

    def load(self, reference: Optional[PlaybackReference]) -> None:
        """Point at a new reference; a different one resets to paused."""
        if reference is self.reference:
            return
        self.reset()
        self.reference = reference

    def toggle(self) -> bool:
        """Switch between playing and paused. Returns the new playing flag."""
        if self.reference is None:
            return False
        if self.is_playing:
            self._player.pause()
            self.is_playing = False
        else:
            self._player.play(self.reference, self._ended)
            self.is_playing = True
        return self.is_playing

    def start(self) -> bool:
        """Begin playing if paused."""
        if self.is_playing:
            return True
        return self.toggle()

    def reset(self) -> None:
        """Stop playback and return to paused."""
        if self.reference is not None:
            self._player.stop()
        self.is_playing = False

    def _ended(self) -> None:
        self.is_playing = False
        logger.debug("Playback reached end")
