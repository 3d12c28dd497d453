"""Recording session controller.

Drives one chunk slot through record / stop / re-record / save:

    IDLE --record--> CAPTURING --stop--> CAPTURED --save--> IDLE
                         ^                   |
                         +----re-record------+

While capturing, a ticker reports elapsed whole seconds once per tick
interval for live feedback. The authoritative duration comes from the
finalized clip's metadata, not from the ticker.

The controller owns two resources: the capture handle and the ticker
task. Both are torn down on re-record, close(), and when the chunk
disappears from the store mid-capture.
"""

import asyncio
import contextlib
import logging
from typing import Callable, Optional

from speech_collector.lib.audio_validation import check_duration
from speech_collector.lib.config import RecordingConfig, get_recording_config
from speech_collector.lib.exceptions import (
    ChunkNotFoundError,
    DeviceUnavailable,
    InvalidRecorderState,
    InvalidTransitionError,
)
from speech_collector.models.chunk import Chunk, ChunkStatus, PlaybackReference
from speech_collector.models.recording import CaptureResult, RecorderState
from speech_collector.services.audio.capture import CaptureDevice, CaptureHandle
from speech_collector.services.audio.codec import probe_duration
from speech_collector.services.audio.playback import AudioPlayer, PlaybackToggle
from speech_collector.services.chunks.store import ChunkStore

logger = logging.getLogger(__name__)

TickCallback = Callable[[int], None]


class RecordingSessionController:
    """
    Per-chunk recording state machine.

    Example:
        controller = RecordingSessionController(chunk.id, store, device, player)
        await controller.record()
        ...
        result = controller.stop()
        if result.advisory:
            print(result.advisory)
        controller.save()
        await controller.close()
    """

    def __init__(
        self,
        chunk_id: str,
        store: ChunkStore,
        device: CaptureDevice,
        player: Optional[AudioPlayer] = None,
        config: Optional[RecordingConfig] = None,
        on_tick: Optional[TickCallback] = None,
    ):
        self.chunk_id = chunk_id
        self._store = store
        self._device = device
        self._config = config or get_recording_config()
        self._on_tick = on_tick
        self._playback = PlaybackToggle(player) if player is not None else None

        self.state = RecorderState.IDLE
        self.elapsed_seconds = 0
        self._handle: Optional[CaptureHandle] = None
        self._ticker: Optional[asyncio.Task] = None
        self._result: Optional[CaptureResult] = None
        self._closed = False
        self._unsubscribe = store.subscribe(self._on_store_change)

    @property
    def result(self) -> Optional[CaptureResult]:
        """Captured audio awaiting save, if any."""
        return self._result

    @property
    def is_playing(self) -> bool:
        return self._playback is not None and self._playback.is_playing

    async def record(self) -> None:
        """
        Start capturing (or re-recording).

        Any in-flight capture is discarded and any captured-but-unsaved
        audio is dropped before the device is reopened.

        Raises:
            DeviceUnavailable: Microphone could not be opened (state stays IDLE)
            ChunkNotFoundError: Chunk no longer exists
            InvalidTransitionError: Chunk already has a recording
        """
        if self._closed:
            raise InvalidRecorderState("record", "closed")
        chunk = self._require_unrecorded()

        self._teardown_capture()
        self._result = None
        if self._playback is not None:
            self._playback.load(None)
        self.state = RecorderState.IDLE

        try:
            handle = await self._device.open()
        except DeviceUnavailable as e:
            logger.warning(f"Cannot record chunk {chunk.id}: {e.message}")
            raise

        if self._closed or self._store.get(self.chunk_id) is None:
            # Torn down while the device was opening
            handle.close()
            raise InvalidRecorderState("record", "closed")

        self._handle = handle
        self.elapsed_seconds = 0
        self._ticker = asyncio.create_task(self._tick())
        self.state = RecorderState.CAPTURING
        logger.info(f"Recording chunk {chunk.id}")

    def stop(self) -> CaptureResult:
        """
        Finalize the capture and measure its duration.

        Returns:
            CaptureResult with clip, measured duration and advisory

        Raises:
            InvalidRecorderState: Not capturing
        """
        if self.state is not RecorderState.CAPTURING or self._handle is None:
            raise InvalidRecorderState("stop", self.state.value)

        self._cancel_ticker()
        handle, self._handle = self._handle, None
        try:
            clip = handle.stop()
        except Exception:
            self.state = RecorderState.IDLE
            raise

        duration = probe_duration(clip)
        check = check_duration(duration, self._config.min_seconds, self._config.max_seconds)
        if check.advisory is not None:
            logger.info(f"Chunk {self.chunk_id}: {check.message}")

        self._result = CaptureResult(
            clip=clip,
            duration_seconds=duration,
            advisory=check.advisory,
            message=check.message,
        )
        if self._playback is not None:
            self._playback.load(PlaybackReference.derive(clip))
        self.state = RecorderState.CAPTURED
        return self._result

    def save(self) -> Chunk:
        """
        Commit the captured audio to the store; the chunk becomes Recorded.

        The duration advisory never blocks saving.

        Raises:
            InvalidRecorderState: Nothing captured
            ChunkNotFoundError / InvalidTransitionError: From the store
        """
        if self.state is not RecorderState.CAPTURED or self._result is None:
            raise InvalidRecorderState("save", self.state.value)

        chunk = self._store.attach_recording(self.chunk_id, self._result.clip)
        if self._playback is not None:
            self._playback.load(None)
        self._result = None
        self.state = RecorderState.IDLE
        return chunk

    def toggle_playback(self) -> bool:
        """Play or pause the captured audio. Returns the new playing flag."""
        if self.state is not RecorderState.CAPTURED or self._playback is None:
            raise InvalidRecorderState("play", self.state.value)
        return self._playback.toggle()

    async def close(self) -> None:
        """Release every resource the controller holds. Idempotent."""
        if self._closed:
            return
        self._closed = True
        self._unsubscribe()
        ticker = self._ticker
        self._teardown_capture()
        if ticker is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await ticker
        if self._playback is not None:
            self._playback.load(None)
        self._result = None
        self.state = RecorderState.IDLE

    def _require_unrecorded(self) -> Chunk:
        chunk = self._store.get(self.chunk_id)
        if chunk is None:
            raise ChunkNotFoundError(self.chunk_id)
        if chunk.status is not ChunkStatus.UNRECORDED:
            raise InvalidTransitionError(chunk.id, chunk.status.value, ChunkStatus.RECORDED.value)
        return chunk

    def _teardown_capture(self) -> None:
        self._cancel_ticker()
        handle, self._handle = self._handle, None
        if handle is not None:
            handle.discard()
            logger.debug(f"Discarded in-flight capture for chunk {self.chunk_id}")
        if self.state is RecorderState.CAPTURING:
            self.state = RecorderState.IDLE

    def _cancel_ticker(self) -> None:
        ticker, self._ticker = self._ticker, None
        if ticker is not None and not ticker.done():
            ticker.cancel()

    async def _tick(self) -> None:
        while True:
            await asyncio.sleep(self._config.tick_seconds)
            self.elapsed_seconds += 1
            if self._on_tick is not None:
                self._on_tick(self.elapsed_seconds)

    def _on_store_change(self, store: ChunkStore) -> None:
        if store.get(self.chunk_id) is None and self.state is not RecorderState.IDLE:
            logger.info(f"Chunk {self.chunk_id} deleted during recording, releasing microphone")
            self._teardown_capture()
            if self._playback is not None:
                self._playback.load(None)
            self._result = None
            self.state = RecorderState.IDLE
