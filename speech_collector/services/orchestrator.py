"""Collection orchestrator.

Wires the durable store, the chunk store, the persistence bridge and
the export collaborator together in the required order:

1. Hydrate the chunk store from the durable record
2. Attach debounced persistence
3. Serve operator actions (ingest, delete, record, verify, export)
4. Flush pending writes on shutdown
"""

import logging
from pathlib import Path
from typing import Optional

from speech_collector.lib.config import StorageConfig, get_storage_config
from speech_collector.lib.exceptions import ChunkNotFoundError, ValidationError
from speech_collector.models.chunk import Chunk, ChunkStatus, CollectionStats
from speech_collector.services.audio.capture import CaptureDevice
from speech_collector.services.audio.playback import AudioPlayer
from speech_collector.services.chunks.store import ChunkStore
from speech_collector.services.export.dataset import DatasetExporter, ExportMode
from speech_collector.services.persistence.bridge import PersistenceBridge
from speech_collector.services.persistence.kv_store import FileKeyValueStore
from speech_collector.services.persistence.preferences import Theme, ThemePreferenceStore
from speech_collector.services.recording.controller import RecordingSessionController, TickCallback
from speech_collector.services.text.segmenter import segment_text
from speech_collector.services.verification.cycler import VerificationCycler

logger = logging.getLogger(__name__)


class CollectionOrchestrator:
    """
    Owns one collection for the lifetime of a CLI invocation.

    Example:
        with CollectionOrchestrator() as collection:
            collection.ingest("First sentence. Second one!")
            print(collection.stats())
    """

    def __init__(
        self,
        config: Optional[StorageConfig] = None,
        debounce_seconds: Optional[float] = None,
    ):
        self._config = config or get_storage_config()
        self.kv = FileKeyValueStore(self._config.data_path)
        self.store = ChunkStore()
        self.bridge = PersistenceBridge(
            self.store,
            self.kv,
            slot=self._config.chunks_slot,
            debounce_seconds=debounce_seconds,
        )
        self.preferences = ThemePreferenceStore(self.kv, slot=self._config.theme_slot)
        self._started = False

    def start(self) -> int:
        """
        Hydrate, then begin persisting changes.

        Returns:
            Number of chunks loaded from disk
        """
        if self._started:
            return len(self.store)
        count = self.bridge.hydrate()
        self.bridge.attach()
        self._started = True
        return count

    def shutdown(self) -> None:
        """Flush any pending write."""
        if self._started:
            self.bridge.close()
            self._started = False

    def __enter__(self) -> "CollectionOrchestrator":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    # ------------------------------------------------------------------
    # Text ingestion
    # ------------------------------------------------------------------

    def ingest(self, raw_text: str) -> tuple[Chunk, ...]:
        """
        Segment text and replace the collection with one chunk per sentence.

        Raises:
            ValidationError: If no sentence survives cleaning
        """
        if not raw_text or not raw_text.strip():
            raise ValidationError("Please enter some text to process", field="content")
        sentences = segment_text(raw_text)
        if not sentences:
            raise ValidationError("No sentences found in the input text", field="content")
        return self.store.create_batch(sentences)

    # ------------------------------------------------------------------
    # Queries and simple mutations
    # ------------------------------------------------------------------

    def list_chunks(self, status: Optional[ChunkStatus] = None) -> tuple[Chunk, ...]:
        if status is None:
            return self.store.chunks()
        return self.store.with_status(status)

    def get_chunk(self, chunk_id: str) -> Chunk:
        chunk = self.store.get(chunk_id)
        if chunk is None:
            raise ChunkNotFoundError(chunk_id)
        return chunk

    def delete(self, chunk_id: str) -> bool:
        return self.store.delete(chunk_id)

    def stats(self) -> CollectionStats:
        return self.store.stats()

    # ------------------------------------------------------------------
    # Recording and verification
    # ------------------------------------------------------------------

    def recorder_for(
        self,
        chunk_id: str,
        device: CaptureDevice,
        player: Optional[AudioPlayer] = None,
        on_tick: Optional[TickCallback] = None,
    ) -> RecordingSessionController:
        return RecordingSessionController(chunk_id, self.store, device, player=player, on_tick=on_tick)

    def verifier(self, player: Optional[AudioPlayer] = None) -> VerificationCycler:
        return VerificationCycler(self.store, player=player)

    # ------------------------------------------------------------------
    # Export and preferences
    # ------------------------------------------------------------------

    def export(self, mode: ExportMode | str, output_dir: Optional[Path] = None) -> list[Path]:
        """
        Export the Verified chunks.

        Raises:
            EmptySetError: Nothing to export
            ArchiveFailure: Archive could not be written
        """
        exporter = DatasetExporter(output_dir or self._config.export_path)
        return exporter.export(self.store.chunks(), mode)

    def theme(self) -> Theme:
        return self.preferences.get()

    def set_theme(self, value: str) -> Theme:
        theme = self.preferences.set(value)
        logger.info(f"Theme set to {theme.value}")
        return theme
