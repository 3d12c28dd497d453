"""Persistence bridge between the chunk store and durable storage.

Two independent protocols:

* Hydrate-on-start: the chunks slot is read once, before anything else
  reads the store. A missing slot means an empty collection. A slot
  that fails to parse or validate is discarded as a whole. An audio
  payload that fails to decode costs only that chunk its audio.

* Debounced persist-on-change: every store mutation (re)schedules one
  write after a quiet period on the running event loop (trailing
  edge). flush() writes a pending change immediately; close() flushes
  and stops observing.
"""

import asyncio
import logging
from typing import Callable, Optional

from pydantic import ValidationError as SchemaError

from speech_collector.lib.config import get_persistence_config, get_storage_config
from speech_collector.lib.exceptions import DecodeFailure, EncodeFailure, PersistenceError
from speech_collector.models.chunk import Chunk, PlaybackReference
from speech_collector.models.stored import StoredChunk, StoredCollection
from speech_collector.services.audio.codec import decode_audio, encode_audio, probe_duration
from speech_collector.services.chunks.store import ChunkStore
from speech_collector.services.persistence.kv_store import FileKeyValueStore

logger = logging.getLogger(__name__)


class PersistenceBridge:
    """
    Keeps the chunks slot in step with a ChunkStore.

    Usage:
        bridge = PersistenceBridge(store, kv)
        bridge.hydrate()   # exactly once, before any reader
        bridge.attach()    # start debounced persistence
        ...
        bridge.close()     # flush pending write on shutdown
    """

    def __init__(
        self,
        store: ChunkStore,
        kv: FileKeyValueStore,
        slot: Optional[str] = None,
        debounce_seconds: Optional[float] = None,
    ):
        self._store = store
        self._kv = kv
        self._slot = slot or get_storage_config().chunks_slot
        self._debounce = (
            debounce_seconds
            if debounce_seconds is not None
            else get_persistence_config().debounce_seconds
        )
        self._pending: Optional[asyncio.TimerHandle] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._hydrated = False
        self.write_count = 0

    @property
    def has_pending_write(self) -> bool:
        return self._pending is not None

    # ------------------------------------------------------------------
    # Hydration
    # ------------------------------------------------------------------

    def hydrate(self) -> int:
        """
        Load the durable record into the store.

        Never raises for unreadable data: a corrupt record is deleted
        and the store is left empty.

        Returns:
            Number of chunks hydrated

        Raises:
            PersistenceError: If called twice or after attach()
        """
        if self._hydrated or self._unsubscribe is not None:
            raise PersistenceError("Hydration must run once, before persistence is attached")
        self._hydrated = True

        try:
            raw = self._kv.get(self._slot)
        except DecodeFailure as e:
            logger.warning(f"Discarding unreadable chunk record: {e.message}")
            self._kv.delete(self._slot)
            return 0

        if raw is None:
            logger.info("No saved chunks, starting empty")
            return 0

        try:
            document = StoredCollection.model_validate(raw)
        except SchemaError as e:
            logger.warning(f"Discarding malformed chunk record ({e.error_count()} errors)")
            self._kv.delete(self._slot)
            return 0

        chunks = [self._restore(stored) for stored in document.chunks]
        self._store.replace_all(chunks)
        logger.info(f"Hydrated {len(chunks)} chunks")
        return len(chunks)

    def _restore(self, stored: StoredChunk) -> Chunk:
        unrecorded = Chunk(id=stored.id, text=stored.text)

        if not stored.status.carries_audio:
            return unrecorded

        if stored.audio is None:
            logger.warning(f"Chunk {stored.id} was {stored.status.value} but has no audio, reset to Unrecorded")
            return unrecorded

        try:
            clip = decode_audio(stored.audio, stored.audio_checksum)
        except DecodeFailure as e:
            logger.warning(f"Audio for chunk {stored.id} could not be decoded ({e.message}), reset to Unrecorded")
            return unrecorded

        if probe_duration(clip) is None:
            logger.warning(f"Audio for chunk {stored.id} is not a readable WAV, reset to Unrecorded")
            return unrecorded

        return Chunk(
            id=stored.id,
            text=stored.text,
            status=stored.status,
            audio=clip,
            playback=PlaybackReference.derive(clip),
        )

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def attach(self) -> None:
        """Start persisting on every store change."""
        if self._unsubscribe is None:
            self._unsubscribe = self._store.subscribe(self._on_change)

    def _on_change(self, store: ChunkStore) -> None:
        self.schedule()

    def schedule(self) -> None:
        """
        (Re)start the quiet period.

        Without a running event loop the write happens immediately.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.write_now()
            return

        if self._pending is not None:
            self._pending.cancel()
        self._pending = loop.call_later(self._debounce, self._fire)
        logger.debug(f"Persist scheduled in {self._debounce}s")

    def _fire(self) -> None:
        self._pending = None
        try:
            self.write_now()
        except PersistenceError as e:
            logger.error(f"Failed to persist chunks: {e.message}")

    def flush(self) -> bool:
        """
        Write a pending change synchronously.

        Returns:
            True if a pending write was flushed
        """
        if self._pending is None:
            return False
        self._pending.cancel()
        self._pending = None
        self.write_now()
        return True

    def close(self) -> None:
        """Flush any pending write and stop observing the store."""
        try:
            self.flush()
        finally:
            if self._unsubscribe is not None:
                self._unsubscribe()
                self._unsubscribe = None

    def serialize(self) -> Optional[dict]:
        """
        Build the durable document for the current collection.

        Returns:
            JSON-ready dict, or None when the collection is empty
        """
        chunks = self._store.chunks()
        if not chunks:
            return None
        document = StoredCollection(chunks=[self._dehydrate(chunk) for chunk in chunks])
        return document.model_dump(mode="json")

    def write_now(self) -> None:
        """
        Serialize and write the whole collection.

        Raises:
            PersistenceError: If the slot cannot be written
        """
        document = self.serialize()
        if document is None:
            self._kv.delete(self._slot)
            logger.debug("Collection empty, chunk record removed")
        else:
            self._kv.set(self._slot, document)
            logger.debug(f"Persisted {len(document['chunks'])} chunks")
        self.write_count += 1

    def _dehydrate(self, chunk: Chunk) -> StoredChunk:
        audio: Optional[str] = None
        checksum: Optional[str] = None
        if chunk.audio is not None:
            try:
                audio, checksum = encode_audio(chunk.audio)
            except EncodeFailure as e:
                logger.warning(f"Saving chunk {chunk.id} without audio: {e.message}")
        return StoredChunk(
            id=chunk.id,
            text=chunk.text,
            status=chunk.status,
            audio=audio,
            audio_checksum=checksum,
        )
