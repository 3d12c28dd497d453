"""Chunk store: the authoritative, ordered chunk collection.

The store is an explicitly owned object passed to every component that
needs it. It is the only place chunks are replaced; consumers receive
read-only tuples. Every mutation swaps one immutable Chunk for another
and then notifies observers, so no observer ever sees a chunk whose
status and audio disagree.
"""

import logging
from typing import Callable, Iterable, Optional

from speech_collector.lib.exceptions import ChunkNotFoundError, InvalidTransitionError
from speech_collector.models.chunk import AudioClip, Chunk, ChunkStatus, CollectionStats

logger = logging.getLogger(__name__)

StoreObserver = Callable[["ChunkStore"], None]


class ChunkStore:
    """
    Ordered chunk collection with lifecycle transition functions.

    Creation order is preserved and is the canonical export order.
    """

    def __init__(self, chunks: Iterable[Chunk] = ()):
        self._chunks: list[Chunk] = list(chunks)
        self._observers: list[StoreObserver] = []

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def chunks(self) -> tuple[Chunk, ...]:
        """All chunks in canonical order."""
        return tuple(self._chunks)

    def with_status(self, status: ChunkStatus) -> tuple[Chunk, ...]:
        return tuple(c for c in self._chunks if c.status is status)

    def unrecorded(self) -> tuple[Chunk, ...]:
        return self.with_status(ChunkStatus.UNRECORDED)

    def recorded(self) -> tuple[Chunk, ...]:
        """Chunks awaiting verification."""
        return self.with_status(ChunkStatus.RECORDED)

    def verified(self) -> tuple[Chunk, ...]:
        return self.with_status(ChunkStatus.VERIFIED)

    def get(self, chunk_id: str) -> Optional[Chunk]:
        for chunk in self._chunks:
            if chunk.id == chunk_id:
                return chunk
        return None

    def stats(self) -> CollectionStats:
        verified = sum(1 for c in self._chunks if c.status is ChunkStatus.VERIFIED)
        recorded = sum(1 for c in self._chunks if c.status.carries_audio)
        return CollectionStats(total=len(self._chunks), recorded=recorded, verified=verified)

    def __len__(self) -> int:
        return len(self._chunks)

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    def subscribe(self, observer: StoreObserver) -> Callable[[], None]:
        """Register an observer called after every mutation.

        Returns:
            Function that removes the observer
        """
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _notify(self) -> None:
        for observer in list(self._observers):
            observer(self)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_batch(self, sentences: Iterable[str]) -> tuple[Chunk, ...]:
        """
        Replace the entire collection with one Unrecorded chunk per sentence.

        Args:
            sentences: Sentences in reading order

        Returns:
            The new chunks
        """
        self._chunks = [Chunk.create(sentence) for sentence in sentences]
        logger.info(f"Created {len(self._chunks)} chunks")
        self._notify()
        return tuple(self._chunks)

    def replace_all(self, chunks: Iterable[Chunk]) -> None:
        """Install a complete collection (hydration)."""
        self._chunks = list(chunks)
        self._notify()

    def delete(self, chunk_id: str) -> bool:
        """
        Remove a chunk. Unknown ids are a silent no-op.

        Returns:
            True if a chunk was removed
        """
        remaining = [c for c in self._chunks if c.id != chunk_id]
        if len(remaining) == len(self._chunks):
            logger.debug(f"Delete ignored, chunk {chunk_id} not present")
            return False
        self._chunks = remaining
        logger.info(f"Deleted chunk {chunk_id}")
        self._notify()
        return True

    def attach_recording(self, chunk_id: str, clip: AudioClip) -> Chunk:
        """
        Attach a recording to an Unrecorded chunk, making it Recorded.

        Raises:
            ChunkNotFoundError: Unknown id
            InvalidTransitionError: Chunk is not Unrecorded
        """
        index, chunk = self._locate(chunk_id)
        updated = chunk.with_recording(clip)
        self._chunks[index] = updated
        logger.info(f"Recording saved for chunk {chunk_id} ({clip.size_bytes} bytes)")
        self._notify()
        return updated

    def verify(
        self,
        chunk_id: str,
        status: ChunkStatus,
        text: Optional[str] = None,
    ) -> Chunk:
        """
        Resolve review of a Recorded chunk.

        Verified approves, optionally replacing the text. Unrecorded
        rejects, clearing audio and playback; any text is ignored.

        Raises:
            ChunkNotFoundError: Unknown id
            InvalidTransitionError: Chunk is not Recorded, or status is
                not Verified/Unrecorded
        """
        index, chunk = self._locate(chunk_id)
        if status is ChunkStatus.VERIFIED:
            updated = chunk.approved(text)
            logger.info(f"Chunk {chunk_id} verified")
        elif status is ChunkStatus.UNRECORDED:
            updated = chunk.rejected()
            logger.info(f"Chunk {chunk_id} rejected, needs re-recording")
        else:
            raise InvalidTransitionError(chunk_id, chunk.status.value, status.value)
        self._chunks[index] = updated
        self._notify()
        return updated

    def _locate(self, chunk_id: str) -> tuple[int, Chunk]:
        for index, chunk in enumerate(self._chunks):
            if chunk.id == chunk_id:
                return index, chunk
        raise ChunkNotFoundError(chunk_id)
