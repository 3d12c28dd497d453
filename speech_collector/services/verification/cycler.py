"""Keyboard-driven verification cycle.

The cycler keeps one active index into the Recorded view of the store
(chunks awaiting review). Key presses act on the active item only:

    toggle key   play / pause the active recording
    approve key  commit Verified with the edited text, move to next
    reject key   commit Unrecorded (audio cleared), move to next

"Next" is the item that followed the resolved one before it left the
view; at the end of the view focus stays on the last item. Whenever
the view shrinks under the active index, the index is clamped to the
last valid position, or 0 for an empty view.
"""

import logging
from enum import Enum
from typing import Optional

from speech_collector.lib.config import VerificationConfig, get_verification_config
from speech_collector.lib.exceptions import DecodeFailure, DeviceUnavailable
from speech_collector.models.chunk import Chunk, ChunkStatus
from speech_collector.services.audio.playback import AudioPlayer, PlaybackToggle
from speech_collector.services.chunks.store import ChunkStore

logger = logging.getLogger(__name__)

SPACE_KEYS = (" ", "space")


class KeyAction(str, Enum):
    """Actions reachable from the keyboard during verification."""

    TOGGLE_PLAYBACK = "TOGGLE_PLAYBACK"
    APPROVE = "APPROVE"
    REJECT = "REJECT"


class VerificationCycler:
    """
    Active-item tracking and key dispatch over recorded chunks.

    Example:
        cycler = VerificationCycler(store, player)
        cycler.set_active(0)          # autoplays the first recording
        cycler.edit_text(0, "Fixed transcription.")
        cycler.handle_key(0, "a")     # approve, focus moves on
    """

    def __init__(
        self,
        store: ChunkStore,
        player: Optional[AudioPlayer] = None,
        config: Optional[VerificationConfig] = None,
    ):
        self._store = store
        self._config = config or get_verification_config()
        self._playback = PlaybackToggle(player) if player is not None else None
        self._drafts: dict[str, str] = {}
        self._active_id: Optional[str] = None
        self.active_index = 0

        self._bindings: dict[str, KeyAction] = {key: KeyAction.TOGGLE_PLAYBACK for key in SPACE_KEYS}
        self._bindings[self._config.key_toggle.lower()] = KeyAction.TOGGLE_PLAYBACK
        self._bindings[self._config.key_approve.lower()] = KeyAction.APPROVE
        self._bindings[self._config.key_reject.lower()] = KeyAction.REJECT

        self._unsubscribe = store.subscribe(self._on_store_change)

    # ------------------------------------------------------------------
    # View and focus
    # ------------------------------------------------------------------

    def view(self) -> tuple[Chunk, ...]:
        """Recorded-but-unverified chunks in store order."""
        return self._store.recorded()

    @property
    def active(self) -> Optional[Chunk]:
        view = self.view()
        if not view:
            return None
        return view[self.active_index]

    @property
    def is_playing(self) -> bool:
        return self._playback is not None and self._playback.is_playing

    def set_active(self, index: int) -> None:
        """Focus an item explicitly (clamped into the view)."""
        self.active_index = index
        self.clamp()

    def cycle_next(self) -> None:
        """Advance focus by one. Stops at the last item; never wraps."""
        self.active_index += 1
        self.clamp()

    def clamp(self) -> None:
        """Pull the active index back inside the current view."""
        size = len(self.view())
        if size == 0:
            self.active_index = 0
        elif self.active_index > size - 1:
            self.active_index = size - 1
        elif self.active_index < 0:
            self.active_index = 0
        self._activate()

    # ------------------------------------------------------------------
    # Drafts
    # ------------------------------------------------------------------

    def draft_text(self, index: int) -> str:
        """Text that approval would commit for the item at index."""
        chunk = self.view()[index]
        return self._drafts.get(chunk.id, chunk.text)

    def edit_text(self, index: int, text: str) -> None:
        """Record a transcription correction for the item at index."""
        chunk = self.view()[index]
        self._drafts[chunk.id] = text

    # ------------------------------------------------------------------
    # Keyboard dispatch
    # ------------------------------------------------------------------

    def handle_key(self, index: int, key: str) -> Optional[KeyAction]:
        """
        Dispatch a key press coming from the item at index.

        Returns:
            The action performed, or None if the key was ignored
            (unbound key, non-active item, or empty view)
        """
        if index != self.active_index or self.active is None:
            return None
        action = self._bindings.get(key if key in SPACE_KEYS else key.lower())
        if action is None:
            return None

        if action is KeyAction.TOGGLE_PLAYBACK:
            self.toggle_playback()
        elif action is KeyAction.APPROVE:
            self.approve()
        else:
            self.reject()
        return action

    def toggle_playback(self) -> bool:
        """Play or pause the active recording. Returns the new playing flag."""
        if self._playback is None or self.active is None:
            return False
        return self._playback.toggle()

    def approve(self) -> Chunk:
        """Commit the active item as Verified with its edited text, then move on."""
        chunk = self._require_active()
        text = self._drafts.pop(chunk.id, None)
        return self._resolve(chunk, ChunkStatus.VERIFIED, text)

    def reject(self) -> Chunk:
        """Send the active item back for re-recording, then move on."""
        chunk = self._require_active()
        self._drafts.pop(chunk.id, None)
        return self._resolve(chunk, ChunkStatus.UNRECORDED, None)

    def close(self) -> None:
        """Stop playback and stop observing the store."""
        self._unsubscribe()
        if self._playback is not None:
            self._playback.load(None)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_active(self) -> Chunk:
        chunk = self.active
        if chunk is None:
            raise IndexError("No recording awaiting verification")
        return chunk

    def _resolve(self, chunk: Chunk, status: ChunkStatus, text: Optional[str]) -> Chunk:
        view = self.view()
        position = self.active_index
        following = view[position + 1].id if position + 1 < len(view) else None

        updated = self._store.verify(chunk.id, status, text)

        remaining = [c.id for c in self.view()]
        if following is not None and following in remaining:
            self.set_active(remaining.index(following))
        else:
            self.cycle_next()
        return updated

    def _activate(self) -> None:
        chunk = self.active
        if chunk is None:
            self._active_id = None
            if self._playback is not None:
                self._playback.load(None)
            return
        if chunk.id == self._active_id:
            return

        self._active_id = chunk.id
        if self._playback is None:
            return
        self._playback.load(chunk.playback)
        if not self._config.autoplay:
            return
        try:
            self._playback.start()
        except (DeviceUnavailable, DecodeFailure) as e:
            logger.warning(f"Autoplay refused for chunk {chunk.id}: {e.message}")

    def _on_store_change(self, store: ChunkStore) -> None:
        self.clamp()
