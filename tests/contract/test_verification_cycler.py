"""Contract tests for the keyboard-driven verification cycle."""

import pytest

from speech_collector.lib.config import VerificationConfig
from speech_collector.models.chunk import AudioClip, ChunkStatus
from speech_collector.services.chunks.store import ChunkStore
from speech_collector.services.verification.cycler import KeyAction, VerificationCycler


@pytest.fixture
def config() -> VerificationConfig:
    return VerificationConfig(key_toggle="p", key_approve="a", key_reject="r", autoplay=True)


@pytest.fixture
def cycler(recorded_store, player, config):
    cycler = VerificationCycler(recorded_store, player=player, config=config)
    yield cycler
    cycler.close()


class TestActiveIndex:
    """The active index always points inside the Recorded view."""

    def test_starts_at_zero(self, cycler):
        assert cycler.active_index == 0

    def test_cycle_next_clamps_at_last_item(self, cycler):
        for _ in range(10):
            cycler.cycle_next()

        assert cycler.active_index == 2

    def test_set_active_clamps(self, cycler):
        cycler.set_active(99)
        assert cycler.active_index == 2

        cycler.set_active(-4)
        assert cycler.active_index == 0

    def test_empty_view_resets_to_zero(self, store, player, config):
        cycler = VerificationCycler(store, player=player, config=config)

        cycler.cycle_next()

        assert cycler.active_index == 0
        assert cycler.active is None
        cycler.close()

    def test_shrinking_view_clamps(self, cycler, recorded_store):
        cycler.set_active(2)
        last = cycler.active

        recorded_store.delete(last.id)

        assert cycler.active_index == 1

    def test_view_emptied_externally(self, cycler, recorded_store):
        cycler.set_active(1)
        for chunk in recorded_store.recorded():
            recorded_store.delete(chunk.id)

        assert cycler.active_index == 0
        assert cycler.active is None


class TestKeyDispatch:
    def test_approve_commits_and_moves_on(self, cycler, recorded_store):
        first, second, _ = recorded_store.recorded()

        action = cycler.handle_key(0, "a")

        assert action is KeyAction.APPROVE
        assert recorded_store.get(first.id).status is ChunkStatus.VERIFIED
        assert cycler.active.id == second.id

    def test_reject_clears_audio_and_moves_on(self, cycler, recorded_store):
        first, second, _ = recorded_store.recorded()

        action = cycler.handle_key(0, "R")

        rejected = recorded_store.get(first.id)
        assert action is KeyAction.REJECT
        assert rejected.status is ChunkStatus.UNRECORDED
        assert rejected.audio is None
        assert rejected.playback is None
        assert cycler.active.id == second.id

    def test_resolving_last_item_keeps_focus_on_new_last(self, cycler, recorded_store):
        _, second, third = recorded_store.recorded()
        cycler.set_active(2)

        cycler.handle_key(2, "a")

        assert recorded_store.get(third.id).status is ChunkStatus.VERIFIED
        assert cycler.active.id == second.id
        assert cycler.active_index == 1

    def test_edited_text_committed_on_approve(self, cycler, recorded_store):
        first = recorded_store.recorded()[0]

        cycler.edit_text(0, "  Corrected sentence.  ")
        assert cycler.draft_text(0) == "  Corrected sentence.  "
        cycler.handle_key(0, "a")

        assert recorded_store.get(first.id).text == "Corrected sentence."

    def test_blank_edit_keeps_original_text(self, cycler, recorded_store):
        first = recorded_store.recorded()[0]

        cycler.edit_text(0, "   ")
        cycler.approve()

        assert recorded_store.get(first.id).text == first.text

    def test_keys_on_inactive_item_ignored(self, cycler, recorded_store):
        second = recorded_store.recorded()[1]

        assert cycler.handle_key(1, "a") is None
        assert recorded_store.get(second.id).status is ChunkStatus.RECORDED

    def test_unbound_key_ignored(self, cycler):
        assert cycler.handle_key(0, "x") is None

    def test_approving_everything_empties_view(self, cycler, recorded_store):
        for _ in range(3):
            cycler.handle_key(cycler.active_index, "a")

        assert cycler.active is None
        assert cycler.active_index == 0
        assert recorded_store.stats().verified == 3

    def test_custom_bindings(self, recorded_store, player):
        config = VerificationConfig(key_toggle="t", key_approve="y", key_reject="n", autoplay=False)
        cycler = VerificationCycler(recorded_store, player=player, config=config)

        assert cycler.handle_key(0, "a") is None
        assert cycler.handle_key(0, "y") is KeyAction.APPROVE
        cycler.close()


class TestPlayback:
    def test_autoplay_on_activation(self, cycler, player, recorded_store):
        cycler.set_active(0)

        assert player.played[-1] is recorded_store.recorded()[0].playback

    def test_autoplay_follows_focus(self, cycler, player, recorded_store):
        cycler.set_active(0)
        second = recorded_store.recorded()[1]

        cycler.cycle_next()

        assert player.played[-1] is second.playback

    def test_toggle_key_pauses_and_resumes(self, cycler, player):
        cycler.set_active(0)
        assert cycler.is_playing

        assert cycler.handle_key(0, "p") is KeyAction.TOGGLE_PLAYBACK
        assert cycler.is_playing is False

        cycler.handle_key(0, "space")
        assert cycler.is_playing is True

    def test_playback_end_returns_to_paused(self, cycler, player):
        cycler.set_active(0)

        player.finish()

        assert cycler.is_playing is False

    def test_refused_autoplay_is_tolerated(self, recorded_store, player_factory, config):
        refusing = player_factory(refuse=True)
        cycler = VerificationCycler(recorded_store, player=refusing, config=config)

        cycler.set_active(0)

        assert cycler.active_index == 0
        assert cycler.is_playing is False
        cycler.close()

    def test_autoplay_disabled(self, recorded_store, player):
        config = VerificationConfig(autoplay=False)
        cycler = VerificationCycler(recorded_store, player=player, config=config)

        cycler.set_active(0)

        assert player.played == []
        cycler.close()

    def test_without_player(self):
        store = ChunkStore()
        cycler = VerificationCycler(store)

        assert cycler.toggle_playback() is False
        cycler.close()

    def test_unreadable_clip_autoplay_is_tolerated(self, store, player_factory, config):
        """A clip the player cannot decode leaves the item active and paused."""
        first, second = store.create_batch(["Bad audio.", "Next one."])
        store.attach_recording(first.id, AudioClip(data=b"x" * 64))
        store.attach_recording(second.id, AudioClip(data=b"y" * 64))
        cycler = VerificationCycler(store, player=player_factory(undecodable=True), config=config)

        cycler.set_active(0)
        action = cycler.handle_key(0, "a")

        assert action is KeyAction.APPROVE
        assert cycler.active.id == second.id
        assert cycler.is_playing is False
        cycler.close()
