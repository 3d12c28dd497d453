"""Unit tests for playback: the toggle flag and the sounddevice player."""

from types import SimpleNamespace

import numpy as np
import pytest

from speech_collector.lib.exceptions import DeviceUnavailable, PlaybackRefused
from speech_collector.models.chunk import PlaybackReference
from speech_collector.services.audio import playback
from speech_collector.services.audio.playback import PlaybackToggle, SoundDevicePlayer


class FakeCallbackStop(Exception):
    pass


class FakePortAudioError(Exception):
    pass


class FakeOutputStream:
    """Stands in for sounddevice.OutputStream."""

    error: Exception | None = None
    instances: list["FakeOutputStream"] = []

    def __init__(self, samplerate, channels, dtype, device, callback, finished_callback):
        self.samplerate = samplerate
        self.channels = channels
        self.callback = callback
        self.finished_callback = finished_callback
        self.started = False
        self.closed = False
        FakeOutputStream.instances.append(self)

    def start(self):
        if FakeOutputStream.error is not None:
            raise FakeOutputStream.error
        self.started = True

    def stop(self):
        self.started = False

    def close(self):
        self.closed = True

    @property
    def active(self) -> bool:
        return self.started

    def pull(self, frames: int) -> np.ndarray:
        out = np.full((frames, self.channels), -1, dtype=np.int16)
        try:
            self.callback(out, frames, None, None)
        except FakeCallbackStop:
            self.started = False
            raise
        return out


@pytest.fixture
def fake_sd(monkeypatch):
    FakeOutputStream.instances = []
    FakeOutputStream.error = None
    module = SimpleNamespace(
        OutputStream=FakeOutputStream,
        PortAudioError=FakePortAudioError,
        CallbackStop=FakeCallbackStop,
    )
    monkeypatch.setattr(playback, "load_sounddevice", lambda: module)
    return module


class TestPlaybackToggle:
    def test_toggle_alternates(self, player, clip):
        toggle = PlaybackToggle(player)
        toggle.load(PlaybackReference.derive(clip))

        assert toggle.toggle() is True
        assert toggle.toggle() is False
        assert [name for name, _ in player.calls] == ["play", "pause"]

    def test_toggle_without_reference(self, player):
        assert PlaybackToggle(player).toggle() is False
        assert player.calls == []

    def test_new_reference_resets_to_paused(self, player, clip):
        toggle = PlaybackToggle(player)
        toggle.load(PlaybackReference.derive(clip))
        toggle.start()

        toggle.load(PlaybackReference.derive(clip))

        assert toggle.is_playing is False
        assert player.calls[-1] == ("stop", None)

    def test_same_reference_keeps_state(self, player, clip):
        toggle = PlaybackToggle(player)
        reference = PlaybackReference.derive(clip)
        toggle.load(reference)
        toggle.start()

        toggle.load(reference)

        assert toggle.is_playing is True

    def test_end_of_clip_pauses(self, player, clip):
        toggle = PlaybackToggle(player)
        toggle.load(PlaybackReference.derive(clip))
        toggle.start()

        player.finish()

        assert toggle.is_playing is False

    def test_refused_play_stays_paused(self, player_factory, clip):
        toggle = PlaybackToggle(player_factory(refuse=True))
        toggle.load(PlaybackReference.derive(clip))

        with pytest.raises(PlaybackRefused):
            toggle.toggle()
        assert toggle.is_playing is False


class TestSoundDevicePlayer:
    def test_plays_to_end_and_reports(self, fake_sd, clip_factory):
        clip = clip_factory(0.01)
        finished = []
        player = SoundDevicePlayer()

        player.play(PlaybackReference.derive(clip), lambda: finished.append(True))
        stream = FakeOutputStream.instances[0]
        first = stream.pull(100)
        with pytest.raises(FakeCallbackStop):
            stream.pull(100)
        stream.finished_callback()

        assert stream.started
        assert first.shape == (100, 1)
        assert finished == [True]

    def test_pause_then_resume_continues_position(self, fake_sd, clip_factory):
        reference = PlaybackReference.derive(clip_factory(0.1))
        player = SoundDevicePlayer()
        player.play(reference, lambda: None)
        FakeOutputStream.instances[0].pull(400)

        player.pause()
        stream = FakeOutputStream.instances[0]
        stream.finished_callback()
        player.play(reference, lambda: None)

        assert stream.closed
        assert len(FakeOutputStream.instances) == 2
        assert player._position == 400

    def test_port_audio_error_is_refusal(self, fake_sd, clip):
        FakeOutputStream.error = FakePortAudioError("busy")

        with pytest.raises(PlaybackRefused):
            SoundDevicePlayer().play(PlaybackReference.derive(clip), lambda: None)
        assert FakeOutputStream.instances[0].closed

    def test_bad_device_is_unavailable(self, fake_sd, clip):
        FakeOutputStream.error = ValueError("No output device matching 'x'")

        with pytest.raises(DeviceUnavailable):
            SoundDevicePlayer(device="x").play(PlaybackReference.derive(clip), lambda: None)

    def test_replay_after_end_opens_new_stream(self, fake_sd, clip_factory):
        """A clip that played to the end starts again on the next toggle."""
        toggle = PlaybackToggle(SoundDevicePlayer())
        toggle.load(PlaybackReference.derive(clip_factory(0.01)))

        toggle.toggle()
        first = FakeOutputStream.instances[0]
        first.pull(100)
        with pytest.raises(FakeCallbackStop):
            first.pull(100)
        first.finished_callback()

        assert toggle.is_playing is False
        assert toggle.toggle() is True
        assert len(FakeOutputStream.instances) == 2
        assert first.closed
        assert FakeOutputStream.instances[1].started

    def test_second_play_while_running_is_noop(self, fake_sd, clip):
        reference = PlaybackReference.derive(clip)
        player = SoundDevicePlayer()

        player.play(reference, lambda: None)
        player.play(reference, lambda: None)

        assert len(FakeOutputStream.instances) == 1
