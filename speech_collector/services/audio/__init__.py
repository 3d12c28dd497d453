"""Audio capture, codec and playback."""

from speech_collector.services.audio.capture import CaptureDevice, CaptureHandle, SoundDeviceCapture
from speech_collector.services.audio.codec import decode_audio, encode_audio, probe_duration
from speech_collector.services.audio.playback import AudioPlayer, PlaybackToggle, SoundDevicePlayer

__all__ = [
    "CaptureDevice",
    "CaptureHandle",
    "SoundDeviceCapture",
    "decode_audio",
    "encode_audio",
    "probe_duration",
    "AudioPlayer",
    "PlaybackToggle",
    "SoundDevicePlayer",
]
