"""Recording session control."""

from speech_collector.services.recording.controller import RecordingSessionController

__all__ = ["RecordingSessionController"]
