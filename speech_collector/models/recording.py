"""Recording session models.

The recorder drives one chunk slot at a time:

    IDLE → CAPTURING (record)
    CAPTURING → CAPTURED (stop)
    CAPTURED → CAPTURING (re-record)
    CAPTURED → IDLE (save)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from speech_collector.models.chunk import AudioClip


class RecorderState(str, Enum):
    """Recording session controller states."""

    IDLE = "IDLE"  # No capture, nothing pending
    CAPTURING = "CAPTURING"  # Device open, timer running
    CAPTURED = "CAPTURED"  # Finalized audio waiting for save or re-record


class DurationAdvisory(str, Enum):
    """Informational duration feedback. Never blocks a save."""

    TOO_SHORT = "TOO_SHORT"
    TOO_LONG = "TOO_LONG"


@dataclass(frozen=True)
class CaptureResult:
    """
    Outcome of stopping a capture.

    Attributes:
        clip: Finalized audio
        duration_seconds: Duration read from the clip metadata (None if unreadable)
        advisory: Duration advisory, None when inside the target window
        message: Operator feedback for the measured duration
    """

    clip: AudioClip
    duration_seconds: Optional[float] = None
    advisory: Optional[DurationAdvisory] = None
    message: str = ""
