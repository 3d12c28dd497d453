"""Audio validation utilities for captured recordings.

This module provides checks applied to a finalized recording:
- Empty audio detection (0 bytes or header-only)
- Duration feedback against the target reading window
"""

from dataclasses import dataclass
from typing import Optional

from speech_collector.models.recording import DurationAdvisory


@dataclass
class DurationCheck:
    """Result of checking a recording's duration.

    Attributes:
        advisory: TOO_SHORT / TOO_LONG, or None inside the window
        message: Human-readable feedback for the operator
    """

    advisory: Optional[DurationAdvisory]
    message: str = ""


def is_audio_empty(
    audio_data: bytes,
    min_size_bytes: int = 45,
) -> bool:
    """Check if audio data is empty or too small to contain samples.

    A WAV header alone is 44 bytes, so anything smaller holds no audio.

    Args:
        audio_data: Raw audio bytes
        min_size_bytes: Minimum size to be considered non-empty

    Returns:
        True if audio is empty or too small
    """
    return len(audio_data) < min_size_bytes


def check_duration(
    duration_seconds: Optional[float],
    min_seconds: float = 15.0,
    max_seconds: float = 20.0,
) -> DurationCheck:
    """Compare a recording's duration with the inclusive target window.

    The result is informational only; callers never block a save on it.

    Args:
        duration_seconds: Measured duration (None if unknown)
        min_seconds: Lower bound of the window
        max_seconds: Upper bound of the window

    Returns:
        DurationCheck with advisory and operator message
    """
    if duration_seconds is None:
        # Unknown duration - give benefit of the doubt
        return DurationCheck(advisory=None, message="Duration unknown")

    if duration_seconds < min_seconds:
        return DurationCheck(
            advisory=DurationAdvisory.TOO_SHORT,
            message=(
                f"Recording is short ({duration_seconds:.1f}s). "
                f"Aim for {min_seconds:.0f}-{max_seconds:.0f} seconds."
            ),
        )

    if duration_seconds > max_seconds:
        return DurationCheck(
            advisory=DurationAdvisory.TOO_LONG,
            message=(
                f"Recording is long ({duration_seconds:.1f}s). "
                f"Aim for {min_seconds:.0f}-{max_seconds:.0f} seconds."
            ),
        )

    return DurationCheck(
        advisory=None,
        message=f"Duration good ({duration_seconds:.1f}s)",
    )
