"""Audio payload codec.

Converts finalized clips to and from the storage-safe textual form
(base64 data URLs) and reads WAV metadata and samples with soundfile.
"""

import base64
import binascii
import io
import logging
from typing import Optional

import numpy as np
import soundfile as sf

from speech_collector.lib.audio_validation import is_audio_empty
from speech_collector.lib.checksum import ChecksumService
from speech_collector.lib.exceptions import DecodeFailure, EncodeFailure
from speech_collector.models.chunk import WAV_MIME_TYPE, AudioClip

logger = logging.getLogger(__name__)

_DATA_URL_PREFIX = "data:"
_BASE64_MARKER = ";base64"


def encode_audio(clip: AudioClip) -> tuple[str, str]:
    """Encode a clip as a base64 data URL.

    Args:
        clip: Finalized audio

    Returns:
        Tuple of (data_url, checksum)

    Raises:
        EncodeFailure: If the payload is not bytes or holds no audio
    """
    data = clip.data
    if not isinstance(data, (bytes, bytearray)):
        raise EncodeFailure(f"Audio payload must be bytes, got {type(data).__name__}")
    if is_audio_empty(bytes(data)):
        raise EncodeFailure(f"Audio payload is empty ({len(data)} bytes)")
    if not clip.mime_type or "," in clip.mime_type or ";" in clip.mime_type:
        raise EncodeFailure(f"Invalid audio media type: {clip.mime_type!r}")

    encoded = base64.b64encode(bytes(data)).decode("ascii")
    checksum = ChecksumService.compute_bytes_checksum(bytes(data))
    return f"{_DATA_URL_PREFIX}{clip.mime_type}{_BASE64_MARKER},{encoded}", checksum


def decode_audio(data_url: str, checksum: Optional[str] = None) -> AudioClip:
    """Decode a data URL produced by encode_audio back into a clip.

    Args:
        data_url: "data:<mime>;base64,<payload>"
        checksum: Expected checksum of the decoded bytes, if stored

    Returns:
        AudioClip with byte-identical payload

    Raises:
        DecodeFailure: On malformed URL, invalid base64, empty payload
            or checksum mismatch
    """
    if not data_url.startswith(_DATA_URL_PREFIX) or "," not in data_url:
        raise DecodeFailure("Audio field is not a data URL")

    header, payload = data_url[len(_DATA_URL_PREFIX):].split(",", 1)
    if not header.endswith(_BASE64_MARKER):
        raise DecodeFailure("Audio data URL is not base64 encoded")
    mime_type = header[: -len(_BASE64_MARKER)] or WAV_MIME_TYPE

    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeFailure(f"Invalid base64 audio payload: {e}") from e

    if not data:
        raise DecodeFailure("Audio payload is empty")

    if checksum:
        try:
            matches = ChecksumService.verify_bytes_checksum(data, checksum)
        except ValueError as e:
            raise DecodeFailure(f"Invalid audio checksum: {e}") from e
        if not matches:
            raise DecodeFailure("Audio checksum mismatch")

    return AudioClip(data=data, mime_type=mime_type)


def probe_duration(clip: AudioClip) -> Optional[float]:
    """Read a clip's duration from its container metadata.

    Returns:
        Duration in seconds, or None if the container cannot be parsed
    """
    try:
        info = sf.info(io.BytesIO(clip.data))
    except (sf.LibsndfileError, RuntimeError, TypeError) as e:
        logger.warning(f"Could not read audio metadata: {e}")
        return None
    if not info.samplerate:
        return None
    return info.frames / info.samplerate


def read_samples(clip: AudioClip) -> tuple[np.ndarray, int]:
    """Decode a clip into int16 samples for playback.

    Raises:
        DecodeFailure: If the container cannot be parsed
    """
    try:
        samples, sample_rate = sf.read(io.BytesIO(clip.data), dtype="int16")
    except (sf.LibsndfileError, RuntimeError, TypeError) as e:
        raise DecodeFailure(f"Unreadable audio container: {e}") from e
    return samples, sample_rate


def write_wav(samples: np.ndarray, sample_rate: int) -> AudioClip:
    """Pack int16 samples into a 16-bit PCM WAV clip."""
    buffer = io.BytesIO()
    sf.write(buffer, samples.astype(np.int16, copy=False), sample_rate, format="WAV", subtype="PCM_16")
    return AudioClip(data=buffer.getvalue(), mime_type=WAV_MIME_TYPE)
