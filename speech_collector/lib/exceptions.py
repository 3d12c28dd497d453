"""Exception hierarchy for the speech dataset collector.

All custom exceptions inherit from CollectorError to enable
selective catching at different levels.

Hierarchy:
    CollectorError (base)
    ├── ConfigError - Configuration issues (invalid env values)
    ├── ValidationError - Operator input validation failures
    ├── DeviceUnavailable - Microphone/speaker could not be opened
    │   └── PlaybackRefused - Player declined to start playback
    ├── InvalidRecorderState - Recorder call in the wrong state
    ├── ChunkNotFoundError - Unknown chunk id
    ├── InvalidTransitionError - Chunk status transition not allowed
    ├── PersistenceError - Durable storage read/write failures
    │   ├── DecodeFailure - Stored record or audio payload unreadable
    │   └── EncodeFailure - Audio payload cannot be serialized
    ├── ArchiveFailure - Export archive could not be assembled
    └── EmptySetError - Export requested with no verified chunks

Nothing raised here is fatal to the process: the CLI reports each one
and leaves the collection in a safe state.
"""


class CollectorError(Exception):
    """
    Base exception for all collector errors.

    Catching this will catch all custom exceptions from this module.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigError(CollectorError):
    """
    Configuration error.

    Raised when configuration values are inconsistent.
    Example: RECORDING_MIN_SECONDS greater than RECORDING_MAX_SECONDS.

    CLI Exit Code: 2
    """

    pass


class ValidationError(CollectorError):
    """
    Operator input validation error.

    Raised when text input is empty or a CLI argument is malformed.

    CLI Exit Code: 3
    """

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class DeviceUnavailable(CollectorError):
    """
    Capture or playback device could not be opened.

    Covers denied permission, absent hardware and a missing audio
    backend. The recorder stays Idle; retrying is re-invoking record.

    CLI Exit Code: 4

    Attributes:
        device: Device identifier that failed, if known
        original_error: Underlying backend exception if wrapping
    """

    def __init__(
        self,
        message: str,
        device: str | int | None = None,
        original_error: Exception | None = None,
    ):
        self.device = device
        self.original_error = original_error
        super().__init__(message)


class PlaybackRefused(DeviceUnavailable):
    """Player refused to start (e.g. output busy). Autoplay treats it as a no-op."""

    pass


class InvalidRecorderState(CollectorError):
    """Raised when a recorder operation is invalid for its current state."""

    def __init__(self, operation: str, state: str):
        self.operation = operation
        self.state = state
        super().__init__(f"Cannot {operation} while recorder is {state}")


class ChunkNotFoundError(CollectorError):
    """Raised when a chunk id is not in the collection."""

    def __init__(self, chunk_id: str):
        self.chunk_id = chunk_id
        super().__init__(f"Chunk '{chunk_id}' not found")


class InvalidTransitionError(CollectorError):
    """
    Chunk status transition not allowed.

    Raised when attaching a recording to a chunk that is not
    Unrecorded, or verifying a chunk that is not Recorded.

    Attributes:
        chunk_id: Chunk the transition was attempted on
        current: Current status value
        requested: Requested status value
    """

    def __init__(self, chunk_id: str, current: str, requested: str):
        self.chunk_id = chunk_id
        self.current = current
        self.requested = requested
        super().__init__(
            f"Chunk '{chunk_id}' is {current}, cannot transition to {requested}"
        )


class PersistenceError(CollectorError):
    """
    Storage read/write error.

    Raised when durable storage operations fail.
    Examples: permission denied, disk full.

    CLI Exit Code: 5

    Attributes:
        path: Path that caused the error
        operation: Operation that failed (read, write, delete)
    """

    def __init__(self, message: str, path: str | None = None, operation: str | None = None):
        self.path = path
        self.operation = operation
        super().__init__(message)


class DecodeFailure(PersistenceError):
    """
    Durable record or audio payload could not be decoded.

    Recovered by discarding the unreadable unit: the whole collection
    for a top-level parse failure, a single chunk's audio otherwise.
    """

    def __init__(self, message: str, chunk_id: str | None = None):
        self.chunk_id = chunk_id
        super().__init__(message, operation="read")


class EncodeFailure(PersistenceError):
    """
    Audio payload could not be serialized for storage.

    Recovered by persisting the chunk without its audio.
    """

    def __init__(self, message: str, chunk_id: str | None = None):
        self.chunk_id = chunk_id
        super().__init__(message, operation="write")


class ArchiveFailure(CollectorError):
    """
    Export archive could not be assembled.

    No partial file is left in the output directory.

    CLI Exit Code: 5
    """

    def __init__(self, message: str, original_error: Exception | None = None):
        self.original_error = original_error
        super().__init__(message)


class EmptySetError(CollectorError):
    """
    Export requested with zero verified chunks.

    Advisory only; the export is aborted before any I/O.

    CLI Exit Code: 3
    """

    pass
