"""Error catalog for operator-facing messages.

Every failure the operator can see is rendered from this catalog
instead of from raw exception text.

Error Code Format: ERR_{DOMAIN}_{NUMBER}
- STORAGE: 001-099 (durable slots, disk)
- DEVICE: 100-199 (microphone, speakers)
- CHUNK: 200-299 (chunk lifecycle, recorder state)
- EXPORT: 300-399 (dataset export)
- INPUT: 400-499 (operator text and arguments)
- CONFIG: 500-599 (invalid settings)
- UNKNOWN: 900-999 (unmapped exceptions)
"""

from dataclasses import dataclass, field
from enum import Enum

from speech_collector.lib.exceptions import (
    ArchiveFailure,
    ChunkNotFoundError,
    ConfigError,
    DecodeFailure,
    DeviceUnavailable,
    EmptySetError,
    EncodeFailure,
    InvalidRecorderState,
    InvalidTransitionError,
    PersistenceError,
    PlaybackRefused,
    ValidationError,
)


class ErrorSeverity(str, Enum):
    """Severity level for operator-facing errors."""

    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class UserFacingError:
    """Structured error for terminal presentation.

    Attributes:
        error_code: Unique error identifier (e.g., "ERR_STORAGE_001")
        message: Plain-language description
        suggestions: Actionable recovery hints
        severity: Error severity level
    """

    error_code: str
    message: str
    suggestions: list[str] = field(default_factory=list)
    severity: ErrorSeverity = ErrorSeverity.ERROR

    def render(self, detail: str | None = None) -> str:
        """Format for the terminal, optionally with the underlying detail."""
        lines = [f"[{self.error_code}] {self.message}"]
        if detail:
            lines.append(f"  {detail}")
        lines.extend(f"  - {hint}" for hint in self.suggestions)
        return "\n".join(lines)


# =============================================================================
# Error Catalog
# =============================================================================

ERROR_CATALOG: dict[str, UserFacingError] = {
    # -------------------------------------------------------------------------
    # Storage Errors (ERR_STORAGE_xxx)
    # -------------------------------------------------------------------------
    "ERR_STORAGE_001": UserFacingError(
        error_code="ERR_STORAGE_001",
        message="The collection could not be saved.",
        suggestions=[
            "Check that the data directory is writable and the disk is not full.",
            "Your changes stay in memory until the next successful save.",
        ],
        severity=ErrorSeverity.CRITICAL,
    ),
    "ERR_STORAGE_002": UserFacingError(
        error_code="ERR_STORAGE_002",
        message="Saved data could not be read and was discarded.",
        suggestions=["Re-ingest your text to start a new collection."],
        severity=ErrorSeverity.WARNING,
    ),
    "ERR_STORAGE_003": UserFacingError(
        error_code="ERR_STORAGE_003",
        message="A recording could not be prepared for saving.",
        suggestions=["Re-record the sentence."],
        severity=ErrorSeverity.WARNING,
    ),
    # -------------------------------------------------------------------------
    # Device Errors (ERR_DEVICE_xxx)
    # -------------------------------------------------------------------------
    "ERR_DEVICE_101": UserFacingError(
        error_code="ERR_DEVICE_101",
        message="The microphone could not be opened.",
        suggestions=[
            "Check that a microphone is connected and not used by another program.",
            "Check microphone permissions, then press r to try again.",
        ],
        severity=ErrorSeverity.ERROR,
    ),
    "ERR_DEVICE_102": UserFacingError(
        error_code="ERR_DEVICE_102",
        message="Playback could not start.",
        suggestions=["Check your audio output device, then toggle playback again."],
        severity=ErrorSeverity.WARNING,
    ),
    # -------------------------------------------------------------------------
    # Chunk Errors (ERR_CHUNK_xxx)
    # -------------------------------------------------------------------------
    "ERR_CHUNK_201": UserFacingError(
        error_code="ERR_CHUNK_201",
        message="That chunk does not exist.",
        suggestions=["Run 'collect list' to see the current chunk ids."],
        severity=ErrorSeverity.WARNING,
    ),
    "ERR_CHUNK_202": UserFacingError(
        error_code="ERR_CHUNK_202",
        message="That chunk is not in the right state for this action.",
        suggestions=["Run 'collect list' to check the chunk status."],
        severity=ErrorSeverity.WARNING,
    ),
    "ERR_CHUNK_203": UserFacingError(
        error_code="ERR_CHUNK_203",
        message="The recorder cannot do that right now.",
        suggestions=["Start a recording with r before stopping or saving."],
        severity=ErrorSeverity.INFO,
    ),
    # -------------------------------------------------------------------------
    # Export Errors (ERR_EXPORT_xxx)
    # -------------------------------------------------------------------------
    "ERR_EXPORT_301": UserFacingError(
        error_code="ERR_EXPORT_301",
        message="No verified chunks to export.",
        suggestions=["Verify some recordings with 'collect verify' first."],
        severity=ErrorSeverity.INFO,
    ),
    "ERR_EXPORT_302": UserFacingError(
        error_code="ERR_EXPORT_302",
        message="The export archive could not be created.",
        suggestions=["Check that the output directory is writable and try again."],
        severity=ErrorSeverity.ERROR,
    ),
    # -------------------------------------------------------------------------
    # Input Errors (ERR_INPUT_xxx)
    # -------------------------------------------------------------------------
    "ERR_INPUT_401": UserFacingError(
        error_code="ERR_INPUT_401",
        message="The input was not accepted.",
        suggestions=["Provide non-empty text ending in . ! or ?"],
        severity=ErrorSeverity.WARNING,
    ),
    # -------------------------------------------------------------------------
    # Config Errors (ERR_CONFIG_xxx)
    # -------------------------------------------------------------------------
    "ERR_CONFIG_501": UserFacingError(
        error_code="ERR_CONFIG_501",
        message="Invalid configuration detected.",
        suggestions=["Check the RECORDING_*, COLLECTOR_* and VERIFY_* settings in your .env file."],
        severity=ErrorSeverity.CRITICAL,
    ),
}

# =============================================================================
# Default Error (for unmapped exceptions)
# =============================================================================

DEFAULT_ERROR: UserFacingError = UserFacingError(
    error_code="ERR_UNKNOWN_901",
    message="Something unexpected happened.",
    suggestions=["Run again with --verbose for details."],
    severity=ErrorSeverity.ERROR,
)

# =============================================================================
# Exception to Error Code Mapping
# =============================================================================

EXCEPTION_MAPPING: dict[type, str] = {
    # Order matters: subclasses before their bases
    PlaybackRefused: "ERR_DEVICE_102",
    DeviceUnavailable: "ERR_DEVICE_101",
    DecodeFailure: "ERR_STORAGE_002",
    EncodeFailure: "ERR_STORAGE_003",
    PersistenceError: "ERR_STORAGE_001",
    ChunkNotFoundError: "ERR_CHUNK_201",
    InvalidTransitionError: "ERR_CHUNK_202",
    InvalidRecorderState: "ERR_CHUNK_203",
    EmptySetError: "ERR_EXPORT_301",
    ArchiveFailure: "ERR_EXPORT_302",
    ValidationError: "ERR_INPUT_401",
    ConfigError: "ERR_CONFIG_501",
}


def get_error_for_exception(exc: Exception) -> UserFacingError:
    """Get the appropriate UserFacingError for an exception.

    Args:
        exc: The exception to map

    Returns:
        UserFacingError from catalog, or DEFAULT_ERROR if unmapped
    """
    for exc_type, error_code in EXCEPTION_MAPPING.items():
        if isinstance(exc, exc_type):
            return ERROR_CATALOG.get(error_code, DEFAULT_ERROR)
    return DEFAULT_ERROR


def get_error_by_code(error_code: str) -> UserFacingError:
    """Get an error by its code.

    Args:
        error_code: The error code (e.g., "ERR_STORAGE_001")

    Returns:
        UserFacingError from catalog, or DEFAULT_ERROR if not found
    """
    return ERROR_CATALOG.get(error_code, DEFAULT_ERROR)
