"""Timestamp and ID generation utilities."""

import itertools
import time
from datetime import datetime, timezone

# Process-wide; never reset so ids stay unique across re-segmentation.
_chunk_counter = itertools.count(1)


def generate_chunk_id() -> str:
    """
    Generate a unique chunk identifier.

    Combines a millisecond timestamp with a monotonic counter so that
    chunks created within the same millisecond still get distinct ids.

    Returns:
        str: Chunk ID (e.g., "chunk-1734532200000-7")
    """
    millis = int(time.time() * 1000)
    return f"chunk-{millis}-{next(_chunk_counter)}"


def generate_timestamp() -> datetime:
    """
    Generate a timezone-aware UTC timestamp.

    Returns:
        datetime: Current UTC time with timezone info
    """
    return datetime.now(timezone.utc)


def format_file_stamp(dt: datetime | None = None) -> str:
    """
    Format a datetime for use in export filenames.

    Colons and dots are replaced so the stamp is safe on every filesystem.

    Args:
        dt: Datetime to format (default: now)

    Returns:
        str: Stamp (e.g., "2025-12-18T14-30-00-123456+00-00")
    """
    dt = dt or generate_timestamp()
    return dt.isoformat().replace(":", "-").replace(".", "-")
