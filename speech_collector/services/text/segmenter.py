"""Text cleaning and sentence segmentation.

Turns raw operator text into the sentences that become chunks: digit
runs are removed, whitespace is collapsed, and the text is split after
sentence-terminal punctuation.
"""

import re
from pathlib import Path

from speech_collector.lib.exceptions import ValidationError

_DIGITS = re.compile(r"\d+")
_WHITESPACE = re.compile(r"\s+")
_SENTENCE = re.compile(r"[^.!?]+[.!?]+")


def clean_text(raw: str) -> str:
    """Strip digits and normalize whitespace."""
    without_digits = _DIGITS.sub("", raw)
    return _WHITESPACE.sub(" ", without_digits).strip()


def segment_text(raw: str) -> list[str]:
    """
    Split raw text into sentences.

    Text with no terminator becomes a single sentence. Trailing text
    after the last terminator is dropped. Fragments that are only
    punctuation after trimming are skipped.

    Args:
        raw: Operator-provided text

    Returns:
        Sentences in reading order (empty for blank input)
    """
    cleaned = clean_text(raw)
    if not cleaned:
        return []
    matches = _SENTENCE.findall(cleaned)
    if not matches:
        return [cleaned]
    sentences = [m.strip() for m in matches]
    return [s for s in sentences if s.strip(".!? ")]


def load_text_file(file_path: str | Path) -> str:
    """
    Read operator text from a UTF-8 file.

    Raises:
        ValidationError: If the file is missing, unreadable or blank
    """
    path = Path(file_path)

    if not path.exists():
        raise ValidationError(f"Input file not found: {file_path}", field="source_path")

    if not path.is_file():
        raise ValidationError(f"Path is not a file: {file_path}", field="source_path")

    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ValidationError(f"Could not read {file_path}: {e}", field="source_path") from e

    if not content.strip():
        raise ValidationError("Input text cannot be empty or whitespace-only", field="content")
    return content
