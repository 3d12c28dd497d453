"""Dataset export: metadata table and audio archives.

Only Verified chunks are exported, in store order. Each one is named
sentence<N>.wav, N being its 1-based position among Verified chunks,
and the same name links the audio file to its row in the table.

Modes:
    csv     metadata_<stamp>.csv   (filename|transcription table)
    audio   audio_<stamp>.zip      (sentence<N>.wav files)
    backup  backup_<stamp>.zip     (data/audio/sentence<N>.wav + data/metadata.csv)
    full    csv + audio
"""

import io
import logging
import os
import tempfile
import zipfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

from speech_collector.lib.config import get_storage_config
from speech_collector.lib.exceptions import ArchiveFailure, EmptySetError
from speech_collector.lib.timestamps import format_file_stamp
from speech_collector.models.chunk import Chunk, ChunkStatus

logger = logging.getLogger(__name__)

TABLE_HEADER = "filename|transcription"
BACKUP_AUDIO_DIR = "data/audio"
BACKUP_TABLE_PATH = "data/metadata.csv"


class ExportMode(str, Enum):
    CSV = "csv"
    AUDIO = "audio"
    BACKUP = "backup"
    FULL = "full"


@dataclass(frozen=True)
class ExportEntry:
    """A Verified chunk paired with its export filename."""

    filename: str
    text: str
    audio: bytes


def verified_entries(chunks: Iterable[Chunk]) -> list[ExportEntry]:
    """
    Number Verified chunks for export.

    Raises:
        EmptySetError: If no chunk is Verified
    """
    verified = [c for c in chunks if c.status is ChunkStatus.VERIFIED]
    if not verified:
        raise EmptySetError("No verified chunks to export")
    return [
        ExportEntry(filename=f"sentence{n}.wav", text=chunk.text.strip(), audio=chunk.audio.data)
        for n, chunk in enumerate(verified, start=1)
    ]


def _table(entries: list[ExportEntry]) -> str:
    rows = [f"{entry.filename}|{entry.text}" for entry in entries]
    return "\n".join([TABLE_HEADER, *rows])


def _zip(files: dict[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    try:
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for name, payload in files.items():
                archive.writestr(name, payload)
    except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, ValueError) as e:
        raise ArchiveFailure(f"Failed to assemble archive: {e}", original_error=e) from e
    return buffer.getvalue()


def build_metadata_table(chunks: Iterable[Chunk]) -> str:
    """
    Build the pipe-delimited transcription table.

    Returns:
        Header plus one row per Verified chunk, newline separated,
        without a trailing newline
    """
    return _table(verified_entries(chunks))


def build_audio_archive(chunks: Iterable[Chunk]) -> bytes:
    """Zip the Verified recordings as sentence<N>.wav."""
    entries = verified_entries(chunks)
    return _zip({entry.filename: entry.audio for entry in entries})


def build_backup_archive(chunks: Iterable[Chunk]) -> bytes:
    """Zip recordings under data/audio/ with the table at data/metadata.csv."""
    entries = verified_entries(chunks)
    files = {f"{BACKUP_AUDIO_DIR}/{entry.filename}": entry.audio for entry in entries}
    files[BACKUP_TABLE_PATH] = _table(entries).encode("utf-8")
    return _zip(files)


class DatasetExporter:
    """
    Writes export files into an output directory.

    Example:
        exporter = DatasetExporter(Path("./exports"))
        paths = exporter.export(store.chunks(), ExportMode.FULL)
    """

    def __init__(self, output_dir: Optional[Path] = None):
        self.output_dir = output_dir or get_storage_config().export_path

    def export(self, chunks: Iterable[Chunk], mode: ExportMode | str) -> list[Path]:
        """
        Run one export mode.

        Returns:
            Paths of the files written

        Raises:
            EmptySetError: If nothing is Verified (no file is touched)
            ArchiveFailure: If an archive cannot be built or written
        """
        mode = ExportMode(mode)
        chunks = list(chunks)
        stamp = format_file_stamp()

        if mode is ExportMode.CSV:
            return [self.export_csv(chunks, stamp)]
        if mode is ExportMode.AUDIO:
            return [self.export_audio(chunks, stamp)]
        if mode is ExportMode.BACKUP:
            return [self.export_backup(chunks, stamp)]
        return self.export_full(chunks, stamp)

    def export_csv(self, chunks: Iterable[Chunk], stamp: Optional[str] = None) -> Path:
        table = build_metadata_table(chunks)
        return self._write(f"metadata_{stamp or format_file_stamp()}.csv", table.encode("utf-8"))

    def export_audio(self, chunks: Iterable[Chunk], stamp: Optional[str] = None) -> Path:
        archive = build_audio_archive(chunks)
        return self._write(f"audio_{stamp or format_file_stamp()}.zip", archive)

    def export_backup(self, chunks: Iterable[Chunk], stamp: Optional[str] = None) -> Path:
        archive = build_backup_archive(chunks)
        return self._write(f"backup_{stamp or format_file_stamp()}.zip", archive)

    def export_full(self, chunks: Iterable[Chunk], stamp: Optional[str] = None) -> list[Path]:
        chunks = list(chunks)
        stamp = stamp or format_file_stamp()
        # Build both before writing either
        table = build_metadata_table(chunks)
        archive = build_audio_archive(chunks)
        return [
            self._write(f"metadata_{stamp}.csv", table.encode("utf-8")),
            self._write(f"audio_{stamp}.zip", archive),
        ]

    def _write(self, filename: str, payload: bytes) -> Path:
        target = self.output_dir / filename
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            temp_fd, temp_path = tempfile.mkstemp(dir=self.output_dir, prefix=f".{filename}_", suffix=".tmp")
        except OSError as e:
            raise ArchiveFailure(f"Cannot write to {self.output_dir}: {e}", original_error=e) from e

        try:
            with os.fdopen(temp_fd, "wb") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, target)
        except OSError as e:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise ArchiveFailure(f"Failed to write {filename}: {e}", original_error=e) from e

        logger.info(f"Export written: {target} ({len(payload)} bytes)")
        return target
