"""Dataset export."""

from speech_collector.services.export.dataset import (
    DatasetExporter,
    ExportMode,
    build_audio_archive,
    build_backup_archive,
    build_metadata_table,
)

__all__ = [
    "DatasetExporter",
    "ExportMode",
    "build_audio_archive",
    "build_backup_archive",
    "build_metadata_table",
]
