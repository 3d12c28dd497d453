"""CLI entry point for the speech dataset collector."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from pydantic import ValidationError as SettingsError

from speech_collector import __version__
from speech_collector.cli.interactive import run_record_session, run_verify_session
from speech_collector.lib import messages
from speech_collector.lib.config import get_recording_config
from speech_collector.lib.error_catalog import get_error_for_exception
from speech_collector.lib.exceptions import (
    ChunkNotFoundError,
    CollectorError,
    ConfigError,
    DeviceUnavailable,
    EmptySetError,
    InvalidRecorderState,
    InvalidTransitionError,
    ValidationError,
)
from speech_collector.models.chunk import ChunkStatus
from speech_collector.services.audio.capture import SoundDeviceCapture
from speech_collector.services.audio.playback import SoundDevicePlayer
from speech_collector.services.export.dataset import ExportMode
from speech_collector.services.orchestrator import CollectionOrchestrator
from speech_collector.services.persistence.preferences import Theme
from speech_collector.services.text.segmenter import load_text_file

logger = logging.getLogger(__name__)


# Exit codes per CLI contract
EXIT_SUCCESS = 0
EXIT_USAGE_ERROR = 1
EXIT_CONFIG_ERROR = 2
EXIT_VALIDATION_ERROR = 3
EXIT_DEVICE_ERROR = 4
EXIT_INTERNAL_ERROR = 5


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if verbose else logging.INFO
    format_str = "[%(asctime)s] %(levelname)s: %(message)s"
    logging.basicConfig(
        level=level,
        format=format_str,
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="collect",
        description="Collect and verify spoken recordings of text sentences",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  collect ingest ./corpus/story.txt
  collect record
  collect verify
  collect export full -o ./dataset
        """,
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show debug logging",
    )

    parser.add_argument(
        "-V", "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    commands = parser.add_subparsers(dest="command", metavar="COMMAND")

    ingest = commands.add_parser("ingest", help="Split text into sentences and replace the collection")
    source = ingest.add_mutually_exclusive_group(required=True)
    source.add_argument("input_file", nargs="?", help="UTF-8 text file (.txt)")
    source.add_argument("-t", "--text", help="Text given inline")

    listing = commands.add_parser("list", help="Show chunks with their status")
    listing.add_argument(
        "-s", "--status",
        choices=[status.value for status in ChunkStatus],
        default=None,
        help="Only show chunks with this status",
    )

    delete = commands.add_parser("delete", help="Remove a chunk")
    delete.add_argument("chunk_id", help="Chunk id as shown by 'list'")

    record = commands.add_parser("record", help="Record unrecorded sentences interactively")
    record.add_argument("-c", "--chunk", default=None, help="Record only this chunk id")

    commands.add_parser("verify", help="Review recordings interactively")

    export = commands.add_parser("export", help="Export verified recordings")
    export.add_argument(
        "mode",
        choices=[mode.value for mode in ExportMode],
        help="csv: metadata table, audio: zip of WAVs, backup: zip of both, full: csv + audio",
    )
    export.add_argument(
        "-o", "--output-dir",
        type=str,
        default=None,
        help="Directory for export files (default: ./exports)",
    )

    commands.add_parser("stats", help="Show collection progress")

    theme = commands.add_parser("theme", help="Show or set the presentation theme")
    theme.add_argument("value", nargs="?", choices=[t.value for t in Theme], help="New theme")

    return parser


def exit_code_for(exc: CollectorError) -> int:
    """Map a collector error to the CLI exit code."""
    if isinstance(exc, ConfigError):
        return EXIT_CONFIG_ERROR
    if isinstance(
        exc,
        (ValidationError, EmptySetError, ChunkNotFoundError, InvalidTransitionError, InvalidRecorderState),
    ):
        return EXIT_VALIDATION_ERROR
    if isinstance(exc, DeviceUnavailable):
        return EXIT_DEVICE_ERROR
    return EXIT_INTERNAL_ERROR


def run(args: argparse.Namespace) -> int:
    """
    Run one CLI command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code
    """
    if args.command is None:
        create_parser().print_usage(sys.stderr)
        return EXIT_USAGE_ERROR

    try:
        with CollectionOrchestrator() as collection:
            return COMMANDS[args.command](collection, args)

    except CollectorError as e:
        print(get_error_for_exception(e).render(e.message), file=sys.stderr)
        return exit_code_for(e)

    except SettingsError as e:
        error = get_error_for_exception(ConfigError(str(e)))
        print(error.render(f"{e.error_count()} invalid setting(s)"), file=sys.stderr)
        return EXIT_CONFIG_ERROR

    except KeyboardInterrupt:
        print(file=sys.stderr)
        return EXIT_SUCCESS

    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        print(get_error_for_exception(e).render(str(e)), file=sys.stderr)
        return EXIT_INTERNAL_ERROR


# =============================================================================
# Commands
# =============================================================================


def cmd_ingest(collection: CollectionOrchestrator, args: argparse.Namespace) -> int:
    text = args.text if args.text is not None else load_text_file(args.input_file)
    chunks = collection.ingest(text)
    print(messages.CHUNKS_CREATED.format(count=len(chunks)))
    return EXIT_SUCCESS


def cmd_list(collection: CollectionOrchestrator, args: argparse.Namespace) -> int:
    status = ChunkStatus(args.status) if args.status else None
    chunks = collection.list_chunks(status)
    if not chunks:
        print(messages.NO_CHUNKS)
        return EXIT_SUCCESS
    for index, chunk in enumerate(chunks, start=1):
        print(
            messages.CHUNK_LINE.format(
                index=index,
                status=chunk.status.value,
                chunk_id=chunk.id,
                text=chunk.text,
            )
        )
    return EXIT_SUCCESS


def cmd_delete(collection: CollectionOrchestrator, args: argparse.Namespace) -> int:
    if collection.delete(args.chunk_id):
        print(messages.CHUNK_DELETED.format(chunk_id=args.chunk_id))
    else:
        print(messages.CHUNK_NOT_DELETED.format(chunk_id=args.chunk_id))
    return EXIT_SUCCESS


def cmd_record(collection: CollectionOrchestrator, args: argparse.Namespace) -> int:
    config = get_recording_config()
    device = SoundDeviceCapture(config)
    player = SoundDevicePlayer()
    asyncio.run(run_record_session(collection, device, player, chunk_id=args.chunk))
    return EXIT_SUCCESS


def cmd_verify(collection: CollectionOrchestrator, args: argparse.Namespace) -> int:
    asyncio.run(run_verify_session(collection, SoundDevicePlayer()))
    return EXIT_SUCCESS


def cmd_export(collection: CollectionOrchestrator, args: argparse.Namespace) -> int:
    output_dir = Path(args.output_dir) if args.output_dir else None
    for path in collection.export(args.mode, output_dir):
        print(messages.EXPORT_WRITTEN.format(path=path))
    return EXIT_SUCCESS


def cmd_stats(collection: CollectionOrchestrator, args: argparse.Namespace) -> int:
    stats = collection.stats()
    print(messages.STATS_SUMMARY.format(total=stats.total, recorded=stats.recorded, verified=stats.verified))
    return EXIT_SUCCESS


def cmd_theme(collection: CollectionOrchestrator, args: argparse.Namespace) -> int:
    theme = collection.set_theme(args.value) if args.value else collection.theme()
    print(messages.THEME_CURRENT.format(theme=theme.value))
    return EXIT_SUCCESS


COMMANDS = {
    "ingest": cmd_ingest,
    "list": cmd_list,
    "delete": cmd_delete,
    "record": cmd_record,
    "verify": cmd_verify,
    "export": cmd_export,
    "stats": cmd_stats,
    "theme": cmd_theme,
}


def main() -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()
    setup_logging(verbose=args.verbose)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
