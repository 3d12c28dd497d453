"""Interactive terminal loops for recording and verification.

Both loops read one command per line. Input is read on a worker thread
so the event loop keeps running the elapsed-time ticker and the
persistence debounce timer while the operator types.
"""

import asyncio
import logging
import sys
from enum import Enum
from typing import Optional

from speech_collector.lib import messages
from speech_collector.lib.config import get_recording_config, get_verification_config
from speech_collector.lib.error_catalog import get_error_for_exception
from speech_collector.lib.exceptions import (
    CollectorError,
    DecodeFailure,
    DeviceUnavailable,
    InvalidRecorderState,
)
from speech_collector.models.chunk import ChunkStatus
from speech_collector.services.audio.capture import CaptureDevice
from speech_collector.services.audio.playback import AudioPlayer
from speech_collector.services.orchestrator import CollectionOrchestrator
from speech_collector.services.recording.controller import RecordingSessionController
from speech_collector.services.verification.cycler import KeyAction, VerificationCycler

logger = logging.getLogger(__name__)


class RecordOutcome(str, Enum):
    SAVED = "SAVED"
    SKIPPED = "SKIPPED"
    QUIT = "QUIT"


async def prompt(text: str = "> ") -> Optional[str]:
    """Read one line without blocking the event loop. None on end of input.

    Only the line ending is removed; a bare space is a key press.
    """
    try:
        line = await asyncio.to_thread(input, text)
    except EOFError:
        return None
    return line.rstrip("\r\n")


def report(exc: CollectorError) -> None:
    """Print a recovered error from the catalog."""
    print(get_error_for_exception(exc).render(exc.message), file=sys.stderr)


def _print_tick(seconds: int) -> None:
    sys.stdout.write(messages.RECORDING_TICK.format(seconds=seconds))
    sys.stdout.flush()


# =============================================================================
# Recording
# =============================================================================


async def run_record_session(
    collection: CollectionOrchestrator,
    device: CaptureDevice,
    player: Optional[AudioPlayer] = None,
    chunk_id: Optional[str] = None,
) -> int:
    """
    Walk the operator through the Unrecorded chunks (or a single one).

    Returns:
        Number of recordings saved

    Raises:
        ChunkNotFoundError: chunk_id does not exist
    """
    if chunk_id is not None:
        collection.get_chunk(chunk_id)
        queue = [chunk_id]
    else:
        queue = [chunk.id for chunk in collection.store.unrecorded()]

    if not queue:
        print(messages.NOTHING_TO_RECORD)
        return 0

    config = get_recording_config()
    print(messages.RECORD_HELP)
    saved = 0

    for position, current_id in enumerate(queue, start=1):
        chunk = collection.store.get(current_id)
        if chunk is None or chunk.status is not ChunkStatus.UNRECORDED:
            continue

        print(
            messages.RECORD_HEADER.format(
                position=position,
                total=len(queue),
                chunk_id=chunk.id,
                text=chunk.text,
                min_seconds=config.min_seconds,
                max_seconds=config.max_seconds,
            )
        )
        controller = collection.recorder_for(current_id, device, player, on_tick=_print_tick)
        try:
            outcome = await record_one(controller)
        finally:
            await controller.close()

        if outcome is RecordOutcome.SAVED:
            saved += 1
        elif outcome is RecordOutcome.QUIT:
            break

    print(messages.RECORDING_SUMMARY.format(saved=saved))
    return saved


async def record_one(controller: RecordingSessionController) -> RecordOutcome:
    """Command loop for a single chunk slot."""
    while True:
        command = await prompt()
        if command is None:
            return RecordOutcome.QUIT
        command = command.strip().lower()

        try:
            if command == "r":
                await controller.record()
                print(messages.RECORDING_STARTED)
            elif command == "s":
                result = controller.stop()
                print()
                duration = f"{result.duration_seconds:.1f}s" if result.duration_seconds is not None else "audio"
                print(messages.RECORDING_STOPPED.format(duration=duration))
                if result.message:
                    print(f"  {result.message}")
            elif command == "p":
                controller.toggle_playback()
            elif command == "w":
                controller.save()
                print(messages.RECORDING_SAVED)
                return RecordOutcome.SAVED
            elif command == "n":
                return RecordOutcome.SKIPPED
            elif command == "q":
                return RecordOutcome.QUIT
            elif command:
                print(messages.UNKNOWN_COMMAND)
                print(messages.RECORD_HELP)
        except (DeviceUnavailable, DecodeFailure, InvalidRecorderState) as e:
            report(e)


# =============================================================================
# Verification
# =============================================================================


def _show_active(cycler: VerificationCycler) -> None:
    view = cycler.view()
    chunk = cycler.active
    print(
        messages.VERIFY_ITEM.format(
            position=cycler.active_index + 1,
            total=len(view),
            chunk_id=chunk.id,
            playing="  (playing)" if cycler.is_playing else "",
            text=cycler.draft_text(cycler.active_index),
        )
    )


async def run_verify_session(
    collection: CollectionOrchestrator,
    player: Optional[AudioPlayer] = None,
) -> tuple[int, int]:
    """
    Review Recorded chunks one at a time.

    Returns:
        (approved, rejected) counts
    """
    cycler = collection.verifier(player)
    approved = rejected = 0
    try:
        if not cycler.view():
            print(messages.NOTHING_TO_VERIFY)
            return approved, rejected

        config = get_verification_config()
        print(
            messages.VERIFY_HELP.format(
                toggle=config.key_toggle,
                approve=config.key_approve,
                reject=config.key_reject,
            )
        )
        cycler.set_active(0)

        while cycler.active is not None:
            _show_active(cycler)
            line = await prompt()
            if line is None or line.strip().lower() == "q":
                break
            if not line:
                continue
            key = " " if line.isspace() else line.strip()

            if key.startswith("e "):
                cycler.edit_text(cycler.active_index, key[2:])
                print(messages.VERIFY_EDITED)
                continue

            if key.startswith("j "):
                total = len(cycler.view())
                target = key[2:].strip()
                if not target.isdigit() or not 1 <= int(target) <= total:
                    print(messages.VERIFY_BAD_JUMP.format(total=total))
                    continue
                cycler.set_active(int(target) - 1)
                continue

            chunk_id = cycler.active.id
            try:
                action = cycler.handle_key(cycler.active_index, key)
            except (DeviceUnavailable, DecodeFailure) as e:
                report(e)
                continue

            if action is KeyAction.APPROVE:
                approved += 1
                print(messages.VERIFY_APPROVED.format(chunk_id=chunk_id))
            elif action is KeyAction.REJECT:
                rejected += 1
                print(messages.VERIFY_REJECTED.format(chunk_id=chunk_id))
            elif action is None:
                print(messages.UNKNOWN_COMMAND)
    finally:
        cycler.close()

    print(messages.VERIFY_SUMMARY.format(approved=approved, rejected=rejected))
    return approved, rejected
