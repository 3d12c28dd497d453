"""Operator-facing message templates for the terminal.

All text printed by the CLI lives here so wording can change without
touching control flow.
"""

# =============================================================================
# Ingestion and collection
# =============================================================================

CHUNKS_CREATED = "Created {count} chunk(s) from the input text."

CHUNK_LINE = "{index:>4}. [{status:<10}] {chunk_id}  {text}"

NO_CHUNKS = "The collection is empty. Use 'collect ingest' to add text."

CHUNK_DELETED = "Deleted {chunk_id}."

CHUNK_NOT_DELETED = "No chunk with id {chunk_id}; nothing deleted."

STATS_SUMMARY = """Total sentences:    {total}
Recorded (pending): {recorded}
Verified:           {verified}"""

# =============================================================================
# Recording
# =============================================================================

RECORD_HELP = """Commands:
  r  record (or re-record)   s  stop
  p  play / pause            w  save and continue
  n  skip this sentence      q  quit"""

RECORD_HEADER = """
[{position}/{total}] {chunk_id}
  "{text}"
Target length: {min_seconds}-{max_seconds} seconds."""

NOTHING_TO_RECORD = "No unrecorded sentences. Ingest more text or verify your recordings."

RECORDING_STARTED = "Recording... press s then Enter to stop."

RECORDING_TICK = "\r  recording {seconds}s "

RECORDING_STOPPED = "Captured {duration}. Press p to review, w to save or r to re-record."

RECORDING_SAVED = "Saved. The sentence is ready for verification."

RECORDING_SUMMARY = "Saved {saved} recording(s)."

# =============================================================================
# Verification
# =============================================================================

VERIFY_HELP = """Commands:
  {toggle} or space  play / pause     {approve}  approve     {reject}  reject (re-record)
  e TEXT  edit transcription    j N  jump to item N    q  quit"""

VERIFY_ITEM = """
[{position}/{total}] {chunk_id}{playing}
  "{text}\""""

NOTHING_TO_VERIFY = "No recordings waiting for verification."

VERIFY_APPROVED = "Approved {chunk_id}."

VERIFY_REJECTED = "Rejected {chunk_id}; it is back in the recording queue."

VERIFY_EDITED = "Transcription updated; approve to keep it."

VERIFY_BAD_JUMP = "Enter an item number between 1 and {total}."

VERIFY_SUMMARY = "Approved {approved}, rejected {rejected}."

# =============================================================================
# Export and preferences
# =============================================================================

EXPORT_WRITTEN = "Wrote {path}"

THEME_CURRENT = "Theme: {theme}"

UNKNOWN_COMMAND = "Unknown command. Type one of the commands listed above."
