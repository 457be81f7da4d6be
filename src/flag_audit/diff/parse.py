"""Unified-diff parser — per-file added chunks and removed lines.

An added *chunk* is a maximal run of consecutive ``+`` lines.  Any other line
(context, hunk header, removal) ends the run, so lines from different hunks
are never placed in the same chunk.

Pure Python, no git calls.
"""

from __future__ import annotations

from flag_audit.model.reference import DiffResult

_NEW_FILE_PREFIX = "+++ b/"
_OLD_FILE_PREFIX = "--- a/"
_DEV_NULL = "+++ /dev/null"


def parse_diff(diff: str) -> DiffResult:
    """Parse *diff* into a :class:`DiffResult`.

    Deleted files (``--- a/x`` followed by ``+++ /dev/null``) are keyed by
    their old path.  Sections without ``---``/``+++`` headers (binary files)
    are skipped because no current file is ever set for them.
    """
    result = DiffResult()
    current_file = ""
    pending_file = ""
    last_was_added = False

    for line in diff.split("\n"):
        if line.startswith(_OLD_FILE_PREFIX):
            pending_file = line[len(_OLD_FILE_PREFIX):]

        if line.startswith(_NEW_FILE_PREFIX):
            current_file = line[len(_NEW_FILE_PREFIX):]
            result.touch(current_file)
            last_was_added = False
        elif line.startswith(_DEV_NULL) and pending_file:
            current_file = pending_file
            result.touch(current_file)
            last_was_added = False
        elif line.startswith("+") and not line.startswith("+++ ") and current_file:
            chunks = result.added[current_file]
            if not last_was_added or not chunks:
                chunks.append([])
            chunks[-1].append(line[1:])
            last_was_added = True
        elif line.startswith("-") and not line.startswith("--- ") and current_file:
            result.removed[current_file].append(line[1:])
            last_was_added = False
        else:
            last_was_added = False

    return result
