"""Centralized exit-code contract for all CLI commands.

Code  Meaning
----  -------
  0   Success — every referenced flag is registered (orphan warnings allowed)
  1   Violation — at least one unregistered flag (or unresolved constant)
  2   Error — invalid base branch, no diff obtainable, unreadable registry/config
"""

from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    SUCCESS = 0
    VIOLATION = 1
    ERROR = 2
