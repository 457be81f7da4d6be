"""Orphan detection — registered flags whose last reference a diff removes.

A candidate is a registered flag that shows up in removed lines but nowhere in
added lines.  It is *orphaned* when a whole-word, fixed-string search of the
scan directories finds no file outside the registry directory.  Orphans are
warnings: dynamic name composition can hide references from a text search.
"""

from __future__ import annotations

import logging
import re
import subprocess
from pathlib import Path
from typing import Collection, Iterable, Protocol, Sequence

from flag_audit.model.reference import FlagReference

logger = logging.getLogger(__name__)

# Only names that are safe to hand to the search tool as a literal.
_SEARCHABLE_NAME_RE = re.compile(r"^[\w.]+$", re.ASCII)

_GREP_TIMEOUT = 60


class WordSearch(Protocol):
    """Whole-repository text search collaborator."""

    def files_containing(self, word: str, directories: Sequence[str]) -> list[str]:
        """Return repo-relative paths under *directories* containing *word* as a word."""
        ...


class GitGrepSearch:
    """:class:`WordSearch` backed by ``git grep -lFw``.

    ``git grep`` exits non-zero when nothing matches; that (and any other
    failure) is reported as no matching files.
    """

    def __init__(self, root: Path | str = ".") -> None:
        self.root = Path(root)

    def files_containing(self, word: str, directories: Sequence[str]) -> list[str]:
        try:
            result = subprocess.run(
                ["git", "-C", str(self.root), "grep", "-lFw", "--", word, *directories],
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                timeout=_GREP_TIMEOUT,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            logger.debug("git grep for %s failed: %s", word, exc)
            return []
        if result.returncode != 0:
            return []
        return [f for f in result.stdout.strip().split("\n") if f]


def orphan_candidates(
    removed: Iterable[FlagReference],
    added_flag_names: Collection[str],
    registered: Collection[str],
) -> list[str]:
    """Registered flags referenced only in removed lines, sorted."""
    return sorted(
        {
            ref.flag_name
            for ref in removed
            if ref.flag_name not in added_flag_names and ref.flag_name in registered
        }
    )


class OrphanDetector:
    """Decides which candidate flags have no remaining references.

    Parameters
    ----------
    search:
        Text-search collaborator.
    scan_directories:
        Directories the search is restricted to.
    registry_dir:
        Path prefix whose matches are ignored (the registry's own files).
    """

    def __init__(
        self,
        search: WordSearch,
        *,
        scan_directories: Sequence[str],
        registry_dir: str,
    ) -> None:
        self._search = search
        self._scan_directories = tuple(scan_directories)
        self._registry_dir = registry_dir

    def find_orphaned(self, flag_names: Iterable[str]) -> list[str]:
        orphaned: list[str] = []
        for flag in flag_names:
            if not _SEARCHABLE_NAME_RE.match(flag):
                logger.debug("not searching for unsafe flag name %r", flag)
                continue
            files = [
                f
                for f in self._search.files_containing(flag, self._scan_directories)
                if not f.startswith(self._registry_dir)
            ]
            if not files:
                orphaned.append(flag)
        return sorted(orphaned)
