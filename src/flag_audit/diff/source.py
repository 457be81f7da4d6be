"""Diff retrieval via ``git diff`` against a validated base branch."""

from __future__ import annotations

import logging
import os
import re
import subprocess
from pathlib import Path
from typing import Mapping, Sequence

from flag_audit.errors import DiffUnavailableError, InvalidBaseBranchError

logger = logging.getLogger(__name__)

_BASE_BRANCH_RE = re.compile(r"[\w./-]+", re.ASCII)

DEFAULT_BASE_BRANCH = "main"

_GIT_TIMEOUT = 120


def validate_base_branch(name: str) -> str:
    """Return *name* unchanged, or raise :class:`InvalidBaseBranchError`.

    Runs before any git invocation so the value can never smuggle options or
    shell syntax into the command line.
    """
    if not _BASE_BRANCH_RE.fullmatch(name):
        raise InvalidBaseBranchError(name)
    return name


def resolve_base_branch(
    cli_value: str | None = None,
    env: Mapping[str, str] | None = None,
) -> str:
    """Pick the base branch: ``GITHUB_BASE_REF``, then *cli_value*, then ``main``."""
    if env is None:
        env = os.environ
    candidate = env.get("GITHUB_BASE_REF") or cli_value or DEFAULT_BASE_BRANCH
    return validate_base_branch(candidate)


class GitDiffSource:
    """Computes the diff between a base branch and ``HEAD`` for a set of directories.

    Parameters
    ----------
    root:
        Repository root (``git -C`` target).
    directories:
        Pathspecs the diff is restricted to.
    """

    def __init__(self, root: Path | str = ".", directories: Sequence[str] = ()) -> None:
        self.root = Path(root)
        self.directories = tuple(directories)

    def _run_git(self, *args: str) -> str:
        result = subprocess.run(
            ["git", "-C", str(self.root), *args],
            capture_output=True,
            encoding="utf-8",
            errors="replace",
            timeout=_GIT_TIMEOUT,
        )
        if result.returncode != 0:
            raise RuntimeError(f"git {' '.join(args)} failed: {result.stderr.strip()}")
        return result.stdout

    @staticmethod
    def _ref_spellings(base_branch: str) -> list[str]:
        return [
            f"origin/{base_branch}...HEAD",
            f"origin/{base_branch}..HEAD",
            f"{base_branch}...HEAD",
            f"{base_branch}..HEAD",
        ]

    def diff(self, base_branch: str) -> str:
        """Return the unified diff text, trying each ref spelling in turn.

        Raises :class:`DiffUnavailableError` when every spelling fails.
        """
        validate_base_branch(base_branch)
        last_error: str | None = None
        for spec in self._ref_spellings(base_branch):
            try:
                logger.debug("git diff %s -- %s", spec, " ".join(self.directories))
                return self._run_git("diff", spec, "--", *self.directories)
            except (RuntimeError, OSError, subprocess.TimeoutExpired) as exc:
                last_error = str(exc)
                logger.debug("diff spelling %s failed: %s", spec, exc)
        raise DiffUnavailableError(base_branch, last_error)

    def file_diff(self, base_branch: str, path: str) -> str:
        """Best-effort diff of a single file (empty string if unavailable)."""
        validate_base_branch(base_branch)
        for spec in (f"origin/{base_branch}...HEAD", f"{base_branch}...HEAD"):
            try:
                return self._run_git("diff", spec, "--", path)
            except (RuntimeError, OSError, subprocess.TimeoutExpired) as exc:
                logger.debug("registry diff via %s failed: %s", spec, exc)
        return ""
