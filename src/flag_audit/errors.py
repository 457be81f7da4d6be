"""Exception hierarchy for the flag registry check."""

from __future__ import annotations


class FlagAuditError(Exception):
    """Base class for errors that abort a check run."""


class InvalidBaseBranchError(FlagAuditError, ValueError):
    """Raised when a base-branch name fails ``[\\w./-]+`` validation."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f'Invalid base branch name: "{value}"')


class DiffUnavailableError(FlagAuditError):
    """Raised when no ref spelling yields a diff against the base branch."""

    def __init__(self, base_branch: str, last_error: str | None = None) -> None:
        self.base_branch = base_branch
        self.last_error = last_error
        msg = (
            f'Could not compute diff against base branch "{base_branch}". '
            f"Ensure the base branch is fetched "
            f"(e.g. git fetch origin {base_branch} --depth=1)."
        )
        if last_error:
            msg += f" Last error: {last_error}"
        super().__init__(msg)


class RegistryLoadError(FlagAuditError):
    """Raised when the flag registry cannot be read or fails validation."""


class ConfigError(FlagAuditError):
    """Raised when the YAML configuration is unreadable or invalid."""
