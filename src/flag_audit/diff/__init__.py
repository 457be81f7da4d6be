"""Unified-diff parsing and diff retrieval."""

from flag_audit.diff.parse import parse_diff
from flag_audit.diff.source import GitDiffSource, resolve_base_branch, validate_base_branch

__all__ = [
    "GitDiffSource",
    "parse_diff",
    "resolve_base_branch",
    "validate_base_branch",
]
