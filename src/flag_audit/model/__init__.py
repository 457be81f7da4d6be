"""Enums shared across the scanner, registry and report layers."""

from __future__ import annotations

from enum import Enum


class FlagType(str, Enum):
    """Where a registered feature flag originates."""

    REMOTE = "remote"
    BUILD = "build"


class FlagStatus(str, Enum):
    """Lifecycle status of a registered feature flag."""

    ACTIVE = "active"
    DEPRECATED = "deprecated"


class MatcherKind(str, Enum):
    """Syntactic shape a flag-access matcher recognises."""

    BRACKET_LITERAL = "bracket_literal"
    DOT_ACCESS = "dot_access"
    BRACKET_CONSTANT = "bracket_constant"
    DESTRUCTURING = "destructuring"


class Surface(str, Enum):
    """Which derived form of a line a matcher runs against.

    ``COMMENT_STRIPPED`` keeps string contents visible (quoted flag names);
    ``SANITIZED`` has string contents removed.
    """

    COMMENT_STRIPPED = "comment_stripped"
    SANITIZED = "sanitized"
