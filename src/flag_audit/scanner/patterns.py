"""Matcher table — the syntactic shapes that count as a flag access.

Each :class:`Matcher` pairs a compiled regex with its :class:`MatcherKind`
(which decides how a match becomes candidate names) and the
:class:`Surface` it runs against.  The table is built from the flag-bag
identifier and its getter so a project can point the scanner at its own
accessor names.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from flag_audit.model import MatcherKind, Surface

DEFAULT_FLAG_BAG = "remoteFeatureFlags"
DEFAULT_FLAG_GETTER = "getRemoteFeatureFlags"

# Balanced parens with one level of nesting: (arg) or (fn(arg))
_ARGS = r"[^)]*(?:\([^)]*\)[^)]*)*"

_QUOTED_FLAG = r"(?:'(\w+)'|\"(\w+)\"|`(\w+)`)"

# Identifier, optionally followed by one ``.member``
_CONSTANT_EXPR = r"([A-Za-z_]\w*(?:\.\w+)?)"


@dataclass(frozen=True)
class Matcher:
    """One flag-access pattern."""

    kind: MatcherKind
    surface: Surface
    pattern: re.Pattern[str]
    label: str


def _compile(source: str) -> re.Pattern[str]:
    # ASCII so ``\w`` matches JavaScript's identifier-ish class.
    return re.compile(source, re.ASCII)


def build_matchers(
    flag_bag: str = DEFAULT_FLAG_BAG,
    flag_getter: str = DEFAULT_FLAG_GETTER,
) -> tuple[Matcher, ...]:
    """Return the ordered matcher table for the given accessor names."""
    bag = re.escape(flag_bag)
    getter = re.escape(flag_getter)
    getter_call = rf"{getter}\({_ARGS}\)"

    literal = (MatcherKind.BRACKET_LITERAL, Surface.COMMENT_STRIPPED)
    dot = (MatcherKind.DOT_ACCESS, Surface.SANITIZED)
    const = (MatcherKind.BRACKET_CONSTANT, Surface.SANITIZED)
    destructure = (MatcherKind.DESTRUCTURING, Surface.SANITIZED)

    table: list[tuple[tuple[MatcherKind, Surface], str, str]] = [
        (literal, rf"{bag}(?:\?\.)?\[\s*{_QUOTED_FLAG}\s*\]", "bag-bracket-literal"),
        (literal, rf"{getter_call}(?:\?\.)?\[\s*{_QUOTED_FLAG}\s*\]", "getter-bracket-literal"),
        (dot, rf"{bag}\??\.(\w+)", "bag-dot"),
        (dot, rf"state\.metamask\.{bag}\??\.(\w+)", "state-bag-dot"),
        (dot, rf"remoteFeatureFlagController\.state\.{bag}\??\.(\w+)", "controller-bag-dot"),
        (dot, rf"{getter_call}\??\.(\w+)", "getter-dot"),
        (const, rf"{bag}(?:\?\.)?\[{_CONSTANT_EXPR}\]", "bag-bracket-constant"),
        (const, rf"{getter_call}(?:\?\.)?\[{_CONSTANT_EXPR}\]", "getter-bracket-constant"),
        (destructure, rf"\{{\s*([^}}]+)\}}\s*(?::[^=]+)?\s*=\s*{getter}", "destructure-getter"),
        (
            destructure,
            rf"\{{\s*([^}}]+)\}}\s*(?::[^=]+)?\s*=\s*useSelector\s*\(\s*{getter}",
            "destructure-selector",
        ),
        (
            destructure,
            rf"useSelector\s*\(\s*{getter}\s*\)\s*as\s*\{{\s*([^}}]+)\}}",
            "destructure-selector-cast",
        ),
        (destructure, rf"{bag}:\s*\{{\s*([^}}]+)\}}", "destructure-bag-shape"),
    ]

    return tuple(
        Matcher(kind=kind, surface=surface, pattern=_compile(source), label=label)
        for (kind, surface), source, label in table
    )


DEFAULT_MATCHERS: tuple[Matcher, ...] = build_matchers()
