"""Destructured flag names — ``const { a, b: alias } = getRemoteFeatureFlags()``."""

from __future__ import annotations

import re
from typing import Callable, Iterable, Sequence

from flag_audit.lexical import strip_comments, strip_strings
from flag_audit.model import MatcherKind
from flag_audit.scanner.patterns import Matcher

DEFAULT_BACKWARD_WINDOW = 10

_PART_SPLIT_RE = re.compile(r"[,;]")
_LEADING_WORD_RE = re.compile(r"^(\w+)", re.ASCII)


def destructured_identifiers(content: str) -> list[str]:
    """Return the source-side field names in a destructuring body.

    ``"a, b: renamed, ...rest"`` → ``["a", "b"]``.
    """
    ids: list[str] = []
    for part in _PART_SPLIT_RE.split(content):
        trimmed = part.strip()
        if not trimmed or trimmed.startswith("..."):
            continue
        colon = trimmed.find(":")
        raw = trimmed[:colon].strip() if colon > 0 else trimmed
        m = _LEADING_WORD_RE.match(raw)
        if m:
            ids.append(m.group(1))
    return ids


def match_destructuring(
    sanitized: str,
    matchers: Iterable[Matcher],
) -> list[str]:
    """Run every destructuring matcher over *sanitized* and collect field names."""
    names: list[str] = []
    for matcher in matchers:
        if matcher.kind is not MatcherKind.DESTRUCTURING:
            continue
        for m in matcher.pattern.finditer(sanitized):
            names.extend(destructured_identifiers(m.group(1)))
    return names


def multiline_destructuring(
    chunk: Sequence[str],
    matchers: Iterable[Matcher],
    *,
    trigger: str,
    accept: Callable[[str], bool],
    window: int = DEFAULT_BACKWARD_WINDOW,
) -> list[str]:
    """Find destructuring whose ``{`` sits on an earlier line of *chunk*.

    For every line containing *trigger* (the getter name), walk backwards at
    most *window* lines, prepending comment-stripped text until a line with
    ``{`` is reached, then match the joined text.  Blocks wider than *window*
    lines are not detected.
    """
    matchers = tuple(matchers)
    names: list[str] = []
    for i, line in enumerate(chunk):
        if trigger not in line:
            continue
        combined = ""
        for j in range(i, max(i - window, 0) - 1, -1):
            stripped = strip_comments(chunk[j])
            combined = f"{stripped} {combined}"
            if "{" in stripped:
                break
        sanitized = strip_strings(combined)
        names.extend(
            name for name in match_destructuring(sanitized, matchers) if accept(name)
        )
    return names
