"""Flag-reference extraction from changed source lines.

Per line, :class:`FlagReferenceExtractor` produces three derived forms
(comment-stripped, string-masked, string-stripped) and runs the matcher table
over them:

1. bracket access with a quoted name — against the comment-stripped line,
   rejecting matches that start inside an enclosing string;
2. dot access — against the sanitized line;
3. bracket access with a constant — sanitized, resolved via
   :class:`~flag_audit.constants.ConstantResolver`;
4. destructuring — sanitized, unless the caller joined lines artificially.

Expressions wrapped across two or three physical lines are caught by also
scanning joined pairs and triples of adjacent lines within one chunk.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Sequence

from flag_audit.constants import ConstantResolver
from flag_audit.lexical import sanitize, strip_comments
from flag_audit.model import MatcherKind, Surface
from flag_audit.model.reference import FlagReference
from flag_audit.scanner.destructuring import (
    DEFAULT_BACKWARD_WINDOW,
    match_destructuring,
    multiline_destructuring,
)
from flag_audit.scanner.patterns import DEFAULT_FLAG_GETTER, DEFAULT_MATCHERS, Matcher

logger = logging.getLogger(__name__)

NON_FLAG_NAMES: frozenset[str] = frozenset(
    {
        "constructor",
        "prototype",
        "hasOwnProperty",
        "toString",
        "valueOf",
        "toJSON",
        "keys",
        "values",
        "entries",
        "length",
        "name",
        "type",
        "status",
        "default",
        "then",
        "catch",
        "finally",
        "map",
        "filter",
        "reduce",
        "forEach",
        "find",
        "some",
        "every",
        "includes",
        "undefined",
        "bind",
        "call",
        "apply",
    }
)

_MIN_FLAG_NAME_LENGTH = 3


def is_likely_flag_name(name: str, deny: frozenset[str] = NON_FLAG_NAMES) -> bool:
    """Return True when *name* looks like a camelCase flag name."""
    if name in deny:
        return False
    if len(name) < _MIN_FLAG_NAME_LENGTH:
        return False
    return "a" <= name[0] <= "z"


def join_lines(lines: Sequence[str]) -> str:
    """Concatenate physically adjacent lines into one synthetic line.

    Every line but the last is comment-stripped; the seams are trimmed so
    ``remoteFeatureFlags`` + ``  .someFlag`` reads as one expression.
    """
    if len(lines) == 1:
        return lines[0]
    head = strip_comments(lines[0]).rstrip()
    middle = "".join(strip_comments(line).strip() for line in lines[1:-1])
    return f"{head}{middle}{lines[-1].lstrip()}"


class FlagReferenceExtractor:
    """Extracts :class:`FlagReference` objects from lines and chunks.

    Parameters
    ----------
    resolver:
        Constant table used for ``bag[CONSTANT]`` access.
    matchers:
        Matcher table; defaults to :data:`DEFAULT_MATCHERS`.
    non_flag_names:
        Deny-list for the plausibility filter.
    flag_getter:
        Token that triggers the backward multi-line destructuring scan.
    destructuring_window:
        How many lines the backward scan may look up.
    """

    def __init__(
        self,
        resolver: ConstantResolver | None = None,
        *,
        matchers: Iterable[Matcher] | None = None,
        non_flag_names: frozenset[str] = NON_FLAG_NAMES,
        flag_getter: str = DEFAULT_FLAG_GETTER,
        destructuring_window: int = DEFAULT_BACKWARD_WINDOW,
    ) -> None:
        self._resolver = resolver or ConstantResolver()
        self._matchers = tuple(matchers) if matchers is not None else DEFAULT_MATCHERS
        self._deny = frozenset(non_flag_names)
        self._flag_getter = flag_getter
        self._window = destructuring_window

    def _accept(self, name: str) -> bool:
        return is_likely_flag_name(name, self._deny)

    # ── single line ──────────────────────────────────────────────────

    def extract(
        self,
        line: str,
        file_path: str,
        *,
        skip_destructuring: bool = False,
    ) -> list[FlagReference]:
        """Return every flag reference found in *line*.

        Set *skip_destructuring* for synthetic joined lines, where brace
        matching across the seam is unreliable.
        """
        trimmed = line.strip()
        if trimmed.startswith("//") or trimmed.startswith("*"):
            return []

        comment_stripped, masked, sanitized = sanitize(line)
        surfaces = {
            Surface.COMMENT_STRIPPED: comment_stripped,
            Surface.SANITIZED: sanitized,
        }

        names: list[str] = []
        for matcher in self._matchers:
            if matcher.kind is MatcherKind.DESTRUCTURING:
                continue
            text = surfaces[matcher.surface]
            for m in matcher.pattern.finditer(text):
                names.extend(self._names_from_match(matcher, m, text, masked))

        if not skip_destructuring:
            names.extend(
                name
                for name in match_destructuring(sanitized, self._matchers)
                if self._accept(name)
            )

        return [FlagReference(flag_name=name, file_path=file_path) for name in names]

    def _names_from_match(
        self, matcher: Matcher, m: re.Match[str], text: str, masked: str
    ) -> list[str]:
        if matcher.kind is MatcherKind.BRACKET_LITERAL:
            start = m.start()
            # Started inside an enclosing string literal.
            if masked[start : start + 1] == " " and text[start : start + 1] != " ":
                return []
            name = m.group(1) or m.group(2) or m.group(3)
            return [name] if name and self._accept(name) else []

        if matcher.kind is MatcherKind.DOT_ACCESS:
            name = m.group(1)
            return [name] if self._accept(name) else []

        if matcher.kind is MatcherKind.BRACKET_CONSTANT:
            expr = m.group(1)
            flag_name = self._resolver.flag_name_for(expr)
            if flag_name is None:
                logger.debug("skipping runtime bracket expression %s", expr)
                return []
            return [flag_name]

        return []

    # ── chunks ───────────────────────────────────────────────────────

    def extract_chunk(self, chunk: Sequence[str], file_path: str) -> list[FlagReference]:
        """Scan one contiguous run of added lines.

        Covers each line on its own, every adjacent pair and triple joined
        into one line, and destructuring whose ``{`` opens lines earlier.
        """
        refs: list[FlagReference] = []
        for line in chunk:
            refs.extend(self.extract(line, file_path))

        for i in range(len(chunk) - 1):
            refs.extend(
                self.extract(join_lines(chunk[i : i + 2]), file_path, skip_destructuring=True)
            )
            if i < len(chunk) - 2:
                refs.extend(
                    self.extract(join_lines(chunk[i : i + 3]), file_path, skip_destructuring=True)
                )

        refs.extend(
            FlagReference(flag_name=name, file_path=file_path)
            for name in multiline_destructuring(
                chunk,
                self._matchers,
                trigger=self._flag_getter,
                accept=self._accept,
                window=self._window,
            )
        )
        return refs

    def extract_lines(self, lines: Iterable[str], file_path: str) -> list[FlagReference]:
        """Scan unrelated lines one by one (used for removed lines)."""
        refs: list[FlagReference] = []
        for line in lines:
            refs.extend(self.extract(line, file_path))
        return refs
