"""Single-line lexical sanitizer for JavaScript / TypeScript source.

Three transforms, all operating on one physical line:

* :func:`strip_comments` — drop ``// ...`` tails and ``/* ... */`` spans while
  leaving string literals and regex literals untouched.
* :func:`mask_strings` — replace string-literal contents with spaces.  The
  result has the same length as the input so character offsets line up.
* :func:`strip_strings` — collapse string-literal contents to nothing
  (``"abc"`` → ``""``) so identifier patterns cannot match inside strings.

Template literals get special treatment: the static text is string content,
while ``${...}`` interpolations are live code and pass through unchanged.

Known limitation: block-comment state is not carried across lines.  The body
lines of a multi-line ``/* ... */`` are scanned as ordinary code.
"""

from __future__ import annotations

from typing import Literal

# A ``/`` opens a regex literal when it is the first character of the line or
# the previous non-blank output character is one of these.
_REGEX_PRECEDERS = frozenset("=([!&|,;:?")

_QUOTES = frozenset("'\"`")

_MASK_FILL = " "


# ── comments ──────────────────────────────────────────────────────────


def _find_regex_close(line: str, start: int) -> int:
    """Return the index of the ``/`` closing a regex literal, or ``-1``.

    A ``/`` inside a ``[...]`` character class does not close the literal.
    Escaped characters (odd run of backslashes) are skipped.
    """
    in_char_class = False
    for k in range(start, len(line)):
        backslashes = 0
        while k - 1 - backslashes >= start and line[k - 1 - backslashes] == "\\":
            backslashes += 1
        if backslashes % 2 == 1:
            continue
        c = line[k]
        if c == "[":
            in_char_class = True
        elif c == "]" and in_char_class:
            in_char_class = False
        elif c == "/" and not in_char_class:
            return k
    return -1


def strip_comments(line: str) -> str:
    """Remove line and block comments from *line*, keeping strings and regexes."""
    out: list[str] = []
    in_single = in_double = in_template = False
    in_block = False
    escaped = False
    n = len(line)
    i = 0

    while i < n:
        ch = line[i]

        if escaped:
            escaped = False
            out.append(ch)
            i += 1
            continue

        if in_block:
            if ch == "*" and i + 1 < n and line[i + 1] == "/":
                in_block = False
                i += 2
            else:
                i += 1
            continue

        in_string = in_single or in_double or in_template

        if ch == "\\" and in_string:
            escaped = True
            out.append(ch)
            i += 1
            continue

        if ch == "'" and not in_double and not in_template:
            in_single = not in_single
        elif ch == '"' and not in_single and not in_template:
            in_double = not in_double
        elif ch == "`" and not in_single and not in_double:
            in_template = not in_template
        elif ch == "/" and not in_string:
            nxt = line[i + 1] if i + 1 < n else ""
            if nxt == "/":
                return "".join(out)
            if nxt == "*":
                in_block = True
                i += 2
                continue
            prev = "".join(out).rstrip()[-1:]
            if i == 0 or prev in _REGEX_PRECEDERS:
                close = _find_regex_close(line, i + 1)
                if close > i:
                    out.append(line[i : close + 1])
                    i = close + 1
                    continue

        out.append(ch)
        i += 1

    return "".join(out)


# ── strings ───────────────────────────────────────────────────────────


def _process_template_with_interpolation(
    line: str,
    start: int,
    expr_start: int,
    mode: Literal["strip", "mask"],
    out: list[str],
) -> int:
    """Handle a template literal that contains ``${``.

    *start* is the opening backtick, *expr_start* the ``$`` of the first
    interpolation.  Appends the processed text to *out* and returns the index
    just past the closing backtick (or ``len(line)`` when unterminated).

    ``depth`` counts open braces inside the current interpolation; ``0`` means
    we are back in static template text.  A backtick seen at depth 1 opens a
    nested template, which the next backtick at depth > 1 closes.
    """
    n = len(line)
    mask = mode == "mask"

    out.append("`")
    if mask:
        out.append(_MASK_FILL * (expr_start - start - 1))
    out.append("${")

    depth = 1
    k = expr_start + 2
    while k < n:
        c = line[k]
        if c == "\\":
            if depth > 0:
                out.append(c + (line[k + 1] if k + 1 < n else _MASK_FILL))
            elif mask:
                out.append(_MASK_FILL * 2)
            k += 2
            continue

        if depth == 0:
            if c == "`":
                out.append("`")
                return k + 1
            if c == "$" and k + 1 < n and line[k + 1] == "{":
                depth = 1
                out.append("${")
                k += 2
                continue
            if mask:
                out.append(_MASK_FILL)
        elif c == "$" and k + 1 < n and line[k + 1] == "{":
            out.append("${")
            depth += 1
            k += 1
        elif c == "{":
            out.append("{")
            depth += 1
        elif c == "}":
            out.append("}")
            depth -= 1
        elif c == "`":
            out.append("`")
            depth = depth + 1 if depth == 1 else depth - 1
        else:
            out.append(c)
        k += 1

    return n


def _process_strings(line: str, mode: Literal["strip", "mask"]) -> str:
    """Single-pass string processor shared by :func:`strip_strings` / :func:`mask_strings`."""
    out: list[str] = []
    n = len(line)
    i = 0

    while i < n:
        ch = line[i]
        if ch not in _QUOTES:
            out.append(ch)
            i += 1
            continue

        if ch == "`":
            j = i + 1
            has_expr = False
            while j < n:
                if line[j] == "\\":
                    j += 2
                    continue
                if line[j] == "$" and j + 1 < n and line[j + 1] == "{":
                    has_expr = True
                    break
                if line[j] == "`":
                    break
                j += 1
            if has_expr:
                i = _process_template_with_interpolation(line, i, j, mode, out)
                continue

        j = i + 1
        while j < n:
            if line[j] == "\\":
                j += 2
                continue
            if line[j] == ch:
                break
            j += 1
        if j >= n:
            # Dangling quote: emit it and keep scanning after it.
            out.append(ch)
            i += 1
            continue

        if mode == "mask":
            out.append(ch + _MASK_FILL * (j - i - 1) + ch)
        else:
            out.append(ch + ch)
        i = j + 1

    return "".join(out)


def strip_strings(line: str) -> str:
    """Collapse every string literal in *line* to its empty form."""
    return _process_strings(line, "strip")


def mask_strings(line: str) -> str:
    """Blank out string-literal contents in *line*, preserving its length."""
    return _process_strings(line, "mask")


def sanitize(line: str) -> tuple[str, str, str]:
    """Return ``(comment_stripped, masked, sanitized)`` forms of *line*."""
    comment_stripped = strip_comments(line)
    return (
        comment_stripped,
        mask_strings(comment_stripped),
        strip_strings(comment_stripped),
    )
