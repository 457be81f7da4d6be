"""Known flag-name constants — resolves ``remoteFeatureFlags[CONSTANT]``.

The table is built once per run from:

* **Enum mappings** — every ``Enum.Member`` of an enum-like mapping.  These
  come either inline from configuration or from an ``export enum`` block read
  out of a TypeScript source file.
* **File sources** — named constants read as plain text from their defining
  file (``export const NAME = 'value'``).  Those files are never executed;
  importing them in the real application would pull in runtime-only APIs.

A failed file lookup just leaves the constant out of the table.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping

logger = logging.getLogger(__name__)

_STATIC_DOTTED_RE = re.compile(r"^[A-Z]\w*\.[A-Z]\w*$", re.ASCII)
_ENUM_MEMBER_RE = re.compile(
    r"""(\w+)\s*=\s*(?:'([^']*)'|"([^"]*)"|`([^`]*)`)""",
    re.ASCII,
)

UNRESOLVED_TEMPLATE = "<unresolved constant: {expr}>"


@dataclass(frozen=True)
class FileSource:
    """A constant whose value is read from its defining source file."""

    key: str
    file: str
    export_name: str


@dataclass(frozen=True)
class EnumSource:
    """An ``export enum`` block whose members are read from a source file."""

    name: str
    file: str


# Defaults for the extension layout this tool was written against.
DEFAULT_ENUM_SOURCES: tuple[EnumSource, ...] = (
    EnumSource(name="FeatureFlagNames", file="shared/modules/feature-flags.ts"),
)

DEFAULT_FILE_SOURCES: tuple[FileSource, ...] = (
    FileSource(
        key="ASSETS_UNIFY_STATE_FLAG",
        file="shared/lib/assets-unify-state/remote-feature-flag.ts",
        export_name="ASSETS_UNIFY_STATE_FLAG",
    ),
    FileSource(
        key="STATE_1_FLAG",
        file="ui/selectors/multichain-accounts/feature-flags.ts",
        export_name="STATE_1_FLAG",
    ),
    FileSource(
        key="STATE_2_FLAG",
        file="ui/selectors/multichain-accounts/feature-flags.ts",
        export_name="STATE_2_FLAG",
    ),
    FileSource(
        key="MERKL_FEATURE_FLAG_KEY",
        file="ui/components/app/musd/constants.ts",
        export_name="MERKL_FEATURE_FLAG_KEY",
    ),
)


def is_static_looking(expr: str) -> bool:
    """True for ``Upper.Upper`` or a bare identifier with a leading capital."""
    if "." in expr:
        return bool(_STATIC_DOTTED_RE.match(expr))
    return expr[:1].isascii() and expr[:1].isupper()


def expand_enum(enum_name: str, members: Mapping[str, str]) -> dict[str, str]:
    """``{"Foo": "fooFlag"}`` → ``{"EnumName.Foo": "fooFlag"}``."""
    return {f"{enum_name}.{member}": value for member, value in members.items()}


def _read_text(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("cannot read %s: %s", path, exc)
        return None


def resolve_constant_from_file(path: Path | str, constant_name: str) -> str | None:
    """Extract the string literal assigned by ``export const <name> = ...``.

    Accepts an optional type annotation and single-, double- or
    backtick-quoted values.  Returns *None* if the file is unreadable or has
    no matching declaration.
    """
    content = _read_text(Path(path))
    if content is None:
        return None
    pattern = re.compile(
        rf"export\s+const\s+{re.escape(constant_name)}(?:\s*:[^=]+)?\s*=\s*"
        r"""(?:'([^']+)'|"([^"]+)"|`([^`]+)`)"""
    )
    m = pattern.search(content)
    if m is None:
        return None
    return m.group(1) or m.group(2) or m.group(3)


def read_enum_from_file(path: Path | str, enum_name: str) -> dict[str, str]:
    """Read string members of ``export enum <name> { ... }`` from a TS file.

    Only ``Member = 'literal'`` members are collected; computed members are
    ignored.  Returns an empty dict when the file or enum is missing.
    """
    content = _read_text(Path(path))
    if content is None:
        return {}
    header = re.compile(rf"\benum\s+{re.escape(enum_name)}\s*\{{")
    m = header.search(content)
    if m is None:
        return {}
    close = content.find("}", m.end())
    body = content[m.end() : close if close != -1 else len(content)]
    members: dict[str, str] = {}
    for member in _ENUM_MEMBER_RE.finditer(body):
        value = next(g for g in member.groups()[1:] if g is not None)
        members[member.group(1)] = value
    return members


def build_known_flag_constants(
    *,
    root: Path | str = ".",
    enums: Mapping[str, Mapping[str, str]] | None = None,
    enum_sources: Iterable[EnumSource] = (),
    file_sources: Iterable[FileSource] = (),
) -> dict[str, str]:
    """Build the constant-expression → flag-name table.

    Inline *enums* win over members read from *enum_sources* with the same
    name.  File sources are resolved relative to *root*.
    """
    base = Path(root)
    constants: dict[str, str] = {}

    for source in enum_sources:
        members = read_enum_from_file(base / source.file, source.name)
        if not members:
            logger.debug("enum %s not found in %s", source.name, source.file)
        constants.update(expand_enum(source.name, members))

    for enum_name, members in (enums or {}).items():
        constants.update(expand_enum(enum_name, members))

    for source in file_sources:
        resolved = resolve_constant_from_file(base / source.file, source.export_name)
        if resolved:
            constants[source.key] = resolved
        else:
            logger.debug("constant %s unavailable from %s", source.key, source.file)

    return constants


class ConstantResolver:
    """Read-only lookup over a known-constant table."""

    def __init__(self, table: Mapping[str, str] | None = None) -> None:
        self._table = dict(table or {})

    def __len__(self) -> int:
        return len(self._table)

    def __contains__(self, expr: object) -> bool:
        return expr in self._table

    def resolve(self, expr: str) -> str | None:
        return self._table.get(expr)

    def as_dict(self) -> dict[str, str]:
        return dict(self._table)

    def flag_name_for(self, expr: str) -> str | None:
        """Map a bracket expression to the flag name it should be reported as.

        Known constants resolve to their value.  Unknown static-looking
        constants become ``<unresolved constant: EXPR>`` so they always fail
        the check.  Lowercase runtime variables yield *None*.
        """
        resolved = self.resolve(expr)
        if resolved:
            return resolved
        if is_static_looking(expr):
            return UNRESOLVED_TEMPLATE.format(expr=expr)
        return None
