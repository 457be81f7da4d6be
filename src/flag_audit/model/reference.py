"""Per-run data model: flag references, diff structure, report rows."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class FlagReference:
    """One matched flag occurrence in one changed file."""

    flag_name: str
    file_path: str


@dataclass(slots=True)
class DiffResult:
    """Per-file added chunks and removed lines parsed from a unified diff.

    ``added[path]`` is a list of chunks; each chunk is a run of physically
    adjacent ``+`` lines.  ``removed[path]`` is a flat list.  Every path
    touched by the diff has a key in both maps.
    """

    added: dict[str, list[list[str]]] = field(default_factory=dict)
    removed: dict[str, list[str]] = field(default_factory=dict)

    def touch(self, path: str) -> None:
        self.added.setdefault(path, [])
        self.removed.setdefault(path, [])

    @property
    def changed_file_count(self) -> int:
        """Number of files with at least one added chunk."""
        return sum(1 for chunks in self.added.values() if chunks)


@dataclass(frozen=True, slots=True)
class UnregisteredFlag:
    """A discovered flag name missing from the registry."""

    flag: str
    files: tuple[str, ...]

    def to_dict(self) -> dict:
        return {"flag": self.flag, "files": list(self.files)}
