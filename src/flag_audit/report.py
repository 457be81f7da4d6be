"""Report assembly — registered / unregistered partition plus orphan warnings.

The check fails if and only if at least one unregistered flag was found.
Orphaned flags alone never fail it.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import IO, Any, Collection, Iterable, Mapping

from flag_audit.model.reference import FlagReference, UnregisteredFlag
from flag_audit.utils.exit_codes import ExitCode

ORPHAN_GUIDANCE = (
    "Consider removing these from the registry or marking them as deprecated."
)


def fold_references(refs: Iterable[FlagReference]) -> dict[str, set[str]]:
    """Fold references into a flag → files multimap."""
    flag_to_files: dict[str, set[str]] = {}
    for ref in refs:
        flag_to_files.setdefault(ref.flag_name, set()).add(ref.file_path)
    return flag_to_files


@dataclass(frozen=True)
class CheckReport:
    """Outcome of one registry check run."""

    unique_flag_count: int
    registered_count: int
    unregistered: tuple[UnregisteredFlag, ...] = ()
    orphaned: tuple[str, ...] = ()
    base_branch: str = ""
    registry_size: int = 0
    changed_file_count: int = 0
    registry_added: tuple[str, ...] = ()
    registry_removed: tuple[str, ...] = ()

    @property
    def failed(self) -> bool:
        return bool(self.unregistered)

    @property
    def has_issues(self) -> bool:
        return bool(self.unregistered or self.orphaned)

    @property
    def exit_code(self) -> ExitCode:
        return ExitCode.VIOLATION if self.failed else ExitCode.SUCCESS

    def to_dict(self) -> dict:
        return {
            "base_branch": self.base_branch,
            "registry_size": self.registry_size,
            "changed_file_count": self.changed_file_count,
            "unique_flag_count": self.unique_flag_count,
            "registered_count": self.registered_count,
            "unregistered_flags": [u.to_dict() for u in self.unregistered],
            "orphaned_flags": list(self.orphaned),
            "registry_changes": {
                "added": list(self.registry_added),
                "removed": list(self.registry_removed),
            },
            "failed": self.failed,
            "exit_code": int(self.exit_code),
        }


def assemble_report(
    flag_to_files: Mapping[str, Collection[str]],
    registered: Collection[str],
    orphaned: Iterable[str] = (),
    **context: Any,
) -> CheckReport:
    """Partition *flag_to_files* against the *registered* key set.

    Every discovered flag lands in exactly one bucket.  Unregistered rows are
    sorted by flag name, their files sorted and de-duplicated.  *context* is
    passed through to :class:`CheckReport` (base branch, counts, registry
    changes).
    """
    registered_set = set(registered)
    registered_count = 0
    unregistered: list[UnregisteredFlag] = []
    for flag, files in flag_to_files.items():
        if flag in registered_set:
            registered_count += 1
        else:
            unregistered.append(UnregisteredFlag(flag=flag, files=tuple(sorted(set(files)))))
    unregistered.sort(key=lambda u: u.flag)

    return CheckReport(
        unique_flag_count=len(flag_to_files),
        registered_count=registered_count,
        unregistered=tuple(unregistered),
        orphaned=tuple(sorted(set(orphaned))),
        **context,
    )


def render_console(
    report: CheckReport,
    *,
    out: IO[str] | None = None,
    err: IO[str] | None = None,
) -> None:
    """Print the human-readable summary (stdout) and problem blocks (stderr)."""
    out = out or sys.stdout
    err = err or sys.stderr

    print(f"Found changes in {report.changed_file_count} file(s)", file=out)
    print(
        f"\nResults: {report.unique_flag_count} unique flag(s) referenced in changed files",
        file=out,
    )
    print(f"  {report.registered_count} flag(s) are registered", file=out)
    print(f"  {len(report.unregistered)} flag(s) are NOT registered", file=out)
    if report.orphaned:
        print(
            f"  {len(report.orphaned)} flag(s) may need removal from the registry",
            file=out,
        )
    print("", file=out)

    if not report.has_issues:
        print("All detected feature flags are registered.", file=out)
        return

    if report.unregistered:
        print("Unregistered feature flags detected!\n", file=err)
        for row in report.unregistered:
            print(f"  - {row.flag}", file=err)
            for path in row.files:
                print(f"      {path}", file=err)

    if report.orphaned:
        print("\nFlags with no remaining codebase references:\n", file=err)
        for flag in report.orphaned:
            print(f"  - {flag}", file=err)
        print(f"\n{ORPHAN_GUIDANCE}\n", file=err)
