"""Runner — wires diff parsing, extraction, partition and orphan detection.

This is the only entry point that turns diff text into a :class:`CheckReport`.
Collaborators (registry key set, text search, notifier) are passed in so the
CLI and tests can supply their own.
"""

from __future__ import annotations

import logging
from typing import Callable, Collection, Sequence

from flag_audit.constants import ConstantResolver, build_known_flag_constants
from flag_audit.core.config import CheckConfig
from flag_audit.diff.parse import parse_diff
from flag_audit.model.reference import DiffResult, FlagReference
from flag_audit.orphans import OrphanDetector, WordSearch, orphan_candidates
from flag_audit.report import CheckReport, assemble_report, fold_references
from flag_audit.scanner.extract import FlagReferenceExtractor
from flag_audit.scanner.patterns import build_matchers

_logger = logging.getLogger(__name__)

Notifier = Callable[[CheckReport], None]


def build_resolver(config: CheckConfig) -> ConstantResolver:
    """Build the known-constant table for *config* (reads source files as text)."""
    table = build_known_flag_constants(
        root=config.root,
        enums=config.enum_constants,
        enum_sources=config.enum_sources,
        file_sources=config.file_sources,
    )
    _logger.debug("resolved %d known flag constant(s)", len(table))
    return ConstantResolver(table)


def build_extractor(
    config: CheckConfig,
    resolver: ConstantResolver | None = None,
) -> FlagReferenceExtractor:
    return FlagReferenceExtractor(
        resolver if resolver is not None else build_resolver(config),
        matchers=build_matchers(config.flag_bag, config.flag_getter),
        non_flag_names=config.non_flag_names,
        flag_getter=config.flag_getter,
        destructuring_window=config.destructuring_window,
    )


def scan_diff(
    diff: DiffResult,
    config: CheckConfig,
    extractor: FlagReferenceExtractor,
) -> tuple[list[FlagReference], list[FlagReference]]:
    """Return ``(added_refs, removed_refs)`` for every scannable file in *diff*."""
    added: list[FlagReference] = []
    for path, chunks in diff.added.items():
        if not config.is_scannable(path):
            _logger.debug("skipping %s (not scannable)", path)
            continue
        for chunk in chunks:
            added.extend(extractor.extract_chunk(chunk, path))

    removed: list[FlagReference] = []
    for path, lines in diff.removed.items():
        if not config.is_scannable(path):
            continue
        removed.extend(extractor.extract_lines(lines, path))

    return added, removed


def _notify_best_effort(notifier: Notifier | None, report: CheckReport) -> None:
    """Invoke the side-channel notifier; failures are logged, never raised."""
    if notifier is None:
        return
    try:
        notifier(report)
    except Exception as exc:  # noqa: BLE001
        _logger.warning("Failed to publish check result: %s", exc)


def run_check(
    diff_text: str,
    *,
    config: CheckConfig,
    registered: Collection[str],
    search: WordSearch,
    extractor: FlagReferenceExtractor | None = None,
    notifier: Notifier | None = None,
    base_branch: str = "",
    registry_changes: tuple[Sequence[str], Sequence[str]] = ((), ()),
) -> CheckReport:
    """Run the full registry check over *diff_text*.

    The returned report's ``exit_code`` depends only on unregistered flags;
    the notifier's success or failure is never reflected in it.
    """
    extractor = extractor or build_extractor(config)
    registered_set = frozenset(registered)

    diff = parse_diff(diff_text)
    _logger.info("Found changes in %d file(s)", diff.changed_file_count)

    added_refs, removed_refs = scan_diff(diff, config, extractor)
    flag_to_files = fold_references(added_refs)

    candidates = orphan_candidates(removed_refs, flag_to_files.keys(), registered_set)
    detector = OrphanDetector(
        search,
        scan_directories=config.scan_directories,
        registry_dir=config.registry_dir,
    )
    orphaned = detector.find_orphaned(candidates) if candidates else []

    added_names, removed_names = registry_changes
    report = assemble_report(
        flag_to_files,
        registered_set,
        orphaned,
        base_branch=base_branch,
        registry_size=len(registered_set),
        changed_file_count=diff.changed_file_count,
        registry_added=tuple(added_names),
        registry_removed=tuple(removed_names),
    )

    _notify_best_effort(notifier, report)
    return report
