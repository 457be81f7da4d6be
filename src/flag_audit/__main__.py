"""CLI entry-point for flag_audit.

Usage:
    python -m flag_audit check [BASE_BRANCH] [--root DIR] [--config FILE]
                               [--registry FILE] [--diff-file FILE|-] [--json] [-v]
    python -m flag_audit registry list [--status active|deprecated] [--json]
    python -m flag_audit registry show NAME
    python -m flag_audit registry defaults [--api-response]
    python -m flag_audit constants [--json]

The base branch comes from ``GITHUB_BASE_REF`` when set, else the positional
argument, else ``main``.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from flag_audit import __version__
from flag_audit.core.config import CheckConfig, load_config
from flag_audit.core.runner import build_resolver, run_check
from flag_audit.diff.source import GitDiffSource, resolve_base_branch
from flag_audit.errors import FlagAuditError
from flag_audit.model import FlagStatus
from flag_audit.orphans import GitGrepSearch
from flag_audit.registry import FeatureFlagRegistry, load_registry, registry_changes
from flag_audit.report import render_console
from flag_audit.utils.exit_codes import ExitCode
from flag_audit.utils.json_norm import stable_json_dump


def _configure_logging(verbose: bool) -> None:
    level_name = os.getenv("FLAG_AUDIT_LOG_LEVEL", "").upper()
    if verbose:
        level = logging.DEBUG
    elif level_name in logging.getLevelNamesMapping():
        level = logging.getLevelNamesMapping()[level_name]
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--root",
        type=Path,
        default=Path("."),
        help="Repository root (default: current directory).",
    )
    p.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML configuration file (default: <root>/.flag-audit.yml).",
    )
    p.add_argument(
        "--json",
        dest="json_out",
        action="store_true",
        default=False,
        help="Print machine-readable JSON to stdout.",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="flag-audit",
        description="Check that feature flags referenced in a diff are registered.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = p.add_subparsers(dest="command")

    # ── check ────────────────────────────────────────────────────────
    check_p = sub.add_parser(
        "check",
        help="Scan the diff against a base branch for unregistered flags.",
    )
    check_p.add_argument(
        "base_branch",
        nargs="?",
        default=None,
        help="Base branch (overridden by GITHUB_BASE_REF; default: main).",
    )
    check_p.add_argument(
        "--registry",
        type=Path,
        default=None,
        help="Registry JSON (default: from configuration).",
    )
    check_p.add_argument(
        "--diff-file",
        dest="diff_file",
        default=None,
        help="Read the unified diff from FILE ('-' for stdin) instead of git.",
    )
    _add_common(check_p)

    # ── registry ─────────────────────────────────────────────────────
    reg_p = sub.add_parser("registry", help="Inspect the feature flag registry.")
    reg_sub = reg_p.add_subparsers(dest="registry_command")
    reg_list_p = reg_sub.add_parser("list", help="List registered flag names.")
    reg_list_p.add_argument(
        "--status",
        choices=[s.value for s in FlagStatus],
        default=None,
        help="Only flags with this lifecycle status.",
    )
    reg_list_p.add_argument("--registry", type=Path, default=None)
    _add_common(reg_list_p)

    reg_show_p = reg_sub.add_parser("show", help="Print one registry entry as JSON.")
    reg_show_p.add_argument("name", help="Flag name.")
    reg_show_p.add_argument("--registry", type=Path, default=None)
    _add_common(reg_show_p)

    reg_defaults_p = reg_sub.add_parser(
        "defaults",
        help="Print production defaults of remote flags shipped in production.",
    )
    reg_defaults_p.add_argument(
        "--api-response",
        dest="api_response",
        action="store_true",
        default=False,
        help="Shape the output like the client-config API (one key per item).",
    )
    reg_defaults_p.add_argument("--registry", type=Path, default=None)
    _add_common(reg_defaults_p)

    # ── constants ────────────────────────────────────────────────────
    const_p = sub.add_parser(
        "constants",
        help="Print the resolved flag-constant table.",
    )
    _add_common(const_p)

    return p


def _load(args: argparse.Namespace) -> CheckConfig:
    return load_config(args.root, args.config)


def _registry_for(args: argparse.Namespace, config: CheckConfig) -> FeatureFlagRegistry:
    path = getattr(args, "registry", None) or config.registry_path
    return load_registry(path)


def _read_diff_file(spec: str) -> str:
    # Changed files may hold non-UTF-8 bytes; decode lossily like git output.
    if spec == "-":
        return sys.stdin.buffer.read().decode("utf-8", errors="replace")
    return Path(spec).read_text(encoding="utf-8", errors="replace")


def _handle_check(args: argparse.Namespace) -> int:
    """Dispatch ``flag-audit check``."""
    info = sys.stderr if args.json_out else sys.stdout

    base_branch = resolve_base_branch(args.base_branch)
    config = _load(args)
    print(
        f"\nChecking feature flag references against registry (base: {base_branch})...\n",
        file=info,
    )

    registry = _registry_for(args, config)
    print(f"Registry contains {len(registry)} flags", file=info)

    changes: tuple[list[str], list[str]] = ([], [])
    if args.diff_file is not None:
        diff_text = _read_diff_file(args.diff_file)
    else:
        source = GitDiffSource(config.root, config.scan_directories)
        diff_text = source.diff(base_branch)
        changes = registry_changes(source.file_diff(base_branch, config.registry_file_rel))

    if not diff_text.strip():
        print("No relevant diff found. Nothing to check.", file=info)
        return ExitCode.SUCCESS

    added, removed = changes
    if added or removed:
        print("Registry file was modified in this change:", file=info)
        if added:
            print(f"  Added:   {', '.join(added)}", file=info)
        if removed:
            print(f"  Removed: {', '.join(removed)}", file=info)
        print("", file=info)

    report = run_check(
        diff_text,
        config=config,
        registered=registry.registered_flag_names(),
        search=GitGrepSearch(config.root),
        base_branch=base_branch,
        registry_changes=changes,
    )

    if args.json_out:
        stable_json_dump(report.to_dict(), sys.stdout)
    else:
        render_console(report)
    return report.exit_code


def _handle_registry(args: argparse.Namespace) -> int:
    """Dispatch ``flag-audit registry list | show | defaults``."""
    if args.registry_command not in ("list", "show", "defaults"):
        print("error: use 'registry list', 'show' or 'defaults'.", file=sys.stderr)
        return ExitCode.ERROR

    config = _load(args)
    registry = _registry_for(args, config)

    if args.registry_command == "show":
        entry = registry.get_entry(args.name)
        if entry is None:
            print(f"error: flag not registered: {args.name}", file=sys.stderr)
            return ExitCode.ERROR
        stable_json_dump(entry.to_dict(), sys.stdout)
        return ExitCode.SUCCESS

    if args.registry_command == "defaults":
        if args.api_response:
            stable_json_dump(registry.production_remote_api_response(), sys.stdout)
        else:
            stable_json_dump(registry.production_remote_defaults(), sys.stdout)
        return ExitCode.SUCCESS

    if args.status:
        entries = registry.entries_by_status(FlagStatus(args.status))
    else:
        entries = list(registry)

    if args.json_out:
        stable_json_dump([e.to_dict() for e in entries], sys.stdout)
    else:
        for entry in entries:
            print(entry.name)
    return ExitCode.SUCCESS


def _handle_constants(args: argparse.Namespace) -> int:
    """Dispatch ``flag-audit constants``."""
    config = _load(args)
    table = build_resolver(config).as_dict()
    if args.json_out:
        stable_json_dump(table, sys.stdout)
    else:
        for key in sorted(table):
            print(f"{key} -> {table[key]}")
    return ExitCode.SUCCESS


_HANDLERS = {
    "check": _handle_check,
    "registry": _handle_registry,
    "constants": _handle_constants,
}


def main(argv: list[str] | None = None) -> int:
    """Entry-point; returns an exit code (0 = clean, 1 = unregistered flags, 2 = error)."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    handler = _HANDLERS.get(args.command or "")
    if handler is None:
        parser.print_help(sys.stderr)
        return ExitCode.ERROR

    _configure_logging(getattr(args, "verbose", False))

    try:
        return int(handler(args))
    except FlagAuditError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return ExitCode.ERROR
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return ExitCode.ERROR


if __name__ == "__main__":
    raise SystemExit(main())
