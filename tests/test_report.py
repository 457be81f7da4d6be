"""Tests for report assembly and console rendering."""

from __future__ import annotations

import io
import json

from flag_audit.model.reference import FlagReference, UnregisteredFlag
from flag_audit.report import (
    ORPHAN_GUIDANCE,
    CheckReport,
    assemble_report,
    fold_references,
    render_console,
)
from flag_audit.utils.exit_codes import ExitCode
from flag_audit.utils.json_norm import stable_json_dumps


class TestFoldAndPartition:
    def test_fold_dedupes_files(self):
        refs = [
            FlagReference("aFlag", "ui/x.ts"),
            FlagReference("aFlag", "ui/x.ts"),
            FlagReference("aFlag", "ui/y.ts"),
            FlagReference("bFlag", "ui/x.ts"),
        ]
        assert fold_references(refs) == {
            "aFlag": {"ui/x.ts", "ui/y.ts"},
            "bFlag": {"ui/x.ts"},
        }

    def test_partition_is_complete(self):
        flag_to_files = {
            "knownFlag": {"ui/a.ts"},
            "zNewFlag": {"ui/b.ts", "ui/a.ts"},
            "aNewFlag": {"app/c.js"},
        }
        report = assemble_report(flag_to_files, {"knownFlag", "unusedFlag"})
        assert report.unique_flag_count == 3
        assert report.registered_count + len(report.unregistered) == report.unique_flag_count
        assert report.unregistered == (
            UnregisteredFlag("aNewFlag", ("app/c.js",)),
            UnregisteredFlag("zNewFlag", ("ui/a.ts", "ui/b.ts")),
        )

    def test_context_passed_through(self):
        report = assemble_report({}, set(), ["bFlag", "aFlag"], base_branch="develop")
        assert report.base_branch == "develop"
        assert report.orphaned == ("aFlag", "bFlag")


class TestCheckReport:
    def test_clean(self):
        report = CheckReport(unique_flag_count=1, registered_count=1)
        assert not report.failed
        assert not report.has_issues
        assert report.exit_code is ExitCode.SUCCESS

    def test_orphans_alone_do_not_fail(self):
        report = CheckReport(unique_flag_count=0, registered_count=0, orphaned=("goneFlag",))
        assert report.has_issues
        assert not report.failed
        assert report.exit_code is ExitCode.SUCCESS

    def test_unregistered_fails(self):
        report = CheckReport(
            unique_flag_count=1,
            registered_count=0,
            unregistered=(UnregisteredFlag("newFlag", ("ui/a.ts",)),),
        )
        assert report.failed
        assert report.exit_code is ExitCode.VIOLATION

    def test_to_dict_is_json_ready(self):
        report = CheckReport(
            unique_flag_count=1,
            registered_count=0,
            unregistered=(UnregisteredFlag("newFlag", ("ui/a.ts",)),),
            registry_added=("newFlag",),
        )
        data = json.loads(stable_json_dumps(report.to_dict()))
        assert data["unregistered_flags"] == [{"flag": "newFlag", "files": ["ui/a.ts"]}]
        assert data["registry_changes"] == {"added": ["newFlag"], "removed": []}
        assert data["exit_code"] == 1


class TestRenderConsole:
    def _render(self, report: CheckReport) -> tuple[str, str]:
        out, err = io.StringIO(), io.StringIO()
        render_console(report, out=out, err=err)
        return out.getvalue(), err.getvalue()

    def test_clean_summary(self):
        out, err = self._render(CheckReport(unique_flag_count=2, registered_count=2))
        assert "2 unique flag(s)" in out
        assert "All detected feature flags are registered." in out
        assert err == ""

    def test_unregistered_listed_with_files(self):
        report = CheckReport(
            unique_flag_count=1,
            registered_count=0,
            unregistered=(UnregisteredFlag("newFlag", ("ui/a.ts", "ui/b.ts")),),
        )
        out, err = self._render(report)
        assert "1 flag(s) are NOT registered" in out
        assert "- newFlag" in err
        assert "ui/a.ts" in err and "ui/b.ts" in err

    def test_orphans_listed_with_guidance(self):
        report = CheckReport(unique_flag_count=0, registered_count=0, orphaned=("goneFlag",))
        out, err = self._render(report)
        assert "may need removal" in out
        assert "- goneFlag" in err
        assert ORPHAN_GUIDANCE in err
        assert "All detected feature flags are registered." not in out
