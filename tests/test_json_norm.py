"""Tests for the canonical JSON normalization layer."""

import json

from flag_audit.model import FlagStatus, FlagType
from flag_audit.registry import RegistryEntry
from flag_audit.utils.exit_codes import ExitCode
from flag_audit.utils.json_norm import stable_json_dump, stable_json_dumps


def test_stable_json_dumps_sorts_keys_and_adds_newline():
    s = stable_json_dumps({"b": 1, "a": 2})
    assert s.endswith("\n")
    assert s.index('"a"') < s.index('"b"')


def test_stable_json_dumps_registry_entry_enums():
    entry = RegistryEntry(
        name="oldFlow",
        type=FlagType.REMOTE,
        status=FlagStatus.DEPRECATED,
        in_prod=False,
        production_default={"enabled": True},
    )
    obj = json.loads(stable_json_dumps([entry.to_dict()]))
    assert obj == [
        {
            "name": "oldFlow",
            "type": "remote",
            "status": "deprecated",
            "inProd": False,
            "productionDefault": {"enabled": True},
        }
    ]


def test_stable_json_dumps_keeps_non_ascii():
    assert '"café"' in stable_json_dumps({"k": "café"})


def test_stable_json_dump_writes_to_file_like(tmp_path):
    out = tmp_path / "x.json"
    with out.open("w", encoding="utf-8") as f:
        stable_json_dump({"b": 1, "a": 2}, f)
    txt = out.read_text(encoding="utf-8")
    assert txt.endswith("\n")
    assert '"a"' in txt and '"b"' in txt


def test_exit_code_values():
    assert [int(c) for c in ExitCode] == [0, 1, 2]
