"""Feature-flag registry — the central list of known flags.

The registry is a JSON document::

    {
      "synced_at": "2026-02-09",
      "flags": {
        "addBitcoinAccount": {
          "name": "addBitcoinAccount",
          "type": "remote",
          "status": "active",
          "inProd": true,
          "productionDefault": false
        }
      }
    }

validated against ``feature_flag_registry.schema.json``.  Every key must equal
its entry's ``name``.  The checker itself only needs the key set; the other
queries serve fixtures and the ``registry`` CLI command.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator

import jsonschema

from flag_audit.contracts.load import validate_instance
from flag_audit.errors import RegistryLoadError
from flag_audit.model import FlagStatus, FlagType

REGISTRY_SCHEMA = "feature_flag_registry.schema.json"

# ``"name": "flagName"`` inside a registry file diff line
_REGISTRY_NAME_RE = re.compile(r"""["']?name["']?\s*:\s*["'](\w+)["']""", re.ASCII)


@dataclass(frozen=True, slots=True)
class RegistryEntry:
    """One registered flag."""

    name: str
    type: FlagType
    status: FlagStatus
    in_prod: bool
    production_default: Any

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RegistryEntry:
        return cls(
            name=data["name"],
            type=FlagType(data["type"]),
            status=FlagStatus(data["status"]),
            in_prod=bool(data["inProd"]),
            production_default=data["productionDefault"],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "status": self.status,
            "inProd": self.in_prod,
            "productionDefault": self.production_default,
        }


class FeatureFlagRegistry:
    """Ordered, read-only view over registry entries."""

    def __init__(self, entries: dict[str, RegistryEntry]) -> None:
        for key, entry in entries.items():
            if key != entry.name:
                raise RegistryLoadError(
                    f"registry key {key!r} does not match entry name {entry.name!r}"
                )
        self._entries = dict(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[RegistryEntry]:
        return iter(self._entries.values())

    def registered_flag_names(self) -> list[str]:
        """Flag names in registry order."""
        return list(self._entries)

    def get_entry(self, name: str) -> RegistryEntry | None:
        return self._entries.get(name)

    def entries_by_status(self, status: FlagStatus) -> list[RegistryEntry]:
        return [e for e in self._entries.values() if e.status is status]

    def production_remote_defaults(self) -> dict[str, Any]:
        """``{name: productionDefault}`` for remote flags that ship in production."""
        return {
            e.name: e.production_default
            for e in self._entries.values()
            if e.type is FlagType.REMOTE and e.in_prod
        }

    def production_remote_api_response(self) -> list[dict[str, Any]]:
        """Production defaults shaped like the client-config API (one key per item)."""
        return [{name: value} for name, value in self.production_remote_defaults().items()]


def parse_registry(data: Any) -> FeatureFlagRegistry:
    """Validate a decoded registry document and build the registry."""
    try:
        validate_instance(data, REGISTRY_SCHEMA)
    except jsonschema.ValidationError as exc:
        raise RegistryLoadError(f"registry failed validation: {exc.message}") from exc
    entries = {key: RegistryEntry.from_dict(value) for key, value in data["flags"].items()}
    return FeatureFlagRegistry(entries)


def load_registry(path: Path | str) -> FeatureFlagRegistry:
    """Read and validate the registry JSON at *path*."""
    p = Path(path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except OSError as exc:
        raise RegistryLoadError(f"cannot read registry {p}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise RegistryLoadError(f"registry {p} is not valid JSON: {exc}") from exc
    return parse_registry(data)


def registry_changes(registry_diff: str) -> tuple[list[str], list[str]]:
    """Return ``(added, removed)`` flag names from the registry file's own diff."""
    added: list[str] = []
    removed: list[str] = []
    for line in registry_diff.split("\n"):
        m = _REGISTRY_NAME_RE.search(line)
        if m is None:
            continue
        if line.startswith("+") and not line.startswith("+++"):
            added.append(m.group(1))
        elif line.startswith("-") and not line.startswith("---"):
            removed.append(m.group(1))
    return added, removed
