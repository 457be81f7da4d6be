"""Check configuration — immutable, built once per run.

Defaults match the extension repository layout.  A ``.flag-audit.yml`` at the
repository root (or ``--config PATH``) overrides them::

    registry_dir: test/e2e/feature-flags/
    scan_directories: [app/, ui/, shared/, test/]
    destructuring_window: 10
    constants:
      enums:
        FeatureFlagNames:
          Foo: fooFlag
      file_sources:
        - key: MY_FLAG
          file: ui/constants.ts
          export_name: MY_FLAG
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import jsonschema
import yaml

from flag_audit.constants import (
    DEFAULT_ENUM_SOURCES,
    DEFAULT_FILE_SOURCES,
    EnumSource,
    FileSource,
)
from flag_audit.contracts.load import validate_internal
from flag_audit.errors import ConfigError
from flag_audit.scanner.destructuring import DEFAULT_BACKWARD_WINDOW
from flag_audit.scanner.extract import NON_FLAG_NAMES
from flag_audit.scanner.patterns import DEFAULT_FLAG_BAG, DEFAULT_FLAG_GETTER

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".flag-audit.yml"
CONFIG_SCHEMA = "flag_audit_config.schema.json"

DEFAULT_REGISTRY_DIR = "test/e2e/feature-flags/"
DEFAULT_REGISTRY_FILENAME = "feature-flag-registry.json"
DEFAULT_SCAN_DIRECTORIES: tuple[str, ...] = ("app/", "ui/", "shared/", "test/")
DEFAULT_SCANNABLE_EXTENSIONS: frozenset[str] = frozenset({".ts", ".tsx", ".js", ".jsx"})


@dataclass(frozen=True)
class CheckConfig:
    """Immutable configuration for one registry check run."""

    root: Path = field(default_factory=lambda: Path("."))
    registry_dir: str = DEFAULT_REGISTRY_DIR
    registry_file: str = ""
    scan_directories: tuple[str, ...] = DEFAULT_SCAN_DIRECTORIES
    scannable_extensions: frozenset[str] = DEFAULT_SCANNABLE_EXTENSIONS
    destructuring_window: int = DEFAULT_BACKWARD_WINDOW
    flag_bag: str = DEFAULT_FLAG_BAG
    flag_getter: str = DEFAULT_FLAG_GETTER
    non_flag_names: frozenset[str] = NON_FLAG_NAMES
    enum_constants: Mapping[str, Mapping[str, str]] = field(default_factory=dict)
    enum_sources: tuple[EnumSource, ...] = DEFAULT_ENUM_SOURCES
    file_sources: tuple[FileSource, ...] = DEFAULT_FILE_SOURCES

    @property
    def registry_file_rel(self) -> str:
        """Repo-relative path of the registry JSON."""
        return self.registry_file or posixpath.join(self.registry_dir, DEFAULT_REGISTRY_FILENAME)

    @property
    def registry_path(self) -> Path:
        return self.root / self.registry_file_rel

    def is_scannable(self, file_path: str) -> bool:
        """Gate applied to each changed file before any extraction work."""
        if file_path.startswith(self.registry_dir):
            return False
        if posixpath.splitext(file_path)[1] not in self.scannable_extensions:
            return False
        return any(file_path.startswith(d) for d in self.scan_directories)


def _with_trailing_slash(path: str) -> str:
    return path if path.endswith("/") else path + "/"


def config_from_mapping(data: Mapping[str, Any], *, root: Path | str = ".") -> CheckConfig:
    """Validate *data* (decoded YAML) and overlay it on the defaults."""
    try:
        validate_internal(dict(data), CONFIG_SCHEMA)
    except jsonschema.ValidationError as exc:
        raise ConfigError(f"invalid configuration: {exc.message}") from exc

    kwargs: dict[str, Any] = {"root": Path(root)}
    if "registry_dir" in data:
        kwargs["registry_dir"] = _with_trailing_slash(data["registry_dir"])
    if "registry_file" in data:
        kwargs["registry_file"] = data["registry_file"]
    if "scan_directories" in data:
        kwargs["scan_directories"] = tuple(
            _with_trailing_slash(d) for d in data["scan_directories"]
        )
    if "scannable_extensions" in data:
        kwargs["scannable_extensions"] = frozenset(data["scannable_extensions"])
    if "destructuring_window" in data:
        kwargs["destructuring_window"] = data["destructuring_window"]
    if "flag_bag" in data:
        kwargs["flag_bag"] = data["flag_bag"]
    if "flag_getter" in data:
        kwargs["flag_getter"] = data["flag_getter"]
    if "extra_non_flag_names" in data:
        kwargs["non_flag_names"] = NON_FLAG_NAMES | frozenset(data["extra_non_flag_names"])

    constants = data.get("constants") or {}
    if "enums" in constants:
        kwargs["enum_constants"] = {
            name: dict(members) for name, members in constants["enums"].items()
        }
    if "enum_sources" in constants:
        kwargs["enum_sources"] = tuple(EnumSource(**s) for s in constants["enum_sources"])
    if "file_sources" in constants:
        kwargs["file_sources"] = tuple(FileSource(**s) for s in constants["file_sources"])

    return CheckConfig(**kwargs)


def load_config(root: Path | str = ".", path: Path | str | None = None) -> CheckConfig:
    """Load configuration for the repository at *root*.

    *path* defaults to ``<root>/.flag-audit.yml``; a missing default file means
    built-in defaults.  An explicitly given *path* must exist.
    """
    base = Path(root)
    cfg_path = Path(path) if path is not None else base / CONFIG_FILENAME
    if not cfg_path.exists():
        if path is not None:
            raise ConfigError(f"config file not found: {cfg_path}")
        logger.debug("no %s under %s, using defaults", CONFIG_FILENAME, base)
        return CheckConfig(root=base)

    try:
        data = yaml.safe_load(cfg_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"cannot read config {cfg_path}: {exc}") from exc

    if data is None:
        return CheckConfig(root=base)
    if not isinstance(data, dict):
        raise ConfigError(f"config {cfg_path} must be a mapping")
    logger.debug("loaded configuration from %s", cfg_path)
    return config_from_mapping(data, root=base)
