"""Load and validate JSON/YAML documents against bundled schemas.

Usage::

    from flag_audit.contracts.load import validate_instance, validate_internal

    validate_instance(registry_dict, "feature_flag_registry.schema.json")
    validate_internal(config_dict, "flag_audit_config.schema.json")
"""

from __future__ import annotations

import json
from importlib import resources
from pathlib import Path
from typing import Any

import jsonschema

# ── public-facing schemas ───────────────────────────────────────────

SCHEMA_DIR = "data/schemas"


def _schema_path(directory: str, name: str) -> Path:
    """Resolve a bundled schema.

    Priority:
    1. ``src/flag_audit/<directory>/`` relative to this file
    2. pip-installed package data via importlib.resources
    """
    canonical = Path(__file__).resolve().parents[1] / directory / name
    if canonical.exists():
        return canonical
    with resources.as_file(resources.files("flag_audit") / directory / name) as p:
        return p


def load_schema(name: str) -> dict[str, Any]:
    """Load a public JSON schema by filename."""
    path = _schema_path(SCHEMA_DIR, name)
    return json.loads(path.read_text(encoding="utf-8"))


def validate_instance(instance: Any, schema_name: str) -> None:
    """Validate *instance* against the named schema.

    Raises ``jsonschema.ValidationError`` on failure.
    """
    jsonschema.validate(instance=instance, schema=load_schema(schema_name))


# ── internal schemas (configuration, not user-facing artifacts) ─────

INTERNAL_SCHEMA_DIR = "data/internal_schemas"


def load_internal_schema(name: str) -> dict[str, Any]:
    """Load an internal JSON schema by filename."""
    path = _schema_path(INTERNAL_SCHEMA_DIR, name)
    return json.loads(path.read_text(encoding="utf-8"))


def validate_internal(instance: Any, schema_name: str) -> None:
    """Validate *instance* against an internal schema."""
    jsonschema.validate(instance=instance, schema=load_internal_schema(schema_name))
