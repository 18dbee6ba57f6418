"""JSON Schema validation for bundled data tables.

Schemas are JSON Schema (Draft 2020-12) expressed in YAML and shipped under
``blackdot/data/schemas``.
"""
from __future__ import annotations

from typing import Any, Dict

from jsonschema import Draft202012Validator

from blackdot.core.exceptions import CatalogError
from blackdot.data import get_data_path, read_yaml


def load_schema(schema_name: str) -> Dict[str, Any]:
    """Load a bundled schema by name (``.yaml`` appended when missing).

    Raises:
        FileNotFoundError: If the schema file doesn't exist.
        ValueError: If the schema is not a YAML mapping.
    """
    if not schema_name.lower().endswith((".yaml", ".yml")):
        schema_name = f"{schema_name}.yaml"
    if not get_data_path("schemas", schema_name).exists():
        raise FileNotFoundError(f"Schema not found: {schema_name}")
    schema = read_yaml("schemas", schema_name)
    if not isinstance(schema, dict):
        raise ValueError(f"Schema must be a YAML mapping, got {type(schema).__name__}")
    return schema


def validate_payload(payload: Any, schema_name: str) -> None:
    """Validate ``payload`` against a bundled schema.

    Raises:
        CatalogError: Listing every violation with its location.
    """
    schema = load_schema(schema_name)
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(payload), key=lambda e: list(e.absolute_path))
    if not errors:
        return
    lines = []
    for err in errors:
        location = "/".join(str(p) for p in err.absolute_path) or "<root>"
        lines.append(f"{location}: {err.message}")
    raise CatalogError(
        f"{schema_name} validation failed:\n" + "\n".join(f"  - {line}" for line in lines),
        context={"schema": schema_name, "errors": lines},
    )


__all__ = ["load_schema", "validate_payload"]
