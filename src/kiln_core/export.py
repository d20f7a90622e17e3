"""JSON Schema export functions for kiln.

This module exports JSON Schema Draft 2020-12 schemas from the Pydantic
models of kiln.yaml and of the manifest kinds, for IDE autocomplete and
validation of manifests by other tools.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from kiln_core.schemas import BuildConfig, ClassManifest, ContractManifest, ModelManifest
from kiln_core.schemas.manifest import BaseManifest

SCHEMA_DRAFT = "https://json-schema.org/draft/2020-12/schema"
SCHEMA_BASE_URL = "https://kiln.dev/schemas"

MANIFEST_SCHEMA_KINDS: dict[str, type[BaseManifest]] = {
    "class": ClassManifest,
    "contract": ContractManifest,
    "model": ModelManifest,
}


def export_manifest_schema(
    kind: str,
    output_path: Path | str | None = None,
) -> dict[str, Any]:
    """Export the JSON Schema of one manifest kind.

    Manifests accept operator-owned keys, so the schema keeps
    additionalProperties open.

    Args:
        kind: One of "class", "contract" or "model".
        output_path: Optional path to write schema file. If provided,
            creates parent directories as needed.

    Returns:
        Dictionary containing the JSON Schema.

    Raises:
        ValueError: If kind is unknown.

    Example:
        >>> schema = export_manifest_schema("contract")
        >>> schema["title"]
        'ContractManifest'
    """
    model = MANIFEST_SCHEMA_KINDS.get(kind)
    if model is None:
        valid = ", ".join(sorted(MANIFEST_SCHEMA_KINDS))
        raise ValueError(f"Unknown manifest kind '{kind}'. Valid kinds: {valid}")

    schema = model.model_json_schema()
    schema["$schema"] = SCHEMA_DRAFT
    schema["$id"] = f"{SCHEMA_BASE_URL}/{kind}-manifest.schema.json"

    if output_path is not None:
        _write_schema_file(schema, output_path)

    return schema


def export_build_config_schema(
    output_path: Path | str | None = None,
) -> dict[str, Any]:
    """Export BuildConfig JSON Schema for kiln.yaml autocomplete.

    Args:
        output_path: Optional path to write schema file. If provided,
            creates parent directories as needed.

    Returns:
        Dictionary containing the JSON Schema.

    Example:
        >>> schema = export_build_config_schema()
        >>> schema["$schema"]
        'https://json-schema.org/draft/2020-12/schema'
    """
    schema = BuildConfig.model_json_schema(by_alias=True)
    schema["$schema"] = SCHEMA_DRAFT
    schema["$id"] = f"{SCHEMA_BASE_URL}/kiln.schema.json"

    # Ensure additionalProperties is set at root level
    if "additionalProperties" not in schema:
        schema["additionalProperties"] = False

    if output_path is not None:
        _write_schema_file(schema, output_path)

    return schema


def _write_schema_file(schema: dict[str, Any], path: Path | str) -> None:
    """Write schema to JSON file, creating parent directories."""
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(schema, indent=2))
