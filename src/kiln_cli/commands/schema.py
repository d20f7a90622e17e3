"""kiln schema command - Export JSON Schema."""

from __future__ import annotations

from pathlib import Path

import click

from kiln_cli.output import error, success

SCHEMA_KINDS = ["config", "contract", "model", "class"]


@click.group()
def schema() -> None:
    """Manage JSON Schema for IDE support.

    **Commands:**

    - `kiln schema export` - Export manifest or kiln.yaml JSON Schema
    """
    pass


@schema.command("export")
@click.option(
    "--kind",
    type=click.Choice(SCHEMA_KINDS),
    default="config",
    help="Schema to export [default: config]",
)
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(),
    default=None,
    help="Output path [default: ./schemas/<kind>.schema.json]",
)
def export_schema(kind: str, output_path: str | None) -> None:
    """Export JSON Schema for kiln.yaml or a manifest kind.

    Examples:

        kiln schema export

        kiln schema export --kind contract --output schemas/contract.schema.json
    """
    output = Path(output_path) if output_path else Path("schemas") / f"{kind}.schema.json"

    try:
        # Import here to avoid heavy imports at CLI startup
        from kiln_core.export import export_build_config_schema, export_manifest_schema

        if kind == "config":
            export_build_config_schema(output)
        else:
            export_manifest_schema(kind, output)

        success(f"Schema exported to {output}")

    except PermissionError:
        error(f"Cannot write to: {output}")
        raise SystemExit(2) from None

    except (OSError, ValueError) as e:
        error(f"Schema export failed: {e}")
        raise SystemExit(1) from None
