"""kiln build command - Write class files, manifests and ABIs."""

from __future__ import annotations

import click

from kiln_cli.output import print_report, success, warning

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@click.command("build")
@click.option(
    "-f",
    "--file",
    "file_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to kiln.yaml [default: $KILN_CONFIG, ./kiln.yaml, ./.kiln/kiln.yaml]",
)
@click.option(
    "--snapshot",
    "snapshot_path",
    type=click.Path(exists=False),
    default=None,
    help="Compilation snapshot overriding the one in kiln.yaml",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    help="Minimum log level [default: WARNING]",
)
@click.option(
    "--json-logs",
    is_flag=True,
    default=False,
    help="Emit logs as JSON.",
)
def build(file_path: str | None, snapshot_path: str | None, log_level: str, json_logs: bool) -> None:
    """Build class files, manifests and ABIs.

    Hashes every compiled class, classifies contracts and models, and
    merges the new manifests with the ones already on disk. Addresses and
    other operator-set fields survive the rebuild.

    Examples:

        kiln build

        kiln build --file path/to/kiln.yaml --snapshot target/dev/semantic.json

        kiln build --log-level DEBUG --json-logs
    """
    import yaml

    from kiln_cli.errors import handle_build_error
    from kiln_core import Compiler, KilnError
    from kiln_core.compiler.models import IssueSeverity
    from kiln_core.observability import configure_logging

    configure_logging(log_level=log_level, json_format=json_logs)

    try:
        report = Compiler().compile(file_path, snapshot=snapshot_path)
    except (OSError, ValueError, yaml.YAMLError, KilnError) as e:
        handle_build_error(e, file_path or "kiln.yaml")

    print_report(report)

    warnings = [issue for issue in report.issues if issue.severity is IssueSeverity.WARNING]
    if warnings:
        warning(f"{len(warnings)} declared contract(s) were not found in the compiled target")

    success(
        f"Built {len(report.class_files)} class(es) and wrote {len(report.manifests)} manifest(s)"
    )
