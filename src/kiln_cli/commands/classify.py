"""kiln classify command - Show what a build would produce."""

from __future__ import annotations

import click

from kiln_cli.output import print_json, print_plan


@click.command("classify")
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
    "--json",
    "as_json",
    is_flag=True,
    default=False,
    help="Print the classification as JSON.",
)
def classify(file_path: str | None, snapshot_path: str | None, as_json: bool) -> None:
    """Classify contracts, models and computed values without writing.

    Examples:

        kiln classify

        kiln classify --json
    """
    import yaml

    from kiln_cli.errors import handle_build_error
    from kiln_core import Compiler, KilnError
    from kiln_core.observability import configure_logging

    configure_logging(log_level="WARNING")

    try:
        plan = Compiler().plan(file_path, snapshot=snapshot_path)
    except (OSError, ValueError, yaml.YAMLError, KilnError) as e:
        handle_build_error(e, file_path or "kiln.yaml")

    if as_json:
        print_json(
            {
                "declarations": plan.declarations,
                "system": [manifest.name for manifest in plan.system],
                "contracts": sorted(plan.aggregated.contracts),
                "models": sorted(plan.aggregated.models),
                "computed": {
                    owner: [entry.model_dump() for entry in entries]
                    for owner, entries in plan.aggregated.computed.items()
                },
                "issues": [issue.model_dump(mode="json") for issue in plan.issues],
            }
        )
        return

    print_plan(plan)
