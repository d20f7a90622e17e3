"""Rich console output utilities for kiln-cli.

This module provides formatted console output with Rich, supporting
colored success/error/warning messages, build summary tables and
respecting the NO_COLOR environment variable.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from kiln_core.compiler.models import BuildIssue, BuildPlan, BuildReport

# Rich respects NO_COLOR; --no-color is supported on top of it
_force_no_color = os.environ.get("NO_COLOR") is not None

SEVERITY_STYLES = {
    "info": "cyan",
    "warning": "yellow",
}


def create_console(no_color: bool = False) -> Console:
    """Create a Rich Console instance with appropriate color settings.

    Args:
        no_color: If True, disable colored output. Also respects NO_COLOR env var.

    Returns:
        Configured Console instance.
    """
    force_terminal = None
    if no_color or _force_no_color:
        force_terminal = False
    return Console(force_terminal=force_terminal, no_color=no_color or _force_no_color)


# Default console instance
console = create_console()


def success(message: str, **kwargs: Any) -> None:
    """Print a success message with green checkmark.

    Example:
        >>> success("Build complete")
        ✓ Build complete
    """
    console.print(f"[green]✓[/green] {message}", **kwargs)


def error(message: str, **kwargs: Any) -> None:
    """Print an error message with red X.

    Example:
        >>> error("Contract `dojo::world::world` not found")
        ✗ Contract `dojo::world::world` not found
    """
    console.print(f"[red]✗[/red] {message}", **kwargs)


def warning(message: str, **kwargs: Any) -> None:
    """Print a warning message with yellow triangle."""
    console.print(f"[yellow]⚠[/yellow] {message}", **kwargs)


def info(message: str, **kwargs: Any) -> None:
    """Print an informational message."""
    console.print(message, **kwargs)


def print_json(data: dict[str, Any], **kwargs: Any) -> None:
    """Print JSON data with syntax highlighting.

    Example:
        >>> print_json({"contracts": ["dojo_examples::actions::actions"]})
        {
          "contracts": [
            "dojo_examples::actions::actions"
          ]
        }
    """
    import json

    console.print_json(json.dumps(data), **kwargs)


def issues_table(issues: list[BuildIssue]) -> Table:
    """Build a table of non-fatal build issues."""
    table = Table(title="Issues", show_lines=False)
    table.add_column("Severity")
    table.add_column("Name", overflow="fold")
    table.add_column("Message", overflow="fold")
    for issue in issues:
        style = SEVERITY_STYLES.get(issue.severity.value, "")
        table.add_row(f"[{style}]{issue.severity.value}[/{style}]", issue.name, issue.message)
    return table


def print_report(report: BuildReport) -> None:
    """Print the summary of a completed build."""
    table = Table(title=f"kiln build: {report.project}")
    table.add_column("Kind")
    table.add_column("Name", overflow="fold")
    for name in report.contracts:
        table.add_row("contract", name)
    for name in report.models:
        table.add_row("model", name)
    console.print(table)

    if report.issues:
        console.print(issues_table(report.issues))


def print_plan(plan: BuildPlan) -> None:
    """Print what a build would write."""
    table = Table(title="Classification")
    table.add_column("Kind")
    table.add_column("Name", overflow="fold")
    table.add_column("Details", overflow="fold")

    for manifest in plan.system:
        table.add_row("class", manifest.name, manifest.class_hash)
    for name, contract in sorted(plan.aggregated.contracts.items()):
        details = f"reads={len(contract.reads)} writes={len(contract.writes)} computed={len(contract.computed)}"
        table.add_row("contract", name, details)
    for name, model in sorted(plan.aggregated.models.items()):
        table.add_row("model", name, f"members={len(model.members)}")
    console.print(table)

    if plan.issues:
        console.print(issues_table(plan.issues))


def set_no_color(no_color: bool) -> None:
    """Update the global console to enable/disable colors.

    Note:
        This updates the module-level console instance.
    """
    global console
    console = create_console(no_color=no_color)
