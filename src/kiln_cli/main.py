"""CLI entry point for kiln.

This module defines the main CLI group. Subcommands are loaded lazily so
``kiln --help`` does not import the build pipeline.
"""

from __future__ import annotations

import importlib
from typing import Any

import click
import rich_click as rclick

from kiln_cli import __version__
from kiln_cli.output import set_no_color

# Configure rich-click for better help formatting
rclick.rich_click.TEXT_MARKUP = "markdown"
rclick.rich_click.SHOW_ARGUMENTS = True
rclick.rich_click.GROUP_ARGUMENTS_OPTIONS = True


class LazyGroup(rclick.RichGroup):
    """Click group that loads commands lazily.

    Commands are only imported when actually invoked, not at import time.
    ``kiln --help`` and ``kiln --version`` never import the build pipeline.

    Attributes:
        lazy_subcommands: Mapping of command names to module paths.
    """

    def __init__(
        self,
        *args: Any,
        lazy_subcommands: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize LazyGroup.

        Args:
            *args: Positional arguments for parent class.
            lazy_subcommands: Mapping of command name to module path.
                Format: {"build": "kiln_cli.commands.build.build"}
            **kwargs: Keyword arguments for parent class.
        """
        super().__init__(*args, **kwargs)
        self.lazy_subcommands: dict[str, str] = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        """Return list of available command names.

        Args:
            ctx: Click context.

        Returns:
            Sorted names of directly registered and lazy commands.
        """
        # Directly registered commands share the namespace with lazy ones
        commands = set(super().list_commands(ctx))
        commands.update(self.lazy_subcommands.keys())
        return sorted(commands)

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        """Get a command by name, loading lazily if needed.

        Args:
            ctx: Click context.
            cmd_name: Name of the command to get.

        Returns:
            Click Command instance, or None if not found.
        """
        cmd = super().get_command(ctx, cmd_name)  # type: ignore[arg-type]
        if cmd is not None:
            return cmd

        # Import the command module on first use
        if cmd_name not in self.lazy_subcommands:
            return None

        module_path = self.lazy_subcommands[cmd_name]
        module_name, attr_name = module_path.rsplit(".", 1)
        mod = importlib.import_module(module_name)
        return getattr(mod, attr_name)  # type: ignore[no-any-return]


LAZY_COMMANDS = {
    "build": "kiln_cli.commands.build.build",
    "classify": "kiln_cli.commands.classify.classify",
    "schema": "kiln_cli.commands.schema.schema",
}


@click.command(cls=LazyGroup, lazy_subcommands=LAZY_COMMANDS)
@click.version_option(version=__version__, prog_name="kiln")
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable colored output.",
    is_eager=True,
    expose_value=False,
    callback=lambda ctx, param, value: set_no_color(value) if value else None,
)
def cli() -> None:
    """kiln - Artifact classification and manifest synthesis for Dojo worlds.

    Turns the compilation snapshot of a Dojo project into class files,
    manifests and ABIs.

    **Getting Started:**

    - `kiln classify` - Show what a build would produce
    - `kiln build` - Write class files, manifests and ABIs
    - `kiln schema export` - Export JSON Schema for manifests and kiln.yaml
    """
    pass


if __name__ == "__main__":
    cli()
