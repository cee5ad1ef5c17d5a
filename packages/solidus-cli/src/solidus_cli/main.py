"""CLI entry point for solidus.

This module defines the main CLI group using LazyGroup pattern
so --help stays fast without importing the compiler stack.
"""

from __future__ import annotations

import importlib
from typing import Any

import click
import rich_click as rclick

from solidus_cli import __version__
from solidus_cli.output import set_no_color

# Configure rich-click for better help formatting
rclick.rich_click.TEXT_MARKUP = "markdown"
rclick.rich_click.SHOW_ARGUMENTS = True
rclick.rich_click.GROUP_ARGUMENTS_OPTIONS = True

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LazyGroup(rclick.RichGroup):
    """Click group that loads commands lazily.

    Commands are only imported when actually invoked, not at import time.

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
                Format: {"strip": "solidus_cli.commands.bytecode.strip"}
            **kwargs: Keyword arguments for parent class.
        """
        super().__init__(*args, **kwargs)
        self.lazy_subcommands: dict[str, str] = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        """Return sorted list of available command names."""
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

        if cmd_name not in self.lazy_subcommands:
            return None

        module_path = self.lazy_subcommands[cmd_name]
        module_name, attr_name = module_path.rsplit(".", 1)
        mod = importlib.import_module(module_name)
        return getattr(mod, attr_name)  # type: ignore[no-any-return]


LAZY_COMMANDS = {
    "recompile": "solidus_cli.commands.recompile.recompile_cmd",
    "locate": "solidus_cli.commands.locate.locate",
    "strip": "solidus_cli.commands.bytecode.strip",
    "decode": "solidus_cli.commands.bytecode.decode",
    "compare": "solidus_cli.commands.bytecode.compare",
}


def _configure_logging(ctx: click.Context, param: click.Parameter, value: str | None) -> None:
    if value is None:
        return
    from solidus_core.observability import configure_logging

    configure_logging(log_level=value, json_format=ctx.params.get("json_logs", False))


@click.command(cls=LazyGroup, lazy_subcommands=LAZY_COMMANDS)
@click.version_option(version=__version__, prog_name="solidus")
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable colored output.",
    is_eager=True,
    expose_value=False,
    callback=lambda ctx, param, value: set_no_color(value) if value else None,
)
@click.option(
    "--json-logs",
    is_flag=True,
    default=False,
    is_eager=True,
    help="Emit logs as JSON lines.",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    expose_value=False,
    callback=_configure_logging,
    help="Minimum level of structured logs written to stderr.",
)
def cli(json_logs: bool) -> None:
    """Solidus - Deterministic Solidity recompilation.

    Recompile contracts from their metadata and compare the result with
    deployed bytecode.

    **Commands:**

    - `solidus recompile` - Recompile a contract from metadata and sources
    - `solidus locate` - Resolve a compiler version
    - `solidus strip` - Remove the metadata suffix from bytecode
    - `solidus decode` - Decode the metadata suffix of bytecode
    - `solidus compare` - Compare recompiled and reference bytecode
    """
    pass


if __name__ == "__main__":
    cli()
