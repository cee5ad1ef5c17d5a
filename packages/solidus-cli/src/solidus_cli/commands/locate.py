"""solidus locate command - Resolve a compiler version."""

from __future__ import annotations

import asyncio
from typing import Any

import click

from solidus_cli.commands.options import build_config, compiler_options
from solidus_cli.errors import handle_solidus_error
from solidus_cli.output import print_json


@click.command("locate")
@click.argument("version")
@compiler_options
def locate(version: str, **config_overrides: Any) -> None:
    """Resolve VERSION to a runnable compiler, downloading it if needed.

    Tries cached native binaries, the native archive, cached module
    compilers and the module registry, in that order.

    Examples:

        solidus locate 0.8.20+commit.a1b79de6

        solidus locate latest --soljson-repo ~/.solcx
    """
    config = build_config(**config_overrides)

    from solidus_core.errors import SolidusError
    from solidus_core.locator import CompilerLocator

    try:
        compiler = asyncio.run(CompilerLocator(config).locate(version))
    except SolidusError as e:
        handle_solidus_error(e)

    print_json(compiler.describe())
