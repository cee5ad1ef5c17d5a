"""solidus recompile command - Rebuild a contract from metadata."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import click

from solidus_cli.commands.options import build_config, compiler_options
from solidus_cli.errors import (
    handle_encoding_error,
    handle_file_not_found,
    handle_json_error,
    handle_permission_error,
    handle_solidus_error,
)
from solidus_cli.output import print_json, success


def load_sources(sources_dir: Path) -> dict[str, str]:
    """Read every file under a directory, keyed by POSIX relative path.

    Example:
        >>> load_sources(Path("sources"))
        {'contracts/A.sol': 'pragma solidity ^0.8.0; ...'}
    """
    sources: dict[str, str] = {}
    for path in sorted(sources_dir.rglob("*")):
        if path.is_file():
            key = path.relative_to(sources_dir).as_posix()
            try:
                sources[key] = path.read_text(encoding="utf-8")
            except UnicodeDecodeError:
                handle_encoding_error(str(path))
    return sources


def load_metadata(metadata_path: Path) -> dict[str, Any]:
    """Read and parse a metadata JSON file."""
    try:
        data = json.loads(metadata_path.read_text(encoding="utf-8"))
    except UnicodeDecodeError:
        handle_encoding_error(str(metadata_path))
    except json.JSONDecodeError as e:
        handle_json_error(e, str(metadata_path))
    if not isinstance(data, dict):
        handle_json_error(ValueError("expected a JSON object"), str(metadata_path))
    return data


@click.command("recompile")
@click.option(
    "-m",
    "--metadata",
    "metadata_path",
    type=click.Path(path_type=Path),
    required=True,
    help="Path to the contract metadata JSON",
)
@click.option(
    "-s",
    "--sources",
    "sources_dir",
    type=click.Path(path_type=Path),
    required=True,
    help="Directory holding the contract's source files",
)
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Write the result JSON here instead of stdout",
)
@compiler_options
def recompile_cmd(
    metadata_path: Path,
    sources_dir: Path,
    output_path: Path | None,
    **config_overrides: Any,
) -> None:
    """Recompile a contract using the compiler named in its metadata.

    Prints creation bytecode, deployed bytecode and the compiler-emitted
    metadata as JSON.

    Examples:

        solidus recompile -m metadata.json -s sources/

        solidus recompile -m metadata.json -s sources/ -o result.json
    """
    if not metadata_path.is_file():
        handle_file_not_found(str(metadata_path))
    if not sources_dir.is_dir():
        handle_file_not_found(str(sources_dir))

    metadata = load_metadata(metadata_path)
    sources = load_sources(sources_dir)
    config = build_config(**config_overrides)

    # Import here to avoid heavy imports at CLI startup
    from solidus_core.errors import SolidusError
    from solidus_core.recompile import recompile

    try:
        result = asyncio.run(recompile(metadata, sources, config=config))
    except SolidusError as e:
        handle_solidus_error(e)

    if output_path is None:
        print_json(result.to_dict())
        return

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(json.dumps(result.to_dict(), indent=2), encoding="utf-8")
    except PermissionError:
        handle_permission_error(str(output_path), "write")

    success(f"Recompiled to {output_path}")
