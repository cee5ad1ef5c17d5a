"""Console output for solidus commands.

Result documents (recompiled artifacts, decoded metadata, compiler
descriptions) go to stdout as plain JSON so they can be piped. Status
lines use Rich markup and honour ``NO_COLOR`` and ``--no-color``.
"""

from __future__ import annotations

import json
import os
from typing import TYPE_CHECKING, Any

from rich.console import Console

if TYPE_CHECKING:
    from solidus_core.models import MatchResult

_env_no_color = os.environ.get("NO_COLOR") is not None

# status value -> (style, symbol)
_MATCH_MARKS = {
    "perfect": ("green", "✓"),
    "partial": ("green", "✓"),
    "probably_immutables": ("yellow", "⚠"),
    "mismatch": ("red", "✗"),
}


def _console(no_color: bool = False) -> Console:
    plain = no_color or _env_no_color
    return Console(force_terminal=False if plain else None, no_color=plain)


console = _console()


def set_no_color(no_color: bool) -> None:
    """Replace the module console, e.g. for ``--no-color``."""
    global console
    console = _console(no_color=no_color)


def success(message: str) -> None:
    console.print(f"[green]✓[/green] {message}")


def error(message: str) -> None:
    console.print(f"[red]✗[/red] {message}")


def print_json(data: dict[str, Any]) -> None:
    """Write ``data`` as indented JSON without highlighting or wrapping.

    Bytecode strings run to tens of kilobytes, so lines are never folded
    to the terminal width.

    Example:
        >>> print_json({"deployedBytecode": "0x6080..."})
        {
          "deployedBytecode": "0x6080..."
        }
    """
    console.print(
        json.dumps(data, indent=2),
        markup=False,
        highlight=False,
        soft_wrap=True,
    )


def report_match(result: MatchResult) -> None:
    """Print a bytecode comparison outcome as one status line.

    A partial match gets a second, dimmed line explaining that only the
    metadata suffix differs.
    """
    style, mark = _MATCH_MARKS[result.status.value]
    console.print(f"[{style}]{mark}[/{style}] {result.message}")
    if result.status.value == "partial":
        console.print("[dim]Only the metadata suffix differs[/dim]")
