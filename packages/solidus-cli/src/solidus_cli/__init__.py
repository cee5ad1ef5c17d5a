"""solidus-cli: Command line interface for solidus.

Recompile contracts from their metadata, locate compilers and compare
bytecode from a terminal.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
