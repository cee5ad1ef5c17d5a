"""Recompilation entry point.

recompile() ties the steps together:
1. The metadata reformatter builds the standard-JSON input
2. The compiler locator resolves ``metadata.compiler.version``
3. The compiler runs on the input
4. The output extractor returns the target contract's artifacts

Any failure propagates as a single SolidusError; there are no partial
results.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any, Protocol

import structlog

from solidus_core.config import RecompileConfig
from solidus_core.errors import MetadataError
from solidus_core.extractor import extract_contract
from solidus_core.invoker import compile_with
from solidus_core.locator import CompilerLocator
from solidus_core.metadata import reformat_metadata
from solidus_core.models import ReformattedMetadata, RecompilationResult
from solidus_core.observability import compiler_operation

logger = structlog.get_logger(__name__)


class MetadataReformatter(Protocol):
    """Turns metadata and sources into a compiler input and its target."""

    def __call__(
        self,
        metadata: Any,
        sources: Mapping[str, str],
        log: Any,
    ) -> ReformattedMetadata: ...


def compiler_version(metadata: Any) -> str:
    """Read ``compiler.version`` from metadata.

    Raises:
        MetadataError: If the metadata does not name a compiler version.
    """
    try:
        version = metadata["compiler"]["version"]
    except (KeyError, TypeError):
        raise MetadataError("Metadata does not specify a compiler version") from None
    if not isinstance(version, str) or not version.strip():
        raise MetadataError("Metadata does not specify a compiler version")
    return version


async def recompile(
    metadata: Any,
    sources: Mapping[str, str],
    *,
    log: Any = None,
    reformatter: MetadataReformatter | None = None,
    locator: CompilerLocator | None = None,
    config: RecompileConfig | None = None,
) -> RecompilationResult:
    """Compile sources with the version and settings given in metadata.

    Args:
        metadata: Parsed contract metadata.
        sources: Source texts keyed by file name.
        log: structlog-style logger. Defaults to the module logger.
        reformatter: Metadata normalization routine. Defaults to
            reformat_metadata.
        locator: Compiler locator. Defaults to one built from ``config``.
        config: Configuration for the default locator.

    Returns:
        Artifacts of the contract named by the metadata's compilation target.

    Raises:
        CompilerNotFoundError: If no compiler could be found or fetched.
        InvocationError: If the compiler produced no output.
        RecompilationError: If the output lacks the target contract.
        MetadataError: If the metadata cannot be reformatted.

    Example:
        >>> result = await recompile(metadata, {"contracts/A.sol": source})
        >>> result.deployed_bytecode[:10]
        '0x60806040'
    """
    log = log or logger
    reformatter = reformatter or reformat_metadata
    locator = locator or CompilerLocator(config)

    reformatted = reformatter(metadata, sources, log)
    version = compiler_version(metadata)

    log.info(
        "recompiling",
        loc="[RECOMPILE]",
        file_name=reformatted.file_name,
        contract_name=reformatted.contract_name,
        version=version,
    )

    with compiler_operation(
        "recompile",
        version=version,
        file_name=reformatted.file_name,
        contract_name=reformatted.contract_name,
    ):
        compiler = await locator.locate(version)
        # compile_with blocks until solc exits
        raw_output = await asyncio.to_thread(compile_with, compiler, reformatted.input)
        return extract_contract(
            raw_output,
            reformatted.file_name,
            reformatted.contract_name,
            version=version,
            log=log,
        )


def recompile_sync(
    metadata: Any,
    sources: Mapping[str, str],
    **kwargs: Any,
) -> RecompilationResult:
    """Blocking wrapper around recompile() for callers without an event loop."""
    return asyncio.run(recompile(metadata, sources, **kwargs))
