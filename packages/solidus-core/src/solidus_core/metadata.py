"""Default metadata reformatter.

Rebuilds a standard-JSON compiler input from the metadata a contract was
compiled with and the source files the caller supplies. Callers with their
own normalization routine pass it to ``recompile`` instead.

Sources are matched to the metadata's source list:
1. By exact path
2. By inline ``content`` carried in the metadata
3. By keccak256 of the supplied file contents
"""

from __future__ import annotations

import copy
import json
from collections.abc import Mapping
from typing import Any

import structlog
from Crypto.Hash import keccak

from solidus_core.errors import MetadataError
from solidus_core.models import ReformattedMetadata

logger = structlog.get_logger(__name__)

OUTPUT_SELECTION = ["evm.bytecode", "evm.deployedBytecode", "metadata"]


def keccak256_hex(content: str) -> str:
    """Return the ``0x``-prefixed keccak256 of UTF-8 encoded text."""
    digest = keccak.new(digest_bits=256)
    digest.update(content.encode("utf-8"))
    return "0x" + digest.hexdigest()


def _load(metadata: Mapping[str, Any] | str) -> dict[str, Any]:
    if isinstance(metadata, str):
        try:
            metadata = json.loads(metadata)
        except json.JSONDecodeError as exc:
            raise MetadataError(
                "Metadata is not valid JSON",
                internal_details=str(exc),
            ) from None
    if not isinstance(metadata, Mapping):
        raise MetadataError("Metadata must be a JSON object")
    return copy.deepcopy(dict(metadata))


def _compilation_target(settings: dict[str, Any]) -> tuple[str, str]:
    target = settings.pop("compilationTarget", None) or {}
    if not isinstance(target, dict) or len(target) != 1:
        raise MetadataError(
            "Could not determine compilation target from metadata",
            internal_details=f"compilationTarget={target!r}",
        )
    ((file_name, contract_name),) = target.items()
    return file_name, contract_name


def _nest_libraries(libraries: dict[str, Any]) -> dict[str, Any]:
    """Convert ``{"file:Lib": addr}`` into ``{"file": {"Lib": addr}}``."""
    nested: dict[str, dict[str, Any]] = {}
    for key, address in libraries.items():
        if isinstance(address, dict):
            nested.setdefault(key, {}).update(address)
            continue
        file_name, _, library = key.rpartition(":")
        nested.setdefault(file_name, {})[library] = address
    return nested


def _match_sources(
    declared: dict[str, Any],
    supplied: Mapping[str, str],
) -> dict[str, dict[str, str]]:
    by_hash = {keccak256_hex(content): content for content in supplied.values()}
    matched: dict[str, dict[str, str]] = {}
    missing: list[str] = []

    for path, info in declared.items():
        info = info or {}
        content = supplied.get(path)
        if content is None and "content" in info:
            content = info["content"]
        if content is None and info.get("keccak256"):
            content = by_hash.get(str(info["keccak256"]).lower())
        if content is None:
            missing.append(path)
            continue
        matched[path] = {"content": content}

    if missing:
        raise MetadataError(
            "Some source files referenced by the metadata are missing",
            internal_details=f"missing={missing}",
        )
    return matched


def reformat_metadata(
    metadata: Mapping[str, Any] | str,
    sources: Mapping[str, str],
    log: Any = None,
) -> ReformattedMetadata:
    """Build a standard-JSON input from contract metadata and sources.

    The metadata settings are copied without ``compilationTarget``.
    Output selection asks for creation bytecode, deployed bytecode and
    metadata of the target contract.

    Args:
        metadata: Contract metadata, parsed or as JSON text.
        sources: Source texts keyed by path (or any name when matched by hash).
        log: structlog-style logger. Defaults to the module logger.

    Returns:
        ReformattedMetadata with the input document and the target.

    Raises:
        MetadataError: If the target cannot be determined or sources are missing.

    Example:
        >>> reformatted = reformat_metadata(metadata, {"A.sol": "contract A {}"})
        >>> reformatted.file_name, reformatted.contract_name
        ('A.sol', 'A')
    """
    log = log or logger
    data = _load(metadata)
    settings = dict(data.get("settings") or {})
    file_name, contract_name = _compilation_target(settings)

    if isinstance(settings.get("libraries"), dict):
        settings["libraries"] = _nest_libraries(settings["libraries"])

    output_selection = dict(settings.get("outputSelection") or {})
    output_selection.setdefault(file_name, {})
    output_selection[file_name] = {
        **output_selection[file_name],
        contract_name: list(OUTPUT_SELECTION),
    }
    settings["outputSelection"] = output_selection

    document = {
        "language": data.get("language", "Solidity"),
        "sources": _match_sources(dict(data.get("sources") or {}), sources),
        "settings": settings,
    }

    log.debug(
        "metadata_reformatted",
        loc="[REFORMAT]",
        file_name=file_name,
        contract_name=contract_name,
        source_count=len(document["sources"]),
    )
    return ReformattedMetadata(input=document, file_name=file_name, contract_name=contract_name)
