"""Standard-JSON output extraction.

The presence of ``contracts[file_name][contract_name]`` is the only
success signal. Diagnostics are logged with file/contract/version context
and never returned to the caller.
"""

from __future__ import annotations

import json
from typing import Any

import structlog

from solidus_core.errors import RecompilationError
from solidus_core.models import RecompilationResult

logger = structlog.get_logger(__name__)

ERROR_SEVERITY = "error"


def error_messages(output: dict[str, Any]) -> list[str]:
    """Collect the messages of diagnostics with severity ``error``.

    Warnings and infos are skipped. ``formattedMessage`` is preferred when
    the compiler provides it.
    """
    messages: list[str] = []
    for entry in output.get("errors") or []:
        if not isinstance(entry, dict) or entry.get("severity") != ERROR_SEVERITY:
            continue
        messages.append(str(entry.get("formattedMessage") or entry.get("message", "")))
    return messages


def extract_contract(
    raw_output: str,
    file_name: str,
    contract_name: str,
    *,
    version: str | None = None,
    log: Any = None,
) -> RecompilationResult:
    """Pull one contract's artifacts out of raw compiler output.

    Args:
        raw_output: Standard-JSON output text.
        file_name: Source unit declaring the contract.
        contract_name: Contract to extract.
        version: Compiler version, for log context.
        log: structlog-style logger. Defaults to the module logger.

    Returns:
        RecompilationResult with ``0x``-prefixed bytecodes and trimmed metadata.

    Raises:
        RecompilationError: If the output is not JSON or does not contain
            the target contract, whatever diagnostics it carries.

    Example:
        >>> output = json.dumps({"contracts": {"A.sol": {"A": {
        ...     "evm": {"bytecode": {"object": "6001"},
        ...             "deployedBytecode": {"object": "6002"}},
        ...     "metadata": "  {}  "}}}})
        >>> extract_contract(output, "A.sol", "A").to_dict()
        {'bytecode': '0x6001', 'deployedBytecode': '0x6002', 'metadata': '{}'}
    """
    log = log or logger
    context = {
        "loc": "[RECOMPILE]",
        "file_name": file_name,
        "contract_name": contract_name,
        "version": version,
    }

    try:
        output = json.loads(raw_output)
    except json.JSONDecodeError as exc:
        log.error("compiler_output_unparseable", error=str(exc), **context)
        raise RecompilationError() from None

    if not isinstance(output, dict):
        log.error("compiler_output_unparseable", error="output is not an object", **context)
        raise RecompilationError()

    contracts = output.get("contracts") or {}
    contract = (contracts.get(file_name) or {}).get(contract_name)
    if not contract:
        log.error("recompilation_failed", errors=error_messages(output), **context)
        raise RecompilationError()

    try:
        evm = contract["evm"]
        return RecompilationResult(
            bytecode=f"0x{evm['bytecode']['object']}",
            deployed_bytecode=f"0x{evm['deployedBytecode']['object']}",
            metadata=str(contract.get("metadata", "")).strip(),
        )
    except (KeyError, TypeError) as exc:
        log.error("contract_artifacts_incomplete", missing=str(exc), **context)
        raise RecompilationError() from None
