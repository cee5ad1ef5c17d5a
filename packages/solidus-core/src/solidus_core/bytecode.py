"""Metadata-tolerant bytecode comparison.

Solidity appends a CBOR-encoded metadata blob to the bytecode it emits.
The last two bytes hold the blob length, big-endian, without counting
themselves. Two compilations of the same source can differ only in that
blob, so comparisons strip it first.
"""

from __future__ import annotations

import re
from typing import Any

import cbor2

from solidus_core.errors import InvalidBytecodeError
from solidus_core.models import MatchResult, MatchStatus

HEX_PREFIX = "0x"
LENGTH_FIELD_CHARS = 4
LENGTH_FIELD_PATTERN = re.compile(r"[0-9a-fA-F]{4}")


def _body(bytecode: str) -> str:
    return bytecode[2:] if bytecode.startswith(HEX_PREFIX) else bytecode


def metadata_length(bytecode: str) -> int:
    """Return the number of hex characters the metadata suffix occupies.

    This is ``2n + 4`` where ``n`` is the big-endian integer in the last
    four hex characters; the ``+ 4`` is the length field itself.

    Raises:
        InvalidBytecodeError: If the length field is not hex or the
            computed suffix is longer than the bytecode.

    Example:
        >>> metadata_length("0x60016002" + "00" * 0x21 + "0021")
        70
    """
    body = _body(bytecode)
    if len(body) < LENGTH_FIELD_CHARS:
        raise InvalidBytecodeError(
            "Bytecode too short to carry a metadata length",
            length=len(bytecode),
        )

    field = body[-LENGTH_FIELD_CHARS:]
    if not LENGTH_FIELD_PATTERN.fullmatch(field):
        raise InvalidBytecodeError(
            "Bytecode metadata length is not hexadecimal",
            length=len(bytecode),
        )
    size = int(field, 16)

    total = size * 2 + LENGTH_FIELD_CHARS
    if total > len(body):
        raise InvalidBytecodeError(
            f"Metadata length {total} exceeds bytecode length {len(body)}",
            length=len(bytecode),
        )
    return total


def strip_metadata(bytecode: str) -> str:
    """Remove the trailing metadata section from bytecode.

    A ``0x`` prefix, if present, is kept.

    Args:
        bytecode: Hex bytecode as emitted by solc or read from chain.

    Returns:
        Bytecode without its metadata suffix.

    Raises:
        InvalidBytecodeError: If the bytecode is shorter than the metadata
            length it declares.

    Example:
        >>> strip_metadata("0x6001" + "a2" + "00" * 4 + "0005")
        '0x6001'
    """
    total = metadata_length(bytecode)
    return bytecode[: len(bytecode) - total]


def decode_metadata(bytecode: str) -> dict[str, Any]:
    """Decode the CBOR metadata blob appended to bytecode.

    Byte-string values (``ipfs``, ``bzzr1``, binary ``solc`` versions) are
    returned as ``0x``-prefixed hex strings.

    Raises:
        InvalidBytecodeError: If the suffix is missing or not a CBOR map.
    """
    total = metadata_length(bytecode)
    body = _body(bytecode)
    blob_hex = body[len(body) - total : len(body) - LENGTH_FIELD_CHARS]

    try:
        decoded = cbor2.loads(bytes.fromhex(blob_hex))
    except (ValueError, cbor2.CBORDecodeError) as exc:
        raise InvalidBytecodeError(
            f"Metadata suffix is not valid CBOR: {exc}",
            length=len(bytecode),
        ) from exc

    if not isinstance(decoded, dict):
        raise InvalidBytecodeError("Metadata suffix is not a CBOR map", length=len(bytecode))

    return {
        str(key): HEX_PREFIX + value.hex() if isinstance(value, bytes) else value
        for key, value in decoded.items()
    }


def probably_immutables(bytecode1: str, bytecode2: str) -> bool:
    """Check whether two bytecodes probably differ due to immutable variables.

    Immutable values are inlined at fixed offsets, so otherwise identical
    bytecode keeps its length. This is a heuristic: any equal-length
    difference is reported.

    Returns:
        True if both are non-empty, equally long and not identical.

    Example:
        >>> probably_immutables("0x6001", "0x6002")
        True
        >>> probably_immutables("0x6001", "0x6001")
        False
    """
    return bool(
        bytecode1
        and bytecode2
        and len(bytecode1) == len(bytecode2)
        and bytecode1 != bytecode2
    )


def compare_bytecode(recompiled: str, reference: str) -> MatchResult:
    """Classify recompiled bytecode against a reference.

    Args:
        recompiled: Bytecode produced by recompilation.
        reference: Bytecode to verify against, typically deployed code.

    Returns:
        MatchResult with PERFECT, PARTIAL, PROBABLY_IMMUTABLES or MISMATCH.
    """
    if recompiled and recompiled.lower() == reference.lower():
        return MatchResult(status=MatchStatus.PERFECT, message="Bytecode is identical")

    try:
        stripped_recompiled = strip_metadata(recompiled).lower()
        stripped_reference = strip_metadata(reference).lower()
    except InvalidBytecodeError:
        stripped_recompiled = stripped_reference = None

    if stripped_recompiled is not None and stripped_recompiled == stripped_reference:
        return MatchResult(
            status=MatchStatus.PARTIAL,
            message="Bytecode matches without the metadata suffix",
        )

    if probably_immutables(recompiled, reference):
        return MatchResult(
            status=MatchStatus.PROBABLY_IMMUTABLES,
            message="Bytecode has equal length but differs, probably caused by immutables",
        )

    return MatchResult(status=MatchStatus.MISMATCH, message="Bytecode does not match")
