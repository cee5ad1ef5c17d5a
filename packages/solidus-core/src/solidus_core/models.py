"""Result models for solidus-core.

Models exchanged between the recompilation steps and with callers.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ReformattedMetadata(BaseModel):
    """A standard-JSON compiler input and the contract it targets.

    Produced by a metadata reformatter and handed to the compiler unchanged.

    Attributes:
        input: Standard-JSON input document (language, sources, settings).
        file_name: Source unit that declares the target contract.
        contract_name: Name of the target contract.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    input: dict[str, Any] = Field(..., description="Standard-JSON input document")
    file_name: str = Field(..., min_length=1, description="Target source file")
    contract_name: str = Field(..., min_length=1, description="Target contract")


class RecompilationResult(BaseModel):
    """Artifacts recompiled for exactly one contract.

    Attributes:
        bytecode: Creation bytecode, ``0x``-prefixed.
        deployed_bytecode: Runtime bytecode, ``0x``-prefixed.
        metadata: Metadata JSON re-emitted by the compiler, trimmed.

    Example:
        >>> result = RecompilationResult(
        ...     bytecode="0x6001", deployed_bytecode="0x6002", metadata="{}"
        ... )
        >>> result.to_dict()
        {'bytecode': '0x6001', 'deployedBytecode': '0x6002', 'metadata': '{}'}
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    bytecode: str = Field(..., description="Creation bytecode")
    deployed_bytecode: str = Field(..., description="Deployed (runtime) bytecode")
    metadata: str = Field(..., description="Compiler-emitted metadata")

    def to_dict(self) -> dict[str, str]:
        """Return the result with the wire (camelCase) key names."""
        return {
            "bytecode": self.bytecode,
            "deployedBytecode": self.deployed_bytecode,
            "metadata": self.metadata,
        }


class MatchStatus(str, Enum):
    """How recompiled bytecode relates to a reference.

    Attributes:
        PERFECT: Identical, metadata included
        PARTIAL: Identical once the metadata suffix is stripped
        PROBABLY_IMMUTABLES: Same length, different content
        MISMATCH: Anything else
    """

    PERFECT = "perfect"
    PARTIAL = "partial"
    PROBABLY_IMMUTABLES = "probably_immutables"
    MISMATCH = "mismatch"


class MatchResult(BaseModel):
    """Outcome of comparing recompiled bytecode with a reference."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    status: MatchStatus = Field(..., description="Match classification")
    message: str = Field(default="", description="Human-readable summary")

    @property
    def matched(self) -> bool:
        return self.status in (MatchStatus.PERFECT, MatchStatus.PARTIAL)
