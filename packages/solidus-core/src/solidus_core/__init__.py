"""solidus-core: Deterministic Solidity recompilation.

This package provides:
- CompilerVersion: Canonical compiler version identifiers
- CompilerLocator: Four-tier compiler resolution (native cache, native
  download, module cache, module registry)
- NativeCompiler / ModuleCompiler: Standard-JSON compiler invocation
- recompile: Rebuild a contract's bytecode from its on-chain metadata
- strip_metadata / probably_immutables: Metadata-tolerant comparison
"""

from __future__ import annotations

__version__ = "0.1.0"

# Bytecode comparison
from solidus_core.bytecode import (
    compare_bytecode,
    decode_metadata,
    probably_immutables,
    strip_metadata,
)

# On-chain code
from solidus_core.chain import fetch_deployed_bytecode

# Configuration
from solidus_core.config import RecompileConfig

# Error types
from solidus_core.errors import (
    ChainRequestError,
    CompilerNotFoundError,
    InvalidBytecodeError,
    InvocationError,
    MetadataError,
    RecompilationError,
    SolidusError,
)

# Output extraction
from solidus_core.extractor import extract_contract

# Compiler handles
from solidus_core.invoker import (
    Compiler,
    CompilerSource,
    ModuleCompiler,
    NativeCompiler,
    compile_with,
)

# Resolution
from solidus_core.locator import CompilerLocator

# Metadata reformatting
from solidus_core.metadata import reformat_metadata

# Models
from solidus_core.models import (
    MatchResult,
    MatchStatus,
    RecompilationResult,
    ReformattedMetadata,
)

# Entry points
from solidus_core.recompile import recompile, recompile_sync

# Versions
from solidus_core.version import CompilerVersion, canonicalize

__all__ = [
    "__version__",
    # Bytecode
    "compare_bytecode",
    "decode_metadata",
    "probably_immutables",
    "strip_metadata",
    # Chain
    "fetch_deployed_bytecode",
    # Config
    "RecompileConfig",
    # Errors
    "SolidusError",
    "CompilerNotFoundError",
    "InvocationError",
    "RecompilationError",
    "MetadataError",
    "InvalidBytecodeError",
    "ChainRequestError",
    # Extraction
    "extract_contract",
    # Compilers
    "Compiler",
    "CompilerSource",
    "NativeCompiler",
    "ModuleCompiler",
    "compile_with",
    # Resolution
    "CompilerLocator",
    # Metadata
    "reformat_metadata",
    # Models
    "RecompilationResult",
    "ReformattedMetadata",
    "MatchResult",
    "MatchStatus",
    # Entry points
    "recompile",
    "recompile_sync",
    # Versions
    "CompilerVersion",
    "canonicalize",
]
