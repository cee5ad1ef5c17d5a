"""Compiler resolution tiers and the locator that runs them.

Exports the resolver base class, the four standard tiers and the
CompilerLocator.
"""

from __future__ import annotations

from solidus_core.locator.base import BaseResolver
from solidus_core.locator.locator import CompilerLocator, build_default_resolvers
from solidus_core.locator.module import (
    CachedModuleResolver,
    ModuleRegistry,
    RemoteModuleResolver,
    SolcxRegistry,
)
from solidus_core.locator.native import (
    CachedNativeResolver,
    DownloadedNativeResolver,
    native_binary_name,
)

__all__ = [
    "BaseResolver",
    "CachedModuleResolver",
    "CachedNativeResolver",
    "CompilerLocator",
    "DownloadedNativeResolver",
    "ModuleRegistry",
    "RemoteModuleResolver",
    "SolcxRegistry",
    "build_default_resolvers",
    "native_binary_name",
]
