"""Compiler locator.

Orchestrates the resolution tiers for a compiler version.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import structlog

from solidus_core.config import RecompileConfig
from solidus_core.errors import CompilerNotFoundError
from solidus_core.locator.module import (
    CachedModuleResolver,
    ModuleRegistry,
    RemoteModuleResolver,
    SolcxRegistry,
)
from solidus_core.locator.native import CachedNativeResolver, DownloadedNativeResolver
from solidus_core.observability import compiler_operation
from solidus_core.version import CompilerVersion

if TYPE_CHECKING:
    import httpx

    from solidus_core.invoker import Compiler
    from solidus_core.locator.base import BaseResolver

logger = structlog.get_logger(__name__)


def build_default_resolvers(
    config: RecompileConfig,
    *,
    client: httpx.AsyncClient | None = None,
    registry: ModuleRegistry | None = None,
) -> list[BaseResolver]:
    """Build the standard tier order.

    1. Cached native binary (download directory, then primary repository)
    2. Native binary downloaded from the archive
    3. Cached module compiler
    4. Module compiler fetched from the registry

    Args:
        config: Cache locations, archive URL and timeouts.
        client: Optional shared HTTP client for the download tier.
        registry: Optional module registry. Defaults to py-solc-x.

    Returns:
        Resolvers in the order they are tried.
    """
    return [
        CachedNativeResolver(
            [config.native_tmp_repo, config.native_repo],
            compile_timeout_seconds=config.compile_timeout_seconds,
        ),
        DownloadedNativeResolver(
            config.archive_url,
            config.native_tmp_repo,
            timeout_seconds=config.download_timeout_seconds,
            compile_timeout_seconds=config.compile_timeout_seconds,
            client=client,
        ),
        CachedModuleResolver(config.module_repo),
        RemoteModuleResolver(registry or SolcxRegistry(config.module_repo)),
    ]


class CompilerLocator:
    """Resolves a compiler version to a runnable compiler handle.

    Tiers run sequentially and the first hit wins. A miss in one tier,
    including a failed download, moves on to the next. Only a failure of
    the final registry fetch, or every tier missing, is terminal.

    Handles are remembered per canonical version for the lifetime of the
    locator (``latest`` excepted). The on-disk caches stay authoritative.

    Attributes:
        config: Locator configuration.
        resolvers: Tiers in the order they are tried.

    Example:
        >>> locator = CompilerLocator(RecompileConfig.from_env())
        >>> compiler = await locator.locate("0.8.20+commit.a1b79de6")
        >>> compiler.source
        <CompilerSource.CACHED_NATIVE: 'cached_native'>
    """

    def __init__(
        self,
        config: RecompileConfig | None = None,
        *,
        resolvers: Sequence[BaseResolver] | None = None,
        client: httpx.AsyncClient | None = None,
        registry: ModuleRegistry | None = None,
    ) -> None:
        """Initialize the locator.

        Args:
            config: Configuration. Defaults to RecompileConfig.from_env().
            resolvers: Explicit tier list, overriding the defaults.
            client: Optional shared HTTP client for the download tier.
            registry: Optional module registry for the last tier.
        """
        self.config = config or RecompileConfig.from_env()
        if resolvers is None:
            resolvers = build_default_resolvers(self.config, client=client, registry=registry)
        self.resolvers: list[BaseResolver] = list(resolvers)
        self._handles: dict[str, Compiler] = {}
        self._log = logger.bind(loc="[GET_SOLC]")

    async def locate(self, version: CompilerVersion | str) -> Compiler:
        """Return a compiler for a version.

        Args:
            version: Parsed version, or a raw version string.

        Returns:
            The handle from the first tier that has the compiler.

        Raises:
            CompilerNotFoundError: If the registry fetch fails or every
                tier misses.
        """
        if isinstance(version, str):
            version = CompilerVersion.parse(version)

        cached = self._handles.get(version.value)
        if cached is not None and cached.location.exists():
            self._log.debug("compiler_handle_reused", version=version.value)
            return cached

        with compiler_operation("locate", version=version.value) as s:
            for resolver in self.resolvers:
                compiler = await resolver.resolve(version)
                if compiler is not None:
                    s.set_attribute("solc.tier", compiler.source.value)
                    if not version.is_latest:
                        self._handles[version.value] = compiler
                    return compiler

            tiers = ", ".join(r.name for r in self.resolvers)
            raise CompilerNotFoundError(
                version.value,
                internal_details=f"No tier resolved {version.value} (tried: {tiers})",
            )

    def clear(self) -> None:
        """Forget remembered handles."""
        self._handles.clear()
