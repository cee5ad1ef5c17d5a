"""Base class for compiler resolution tiers.

Each tier either returns a compiler handle or a miss (None). Tiers are
independent and safe to retry; the locator tries them in order.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from solidus_core.invoker import Compiler
    from solidus_core.version import CompilerVersion

logger = structlog.get_logger(__name__)


class BaseResolver(ABC):
    """Base class for compiler resolvers.

    Provides timing and hit/miss logging around the tier-specific lookup.

    Attributes:
        name: Tier name for identification and logging

    Example:
        >>> class PathResolver(BaseResolver):
        ...     async def _resolve(self, version):
        ...         return NativeCompiler(Path("/usr/bin/solc"), version=version.value)
    """

    def __init__(self, name: str) -> None:
        """Initialize the resolver.

        Args:
            name: Tier name for identification and logging
        """
        self.name = name
        self._log = logger.bind(loc="[GET_SOLC]", tier=name)

    async def resolve(self, version: CompilerVersion) -> Compiler | None:
        """Run the tier lookup with timing and logging.

        Args:
            version: Canonical compiler version.

        Returns:
            A compiler handle, or None when this tier has no compiler.
        """
        start_time = time.monotonic()
        self._log.info("tier_started", version=version.value)

        compiler = await self._resolve(version)
        duration_ms = int((time.monotonic() - start_time) * 1000)

        if compiler is None:
            self._log.info("tier_missed", version=version.value, duration_ms=duration_ms)
        else:
            self._log.info(
                "tier_hit",
                version=version.value,
                location=str(compiler.location),
                duration_ms=duration_ms,
            )
        return compiler

    @abstractmethod
    async def _resolve(self, version: CompilerVersion) -> Compiler | None:
        """Look the version up in this tier.

        Subclasses must implement this method. Recoverable failures
        (missing files, failed downloads) return None.

        Returns:
            A compiler handle, or None on a miss.
        """
        pass
