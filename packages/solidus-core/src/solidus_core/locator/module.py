"""Module compiler tiers.

The module form of the compiler is a py-solc-x managed installation:
- CachedModuleResolver: a compiler already present in the module repository
- RemoteModuleResolver: install through the solc release registry

py-solc-x keys installations by ``major.minor.patch`` only, so both tiers
ask the installed binary for its full version and accept it only when the
commit hash (and any prerelease tag) matches the requested version.

The registry fetch is the last tier. Its failure is the only terminal
resolution failure and is raised as CompilerNotFoundError.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from solcx import install_solc
from solcx.exceptions import SolcNotInstalled, UnsupportedVersionError
from solcx.install import get_executable

from solidus_core.errors import CompilerNotFoundError
from solidus_core.invoker import CompilerSource, ModuleCompiler, binary_version
from solidus_core.locator.base import BaseResolver

if TYPE_CHECKING:
    from solidus_core.version import CompilerVersion


class ModuleRegistry(Protocol):
    """Version-keyed source of module compilers.

    ``fetch`` completes with exactly one of: the path of the installed
    compiler, or an exception.
    """

    async def fetch(self, version: CompilerVersion) -> Path: ...


class CompilerVersionMismatch(LookupError):
    """An installed compiler reports a different version than requested."""

    def __init__(self, requested: str, installed: str | None) -> None:
        self.requested = requested
        self.installed = installed
        super().__init__(f"Installed compiler is {installed or 'unknown'}, not {requested}")


async def version_mismatch(path: Path, version: CompilerVersion) -> str | None:
    """Return what a binary reports when it is not the requested version.

    Returns:
        None when the binary reports exactly ``version``, otherwise the
        version it reports (``"unknown"`` if it reports none).
    """
    installed = await asyncio.to_thread(binary_version, path)
    if installed == version.bare:
        return None
    return installed or "unknown"


class SolcxRegistry:
    """Install compilers with ``solcx.install_solc`` into a module repository.

    The blocking install runs in a worker thread so the fetch is awaitable.
    Releases are installed by ``major.minor.patch``; the installed binary
    must then report the exact requested version. ``latest`` is resolved
    by the registry itself and is not checked.

    Attributes:
        install_dir: py-solc-x install folder (the module repository).

    Example:
        >>> registry = SolcxRegistry(Path("soljson-repo"))
        >>> path = await registry.fetch(CompilerVersion.parse("0.8.20+commit.a1b79de6"))
    """

    def __init__(self, install_dir: Path) -> None:
        self.install_dir = install_dir

    async def fetch(self, version: CompilerVersion) -> Path:
        release = "latest" if version.is_latest else version.semver
        if release is None:
            msg = f"Version {version.value} does not name a compiler release"
            raise ValueError(msg)

        self.install_dir.mkdir(parents=True, exist_ok=True)
        installed = await asyncio.to_thread(
            install_solc,
            release,
            show_progress=False,
            solcx_binary_path=self.install_dir,
        )
        path = get_executable(installed, solcx_binary_path=self.install_dir)

        if not version.is_latest:
            reported = await version_mismatch(path, version)
            if reported is not None:
                raise CompilerVersionMismatch(version.bare, reported)
        return path


class CachedModuleResolver(BaseResolver):
    """Find an installed module compiler in the module repository.

    An installation of the same release built from another commit, such
    as a nightly, is a miss.

    Attributes:
        module_repo: py-solc-x install folder to search.
    """

    def __init__(self, module_repo: Path) -> None:
        super().__init__(name=CompilerSource.CACHED_MODULE.value)
        self.module_repo = module_repo

    async def _resolve(self, version: CompilerVersion) -> ModuleCompiler | None:
        release = version.semver
        if release is None:
            self._log.debug("module_lookup_skipped", version=version.value)
            return None

        self._log.info("searching_module_compiler", target=str(self.module_repo), release=release)
        try:
            path = get_executable(release, solcx_binary_path=self.module_repo)
        except (SolcNotInstalled, UnsupportedVersionError):
            return None

        reported = await version_mismatch(path, version)
        if reported is not None:
            self._log.warning(
                "module_compiler_version_mismatch",
                version=version.value,
                installed=reported,
                path=str(path),
            )
            return None

        return ModuleCompiler(path, version=version.value, source=CompilerSource.CACHED_MODULE)


class RemoteModuleResolver(BaseResolver):
    """Fetch a module compiler from a registry.

    Never returns a miss: either a handle or CompilerNotFoundError chained
    from the registry error.

    Attributes:
        registry: Source of module compilers.
    """

    def __init__(self, registry: ModuleRegistry) -> None:
        super().__init__(name=CompilerSource.REMOTE_MODULE.value)
        self.registry = registry

    async def _resolve(self, version: CompilerVersion) -> ModuleCompiler:
        log = self._log.bind(version=version.value)
        log.info("searching_module_compiler_remotely")

        try:
            path = await self.registry.fetch(version)
        except Exception as exc:
            log.error("module_compiler_not_found", error=str(exc))
            raise CompilerNotFoundError(version.value) from exc

        log.info("module_compiler_found", path=str(path))
        return ModuleCompiler(path, version=version.value, source=CompilerSource.REMOTE_MODULE)
