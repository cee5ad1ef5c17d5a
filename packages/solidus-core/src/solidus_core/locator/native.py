"""Native compiler tiers.

- CachedNativeResolver: ``solc-linux-amd64-v<version>`` in local directories
- DownloadedNativeResolver: the same file fetched from the public archive
"""

from __future__ import annotations

import os
import tempfile
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import quote

import httpx

from solidus_core.invoker import CompilerSource, NativeCompiler
from solidus_core.locator.base import BaseResolver

if TYPE_CHECKING:
    from solidus_core.version import CompilerVersion

NATIVE_BINARY_PREFIX = "solc-linux-amd64-v"
EXECUTABLE_MODE = 0o755


def native_binary_name(version: CompilerVersion) -> str:
    """Return the archive file name of the native compiler for a version.

    Example:
        >>> native_binary_name(CompilerVersion.parse("0.8.20+commit.a1b79de6"))
        'solc-linux-amd64-v0.8.20+commit.a1b79de6'
    """
    return f"{NATIVE_BINARY_PREFIX}{version.bare}"


class CachedNativeResolver(BaseResolver):
    """Find a native compiler in local directories, without network access.

    Directories are searched in order; the first existing file wins.

    Attributes:
        search_dirs: Directories to search, download directory first.
        compile_timeout_seconds: Timeout handed to the returned handle.
    """

    def __init__(
        self,
        search_dirs: Sequence[Path],
        *,
        compile_timeout_seconds: float | None = None,
    ) -> None:
        super().__init__(name=CompilerSource.CACHED_NATIVE.value)
        self.search_dirs = tuple(search_dirs)
        self.compile_timeout_seconds = compile_timeout_seconds

    async def _resolve(self, version: CompilerVersion) -> NativeCompiler | None:
        file_name = native_binary_name(version)
        for repo in self.search_dirs:
            candidate = repo / file_name
            if candidate.is_file():
                return NativeCompiler(
                    candidate,
                    version=version.value,
                    source=CompilerSource.CACHED_NATIVE,
                    timeout_seconds=self.compile_timeout_seconds,
                )
        return None


class DownloadedNativeResolver(BaseResolver):
    """Download a native compiler from the public binary archive.

    ``GET <archive_url>/<urlencoded file name>``. On HTTP 200 the body is
    written to the download directory with mode 0755. Any other status,
    a network error or a write error is logged and reported as a miss so
    the locator moves on to the module tiers.

    Concurrent first downloads of one version may race. Each writes a
    private temporary file and renames it into place, so the last writer
    wins with a complete file.

    Attributes:
        archive_url: Archive base URL without trailing slash.
        download_dir: Directory downloaded binaries are stored in.
        timeout_seconds: Timeout for the download request.
        compile_timeout_seconds: Timeout handed to the returned handle.

    Example:
        >>> resolver = DownloadedNativeResolver(
        ...     "https://binaries.soliditylang.org/linux-amd64",
        ...     Path("/tmp/solc-repo"),
        ... )
        >>> compiler = await resolver.resolve(CompilerVersion.parse("0.8.20+commit.a1b79de6"))
    """

    def __init__(
        self,
        archive_url: str,
        download_dir: Path,
        *,
        timeout_seconds: float = 120.0,
        compile_timeout_seconds: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(name=CompilerSource.DOWNLOADED_NATIVE.value)
        self.archive_url = archive_url.rstrip("/")
        self.download_dir = download_dir
        self.timeout_seconds = timeout_seconds
        self.compile_timeout_seconds = compile_timeout_seconds
        self._client = client

    def url_for(self, version: CompilerVersion) -> str:
        return f"{self.archive_url}/{quote(native_binary_name(version), safe='')}"

    async def _resolve(self, version: CompilerVersion) -> NativeCompiler | None:
        url = self.url_for(version)
        log = self._log.bind(version=version.value, url=url)
        log.info("fetching_native_compiler")

        try:
            response = await self._get(url)
        except httpx.HTTPError as exc:
            log.error("native_compiler_fetch_failed", error=str(exc))
            return None

        if response.status_code != httpx.codes.OK:
            log.error("native_compiler_fetch_failed", status_code=response.status_code)
            return None

        try:
            path = self._persist(native_binary_name(version), response.content)
        except OSError as exc:
            log.error("native_compiler_write_failed", error=str(exc))
            return None

        log.info("native_compiler_fetched", path=str(path), size=len(response.content))
        return NativeCompiler(
            path,
            version=version.value,
            source=CompilerSource.DOWNLOADED_NATIVE,
            timeout_seconds=self.compile_timeout_seconds,
        )

    async def _get(self, url: str) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(
                url, follow_redirects=True, timeout=self.timeout_seconds
            )
        async with httpx.AsyncClient(timeout=self.timeout_seconds, follow_redirects=True) as client:
            return await client.get(url)

    def _persist(self, file_name: str, content: bytes) -> Path:
        self.download_dir.mkdir(parents=True, exist_ok=True)
        target = self.download_dir / file_name

        fd, tmp_name = tempfile.mkstemp(dir=self.download_dir, prefix=f".{file_name}.")
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(content)
            tmp_path.chmod(EXECUTABLE_MODE)
            os.replace(tmp_path, target)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise
        return target
