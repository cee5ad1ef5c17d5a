"""Compiler handles and invocation.

A handle compiles a standard-JSON input document and returns the raw
standard-JSON output text. There are two variants:
- NativeCompiler: a ``solc`` executable run as a subprocess
- ModuleCompiler: a py-solc-x managed compiler called through the library

Invocation is synchronous and never retried. A single failure surfaces as
InvocationError with the captured error output logged, not returned.
"""

from __future__ import annotations

import json
import re
import subprocess
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Any

import structlog
from solcx.exceptions import SolcError
from solcx.wrapper import solc_wrapper

from solidus_core.errors import InvocationError

logger = structlog.get_logger(__name__)

STANDARD_JSON_FLAG = "--standard-json"
VERSION_FLAG = "--version"
VERSION_QUERY_TIMEOUT_SECONDS = 30.0

# "Version: 0.8.20+commit.a1b79de6.Linux.g++"; the platform suffix is dropped.
_VERSION_LINE = re.compile(r"Version:\s*(\d+\.\d+\.\d+(?:-[\w.]+)?\+commit\.[0-9a-f]+)")


def binary_version(
    path: Path,
    timeout_seconds: float = VERSION_QUERY_TIMEOUT_SECONDS,
) -> str | None:
    """Ask a compiler binary which version it is.

    Args:
        path: Compiler executable.
        timeout_seconds: Limit for the ``--version`` call.

    Returns:
        The full version without ``v`` prefix or platform suffix, e.g.
        ``"0.8.20+commit.a1b79de6"``, or None if the binary cannot be run
        or does not report one.
    """
    log = logger.bind(loc="[GET_SOLC]", solc_path=str(path))
    try:
        completed = subprocess.run(  # noqa: S603
            [str(path), VERSION_FLAG],
            capture_output=True,
            timeout=timeout_seconds,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        log.warning("compiler_version_unreadable", error=str(exc))
        return None

    match = _VERSION_LINE.search(completed.stdout.decode("utf-8", errors="replace"))
    if match is None:
        log.warning("compiler_version_unreadable", returncode=completed.returncode)
        return None
    return match.group(1)


class CompilerSource(str, Enum):
    """Resolution tier a compiler handle came from."""

    CACHED_NATIVE = "cached_native"
    DOWNLOADED_NATIVE = "downloaded_native"
    CACHED_MODULE = "cached_module"
    REMOTE_MODULE = "remote_module"


class Compiler(ABC):
    """A runnable compiler for one version.

    Attributes:
        version: Canonical version the handle was resolved for.
        source: Tier that produced the handle.
    """

    def __init__(self, version: str, source: CompilerSource) -> None:
        self.version = version
        self.source = source

    @property
    @abstractmethod
    def location(self) -> Path:
        """Filesystem location of the compiler."""

    @abstractmethod
    def compile(self, input_json: str) -> str:
        """Compile a standard-JSON input document.

        Args:
            input_json: Serialized standard-JSON input.

        Returns:
            Raw standard-JSON output text.

        Raises:
            InvocationError: If the compiler produced no output.
        """

    def describe(self) -> dict[str, str]:
        """Return a loggable summary of the handle."""
        return {
            "kind": type(self).__name__,
            "version": self.version,
            "source": self.source.value,
            "location": str(self.location),
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(version={self.version!r}, location={str(self.location)!r})"


class NativeCompiler(Compiler):
    """A native ``solc`` executable invoked with ``--standard-json``.

    The input document is written to stdin and stdout is read back once
    the process exits. Without ``timeout_seconds`` a hung compiler blocks
    the caller indefinitely.

    Example:
        >>> solc = NativeCompiler(
        ...     Path("/tmp/solc-repo/solc-linux-amd64-v0.8.20+commit.a1b79de6"),
        ...     version="v0.8.20+commit.a1b79de6",
        ... )
        >>> output = solc.compile('{"language": "Solidity", ...}')
    """

    def __init__(
        self,
        path: Path,
        *,
        version: str,
        source: CompilerSource = CompilerSource.CACHED_NATIVE,
        timeout_seconds: float | None = None,
    ) -> None:
        super().__init__(version, source)
        self.path = path
        self.timeout_seconds = timeout_seconds

    @property
    def location(self) -> Path:
        return self.path

    def compile(self, input_json: str) -> str:
        log = logger.bind(loc="[RECOMPILE]", version=self.version, solc_path=str(self.path))

        try:
            completed = subprocess.run(  # noqa: S603
                [str(self.path), STANDARD_JSON_FLAG],
                input=input_json.encode("utf-8"),
                capture_output=True,
                timeout=self.timeout_seconds,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            log.error("compiler_timeout", timeout_seconds=self.timeout_seconds)
            raise InvocationError() from exc
        except OSError as exc:
            log.error("compiler_spawn_failed", error=str(exc))
            raise InvocationError() from exc

        if not completed.stdout:
            stderr = completed.stderr.decode("utf-8", errors="replace").strip()
            log.error(
                "compiler_no_output",
                returncode=completed.returncode,
                stderr=stderr or None,
            )
            raise InvocationError()

        try:
            return completed.stdout.decode("utf-8")
        except UnicodeDecodeError as exc:
            log.error("compiler_output_not_utf8", position=exc.start, size=len(completed.stdout))
            raise InvocationError() from exc


class ModuleCompiler(Compiler):
    """A py-solc-x managed compiler.

    Compilation goes through ``solcx.wrapper.solc_wrapper`` so the output
    is the raw standard-JSON text, diagnostics included. Higher-level
    solcx helpers raise on compiler errors, which would hide the decision
    the output extractor has to make.
    """

    def __init__(
        self,
        binary_path: Path,
        *,
        version: str,
        source: CompilerSource = CompilerSource.CACHED_MODULE,
    ) -> None:
        super().__init__(version, source)
        self.binary_path = binary_path

    @property
    def location(self) -> Path:
        return self.binary_path

    def compile(self, input_json: str) -> str:
        log = logger.bind(loc="[RECOMPILE]", version=self.version, module=str(self.binary_path))

        try:
            stdout, stderr, _command, _proc = solc_wrapper(
                solc_binary=self.binary_path,
                stdin=input_json,
                standard_json=True,
            )
        except SolcError as exc:
            log.error("module_compile_failed", error=str(exc))
            raise InvocationError() from exc
        except UnicodeDecodeError as exc:
            log.error("compiler_output_not_utf8", position=exc.start)
            raise InvocationError() from exc

        if not stdout:
            log.error("compiler_no_output", stderr=(stderr or "").strip() or None)
            raise InvocationError()

        return stdout


def compile_with(compiler: Compiler, input_document: dict[str, Any]) -> str:
    """Serialize an input document and compile it with a resolved handle.

    Args:
        compiler: Handle returned by the compiler locator.
        input_document: Standard-JSON input document.

    Returns:
        Raw standard-JSON output text.

    Raises:
        InvocationError: If the compiler produced no output.
    """
    input_json = json.dumps(input_document)
    logger.info(
        "compiling",
        loc="[RECOMPILE]",
        **compiler.describe(),
    )
    return compiler.compile(input_json)
