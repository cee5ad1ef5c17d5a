"""Shared pytest fixtures for solidus-core tests.

This module provides common fixtures used across unit and integration
tests: structlog setup, sample metadata and sources, compiler output
builders and stub resolvers.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import structlog

from solidus_core.invoker import Compiler, CompilerSource
from solidus_core.locator.base import BaseResolver
from solidus_core.version import CompilerVersion

VERSION = "0.8.20+commit.a1b79de6"
CANONICAL_VERSION = "v0.8.20+commit.a1b79de6"

SOURCE_A = """// SPDX-License-Identifier: MIT
pragma solidity ^0.8.0;

contract A {
    uint256 public value = 1;
}
"""


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture.

    Loggers are not cached so structlog.testing.capture_logs() sees every
    event regardless of test order.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,  # Important for test isolation
    )


@pytest.fixture
def version() -> CompilerVersion:
    """Return the canonical version used throughout the tests."""
    return CompilerVersion.parse(VERSION)


@pytest.fixture
def sample_metadata() -> dict[str, Any]:
    """Return metadata for contract A in contracts/A.sol."""
    return {
        "compiler": {"version": VERSION},
        "language": "Solidity",
        "settings": {
            "compilationTarget": {"contracts/A.sol": "A"},
            "evmVersion": "paris",
            "libraries": {},
            "metadata": {"bytecodeHash": "ipfs"},
            "optimizer": {"enabled": False, "runs": 200},
            "remappings": [],
        },
        "sources": {
            "contracts/A.sol": {
                "keccak256": "0x00",
                "license": "MIT",
                "urls": [],
            }
        },
        "version": 1,
    }


@pytest.fixture
def sample_sources() -> dict[str, str]:
    """Return the source files matching sample_metadata."""
    return {"contracts/A.sol": SOURCE_A}


@pytest.fixture
def make_output() -> Callable[..., str]:
    """Return a builder for raw standard-JSON compiler output.

    Example:
        >>> make_output("contracts/A.sol", "A", bytecode="6001")
    """

    def _make(
        file_name: str = "contracts/A.sol",
        contract_name: str = "A",
        *,
        bytecode: str = "60806040",
        deployed_bytecode: str = "6080604052",
        metadata: str = '{"compiler":{"version":"0.8.20+commit.a1b79de6"}}\n',
        errors: list[dict[str, Any]] | None = None,
    ) -> str:
        output: dict[str, Any] = {
            "contracts": {
                file_name: {
                    contract_name: {
                        "evm": {
                            "bytecode": {"object": bytecode},
                            "deployedBytecode": {"object": deployed_bytecode},
                        },
                        "metadata": metadata,
                    }
                }
            },
            "sources": {file_name: {"id": 0}},
        }
        if errors is not None:
            output["errors"] = errors
        return json.dumps(output)

    return _make


class FakeCompiler(Compiler):
    """In-memory compiler returning canned output and recording inputs."""

    def __init__(
        self,
        output: str = "",
        *,
        version: str = CANONICAL_VERSION,
        source: CompilerSource = CompilerSource.CACHED_NATIVE,
        path: Path | None = None,
    ) -> None:
        super().__init__(version, source)
        self.output = output
        self.path = path or Path(sys.executable)
        self.inputs: list[str] = []

    @property
    def location(self) -> Path:
        return self.path

    def compile(self, input_json: str) -> str:
        self.inputs.append(input_json)
        return self.output


class StubResolver(BaseResolver):
    """Resolver returning a fixed result and counting calls."""

    def __init__(
        self,
        name: str,
        result: Compiler | None = None,
        error: Exception | None = None,
    ) -> None:
        super().__init__(name=name)
        self.result = result
        self.error = error
        self.calls: list[str] = []

    async def _resolve(self, version: CompilerVersion) -> Compiler | None:
        self.calls.append(version.value)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def fake_compiler_cls() -> type[FakeCompiler]:
    return FakeCompiler


@pytest.fixture
def stub_resolver_cls() -> type[StubResolver]:
    return StubResolver
