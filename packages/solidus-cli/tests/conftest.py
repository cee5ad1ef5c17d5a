"""Shared test fixtures for solidus-cli tests.

Provides CliRunner fixtures and metadata/source files for testing CLI
commands.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Generator
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
import structlog
from click.testing import CliRunner

METADATA_FILENAME = "metadata.json"

SOURCE_A = """// SPDX-License-Identifier: MIT
pragma solidity ^0.8.0;

contract A {
    uint256 public value = 1;
}
"""


@pytest.fixture(autouse=True)
def quiet_structlog() -> Generator[MagicMock, None, None]:
    """Keep structured logs out of command output.

    The CLI configures logging on every invocation; that call is replaced
    so loggers stay uncached and filtered to CRITICAL on stderr.

    Yields:
        The mock standing in for configure_logging.
    """
    structlog.configure(
        processors=[structlog.dev.ConsoleRenderer()],
        wrapper_class=structlog.make_filtering_bound_logger(logging.CRITICAL),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
    with patch("solidus_core.observability.configure_logging") as configure:
        yield configure


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click test runner.

    Returns:
        CliRunner instance for testing CLI commands.
    """
    return CliRunner()


@pytest.fixture
def isolated_runner(cli_runner: CliRunner) -> Generator[CliRunner, None, None]:
    """Create a Click test runner with an isolated filesystem.

    Yields:
        CliRunner instance with isolated filesystem.
    """
    with cli_runner.isolated_filesystem():
        yield cli_runner


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove solidus environment variables so defaults apply."""
    for var in (
        "SOLC_REPO",
        "SOLC_REPO_TMP",
        "SOLJSON_REPO",
        "SOLC_ARCHIVE_URL",
        "SOLC_DOWNLOAD_TIMEOUT",
        "SOLC_COMPILE_TIMEOUT",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def sample_metadata() -> dict[str, Any]:
    """Return metadata for contract A in contracts/A.sol."""
    return {
        "compiler": {"version": "0.8.20+commit.a1b79de6"},
        "language": "Solidity",
        "settings": {
            "compilationTarget": {"contracts/A.sol": "A"},
            "optimizer": {"enabled": False, "runs": 200},
        },
        "sources": {"contracts/A.sol": {"urls": []}},
        "version": 1,
    }


@pytest.fixture
def metadata_file(tmp_path: Path, sample_metadata: dict[str, Any]) -> Path:
    """Write sample_metadata to a file.

    Returns:
        Path to metadata.json in tmp_path.
    """
    path = tmp_path / METADATA_FILENAME
    path.write_text(json.dumps(sample_metadata))
    return path


@pytest.fixture
def sources_dir(tmp_path: Path) -> Path:
    """Create a sources directory holding contracts/A.sol.

    Returns:
        Path to the sources directory.
    """
    root = tmp_path / "sources"
    (root / "contracts").mkdir(parents=True)
    (root / "contracts" / "A.sol").write_text(SOURCE_A)
    return root
