"""Pydantic configuration model for solidus-core.

This module provides:
- RecompileConfig: Compiler cache locations, archive URL and timeouts

Values come from keyword arguments or from the environment through
``RecompileConfig.from_env()``.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Environment variables read by RecompileConfig.from_env()
NATIVE_REPO_ENV_VAR = "SOLC_REPO"
NATIVE_TMP_REPO_ENV_VAR = "SOLC_REPO_TMP"
MODULE_REPO_ENV_VAR = "SOLJSON_REPO"
ARCHIVE_URL_ENV_VAR = "SOLC_ARCHIVE_URL"
DOWNLOAD_TIMEOUT_ENV_VAR = "SOLC_DOWNLOAD_TIMEOUT"
COMPILE_TIMEOUT_ENV_VAR = "SOLC_COMPILE_TIMEOUT"

DEFAULT_NATIVE_REPO = Path("solc-repo")
DEFAULT_NATIVE_TMP_REPO = Path("/tmp") / "solc-repo"  # noqa: S108
DEFAULT_MODULE_REPO = Path("soljson-repo")
DEFAULT_ARCHIVE_URL = "https://binaries.soliditylang.org/linux-amd64"


class RecompileConfig(BaseModel):
    """Where compilers are cached and fetched from.

    Attributes:
        native_repo: Primary directory of native ``solc-linux-amd64-v*`` binaries.
        native_tmp_repo: Directory freshly downloaded binaries are written to.
            Searched before ``native_repo``.
        module_repo: py-solc-x install folder holding module-form compilers.
        archive_url: Base URL of the public native binary archive.
        download_timeout_seconds: Timeout for a single binary download.
        compile_timeout_seconds: Timeout for one compiler process. ``None``
            leaves the process unbounded; a hung compiler blocks the caller.

    Example:
        >>> config = RecompileConfig(native_repo=Path("/opt/solc"))
        >>> config.archive_url
        'https://binaries.soliditylang.org/linux-amd64'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    native_repo: Path = Field(
        default=DEFAULT_NATIVE_REPO,
        description="Primary native compiler repository",
    )
    native_tmp_repo: Path = Field(
        default=DEFAULT_NATIVE_TMP_REPO,
        description="Download directory for native compilers",
    )
    module_repo: Path = Field(
        default=DEFAULT_MODULE_REPO,
        description="Module compiler repository (py-solc-x install folder)",
    )
    archive_url: str = Field(
        default=DEFAULT_ARCHIVE_URL,
        min_length=1,
        description="Base URL of the native compiler archive",
    )
    download_timeout_seconds: float = Field(
        default=120.0,
        gt=0.0,
        le=3600.0,
        description="Timeout for one native compiler download",
    )
    compile_timeout_seconds: float | None = Field(
        default=None,
        gt=0.0,
        description="Timeout for one compiler process (None = unbounded)",
    )

    @field_validator("archive_url")
    @classmethod
    def validate_archive_url(cls, v: str) -> str:
        """Validate URL scheme (must be http:// or https://)."""
        if not v.startswith(("http://", "https://")):
            msg = f"archive_url must start with http:// or https://, got: {v}"
            raise ValueError(msg)
        return v.rstrip("/")

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: Any,
    ) -> RecompileConfig:
        """Build a config from environment variables.

        Unset variables fall back to the field defaults. Keyword overrides
        win over the environment; ``None`` overrides are ignored so CLI
        options can be passed straight through.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.
            **overrides: Explicit field values.

        Returns:
            Validated RecompileConfig.

        Example:
            >>> RecompileConfig.from_env({"SOLC_REPO": "/opt/solc"}).native_repo
            PosixPath('/opt/solc')
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}

        mapping = {
            "native_repo": NATIVE_REPO_ENV_VAR,
            "native_tmp_repo": NATIVE_TMP_REPO_ENV_VAR,
            "module_repo": MODULE_REPO_ENV_VAR,
            "archive_url": ARCHIVE_URL_ENV_VAR,
            "download_timeout_seconds": DOWNLOAD_TIMEOUT_ENV_VAR,
            "compile_timeout_seconds": COMPILE_TIMEOUT_ENV_VAR,
        }
        for field_name, var in mapping.items():
            raw = env.get(var)
            if raw:
                values[field_name] = raw

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
