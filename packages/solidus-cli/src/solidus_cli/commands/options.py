"""Options shared by commands that resolve compilers."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

import click
from pydantic import ValidationError as PydanticValidationError

from solidus_cli.errors import handle_validation_error

if TYPE_CHECKING:
    from solidus_core.config import RecompileConfig

F = TypeVar("F", bound=Callable[..., Any])


def compiler_options(func: F) -> F:
    """Add compiler cache and archive options to a command.

    Unset options fall back to SOLC_REPO, SOLC_REPO_TMP, SOLJSON_REPO,
    SOLC_ARCHIVE_URL and the built-in defaults.
    """
    options = [
        click.option(
            "--solc-repo",
            "native_repo",
            type=click.Path(path_type=Path),
            default=None,
            help="Directory of native solc binaries [env: SOLC_REPO]",
        ),
        click.option(
            "--solc-repo-tmp",
            "native_tmp_repo",
            type=click.Path(path_type=Path),
            default=None,
            help="Download directory for native solc binaries [env: SOLC_REPO_TMP]",
        ),
        click.option(
            "--soljson-repo",
            "module_repo",
            type=click.Path(path_type=Path),
            default=None,
            help="Module compiler repository [env: SOLJSON_REPO]",
        ),
        click.option(
            "--archive-url",
            "archive_url",
            type=str,
            default=None,
            help="Native compiler archive base URL [env: SOLC_ARCHIVE_URL]",
        ),
        click.option(
            "--compile-timeout",
            "compile_timeout_seconds",
            type=float,
            default=None,
            help="Seconds before a native compiler process is killed",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def build_config(**overrides: Any) -> RecompileConfig:
    """Build a RecompileConfig from the environment and CLI overrides.

    Raises:
        CLIError: If the resulting configuration is invalid.
    """
    from solidus_core.config import RecompileConfig

    try:
        return RecompileConfig.from_env(**overrides)
    except PydanticValidationError as e:
        handle_validation_error(e)
