"""CLI error handling for solidus-cli.

This module provides CLI-specific error handling that wraps
solidus-core exceptions and provides user-friendly messages
with appropriate exit codes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import click
from pydantic import ValidationError as PydanticValidationError

from solidus_cli.output import error

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails

    from solidus_core.errors import SolidusError


# Exit codes following sysexits.h convention
EXIT_USER_ERROR = 1  # User error (bad metadata, recompilation failure)
EXIT_SYSTEM_ERROR = 2  # System error (missing file, permissions)


class CLIError(click.ClickException):
    """CLI-specific exception with exit code support.

    Attributes:
        message: User-facing error message.
        exit_code: Exit code for the CLI (default: 1).
    """

    def __init__(self, message: str, exit_code: int = EXIT_USER_ERROR) -> None:
        """Initialize CLIError.

        Args:
            message: User-facing error message.
            exit_code: Exit code for the CLI.
        """
        super().__init__(message)
        self.exit_code = exit_code

    def show(self, file: object = None) -> None:
        """Display the error message using Rich formatting.

        Args:
            file: Output file (unused, for Click compatibility).
        """
        error(self.format_message())


def format_pydantic_error(err: PydanticValidationError) -> str:
    """Format Pydantic validation error into user-friendly message.

    Args:
        err: Pydantic ValidationError instance.

    Returns:
        Formatted error message with field paths and issues.

    Example:
        >>> format_pydantic_error(err)
        "Validation failed:\\n  - archive_url: Value error, archive_url must start..."
    """
    errors: list[ErrorDetails] = err.errors()
    lines = ["Validation failed:"]

    for e in errors:
        loc = ".".join(str(x) for x in e["loc"])
        msg = e["msg"]
        lines.append(f"  - {loc}: {msg}")

    return "\n".join(lines)


def handle_json_error(err: ValueError, file_path: str) -> NoReturn:
    """Handle JSON parsing errors with line number information.

    Args:
        err: JSON decoding exception.
        file_path: Path to the file being parsed.

    Raises:
        CLIError: Always raises with formatted error message.
    """
    error_msg = str(err)
    lineno = getattr(err, "lineno", None)
    colno = getattr(err, "colno", None)
    if lineno is not None and colno is not None:
        error_msg = f"JSON syntax error at line {lineno}, column {colno}: {err.msg}"  # type: ignore[attr-defined]

    raise CLIError(f"Invalid JSON in {file_path}: {error_msg}")


def handle_encoding_error(file_path: str) -> NoReturn:
    """Handle input files that are not UTF-8 text.

    Raises:
        CLIError: Always raises naming the file.
    """
    raise CLIError(f"Cannot read {file_path}: not valid UTF-8 text")


def handle_validation_error(err: PydanticValidationError) -> NoReturn:
    """Handle configuration validation errors.

    Args:
        err: Pydantic ValidationError instance.

    Raises:
        CLIError: Always raises with formatted error message.
    """
    formatted = format_pydantic_error(err)
    raise CLIError(f"Invalid configuration:\n{formatted}")


def handle_solidus_error(err: SolidusError) -> NoReturn:
    """Handle solidus-core errors.

    Only the user message is shown; technical details were already logged.

    Args:
        err: Error raised by solidus-core.

    Raises:
        CLIError: Always raises with the user message.
    """
    raise CLIError(err.user_message, exit_code=EXIT_USER_ERROR)


def handle_file_not_found(file_path: str) -> NoReturn:
    """Handle file not found errors.

    Args:
        file_path: Path to the missing file.

    Raises:
        CLIError: Always raises with formatted error message.
    """
    raise CLIError(f"File not found: {file_path}", exit_code=EXIT_SYSTEM_ERROR)


def handle_permission_error(path: str, operation: str = "access") -> NoReturn:
    """Handle permission errors.

    Args:
        path: Path that caused the permission error.
        operation: Operation that failed (read, write, etc.).

    Raises:
        CLIError: Always raises with formatted error message.
    """
    raise CLIError(
        f"Permission denied: Cannot {operation} {path}",
        exit_code=EXIT_SYSTEM_ERROR,
    )

