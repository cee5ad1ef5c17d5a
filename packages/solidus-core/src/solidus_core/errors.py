"""Custom exception hierarchy for solidus-core.

This module defines the exception classes raised by the recompilation path:
- SolidusError: Base exception for all solidus errors
- CompilerNotFoundError: No compiler could be found or fetched for a version
- InvocationError: The compiler produced no usable output
- RecompilationError: Compiler output lacks the requested contract
- MetadataError: Contract metadata and sources do not fit together
- InvalidBytecodeError: Bytecode cannot be sliced or decoded
- ChainRequestError: A JSON-RPC request for on-chain code failed

Messages are safe to show to less-trusted callers (for example a public
verification endpoint). Compiler diagnostics, stderr output and paths go to
the structlog sink through ``internal_details`` and never into the message.
"""

from __future__ import annotations

import structlog

logger = structlog.get_logger(__name__)


class SolidusError(Exception):
    """Base exception for solidus.

    Args:
        user_message: Safe message to display to the caller. Should NOT
            contain compiler diagnostics, file paths or process output.
        internal_details: Optional technical details for logging. This is
            logged internally but NEVER exposed to the caller.

    Example:
        >>> raise SolidusError(
        ...     "Recompilation error",
        ...     internal_details="solc exited with: Segmentation fault",
        ... )

    The caller sees: "Recompilation error"
    The logs contain: the full technical details
    """

    def __init__(
        self,
        user_message: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        """Initialize SolidusError with user message and optional internal details.

        Args:
            user_message: Safe message to display to the caller.
            internal_details: Technical details for internal logging only.
        """
        super().__init__(user_message)
        self.user_message = user_message

        if internal_details:
            logger.error(
                "solidus_error",
                error_type=self.__class__.__name__,
                user_message=user_message,
                internal_details=internal_details,
            )


class CompilerNotFoundError(SolidusError):
    """Raised when every compiler tier missed for a version.

    This is the only terminal resolution failure. Network failures of the
    earlier tiers are treated as misses; the final registry fetch failure
    is chained as ``__cause__``.

    Attributes:
        version: Canonical version that could not be resolved.
    """

    def __init__(
        self,
        version: str,
        message: str = "solc not found",
        *,
        internal_details: str | None = None,
    ) -> None:
        """Initialize CompilerNotFoundError.

        Args:
            version: Canonical compiler version.
            message: Caller-visible message.
            internal_details: Technical details for internal logging only.
        """
        super().__init__(message, internal_details=internal_details)
        self.version = version


class InvocationError(SolidusError):
    """Raised when the compiler process or module produced no usable output.

    Example:
        >>> raise InvocationError(internal_details="stderr: Illegal instruction")
    """

    def __init__(
        self,
        message: str = "Recompilation error",
        *,
        internal_details: str | None = None,
    ) -> None:
        """Initialize InvocationError.

        Args:
            message: Caller-visible message.
            internal_details: Captured stderr or library error, logged only.
        """
        super().__init__(message, internal_details=internal_details)


class RecompilationError(SolidusError):
    """Raised when compiler output does not contain the target contract.

    The message is always generic. Compiler diagnostics are logged by the
    output extractor and are not attached to the exception.
    """

    DEFAULT_MESSAGE = "Recompilation error (probably caused by invalid metadata)"

    def __init__(
        self,
        message: str = DEFAULT_MESSAGE,
        *,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(message, internal_details=internal_details)


class MetadataError(SolidusError):
    """Raised when metadata cannot be turned into a compiler input.

    Use this exception when:
    - The metadata has no compilation target
    - A source file listed in the metadata was not supplied
    - The metadata is not a JSON object
    """

    pass


class InvalidBytecodeError(SolidusError):
    """Raised when bytecode is too short or not hex for metadata handling.

    Attributes:
        length: Length of the offending bytecode string (hex characters).
    """

    def __init__(self, message: str, *, length: int | None = None) -> None:
        super().__init__(message)
        self.length = length


class ChainRequestError(SolidusError):
    """Raised when fetching deployed code over JSON-RPC fails."""

    pass
