"""Structured logging and tracing for compiler operations.

Logs go through structlog to stderr so that command output on stdout
stays machine readable. Each locate or recompile step runs inside an
OpenTelemetry span tagged with the compiler version it works on.
"""

from __future__ import annotations

import logging
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

if TYPE_CHECKING:
    from opentelemetry.trace import Span, Tracer

TRACER_NAME = "solidus.core"

_tracer: Tracer | None = None

logger = structlog.get_logger(TRACER_NAME)


def get_tracer() -> Tracer:
    """Return the OpenTelemetry tracer used for compiler operations."""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer(TRACER_NAME)
    return _tracer


def configure_logging(*, log_level: str = "INFO", json_format: bool = True) -> None:
    """Route structlog events through stdlib logging to stderr.

    Args:
        log_level: Minimum level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: JSON lines if True, the console renderer otherwise.

    Example:
        >>> configure_logging(log_level="DEBUG", json_format=False)
    """
    renderer: Any = (
        structlog.processors.JSONRenderer()
        if json_format
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level.upper()),
        force=True,
    )


@contextmanager
def compiler_operation(
    step: str,
    *,
    version: str,
    file_name: str | None = None,
    contract_name: str | None = None,
) -> Iterator[Span]:
    """Trace one compiler step and log its outcome with its duration.

    Emits ``<step>_started`` and ``<step>_completed`` at debug level and
    ``<step>_failed`` at error level before re-raising.

    Args:
        step: Step name, ``"locate"`` or ``"recompile"``.
        version: Compiler version the step works on.
        file_name: Source file of the target contract.
        contract_name: Name of the target contract.

    Yields:
        The OpenTelemetry span of the step.

    Example:
        >>> with compiler_operation("locate", version="v0.8.20+commit.a1b79de6") as s:
        ...     compiler = await resolve()
        ...     s.set_attribute("solc.tier", compiler.source.value)
    """
    attrs: dict[str, Any] = {"solc.step": step, "solc.version": version}
    if file_name:
        attrs["solc.file_name"] = file_name
    if contract_name:
        attrs["solc.contract_name"] = contract_name

    log = logger.bind(step=step, version=version)
    start_time = time.monotonic()

    with get_tracer().start_as_current_span(step, attributes=attrs) as s:
        log.debug(f"{step}_started", file_name=file_name, contract_name=contract_name)
        try:
            yield s
        except Exception as exc:
            s.set_status(Status(StatusCode.ERROR, type(exc).__name__))
            s.record_exception(exc)
            log.error(
                f"{step}_failed",
                error_type=type(exc).__name__,
                error=str(exc),
                duration_ms=_elapsed_ms(start_time),
            )
            raise

        s.set_status(Status(StatusCode.OK))
        log.debug(f"{step}_completed", duration_ms=_elapsed_ms(start_time))


def _elapsed_ms(start_time: float) -> int:
    return int((time.monotonic() - start_time) * 1000)
