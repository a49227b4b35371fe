"""Diagnostics and severity enablement for the invocation logger.

Purpose
    Keep the library's own diagnostics (customizer failures, contained
    logging-path errors) predictable and correlated, and give the severity gate
    a runtime-adjustable answer to "is this tier enabled?".

Contents
    - ``get_logger``: returns the package diagnostics logger (quiet by default).
    - ``get_record_logger``: logger whose level decides record emission.
    - ``set_record_level``: adjust that level at runtime.
    - ``log_debug`` / ``log_info`` / ``log_warning`` / ``log_error``: emit
      structured entries via a single private emitter.
    - ``LoggingSeverityProbe``: answers enablement queries against a logger.

System Integration
    The payload pipeline and the engine report contained failures through the
    ``log_*`` helpers; every entry carries the correlation id active in the
    ambient context. The gate consults :class:`LoggingSeverityProbe` on every
    invocation, never caching the answer.
"""

from __future__ import annotations

import logging
from typing import Any, Final, Mapping

from .application.context import AMBIENT_CONTEXT
from .domain.settings import DEFAULT_CORRELATION_ID_KEY
from .domain.severity import Severity

_LOGGER: Final[logging.Logger] = logging.getLogger("lib_invocation_log")
_LOGGER.addHandler(logging.NullHandler())

_RECORD_LOGGER: Final[logging.Logger] = logging.getLogger("lib_invocation_log.records")
_RECORD_LOGGER.setLevel(logging.INFO)

_correlation_key: str = DEFAULT_CORRELATION_ID_KEY


def get_logger() -> logging.Logger:
    """Expose the package logger so applications may attach handlers.

    Why
        Leaves the library silent by default while giving host applications full
        control over handler and formatter configuration.
    """

    return _LOGGER


def get_record_logger() -> logging.Logger:
    """Return the logger whose level gates successful-invocation records.

    Why
        Emission follows the host's logging configuration. Lowering this
        logger's level (or calling :func:`logging.disable`) changes what is
        emitted on the very next invocation.
    """

    return _RECORD_LOGGER


def set_record_level(severity: Severity | str) -> None:
    """Set the record logger's level from a :class:`Severity` or its name.

    Examples
    --------
    >>> set_record_level("debug")
    >>> get_record_logger().isEnabledFor(logging.DEBUG)
    True
    >>> set_record_level(Severity.INFO)
    """

    resolved = Severity.parse(severity)
    level = resolved.python_level
    _RECORD_LOGGER.setLevel(logging.CRITICAL + 1 if level is None else level)


def bind_correlation_key(key: str) -> None:
    """Choose which ambient context key diagnostics report as ``correlation_id``."""

    global _correlation_key
    _correlation_key = key


class LoggingSeverityProbe:
    """Answer "is this severity enabled?" against a :mod:`logging` logger.

    The logger's effective level is read on every call, so runtime level
    changes take effect immediately.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or _RECORD_LOGGER

    def is_enabled(self, severity: Severity) -> bool:
        level = severity.gate_level
        if level is None:
            return False
        return self._logger.isEnabledFor(level)


def log_debug(message: str, **fields: Any) -> None:
    """Emit a structured debug log entry that includes the correlation context."""

    _emit(logging.DEBUG, message, fields)


def log_info(message: str, **fields: Any) -> None:
    """Emit a structured info log entry that includes the correlation context."""

    _emit(logging.INFO, message, fields)


def log_warning(message: str, **fields: Any) -> None:
    """Emit a structured warning log entry that includes the correlation context."""

    _emit(logging.WARNING, message, fields)


def log_error(message: str, **fields: Any) -> None:
    """Emit a structured error log entry that includes the correlation context."""

    _emit(logging.ERROR, message, fields)


def _emit(level: int, message: str, fields: Mapping[str, Any]) -> None:
    """Send a log entry through the shared logger with contextual metadata."""

    _LOGGER.log(level, message, extra={"context": _with_correlation(fields)})


def _with_correlation(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Attach the current correlation identifier to the provided structured fields."""

    context: dict[str, Any] = {"correlation_id": AMBIENT_CONTEXT.get(_correlation_key)}
    context.update(fields)
    return context
