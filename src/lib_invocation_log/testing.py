"""Testing helpers that keep record emission observable and predictable.

Purpose
    Let consumers (and this package's own suites) assert on emitted records
    without scraping standard streams, and provide a deterministic failure to
    exercise error paths.

Contents
    - ``FAILURE_MESSAGE`` / ``i_should_fail``: stable failing callable.
    - ``parse_record``: load an emitted line back into an ordered ``dict``.
    - ``CollectingSink``: in-memory sink keeping lines and parsed records.
    - ``StaticSeverityProbe``: probe answering from a fixed threshold.
    - ``build_test_engine``: engine wired with the helpers above and a
      private ambient context.

System Integration
    Referenced by CLI end-to-end tests, unit suites and doctests that need an
    engine which does not depend on the host's logging configuration.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Final, Iterable

from .application.context import AmbientContext
from .application.engine import InterceptionEngine
from .application.gate import SeverityGate
from .application.payload import PayloadBuilder
from .application.ports import LogRecord, RecordSink, StructuredLogCustomizer
from .domain.settings import DEFAULT_SETTINGS, LoggerSettings
from .domain.severity import Severity

FAILURE_MESSAGE: Final[str] = "i should fail"
"""Stable message emitted when ``i_should_fail`` triggers a failure sequence."""


def i_should_fail() -> None:
    """Raise a deterministic :class:`RuntimeError` for failure-path testing.

    Examples
    --------
    >>> i_should_fail()
    Traceback (most recent call last):
    ...
    RuntimeError: i should fail
    """

    raise RuntimeError(FAILURE_MESSAGE)


def parse_record(line: str) -> LogRecord:
    """Parse one rendered record, keeping field order.

    Examples
    --------
    >>> parse_record('{ "logLevel": "info", "processTime": 3, "error": null }')
    {'logLevel': 'info', 'processTime': 3, 'error': None}
    """

    return json.loads(line)


@dataclass
class EmittedRecord:
    line: str
    severity: Severity
    failed: bool

    @property
    def record(self) -> LogRecord:
        return parse_record(self.line)


@dataclass
class CollectingSink:
    """Sink that keeps every emission in memory."""

    emitted: list[EmittedRecord] = field(default_factory=list)

    def emit(self, line: str, *, severity: Severity, failed: bool) -> None:
        self.emitted.append(EmittedRecord(line=line, severity=severity, failed=failed))

    @property
    def lines(self) -> list[str]:
        return [item.line for item in self.emitted]

    @property
    def records(self) -> list[LogRecord]:
        return [item.record for item in self.emitted]


class StaticSeverityProbe:
    """Enable every severity at or above *threshold*; ``None`` disables everything."""

    def __init__(self, threshold: Severity | None = Severity.TRACE) -> None:
        self.threshold = threshold
        self.queries: list[Severity] = []

    def is_enabled(self, severity: Severity) -> bool:
        self.queries.append(severity)
        if self.threshold is None or severity is Severity.DISABLED:
            return False
        return severity >= self.threshold


def build_test_engine(
    settings: LoggerSettings = DEFAULT_SETTINGS,
    *,
    customizers: Iterable[StructuredLogCustomizer] = (),
    sink: RecordSink | None = None,
    context: AmbientContext | None = None,
    probe: StaticSeverityProbe | None = None,
) -> InterceptionEngine:
    """Return an engine isolated from the host's logging setup and global context."""

    return InterceptionEngine(
        settings,
        SeverityGate(probe or StaticSeverityProbe()),
        PayloadBuilder(settings, context or AmbientContext("lib_invocation_log_test_context"), customizers),
        sink or CollectingSink(),
    )
