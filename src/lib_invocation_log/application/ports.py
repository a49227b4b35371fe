"""Application-layer ports describing collaborator responsibilities.

Purpose
-------
Define the structural contracts the engine and payload builder depend on so
that sinks, probes and customizers can be swapped without touching the
pipeline.

Contents
--------
* :data:`FieldValue` / :data:`LogRecord` – the record's value domain.
* :class:`StructuredLogCustomizer` – third-party hook that extends a record.
* :class:`SeverityProbe` – answers whether a severity tier is enabled.
* :class:`RecordSink` – receives the rendered line.
* :class:`FunctionCustomizer` / :func:`customizer` – adapt a plain function to
  the customizer port.

System Role
-----------
These protocols keep the dependency rule intact: the application layer asks
for behaviour through abstractions and :mod:`lib_invocation_log.core` wires the
concrete adapters.
"""

from __future__ import annotations

from typing import Callable, Dict, Protocol, Union, runtime_checkable

from ..domain.descriptor import InvocationDescriptor, Outcome
from ..domain.severity import Severity

FieldValue = Union[str, int, float, bool, None]
LogRecord = Dict[str, FieldValue]


@runtime_checkable
class StructuredLogCustomizer(Protocol):
    """Add or override fields of a record before it is rendered.

    Why
    ----
    Services attach domain fields (tenant, order id, result size) without
    forking the pipeline.

    Contract
    --------
    Mutate *record* in place; the return value is ignored. Values must be
    text, booleans, integers, finite floats or decimals, or ``None``; ``nan``,
    infinities and fractions count as non-scalar. Raising, or leaving a
    non-scalar value behind, discards this customizer's changes and logs a
    warning; later customizers still run.
    """

    def customize(
        self,
        record: LogRecord,
        descriptor: InvocationDescriptor,
        duration_ms: int,
        outcome: Outcome,
    ) -> None:
        """Extend *record* for the completed *descriptor*."""


@runtime_checkable
class SeverityProbe(Protocol):
    """Report whether a severity tier is enabled right now."""

    def is_enabled(self, severity: Severity) -> bool:
        """Return ``True`` when records at *severity* should be emitted."""


@runtime_checkable
class RecordSink(Protocol):
    """Write one rendered record."""

    def emit(self, line: str, *, severity: Severity, failed: bool) -> None:
        """Deliver *line*; *failed* marks records of failed invocations."""


CustomizeFunction = Callable[[LogRecord, InvocationDescriptor, int, Outcome], None]


class FunctionCustomizer:
    """Adapter turning a plain function into a :class:`StructuredLogCustomizer`."""

    def __init__(self, func: CustomizeFunction) -> None:
        self._func = func
        self.name = f"{getattr(func, '__module__', '?')}.{getattr(func, '__qualname__', repr(func))}"

    def customize(
        self,
        record: LogRecord,
        descriptor: InvocationDescriptor,
        duration_ms: int,
        outcome: Outcome,
    ) -> None:
        self._func(record, descriptor, duration_ms, outcome)

    def __repr__(self) -> str:
        return f"FunctionCustomizer({self.name})"


def customizer(func: CustomizeFunction) -> FunctionCustomizer:
    """Decorator form of :class:`FunctionCustomizer`.

    Examples
    --------
    >>> @customizer
    ... def add_region(record, descriptor, duration_ms, outcome):
    ...     record["region"] = "eu-west-1"
    >>> isinstance(add_region, StructuredLogCustomizer)
    True
    """

    return FunctionCustomizer(func)


def customizer_name(candidate: object) -> str:
    """Return the qualified name used to identify a customizer in diagnostics."""

    name = getattr(candidate, "name", None)
    if isinstance(name, str) and name:
        return name
    kind = type(candidate)
    return f"{kind.__module__}.{kind.__qualname__}"
