"""Interception engine: time, run, gate, build, render, emit, re-raise.

Purpose
-------
Wrap one unit of work so that exactly one structured record describes it,
while the caller observes precisely what the unwrapped call would have done:
the same return value, or the same exception object with its traceback.

Contents
--------
* :class:`InterceptionEngine` – :meth:`~InterceptionEngine.intercept` for
  blocking callables and :meth:`~InterceptionEngine.intercept_async` for
  coroutine functions.

System Role
-----------
Created by :func:`lib_invocation_log.core.create_engine`; used directly or via
the :func:`lib_invocation_log.core.loggable` decorator. Engines are stateless
across invocations and safe to share between threads and tasks.
"""

from __future__ import annotations

import time
from typing import Awaitable, Callable, TypeVar, Union

from ..domain.descriptor import InvocationDescriptor, Outcome
from ..domain.settings import LoggerSettings
from ..observability import log_warning
from .gate import SeverityGate
from .payload import PayloadBuilder
from .ports import RecordSink
from .serializer import render

T = TypeVar("T")

DescriptorSource = Union[InvocationDescriptor, Callable[[], InvocationDescriptor]]


class InterceptionEngine:
    """Orchestrate one interception per call.

    Examples
    --------
    >>> from lib_invocation_log.testing import CollectingSink, build_test_engine
    >>> sink = CollectingSink()
    >>> engine = build_test_engine(sink=sink)
    >>> engine.intercept(InvocationDescriptor("add", "demo.Calculator"), lambda: 1 + 1)
    2
    >>> sink.records[-1]["logPoint"]
    'Calculator-add-End'
    """

    def __init__(
        self,
        settings: LoggerSettings,
        gate: SeverityGate,
        builder: PayloadBuilder,
        sink: RecordSink,
        *,
        timer: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._settings = settings
        self._gate = gate
        self._builder = builder
        self._sink = sink
        self._timer = timer

    @property
    def settings(self) -> LoggerSettings:
        return self._settings

    def intercept(self, describe: DescriptorSource, work: Callable[[], T]) -> T:
        """Run *work* and emit one record describing it.

        *describe* is a descriptor or a zero-argument factory returning one; it
        is resolved before *work* starts. Any exception raised by *work* is
        re-raised unchanged after the record has been emitted.
        """

        descriptor = self._describe(describe)
        started = self._timer()
        try:
            result = work()
        except BaseException as exc:
            self._complete(descriptor, started, failure=exc)
            raise
        self._complete(descriptor, started, result=result)
        return result

    async def intercept_async(self, describe: DescriptorSource, work: Callable[[], Awaitable[T]]) -> T:
        """Awaitable counterpart of :meth:`intercept` for coroutine functions."""

        descriptor = self._describe(describe)
        started = self._timer()
        try:
            result = await work()
        except BaseException as exc:
            self._complete(descriptor, started, failure=exc)
            raise
        self._complete(descriptor, started, result=result)
        return result

    def _describe(self, describe: DescriptorSource) -> InvocationDescriptor | None:
        """Resolve the descriptor; a failing factory only disables this record."""

        if isinstance(describe, InvocationDescriptor):
            return describe
        try:
            return describe()
        except Exception as exc:  # noqa: BLE001 - logging path must not block the wrapped call
            log_warning("descriptor_failed", error=str(exc), error_type=type(exc).__name__)
            return None

    def _complete(
        self,
        descriptor: InvocationDescriptor | None,
        started: float,
        *,
        result: object = None,
        failure: BaseException | None = None,
    ) -> None:
        """Gate, build, render and emit; every error here is contained."""

        duration_ms = max(0, int((self._timer() - started) * 1000))
        if descriptor is None:
            return
        failed = failure is not None
        try:
            completed = descriptor.failed(failure) if failure is not None else descriptor.succeeded(result)
            decision = self._gate.decide(self._settings.log_level, failed=failed)
            if not decision.should_emit:
                return
            outcome = Outcome.FAILURE if failed else Outcome.SUCCESS
            record = self._builder.build(completed, duration_ms, outcome, decision.severity)
            self._sink.emit(render(record), severity=decision.severity, failed=failed)
        except Exception as exc:  # noqa: BLE001 - only the wrapped call's outcome is visible to callers
            log_warning(
                "invocation_log_failed",
                operation=descriptor.operation_name,
                error=str(exc),
                error_type=type(exc).__name__,
            )
