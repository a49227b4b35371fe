"""Structured payload pipeline.

Purpose
-------
Assemble the ordered field set for one completed invocation from settings, the
ambient context and the descriptor, then let the registered customizers extend
it.

Contents
    - ``PayloadBuilder``: ``build`` entry point plus field resolution helpers.
    - ``ensure_scalar_record``: value-domain check applied after each customizer.

Field order
-----------
``logLevel, apiId, httpStatusCode, internalTransactionId, logMessage, logPoint,
logTimestamp, processTime, transactionId`` then, for failures only, ``error``
and ``logException``, then whatever customizers append in registration order.
"""

from __future__ import annotations

import math
from datetime import datetime
from decimal import Decimal
from numbers import Integral
from typing import Callable, Iterable, Mapping, Sequence

from ..domain.descriptor import InvocationDescriptor, Outcome
from ..domain.errors import UnsupportedFieldValue
from ..domain.settings import LoggerSettings
from ..domain.severity import Severity
from ..observability import log_warning
from .context import AmbientContext
from .ports import LogRecord, StructuredLogCustomizer, customizer_name

UNKNOWN_API_ID = "unknown"


def _now() -> datetime:
    return datetime.now().astimezone()


class PayloadBuilder:
    """Build the :data:`LogRecord` for one completed invocation.

    The builder holds no per-invocation state; one instance serves concurrent
    invocations.
    """

    def __init__(
        self,
        settings: LoggerSettings,
        context: AmbientContext,
        customizers: Iterable[StructuredLogCustomizer] = (),
        *,
        clock: Callable[[], datetime] = _now,
    ) -> None:
        self._settings = settings
        self._context = context
        self._customizers: Sequence[StructuredLogCustomizer] = tuple(customizers)
        self._clock = clock

    @property
    def customizers(self) -> Sequence[StructuredLogCustomizer]:
        return self._customizers

    def build(
        self,
        descriptor: InvocationDescriptor,
        duration_ms: int,
        outcome: Outcome,
        severity: Severity,
    ) -> LogRecord:
        """Return the record for *descriptor* after the customizer pass.

        Examples
        --------
        >>> from lib_invocation_log.application.context import AmbientContext
        >>> builder = PayloadBuilder(LoggerSettings(), AmbientContext("doctest_payload"))
        >>> descriptor = InvocationDescriptor("Process", "com.example.InventoryService").succeeded(None)
        >>> record = builder.build(descriptor, 3, Outcome.SUCCESS, Severity.INFO)
        >>> record["logMessage"], record["logPoint"], record["transactionId"]
        ('InventoryService-process Completed', 'InventoryService-process-End', None)
        """

        failed = outcome is Outcome.FAILURE
        api_id = self.resolve_api_id(descriptor)
        operation = descriptor.operation_name.lower()
        transaction_id = self.resolve_transaction_id()

        record: LogRecord = {
            "logLevel": severity.label,
            "apiId": api_id,
            "httpStatusCode": self._status_code(failed),
            "internalTransactionId": self.resolve_internal_transaction_id(),
            "logMessage": f"{api_id}-{operation} {'Failed' if failed else 'Completed'}",
            "logPoint": f"{api_id}-{operation}-{'Error' if failed else 'End'}",
            "logTimestamp": self._clock().isoformat(),
            "processTime": duration_ms,
            "transactionId": transaction_id,
        }
        if failed:
            detail = descriptor.failure
            record["error"] = detail.message if detail else None
            record["logException"] = detail.rendered_trace if detail else None

        return self._customize(record, descriptor, duration_ms, outcome)

    def resolve_api_id(self, descriptor: InvocationDescriptor) -> str:
        """Configured override, then the descriptor's own id, then the short scope name."""

        if self._settings.api_id.strip():
            return self._settings.api_id
        if descriptor.logical_api_id and descriptor.logical_api_id.strip():
            return descriptor.logical_api_id
        return descriptor.short_scope_name or UNKNOWN_API_ID

    def resolve_transaction_id(self) -> str | None:
        """Transaction key, falling back to the correlation key."""

        value = self._context.get(self._settings.resolved_transaction_id_key)
        if _has_text(value):
            return value
        return self._context.get(self._settings.correlation_id_key)

    def resolve_internal_transaction_id(self) -> str | None:
        """Internal transaction key, falling back to :meth:`resolve_transaction_id`."""

        value = self._context.get(self._settings.resolved_internal_transaction_id_key)
        if _has_text(value):
            return value
        return self.resolve_transaction_id()

    def _status_code(self, failed: bool) -> int:
        if failed:
            return self._settings.error_http_status_code
        return self._settings.success_http_status_code

    def _customize(
        self,
        record: LogRecord,
        descriptor: InvocationDescriptor,
        duration_ms: int,
        outcome: Outcome,
    ) -> LogRecord:
        """Run each customizer on a copy and keep the copy only if it succeeded."""

        for hook in self._customizers:
            candidate = dict(record)
            try:
                hook.customize(candidate, descriptor, duration_ms, outcome)
                ensure_scalar_record(candidate)
            except Exception as exc:  # noqa: BLE001 - third-party hooks must not abort emission
                log_warning(
                    "customizer_failed",
                    customizer=customizer_name(hook),
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                continue
            record = candidate
        return record


def ensure_scalar_record(record: Mapping[object, object]) -> None:
    """Raise :class:`UnsupportedFieldValue` unless every key is text and every value scalar.

    Examples
    --------
    >>> ensure_scalar_record({"a": 1, "b": None, "c": "x", "d": 2.5, "e": False})
    >>> ensure_scalar_record({"ratio": float("inf")})
    Traceback (most recent call last):
    ...
    lib_invocation_log.domain.errors.UnsupportedFieldValue: Field 'ratio' holds unsupported value of type float
    >>> ensure_scalar_record({"tags": ["a"]})
    Traceback (most recent call last):
    ...
    lib_invocation_log.domain.errors.UnsupportedFieldValue: Field 'tags' holds unsupported value of type list
    """

    for key, value in record.items():
        if not isinstance(key, str):
            raise UnsupportedFieldValue(f"Field names must be strings, got {key!r}")
        if not _is_scalar(value):
            raise UnsupportedFieldValue(f"Field {key!r} holds unsupported value of type {type(value).__name__}")


def _is_scalar(value: object) -> bool:
    """Text, booleans, ``None``, integers and finite floats or decimals.

    ``nan``, infinities, fractions and complex numbers have no unquoted literal
    form a log aggregator can read back.

    Examples
    --------
    >>> _is_scalar(2.5), _is_scalar(Decimal("1.10")), _is_scalar(float("nan")), _is_scalar(1j)
    (True, True, False, False)
    """

    if value is None or isinstance(value, (str, bool, Integral)):
        return True
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, Decimal):
        return value.is_finite()
    return False


def _has_text(value: str | None) -> bool:
    return value is not None and bool(value.strip())
