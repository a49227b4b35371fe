"""Payload field derivation, resolution chain and customizer isolation."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from fractions import Fraction

import pytest

from lib_invocation_log.application.context import AmbientContext
from lib_invocation_log.application.payload import PayloadBuilder, ensure_scalar_record
from lib_invocation_log.application.ports import LogRecord, customizer
from lib_invocation_log.domain.descriptor import InvocationDescriptor, Outcome
from lib_invocation_log.domain.errors import UnsupportedFieldValue
from lib_invocation_log.domain.settings import LoggerSettings
from lib_invocation_log.domain.severity import Severity

FIXED_NOW = datetime(2024, 5, 1, 12, 30, 0, 123000, tzinfo=timezone(timedelta(hours=2)))

SUCCESS_FIELDS = [
    "logLevel",
    "apiId",
    "httpStatusCode",
    "internalTransactionId",
    "logMessage",
    "logPoint",
    "logTimestamp",
    "processTime",
    "transactionId",
]


def _builder(context: AmbientContext, settings: LoggerSettings | None = None, customizers=()) -> PayloadBuilder:
    return PayloadBuilder(settings or LoggerSettings(), context, customizers, clock=lambda: FIXED_NOW)


def _success(scope: str = "com.example.InventoryService", operation: str = "process", **extra) -> InvocationDescriptor:
    return InvocationDescriptor(operation, scope, **extra).succeeded("ok")


def _failure(message: str = "boom") -> InvocationDescriptor:
    try:
        raise ValueError(message)
    except ValueError as exc:
        return InvocationDescriptor("process", "com.example.InventoryService").failed(exc)


def test_success_record_fields_in_order(context: AmbientContext) -> None:
    record = _builder(context).build(_success(), 12, Outcome.SUCCESS, Severity.INFO)
    assert list(record) == SUCCESS_FIELDS
    assert record == {
        "logLevel": "info",
        "apiId": "InventoryService",
        "httpStatusCode": 200,
        "internalTransactionId": None,
        "logMessage": "InventoryService-process Completed",
        "logPoint": "InventoryService-process-End",
        "logTimestamp": "2024-05-01T12:30:00.123000+02:00",
        "processTime": 12,
        "transactionId": None,
    }


def test_failure_record_appends_error_and_exception(context: AmbientContext) -> None:
    record = _builder(context).build(_failure(), 4, Outcome.FAILURE, Severity.ERROR)
    assert list(record) == [*SUCCESS_FIELDS, "error", "logException"]
    assert record["httpStatusCode"] == 500
    assert record["logMessage"] == "InventoryService-process Failed"
    assert record["logPoint"] == "InventoryService-process-Error"
    assert record["error"] == "boom"
    assert "Traceback (most recent call last)" in str(record["logException"])
    assert "ValueError: boom" in str(record["logException"])


def test_operation_key_is_lowercased(context: AmbientContext) -> None:
    record = _builder(context).build(_success(operation="ReserveStock"), 0, Outcome.SUCCESS, Severity.INFO)
    assert record["logPoint"] == "InventoryService-reservestock-End"


def test_configured_api_id_wins(context: AmbientContext) -> None:
    settings = LoggerSettings(api_id="DebugApi")
    descriptor = _success(operation="debuggable", logical_api_id="Ignored")
    record = _builder(context, settings).build(descriptor, 1, Outcome.SUCCESS, Severity.DEBUG)
    assert record["logLevel"] == "debug"
    assert record["logPoint"] == "DebugApi-debuggable-End"


def test_descriptor_api_id_beats_scope_name(context: AmbientContext) -> None:
    record = _builder(context).build(_success(logical_api_id="Orders"), 1, Outcome.SUCCESS, Severity.INFO)
    assert record["apiId"] == "Orders"


@pytest.mark.parametrize("api_id", ["", "   "])
def test_blank_api_id_falls_through(context: AmbientContext, api_id: str) -> None:
    record = _builder(context, LoggerSettings(api_id=api_id)).build(_success(), 1, Outcome.SUCCESS, Severity.INFO)
    assert record["apiId"] == "InventoryService"


def test_unknown_api_id_when_scope_is_empty(context: AmbientContext) -> None:
    record = _builder(context).build(_success(scope=""), 1, Outcome.SUCCESS, Severity.INFO)
    assert record["apiId"] == "unknown"
    assert record["logMessage"] == "unknown-process Completed"


def test_transaction_ids_fall_back_to_correlation_id(context: AmbientContext) -> None:
    context.set("correlationId", "corr-1")
    record = _builder(context).build(_success(), 1, Outcome.SUCCESS, Severity.INFO)
    assert record["transactionId"] == "corr-1"
    assert record["internalTransactionId"] == "corr-1"


def test_transaction_keys_override_independently(context: AmbientContext) -> None:
    settings = LoggerSettings(transaction_id_key="txid", internal_transaction_id_key="intid")
    context.set("correlationId", "corr-1")
    context.set("txid", "tx-1")
    builder = _builder(context, settings)
    assert builder.resolve_transaction_id() == "tx-1"
    assert builder.resolve_internal_transaction_id() == "tx-1"
    context.set("intid", "int-1")
    assert builder.resolve_internal_transaction_id() == "int-1"
    context.clear("txid")
    assert builder.resolve_transaction_id() == "corr-1"
    assert builder.resolve_internal_transaction_id() == "int-1"


def test_blank_transaction_value_falls_back(context: AmbientContext) -> None:
    settings = LoggerSettings(transaction_id_key="txid")
    context.set("correlationId", "corr-1")
    context.set("txid", "  ")
    assert _builder(context, settings).resolve_transaction_id() == "corr-1"


def test_failure_without_message_yields_null_error(context: AmbientContext) -> None:
    try:
        raise RuntimeError()
    except RuntimeError as exc:
        descriptor = InvocationDescriptor("process", "svc.Api").failed(exc)
    record = _builder(context).build(descriptor, 1, Outcome.FAILURE, Severity.ERROR)
    assert record["error"] is None
    assert record["logException"]


def test_customizers_run_in_order_and_may_override(context: AmbientContext) -> None:
    calls: list[str] = []

    @customizer
    def first(record: LogRecord, descriptor, duration_ms, outcome) -> None:
        calls.append("first")
        record["tenant"] = "acme"
        record["httpStatusCode"] = 299

    @customizer
    def second(record: LogRecord, descriptor, duration_ms, outcome) -> None:
        calls.append("second")
        record["tenant"] = f"{record['tenant']}-eu"
        record["outcome"] = outcome.value
        record["elapsed"] = duration_ms

    record = _builder(context, customizers=[first, second]).build(_success(), 7, Outcome.SUCCESS, Severity.INFO)
    assert calls == ["first", "second"]
    assert record["httpStatusCode"] == 299
    assert record["tenant"] == "acme-eu"
    assert record["elapsed"] == 7
    assert list(record)[-3:] == ["tenant", "outcome", "elapsed"]


def test_failing_customizer_is_isolated(context: AmbientContext, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="lib_invocation_log")

    @customizer
    def broken(record: LogRecord, descriptor, duration_ms, outcome) -> None:
        record["apiId"] = "Tampered"
        raise LookupError("no tenant")

    @customizer
    def later(record: LogRecord, descriptor, duration_ms, outcome) -> None:
        record["later"] = True

    record = _builder(context, customizers=[broken, later]).build(_success(), 1, Outcome.SUCCESS, Severity.INFO)
    assert record["apiId"] == "InventoryService"
    assert record["later"] is True

    warning = next(entry for entry in caplog.records if entry.getMessage() == "customizer_failed")
    details = getattr(warning, "context")
    assert details["customizer"].endswith("broken")
    assert details["error"] == "no tenant"
    assert details["error_type"] == "LookupError"


def test_non_scalar_value_discards_customizer_changes(context: AmbientContext, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="lib_invocation_log")

    class TagsCustomizer:
        def customize(self, record: LogRecord, descriptor, duration_ms, outcome) -> None:
            record["region"] = "eu"
            record["tags"] = ["a", "b"]  # type: ignore[assignment]

    record = _builder(context, customizers=[TagsCustomizer()]).build(_success(), 1, Outcome.SUCCESS, Severity.INFO)
    assert "tags" not in record
    assert "region" not in record
    warning = next(entry for entry in caplog.records if entry.getMessage() == "customizer_failed")
    assert getattr(warning, "context")["error_type"] == "UnsupportedFieldValue"
    assert getattr(warning, "context")["customizer"].endswith("TagsCustomizer")


def test_customizer_sees_failure_descriptor(context: AmbientContext) -> None:
    seen: list[tuple[Outcome, str | None]] = []

    @customizer
    def spy(record: LogRecord, descriptor: InvocationDescriptor, duration_ms, outcome: Outcome) -> None:
        seen.append((outcome, type(descriptor.exception).__name__))

    _builder(context, customizers=[spy]).build(_failure(), 1, Outcome.FAILURE, Severity.ERROR)
    assert seen == [(Outcome.FAILURE, "ValueError")]


def test_ensure_scalar_record_rejects_non_string_keys() -> None:
    with pytest.raises(UnsupportedFieldValue):
        ensure_scalar_record({1: "x"})


@pytest.mark.parametrize("value", [{"a": 1}, ("x",), 1j, object()])
def test_ensure_scalar_record_rejects_non_scalars(value: object) -> None:
    with pytest.raises(UnsupportedFieldValue):
        ensure_scalar_record({"field": value})


def test_default_clock_is_offset_aware(context: AmbientContext) -> None:
    record = PayloadBuilder(LoggerSettings(), context).build(_success(), 1, Outcome.SUCCESS, Severity.INFO)
    stamp = datetime.fromisoformat(str(record["logTimestamp"]))
    assert stamp.utcoffset() is not None


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf"), Fraction(1, 2)])
def test_non_finite_and_fractional_numbers_discard_customizer(context: AmbientContext, value: object) -> None:
    class RatioCustomizer:
        def customize(self, record: LogRecord, descriptor, duration_ms, outcome) -> None:
            record["ratio"] = value  # type: ignore[assignment]

    record = _builder(context, customizers=[RatioCustomizer()]).build(_success(), 1, Outcome.SUCCESS, Severity.INFO)
    assert "ratio" not in record


def test_finite_float_and_decimal_are_kept(context: AmbientContext) -> None:
    @customizer
    def amounts(record: LogRecord, descriptor, duration_ms, outcome) -> None:
        record["ratio"] = 0.25
        record["amount"] = Decimal("12.50")  # type: ignore[assignment]

    record = _builder(context, customizers=[amounts]).build(_success(), 1, Outcome.SUCCESS, Severity.INFO)
    assert record["ratio"] == 0.25
    assert record["amount"] == Decimal("12.50")
