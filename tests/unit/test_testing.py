from __future__ import annotations

import pytest

from lib_invocation_log.domain.severity import Severity
from lib_invocation_log.testing import CollectingSink, StaticSeverityProbe, i_should_fail, parse_record


def test_i_should_fail_raises_runtime_error() -> None:
    with pytest.raises(RuntimeError, match="^i should fail$"):
        i_should_fail()


def test_i_should_fail_reexported() -> None:
    from lib_invocation_log import i_should_fail as exported
    from lib_invocation_log.testing import i_should_fail as original

    assert exported is original


def test_parse_record_keeps_order() -> None:
    record = parse_record('{ "b": 1, "a": "x", "c": true }')
    assert list(record) == ["b", "a", "c"]


def test_collecting_sink_records_emissions() -> None:
    sink = CollectingSink()
    sink.emit('{ "k": 1 }', severity=Severity.INFO, failed=False)
    assert sink.lines == ['{ "k": 1 }']
    assert sink.records == [{"k": 1}]
    assert sink.emitted[0].failed is False


def test_static_probe_threshold() -> None:
    probe = StaticSeverityProbe(Severity.WARN)
    assert not probe.is_enabled(Severity.INFO)
    assert probe.is_enabled(Severity.ERROR)
    assert probe.queries == [Severity.INFO, Severity.ERROR]
    assert not StaticSeverityProbe(None).is_enabled(Severity.ERROR)
