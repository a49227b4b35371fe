from __future__ import annotations

import logging

import pytest

from lib_invocation_log.domain.errors import InvalidSetting
from lib_invocation_log.domain.severity import TRACE, Severity


def test_ordering_runs_from_trace_to_disabled() -> None:
    ordered = sorted(Severity)
    assert [member.name for member in ordered] == ["TRACE", "DEBUG", "INFO", "WARN", "ERROR", "FATAL", "DISABLED"]


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("info", Severity.INFO),
        ("INFO", Severity.INFO),
        (" Debug ", Severity.DEBUG),
        ("warning", Severity.WARN),
        ("warn", Severity.WARN),
        ("critical", Severity.FATAL),
        ("off", Severity.DISABLED),
        ("disabled", Severity.DISABLED),
    ],
)
def test_parse_accepts_names_and_aliases(text: str, expected: Severity) -> None:
    assert Severity.parse(text) is expected


def test_parse_none_means_info() -> None:
    assert Severity.parse(None) is Severity.INFO


@pytest.mark.parametrize("bad", ["verbose", 3, ""])
def test_parse_rejects_unknown_values(bad: object) -> None:
    with pytest.raises(InvalidSetting):
        Severity.parse(bad)


def test_labels_are_lowercase_names() -> None:
    assert Severity.ERROR.label == "error"
    assert Severity.DEBUG.label == "debug"


def test_python_levels_and_trace_registration() -> None:
    assert Severity.TRACE.python_level == TRACE
    assert logging.getLevelName(TRACE) == "TRACE"
    assert Severity.WARN.python_level == logging.WARNING
    assert Severity.DISABLED.python_level is None


def test_fatal_is_gated_on_error_tier() -> None:
    assert Severity.FATAL.gate_level == logging.ERROR
    assert Severity.INFO.gate_level == logging.INFO
    assert Severity.DISABLED.gate_level is None
