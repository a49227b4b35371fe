"""Severity ordering used by the gate and rendered into ``logLevel``.

Contents
--------
* :data:`TRACE` – numeric level registered with :mod:`logging` for ``Severity.TRACE``.
* :class:`Severity` – ordered enumeration from ``TRACE`` (most verbose) to
  ``DISABLED``.
"""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Final

from .errors import InvalidSetting

TRACE: Final[int] = 5
logging.addLevelName(TRACE, "TRACE")

_ALIASES: Final[dict[str, str]] = {
    "warning": "WARN",
    "critical": "FATAL",
    "off": "DISABLED",
    "none": "DISABLED",
}


class Severity(IntEnum):
    """Severity tiers ordered from most to least verbose.

    Examples
    --------
    >>> Severity.parse("warning") is Severity.WARN
    True
    >>> Severity.DEBUG < Severity.INFO
    True
    >>> Severity.INFO.label
    'info'
    """

    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4
    FATAL = 5
    DISABLED = 6

    @property
    def label(self) -> str:
        """Lower-case name used as the ``logLevel`` field value."""

        return self.name.lower()

    @property
    def python_level(self) -> int | None:
        """Matching :mod:`logging` level, ``None`` for :attr:`DISABLED`."""

        return _PYTHON_LEVELS[self]

    @property
    def gate_level(self) -> int | None:
        """Level whose enablement decides emission; ``FATAL`` shares the error tier."""

        if self is Severity.FATAL:
            return logging.ERROR
        return self.python_level

    @classmethod
    def parse(cls, value: object) -> Severity:
        """Return the severity named by *value* (case-insensitive, common aliases).

        ``None`` resolves to :attr:`INFO`.
        """

        if value is None:
            return cls.INFO
        if isinstance(value, Severity):
            return value
        if not isinstance(value, str):
            raise InvalidSetting(f"Severity must be a name, got {value!r}")
        name = value.strip().lower()
        name = _ALIASES.get(name, name).upper()
        try:
            return cls[name]
        except KeyError as exc:
            choices = ", ".join(member.label for member in cls)
            raise InvalidSetting(f"Unknown severity {value!r}; expected one of: {choices}") from exc


_PYTHON_LEVELS: Final[dict[Severity, int | None]] = {
    Severity.TRACE: TRACE,
    Severity.DEBUG: logging.DEBUG,
    Severity.INFO: logging.INFO,
    Severity.WARN: logging.WARNING,
    Severity.ERROR: logging.ERROR,
    Severity.FATAL: logging.CRITICAL,
    Severity.DISABLED: None,
}
