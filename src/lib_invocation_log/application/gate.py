"""Severity gate: decide whether and at which severity a record is emitted."""

from __future__ import annotations

from typing import NamedTuple

from ..domain.severity import Severity
from .ports import SeverityProbe


class GateDecision(NamedTuple):
    severity: Severity
    should_emit: bool


class SeverityGate:
    """Map configured minimum severity and outcome to a :class:`GateDecision`.

    Failures always use :attr:`Severity.ERROR` and are emitted whenever the
    error tier is enabled. Successes use the configured severity and are
    emitted only while that tier is enabled; :attr:`Severity.DISABLED` never
    emits. The probe is asked on every decision.

    Examples
    --------
    >>> class AllEnabled:
    ...     def is_enabled(self, severity):
    ...         return True
    >>> gate = SeverityGate(AllEnabled())
    >>> gate.decide(Severity.DEBUG, failed=True)
    GateDecision(severity=<Severity.ERROR: 4>, should_emit=True)
    >>> gate.decide(Severity.DISABLED, failed=False).should_emit
    False
    """

    def __init__(self, probe: SeverityProbe) -> None:
        self._probe = probe

    def decide(self, configured: Severity, *, failed: bool) -> GateDecision:
        if failed:
            return GateDecision(Severity.ERROR, self._probe.is_enabled(Severity.ERROR))
        if configured is Severity.DISABLED:
            return GateDecision(configured, False)
        return GateDecision(configured, self._probe.is_enabled(configured))
