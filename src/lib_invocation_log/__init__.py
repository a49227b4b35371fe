"""Public package surface for ``lib_invocation_log``.

Wrap service methods and handlers so every invocation emits exactly one
single-line structured record (timing, outcome, correlation identifiers and
customizer fields) while the caller sees the unwrapped behaviour unchanged.
The stable entry points are re-exported here; adapters stay importable from
their own modules.
"""

from __future__ import annotations

from .adapters.boundary.correlation import CorrelationIdMiddleware, correlation_scope
from .adapters.sinks.stream import LoggerSink, StandardStreamSink
from .application.context import AMBIENT_CONTEXT, AmbientContext
from .application.engine import InterceptionEngine
from .application.gate import GateDecision, SeverityGate
from .application.payload import PayloadBuilder
from .application.ports import FunctionCustomizer, LogRecord, StructuredLogCustomizer, customizer
from .application.serializer import render
from .core import configure, create_engine, get_engine, intercept, load_settings, loggable, reset_engine
from .domain.descriptor import FailureDetail, InvocationDescriptor, Outcome
from .domain.errors import InvalidFormat, InvalidSetting, InvocationLogError, NotFound, UnsupportedFieldValue
from .domain.settings import DEFAULT_SETTINGS, LoggerSettings
from .domain.severity import Severity
from .observability import get_logger, get_record_logger, set_record_level
from .testing import i_should_fail

__all__ = [
    "AMBIENT_CONTEXT",
    "AmbientContext",
    "CorrelationIdMiddleware",
    "DEFAULT_SETTINGS",
    "FailureDetail",
    "FunctionCustomizer",
    "GateDecision",
    "InterceptionEngine",
    "InvalidFormat",
    "InvalidSetting",
    "InvocationDescriptor",
    "InvocationLogError",
    "LogRecord",
    "LoggerSettings",
    "LoggerSink",
    "NotFound",
    "Outcome",
    "PayloadBuilder",
    "Severity",
    "SeverityGate",
    "StandardStreamSink",
    "StructuredLogCustomizer",
    "UnsupportedFieldValue",
    "configure",
    "correlation_scope",
    "create_engine",
    "customizer",
    "get_engine",
    "get_logger",
    "get_record_logger",
    "i_should_fail",
    "intercept",
    "load_settings",
    "loggable",
    "render",
    "reset_engine",
    "set_record_level",
]
