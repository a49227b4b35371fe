"""Read-only snapshot of one intercepted invocation.

Contents
--------
* :class:`Outcome` – ``SUCCESS`` or ``FAILURE``.
* :class:`FailureDetail` – message and rendered traceback of a failure.
* :class:`InvocationDescriptor` – what is being intercepted and how it ended.

System Role
-----------
The engine creates a descriptor at the start of an interception, completes it
exactly once via :meth:`InvocationDescriptor.succeeded` or
:meth:`InvocationDescriptor.failed`, hands it to the payload builder and the
customizers, and drops it after the record is emitted.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class Outcome(Enum):
    """How the wrapped call ended."""

    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True, slots=True)
class FailureDetail:
    """Message and full traceback text captured from a failure.

    ``message`` is ``None`` when the exception carries no message.
    """

    message: str | None
    rendered_trace: str

    @classmethod
    def from_exception(cls, exc: BaseException) -> FailureDetail:
        """Capture *exc* without modifying it.

        Examples
        --------
        >>> FailureDetail.from_exception(ValueError()).message is None
        True
        >>> FailureDetail.from_exception(ValueError("boom")).message
        'boom'
        """

        try:
            message = str(exc) or None
        except Exception:  # noqa: BLE001 - an unprintable failure still gets its record
            message = None
        rendered = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return cls(message=message, rendered_trace=rendered)


@dataclass(frozen=True, slots=True)
class InvocationDescriptor:
    """Immutable description of an intercepted call.

    Attributes
    ----------
    operation_name:
        Method or operation key; lower-cased when it appears in the record.
    declaring_scope_name:
        Dotted name of the owner (``"pkg.module.Class"``); its last segment is
        the fallback ``apiId``.
    logical_api_id:
        Optional per-invocation API identifier.
    arguments / keyword_arguments:
        Call arguments, opaque to the core but visible to customizers.
    result:
        Return value once the call succeeded.
    outcome:
        ``None`` while the call is running.
    failure / exception:
        Populated on failure. ``exception`` is the original object, never a copy.
    """

    operation_name: str
    declaring_scope_name: str | None = None
    logical_api_id: str | None = None
    arguments: tuple[Any, ...] = ()
    keyword_arguments: Mapping[str, Any] = field(default_factory=dict)
    result: Any = None
    outcome: Outcome | None = None
    failure: FailureDetail | None = None
    exception: BaseException | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "arguments", tuple(self.arguments))
        object.__setattr__(self, "keyword_arguments", MappingProxyType(dict(self.keyword_arguments)))

    @property
    def short_scope_name(self) -> str | None:
        """Last dotted segment of :attr:`declaring_scope_name` (``None`` when blank).

        Examples
        --------
        >>> InvocationDescriptor("process", "com.example.InventoryService").short_scope_name
        'InventoryService'
        """

        if not self.declaring_scope_name or not self.declaring_scope_name.strip():
            return None
        return self.declaring_scope_name.rsplit(".", 1)[-1]

    @property
    def completed(self) -> bool:
        return self.outcome is not None

    def succeeded(self, result: Any) -> InvocationDescriptor:
        """Return the completed copy for a normal return."""

        return replace(self, result=result, outcome=Outcome.SUCCESS, failure=None, exception=None)

    def failed(self, exc: BaseException) -> InvocationDescriptor:
        """Return the completed copy for a raised exception."""

        return replace(
            self,
            result=None,
            outcome=Outcome.FAILURE,
            failure=FailureDetail.from_exception(exc),
            exception=exc,
        )
