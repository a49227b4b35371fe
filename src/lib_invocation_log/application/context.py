"""Ambient correlation context scoped to the current logical call.

Purpose
-------
Thread request-scoped identifiers (correlation id, transaction id, internal
transaction id) from an inbound boundary down to the point of logging without
passing them as parameters.

Contents
--------
* :class:`AmbientContext` – ``set`` / ``get`` / ``clear`` plus the bracketing
  :meth:`AmbientContext.scope` context manager.
* :data:`AMBIENT_CONTEXT` – the process-wide instance the engine and the
  boundary share by default.

System Role
-----------
Values live in a :class:`contextvars.ContextVar` holding an immutable mapping.
Every write installs a fresh mapping, so each thread sees its own values and
each :mod:`asyncio` task works on the copy it was created with. Thread-pool
workers keep their context between jobs, which is why every boundary call must
be bracketed with :meth:`AmbientContext.scope` (or ``set`` followed by ``clear``
in a ``finally``).
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from types import MappingProxyType
from typing import Iterator, Mapping

_EMPTY: Mapping[str, str] = MappingProxyType({})


class AmbientContext:
    """Key/value store visible to all code running in the same logical call.

    Keys that were never set resolve to ``None``; an empty string is a value.

    Examples
    --------
    >>> ctx = AmbientContext("doctest_ambient")
    >>> ctx.get("correlationId") is None
    True
    >>> with ctx.scope("correlationId", "abc"):
    ...     ctx.get("correlationId")
    'abc'
    >>> ctx.get("correlationId") is None
    True
    """

    def __init__(self, name: str = "lib_invocation_log_ambient") -> None:
        self._values: ContextVar[Mapping[str, str]] = ContextVar(name, default=_EMPTY)

    def set(self, key: str, value: str) -> None:
        """Bind *value* under *key* for the current logical call."""

        if not isinstance(value, str):
            raise TypeError(f"Ambient context values must be strings, got {type(value).__name__}")
        current = dict(self._values.get())
        current[key] = value
        self._values.set(MappingProxyType(current))

    def get(self, key: str) -> str | None:
        """Return the value bound under *key*, or ``None`` when absent."""

        return self._values.get().get(key)

    def clear(self, key: str) -> None:
        """Drop *key* from the current logical call (no-op when absent)."""

        current = self._values.get()
        if key not in current:
            return
        remaining = {name: value for name, value in current.items() if name != key}
        self._values.set(MappingProxyType(remaining))

    def snapshot(self) -> dict[str, str]:
        """Return a mutable copy of every binding visible right now."""

        return dict(self._values.get())

    @contextmanager
    def scope(self, key: str, value: str) -> Iterator[str]:
        """Bind *key* for the duration of the ``with`` block, then clear it.

        The key is cleared even when the block raises. Other keys set inside
        the block are left untouched.
        """

        self.set(key, value)
        try:
            yield value
        finally:
            self.clear(key)


AMBIENT_CONTEXT = AmbientContext()
