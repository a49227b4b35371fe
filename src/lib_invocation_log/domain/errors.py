"""Domain-level exception hierarchy.

Purpose
-------
Expose the stable error taxonomy shared by the settings loaders, the payload
pipeline, and consuming applications. The hierarchy lives in the domain layer
so outer layers may depend on it without the reverse being true.

Contents
--------
* :class:`InvocationLogError` – umbrella base class for all library failures.
* :class:`InvalidSetting` – a configuration value cannot be interpreted.
* :class:`InvalidFormat` – a settings file cannot be parsed.
* :class:`NotFound` – an expected settings resource is missing.
* :class:`UnsupportedFieldValue` – a customizer left a non-scalar value (or a
  non-string key) in the log record.

System Role
-----------
None of these errors ever reaches the caller of an intercepted invocation. The
engine contains them and reduces them to diagnostics; they surface only from
explicit configuration calls (:func:`lib_invocation_log.core.load_settings`,
:meth:`LoggerSettings.from_mapping`).
"""

from __future__ import annotations


class InvocationLogError(Exception):
    """Base type for all exceptions emitted by ``lib_invocation_log``.

    Why
    ----
    Provide a single catch-all type for consumers that do not need fine-grained
    handling.
    """


class InvalidSetting(InvocationLogError):
    """Raised when a configuration value has the wrong type or an unknown name.

    Typical Sources
    ---------------
    Unknown severity names, non-integer status codes, unknown setting keys.
    """


class InvalidFormat(InvocationLogError):
    """Raised when a settings file cannot be parsed into structured data."""


class NotFound(InvocationLogError):
    """Represents missing resources (settings files, optional parsers)."""


class UnsupportedFieldValue(InvocationLogError):
    """A log record field holds something the serializer does not support.

    Why
    ----
    Records are flat maps of scalars. Collections or arbitrary objects have no
    defined rendering, so a customizer that supplies one is treated as a failed
    customizer and its changes are discarded.
    """
