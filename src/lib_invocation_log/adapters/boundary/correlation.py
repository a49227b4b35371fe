"""Inbound boundary that establishes the correlation id.

Purpose
-------
Populate the ambient context once per inbound call: take the correlation id
from the configured request header, or generate one, bind it for the duration
of the call, echo it on the response, and always clear it afterwards.

Contents
--------
* :func:`resolve_correlation_id` – header lookup with ``uuid4`` fallback.
* :func:`correlation_scope` – framework-neutral context manager.
* :class:`CorrelationIdMiddleware` – WSGI middleware keeping the id bound until
  the response body is closed.
"""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from typing import Any, Callable, Iterable, Iterator, Mapping

from ...application.context import AMBIENT_CONTEXT, AmbientContext
from ...domain.settings import DEFAULT_SETTINGS, LoggerSettings


def resolve_correlation_id(headers: Mapping[str, str] | None, header_name: str) -> str:
    """Return the header value when it has text, otherwise a fresh ``uuid4``.

    Header names are matched case-insensitively.

    Examples
    --------
    >>> resolve_correlation_id({"x-correlation-id": "abc"}, "X-Correlation-Id")
    'abc'
    >>> len(resolve_correlation_id({}, "X-Correlation-Id"))
    36
    """

    wanted = header_name.lower()
    for name, value in (headers or {}).items():
        if name.lower() == wanted and value and value.strip():
            return value
    return str(uuid.uuid4())


@contextmanager
def correlation_scope(
    headers: Mapping[str, str] | None = None,
    settings: LoggerSettings = DEFAULT_SETTINGS,
    *,
    context: AmbientContext = AMBIENT_CONTEXT,
) -> Iterator[str]:
    """Bind the inbound correlation id for the ``with`` block and yield it.

    Examples
    --------
    >>> from lib_invocation_log.application.context import AmbientContext
    >>> ctx = AmbientContext("doctest_boundary")
    >>> with correlation_scope({"X-Correlation-Id": "req-1"}, context=ctx) as cid:
    ...     ctx.get("correlationId") == cid == "req-1"
    True
    >>> ctx.get("correlationId") is None
    True
    """

    correlation_id = resolve_correlation_id(headers, settings.correlation_id_header)
    with context.scope(settings.correlation_id_key, correlation_id):
        yield correlation_id


StartResponse = Callable[..., Any]


class CorrelationIdMiddleware:
    """WSGI middleware binding the correlation id around each request.

    The id stays bound while the server iterates the response body and is
    cleared when the server closes it, or immediately when the wrapped
    application raises.
    """

    def __init__(
        self,
        app: Callable[[dict[str, Any], StartResponse], Iterable[bytes]],
        settings: LoggerSettings = DEFAULT_SETTINGS,
        *,
        context: AmbientContext = AMBIENT_CONTEXT,
    ) -> None:
        self._app = app
        self._settings = settings
        self._context = context

    def __call__(self, environ: dict[str, Any], start_response: StartResponse) -> Iterable[bytes]:
        header_name = self._settings.correlation_id_header
        key = self._settings.correlation_id_key
        correlation_id = resolve_correlation_id({header_name: environ.get(_environ_key(header_name), "")}, header_name)

        def _start_response(status: str, response_headers: list[tuple[str, str]], *args: Any) -> Any:
            echoed = [item for item in response_headers if item[0].lower() != header_name.lower()]
            echoed.append((header_name, correlation_id))
            return start_response(status, echoed, *args)

        self._context.set(key, correlation_id)
        try:
            body = self._app(environ, _start_response)
        except BaseException:
            self._context.clear(key)
            raise
        return _ScopedBody(body, lambda: self._context.clear(key))


class _ScopedBody:
    """Response iterable that runs *on_close* after the wrapped body is closed."""

    def __init__(self, body: Iterable[bytes], on_close: Callable[[], None]) -> None:
        self._body = body
        self._on_close = on_close

    def __iter__(self) -> Iterator[bytes]:
        return iter(self._body)

    def close(self) -> None:
        try:
            close = getattr(self._body, "close", None)
            if close is not None:
                close()
        finally:
            self._on_close()


def _environ_key(header_name: str) -> str:
    """Return the WSGI ``environ`` key for an HTTP header name."""

    return "HTTP_" + header_name.upper().replace("-", "_")
