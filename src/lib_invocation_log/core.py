"""Composition root for ``lib_invocation_log``.

Purpose
-------
Wire settings, ambient context, severity gate, payload builder and sink into
an :class:`~lib_invocation_log.application.engine.InterceptionEngine`, and
expose the declarative :func:`loggable` decorator that applies it to
functions, methods and whole classes.

Contents
--------
* :func:`load_settings` – defaults → settings file → environment.
* :func:`create_engine` – build an engine from settings and collaborators.
* :func:`configure` / :func:`get_engine` – process-wide default engine.
* :func:`intercept` – run a callable through the default engine.
* :func:`loggable` – decorator for functions, methods and classes.

System Role
-----------
This module is the only place that knows about concrete adapters. Application
code depends on it (or on the engine it returns) and never on adapter modules.
"""

from __future__ import annotations

import functools
import inspect
import threading
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, TypeVar, overload

from .adapters.env.default import DEFAULT_ENV_PREFIX, DefaultEnvLoader
from .adapters.file_loaders.structured import DEFAULT_SECTION, load_settings_file
from .adapters.sinks.stream import StandardStreamSink
from .application.context import AMBIENT_CONTEXT, AmbientContext
from .application.engine import DescriptorSource, InterceptionEngine
from .application.gate import SeverityGate
from .application.payload import PayloadBuilder
from .application.ports import RecordSink, SeverityProbe, StructuredLogCustomizer
from .domain.descriptor import InvocationDescriptor
from .domain.settings import DEFAULT_SETTINGS, SETTING_NAMES, LoggerSettings
from .observability import LoggingSeverityProbe, bind_correlation_key, log_debug, log_info

T = TypeVar("T")
F = TypeVar("F", bound=Callable[..., Any])

_default_engine: InterceptionEngine | None = None
_default_lock = threading.Lock()


def load_settings(
    *,
    environ: Mapping[str, str] | None = None,
    path: str | Path | None = None,
    section: str | None = DEFAULT_SECTION,
    env_prefix: str = DEFAULT_ENV_PREFIX,
) -> LoggerSettings:
    """Return settings layered as defaults, then *path*, then the environment.

    Parameters
    ----------
    environ:
        Mapping to read variables from; defaults to :data:`os.environ`.
    path:
        Optional TOML/JSON/YAML settings file.
    section:
        Section of the settings file holding the keys; the whole document is
        used when the section is absent.
    env_prefix:
        Prefix selecting environment variables.

    Examples
    --------
    >>> load_settings(environ={"LIB_INVOCATION_LOG_LOG_LEVEL": "debug"}).log_level.label
    'debug'
    """

    values: dict[str, object] = {}
    if path is not None:
        file_values = load_settings_file(path, section)
        values.update({str(key).lower(): value for key, value in file_values.items()})
        log_debug("settings_layer_loaded", layer="file", path=str(path), keys=len(file_values))

    env_values = DefaultEnvLoader(environ=environ).load(env_prefix)
    ignored = sorted(key for key in env_values if key not in SETTING_NAMES)
    if ignored:
        log_debug("settings_env_ignored", layer="env", path=None, keys=ignored)
    values.update({key: value for key, value in env_values.items() if key in SETTING_NAMES})

    if not values:
        return DEFAULT_SETTINGS
    settings = LoggerSettings.from_mapping(values)
    log_info("settings_loaded", layer="final", path=None, keys=sorted(values))
    return settings


def create_engine(
    settings: LoggerSettings | None = None,
    *,
    customizers: Iterable[StructuredLogCustomizer] = (),
    context: AmbientContext = AMBIENT_CONTEXT,
    sink: RecordSink | None = None,
    probe: SeverityProbe | None = None,
) -> InterceptionEngine:
    """Build an engine; customizers run in the order given.

    Examples
    --------
    >>> engine = create_engine(LoggerSettings(api_id="Docs"))
    >>> engine.settings.api_id
    'Docs'
    """

    resolved = settings or DEFAULT_SETTINGS
    if context is AMBIENT_CONTEXT:
        bind_correlation_key(resolved.correlation_id_key)
    return InterceptionEngine(
        resolved,
        SeverityGate(probe or LoggingSeverityProbe()),
        PayloadBuilder(resolved, context, customizers),
        sink or StandardStreamSink(),
    )


def configure(
    settings: LoggerSettings | None = None,
    *,
    customizers: Iterable[StructuredLogCustomizer] = (),
    sink: RecordSink | None = None,
    probe: SeverityProbe | None = None,
) -> InterceptionEngine:
    """Install and return the process-wide default engine.

    ``settings=None`` loads them via :func:`load_settings`.
    """

    global _default_engine
    engine = create_engine(
        settings if settings is not None else load_settings(),
        customizers=customizers,
        sink=sink,
        probe=probe,
    )
    with _default_lock:
        _default_engine = engine
    return engine


def get_engine() -> InterceptionEngine:
    """Return the default engine, configuring it from the environment on first use."""

    global _default_engine
    with _default_lock:
        if _default_engine is None:
            _default_engine = create_engine(load_settings())
        return _default_engine


def reset_engine() -> None:
    """Forget the default engine so the next :func:`get_engine` rebuilds it."""

    global _default_engine
    with _default_lock:
        _default_engine = None


def intercept(describe: DescriptorSource, work: Callable[[], T]) -> T:
    """Run *work* through the default engine."""

    return get_engine().intercept(describe, work)


@overload
def loggable(target: F) -> F: ...


@overload
def loggable(
    target: None = None,
    *,
    api_id: str | None = None,
    operation: str | None = None,
    engine: InterceptionEngine | None = None,
) -> Callable[[F], F]: ...


def loggable(
    target: Any = None,
    *,
    api_id: str | None = None,
    operation: str | None = None,
    engine: InterceptionEngine | None = None,
) -> Any:
    """Mark a function, method or class for interception.

    Usable bare (``@loggable``) or with options (``@loggable(api_id="Orders")``).
    On a class, every public function defined in the class body is wrapped.
    ``async def`` functions are awaited inside the interception. Without an
    explicit *engine* the default engine is looked up on every call, so
    :func:`configure` may run after decoration.

    Examples
    --------
    >>> from lib_invocation_log.testing import CollectingSink, build_test_engine
    >>> sink = CollectingSink()
    >>> @loggable(engine=build_test_engine(sink=sink))
    ... class InventoryService:
    ...     def process(self, sku):
    ...         return sku.upper()
    >>> InventoryService().process("ab-1")
    'AB-1'
    >>> sink.records[-1]["logMessage"]
    'InventoryService-process Completed'
    """

    def decorate(obj: Any) -> Any:
        if inspect.isclass(obj):
            return _wrap_class(obj, api_id=api_id, engine=engine)
        return _wrap_function(obj, api_id=api_id, operation=operation, engine=engine)

    if target is None:
        return decorate
    return decorate(target)


def _wrap_class(cls: type, *, api_id: str | None, engine: InterceptionEngine | None) -> type:
    scope = _qualified_scope(cls.__module__, cls.__qualname__.split("."))
    for name, member in list(vars(cls).items()):
        if name.startswith("_"):
            continue
        if isinstance(member, staticmethod):
            wrapped = _wrap_function(member.__func__, api_id=api_id, operation=None, engine=engine, scope=scope)
            setattr(cls, name, staticmethod(wrapped))
        elif isinstance(member, classmethod):
            wrapped = _wrap_function(member.__func__, api_id=api_id, operation=None, engine=engine, scope=scope)
            setattr(cls, name, classmethod(wrapped))
        elif inspect.isfunction(member) and not getattr(member, "__lib_invocation_log__", False):
            setattr(cls, name, _wrap_function(member, api_id=api_id, operation=None, engine=engine, scope=scope))
    return cls


def _wrap_function(
    func: F,
    *,
    api_id: str | None,
    operation: str | None,
    engine: InterceptionEngine | None,
    scope: str | None = None,
) -> F:
    declaring_scope = scope or _declaring_scope(func)
    operation_name = operation or func.__name__

    def describe(args: tuple[Any, ...], kwargs: dict[str, Any]) -> InvocationDescriptor:
        return InvocationDescriptor(
            operation_name=operation_name,
            declaring_scope_name=declaring_scope,
            logical_api_id=api_id,
            arguments=args,
            keyword_arguments=kwargs,
        )

    if inspect.iscoroutinefunction(func):

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            active = engine or get_engine()
            return await active.intercept_async(lambda: describe(args, kwargs), lambda: func(*args, **kwargs))

        async_wrapper.__lib_invocation_log__ = True  # type: ignore[attr-defined]
        return async_wrapper  # type: ignore[return-value]

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        active = engine or get_engine()
        return active.intercept(lambda: describe(args, kwargs), lambda: func(*args, **kwargs))

    wrapper.__lib_invocation_log__ = True  # type: ignore[attr-defined]
    return wrapper  # type: ignore[return-value]


def _declaring_scope(func: Callable[..., Any]) -> str:
    """``module.Owner`` for methods, ``module`` for plain functions.

    Examples
    --------
    >>> def helper():
    ...     pass
    >>> _declaring_scope(helper)
    'lib_invocation_log.core'
    """

    return _qualified_scope(getattr(func, "__module__", None) or "", func.__qualname__.split(".")[:-1])


def _qualified_scope(module: str, owners: list[str]) -> str:
    """Join *module* and the owner path, dropping anything up to the last ``<locals>``."""

    if "<locals>" in owners:
        owners = owners[len(owners) - owners[::-1].index("<locals>") :]
    return ".".join(part for part in [module, *owners] if part)


__all__ = [
    "configure",
    "create_engine",
    "get_engine",
    "intercept",
    "load_settings",
    "loggable",
    "reset_engine",
]
