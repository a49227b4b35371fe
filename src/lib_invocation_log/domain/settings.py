"""Flat settings object read by the interception pipeline.

Purpose
-------
Carry the handful of knobs the engine needs (severity, status codes, context
keys, API id) as an immutable value object. Loading is done elsewhere
(:func:`lib_invocation_log.core.load_settings`); this module only defines the
shape, the defaults, and read-time key resolution.

Contents
--------
* :class:`LoggerSettings` – frozen dataclass with defaults and helpers.
* :data:`DEFAULT_SETTINGS` – canonical instance carrying only defaults.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Final, Mapping

from .errors import InvalidSetting
from .severity import Severity

DEFAULT_CORRELATION_ID_HEADER: Final[str] = "X-Correlation-Id"
DEFAULT_CORRELATION_ID_KEY: Final[str] = "correlationId"


@dataclass(frozen=True, slots=True)
class LoggerSettings:
    """Immutable configuration consumed by gate, payload builder and boundary.

    Why
    ----
    The transaction keys fall back to the correlation key. The fallback is
    resolved on every read so a settings object built with only
    ``correlation_id_key`` keeps following it through :meth:`with_overrides`.

    Examples
    --------
    >>> settings = LoggerSettings(correlation_id_key="cid")
    >>> settings.resolved_transaction_id_key
    'cid'
    >>> settings.with_overrides(transaction_id_key="txid").resolved_transaction_id_key
    'txid'
    >>> settings.resolved_internal_transaction_id_key
    'cid'
    """

    correlation_id_header: str = DEFAULT_CORRELATION_ID_HEADER
    correlation_id_key: str = DEFAULT_CORRELATION_ID_KEY
    log_level: Severity = Severity.INFO
    api_id: str = ""
    success_http_status_code: int = 200
    error_http_status_code: int = 500
    transaction_id_key: str | None = None
    internal_transaction_id_key: str | None = None

    def __post_init__(self) -> None:
        """Normalise ``None``/string inputs and validate field types."""

        object.__setattr__(self, "log_level", Severity.parse(self.log_level))
        object.__setattr__(self, "api_id", "" if self.api_id is None else str(self.api_id))
        for name in ("success_http_status_code", "error_http_status_code"):
            object.__setattr__(self, name, _as_status_code(name, getattr(self, name)))
        for name in ("correlation_id_header", "correlation_id_key"):
            if not isinstance(getattr(self, name), str):
                raise InvalidSetting(f"{name} must be a string, got {getattr(self, name)!r}")

    @property
    def resolved_transaction_id_key(self) -> str:
        """Context key for ``transactionId`` (falls back to the correlation key)."""

        if self.transaction_id_key is None:
            return self.correlation_id_key
        return self.transaction_id_key

    @property
    def resolved_internal_transaction_id_key(self) -> str:
        """Context key for ``internalTransactionId`` (falls back to the correlation key)."""

        if self.internal_transaction_id_key is None:
            return self.correlation_id_key
        return self.internal_transaction_id_key

    def with_overrides(self, **overrides: Any) -> LoggerSettings:
        """Return a copy with *overrides* applied, validated like the constructor."""

        unknown = set(overrides) - SETTING_NAMES
        if unknown:
            raise InvalidSetting(f"Unknown settings: {', '.join(sorted(unknown))}")
        return replace(self, **overrides)

    def as_dict(self) -> dict[str, object]:
        """Return a JSON-friendly view including the resolved keys."""

        data = asdict(self)
        data["log_level"] = self.log_level.label
        data["resolved_transaction_id_key"] = self.resolved_transaction_id_key
        data["resolved_internal_transaction_id_key"] = self.resolved_internal_transaction_id_key
        return data

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> LoggerSettings:
        """Build settings from a flat mapping of snake_case keys.

        Keys are matched case-insensitively; unknown keys raise
        :class:`InvalidSetting`. String fields are converted with :func:`str` so
        coerced loader output (``api_id=42``) keeps working.

        Examples
        --------
        >>> LoggerSettings.from_mapping({"LOG_LEVEL": "debug", "api_id": 7}).api_id
        '7'
        """

        values: dict[str, object] = {}
        for key, value in data.items():
            name = str(key).strip().lower()
            if name not in SETTING_NAMES:
                raise InvalidSetting(f"Unknown setting {key!r}")
            values[name] = _as_text(value) if name in _TEXT_FIELDS else value
        return cls(**values)  # type: ignore[arg-type]


SETTING_NAMES: Final[frozenset[str]] = frozenset(field.name for field in fields(LoggerSettings))
_TEXT_FIELDS: Final[frozenset[str]] = frozenset(
    {
        "correlation_id_header",
        "correlation_id_key",
        "api_id",
        "transaction_id_key",
        "internal_transaction_id_key",
    }
)


def _as_text(value: object) -> str | None:
    if value is None:
        return None
    return str(value)


def _as_status_code(name: str, value: object) -> int:
    if isinstance(value, bool):
        raise InvalidSetting(f"{name} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as exc:
            raise InvalidSetting(f"{name} must be an integer, got {value!r}") from exc
    raise InvalidSetting(f"{name} must be an integer, got {value!r}")


DEFAULT_SETTINGS: Final[LoggerSettings] = LoggerSettings()
