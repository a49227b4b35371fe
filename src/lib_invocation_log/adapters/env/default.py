"""Environment variable adapter.

Purpose
-------
Translate process environment variables into a flat settings mapping. It forms
the highest-precedence layer of :func:`lib_invocation_log.core.load_settings`.

Key behaviours
--------------
* Enforces a prefix (:data:`DEFAULT_ENV_PREFIX`) so only relevant keys are
  captured; the remainder of the name is lower-cased into a setting key
  (``LIB_INVOCATION_LOG_LOG_LEVEL`` → ``log_level``).
* Values stay text. ``null`` / ``none`` (any case) become ``None`` so optional
  keys can be reset to their fallback. Type interpretation belongs to
  :class:`lib_invocation_log.domain.settings.LoggerSettings`.
* Emits structured logging via :mod:`lib_invocation_log.observability`.
"""

from __future__ import annotations

import os
from typing import Final, Mapping

from ...observability import log_debug

DEFAULT_ENV_PREFIX: Final[str] = "LIB_INVOCATION_LOG"


def default_env_prefix(slug: str) -> str:
    """Return the canonical environment prefix for *slug*.

    Examples
    --------
    >>> default_env_prefix('lib-invocation-log')
    'LIB_INVOCATION_LOG'
    """

    return slug.replace("-", "_").upper()


class DefaultEnvLoader:
    """Load environment variables that belong to the settings namespace."""

    def __init__(self, *, environ: Mapping[str, str] | None = None) -> None:
        """Initialise the loader with a specific ``environ`` mapping for testability.

        Parameters
        ----------
        environ:
            Mapping to read from. Defaults to :data:`os.environ`.
        """

        self._environ = os.environ if environ is None else environ

    def load(self, prefix: str = DEFAULT_ENV_PREFIX) -> dict[str, object]:
        """Return settings found under *prefix*.

        Examples
        --------
        >>> env = {'DEMO_LOG_LEVEL': 'debug', 'DEMO_TRANSACTION_ID_KEY': 'none', 'OTHER': 'x'}
        >>> DefaultEnvLoader(environ=env).load('DEMO')
        {'log_level': 'debug', 'transaction_id_key': None}
        """

        prefix = f"{prefix}_" if prefix and not prefix.endswith("_") else prefix
        collected: dict[str, object] = {}
        for key, value in self._environ.items():
            if prefix and not key.startswith(prefix):
                continue
            stripped = key[len(prefix) :] if prefix else key
            if not stripped:
                continue
            collected[stripped.lower()] = _coerce(value)
        log_debug("env_settings_loaded", layer="env", path=None, keys=sorted(collected.keys()))
        return collected


def _coerce(value: str) -> str | None:
    """Map textual null markers to ``None``; keep everything else verbatim.

    Examples
    --------
    >>> _coerce('NULL'), _coerce('none'), _coerce('debug')
    (None, None, 'debug')
    """

    if value.strip().lower() in {"null", "none"}:
        return None
    return value
