"""Single-line renderer for log records.

Purpose
-------
Turn an ordered record into ``{ "key": value, ... }`` without any third-party
encoder so the output is byte-for-byte predictable for log aggregators.

Contents
    - ``render``: public entry point; total over any mapping.
    - ``format_value`` / ``escape``: value formatting and string escaping.

Rules
-----
``None`` renders as ``null``; booleans as ``true``/``false``; numbers unquoted;
everything else via :func:`str`, double-quoted, with backslash, double quote,
carriage return, newline and tab escaped. Nothing else is escaped.
"""

from __future__ import annotations

from numbers import Number
from typing import Final, Mapping

_ESCAPES: Final[tuple[tuple[str, str], ...]] = (
    ("\\", "\\\\"),
    ('"', '\\"'),
    ("\r", "\\r"),
    ("\n", "\\n"),
    ("\t", "\\t"),
)


def render(record: Mapping[str, object]) -> str:
    """Render *record* in insertion order.

    Examples
    --------
    >>> render({"logLevel": "info", "processTime": 12, "ok": True, "error": None})
    '{ "logLevel": "info", "processTime": 12, "ok": true, "error": null }'
    >>> render({})
    '{  }'
    """

    pairs = ", ".join(f'"{escape(str(key))}": {format_value(value)}' for key, value in record.items())
    return "{ " + pairs + " }"


def format_value(value: object) -> str:
    """Format one value according to the module rules.

    Examples
    --------
    >>> format_value(False), format_value(2.5), format_value('ok')
    ('false', '2.5', '"ok"')
    """

    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Number):
        return str(value)
    return '"' + escape(str(value)) + '"'


def escape(text: str) -> str:
    """Escape the five characters that may not appear raw inside a quoted value."""

    for raw, replacement in _ESCAPES:
        text = text.replace(raw, replacement)
    return text
