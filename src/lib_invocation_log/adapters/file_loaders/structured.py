"""Settings file loaders.

Purpose
-------
Read logger settings from TOML, JSON or YAML documents so services can keep
them next to the rest of their configuration. A document may hold the settings
at top level or inside a named section (``[invocation_log]`` by default).

Contents
--------
* :class:`BaseFileLoader` – reading, mapping validation, section extraction.
* :class:`TOMLFileLoader` / :class:`JSONFileLoader` / :class:`YAMLFileLoader`.
* :func:`load_settings_file` – picks a loader by suffix.

System Role
-----------
Invoked by :func:`lib_invocation_log.core.load_settings` for the file layer,
below environment variables in precedence.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Final, Mapping

try:  # Python >= 3.11
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for <3.11
    import tomli as tomllib  # type: ignore[no-redef]

from ...domain.errors import InvalidFormat, NotFound
from ...observability import log_debug, log_error

try:
    import yaml  # type: ignore[import-untyped]
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    yaml = None  # type: ignore[assignment]

DEFAULT_SECTION: Final[str] = "invocation_log"

# TOMLDecodeError, JSONDecodeError and UnicodeDecodeError all derive from ValueError.
_PARSE_ERRORS: tuple[type[Exception], ...] = (ValueError,) if yaml is None else (ValueError, yaml.YAMLError)


class BaseFileLoader:
    """Common utilities shared by the structured file loaders."""

    format_name: str = "unknown"

    def load(self, path: str) -> Mapping[str, object]:
        """Return the parsed document at *path* as a mapping."""

        raw = self._read(path)
        try:
            data = self._parse(raw)
        except _PARSE_ERRORS as exc:
            log_error("settings_file_invalid", layer="file", path=path, format=self.format_name, error=str(exc))
            raise InvalidFormat(f"Invalid {self.format_name.upper()} in {path}: {exc}") from exc
        result = self._ensure_mapping({} if data is None else data, path=path)
        log_debug("settings_file_loaded", layer="file", path=path, format=self.format_name)
        return result

    def load_section(self, path: str, section: str | None = DEFAULT_SECTION) -> Mapping[str, object]:
        """Return *section* of the document when present, else the whole document.

        Examples
        --------
        >>> from tempfile import NamedTemporaryFile
        >>> tmp = NamedTemporaryFile('w', suffix='.json', delete=False, encoding='utf-8')
        >>> _ = tmp.write('{"invocation_log": {"api_id": "Orders"}, "other": 1}')
        >>> tmp.close()
        >>> dict(JSONFileLoader().load_section(tmp.name))
        {'api_id': 'Orders'}
        >>> Path(tmp.name).unlink()
        """

        document = self.load(path)
        if section and section in document:
            return self._ensure_mapping(document[section], path=f"{path}#{section}")
        return document

    def _parse(self, raw: bytes) -> object:
        raise NotImplementedError

    def _read(self, path: str) -> bytes:
        """Read *path* as bytes, raising :class:`NotFound` when the file is missing."""

        file_path = Path(path)
        if not file_path.is_file():
            raise NotFound(f"Settings file not found: {path}")
        payload = file_path.read_bytes()
        log_debug("settings_file_read", path=path, layer="file", size=len(payload))
        return payload

    @staticmethod
    def _ensure_mapping(data: object, *, path: str) -> Mapping[str, object]:
        """Ensure *data* behaves like a mapping, otherwise raise ``InvalidFormat``.

        Examples
        --------
        >>> BaseFileLoader._ensure_mapping({"key": 1}, path="demo")
        {'key': 1}
        >>> BaseFileLoader._ensure_mapping(42, path="demo")
        Traceback (most recent call last):
        ...
        lib_invocation_log.domain.errors.InvalidFormat: File demo did not produce a mapping
        """

        if not isinstance(data, Mapping):
            raise InvalidFormat(f"File {path} did not produce a mapping")
        return data  # type: ignore[return-value]


class TOMLFileLoader(BaseFileLoader):
    """Load TOML documents using the standard library parser."""

    format_name = "toml"

    def _parse(self, raw: bytes) -> object:
        return tomllib.loads(raw.decode("utf-8"))


class JSONFileLoader(BaseFileLoader):
    """Load JSON documents."""

    format_name = "json"

    def _parse(self, raw: bytes) -> object:
        return json.loads(raw)


class YAMLFileLoader(BaseFileLoader):
    """Load YAML documents when PyYAML is available."""

    format_name = "yaml"

    def _parse(self, raw: bytes) -> object:
        if yaml is None:
            raise NotFound("PyYAML is required for YAML settings support")
        return yaml.safe_load(raw)


_LOADERS: Final[dict[str, BaseFileLoader]] = {
    ".toml": TOMLFileLoader(),
    ".json": JSONFileLoader(),
    ".yaml": YAMLFileLoader(),
    ".yml": YAMLFileLoader(),
}


def load_settings_file(path: str | Path, section: str | None = DEFAULT_SECTION) -> Mapping[str, object]:
    """Load settings from *path*, choosing the parser by file suffix."""

    suffix = Path(path).suffix.lower()
    loader = _LOADERS.get(suffix)
    if loader is None:
        supported = ", ".join(sorted(_LOADERS))
        raise InvalidFormat(f"Unsupported settings file type {suffix!r}; expected one of: {supported}")
    return loader.load_section(str(path), section)
