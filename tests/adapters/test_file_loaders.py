from __future__ import annotations

import json
from pathlib import Path

import pytest

from lib_invocation_log.adapters.file_loaders.structured import (
    JSONFileLoader,
    TOMLFileLoader,
    YAMLFileLoader,
    load_settings_file,
)
from lib_invocation_log.domain.errors import InvalidFormat, NotFound


def _write(tmp_path: Path, name: str, content: str) -> Path:
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return path


def test_toml_section(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        "service.toml",
        '[invocation_log]\napi_id = "Orders"\nerror_http_status_code = 503\n\n[database]\nurl = "x"\n',
    )
    assert dict(load_settings_file(path)) == {"api_id": "Orders", "error_http_status_code": 503}


def test_toml_top_level_when_section_absent(tmp_path: Path) -> None:
    path = _write(tmp_path, "flat.toml", 'log_level = "debug"\n')
    assert dict(load_settings_file(path)) == {"log_level": "debug"}


def test_json_custom_section(tmp_path: Path) -> None:
    path = _write(tmp_path, "cfg.json", json.dumps({"logging": {"api_id": "Billing"}, "api_id": "Top"}))
    assert dict(load_settings_file(path, "logging")) == {"api_id": "Billing"}
    assert dict(load_settings_file(path, None))["api_id"] == "Top"


def test_yaml_loader(tmp_path: Path) -> None:
    pytest.importorskip("yaml")
    path = _write(tmp_path, "cfg.yml", "invocation_log:\n  log_level: warn\n  transaction_id_key: txid\n")
    assert dict(load_settings_file(path)) == {"log_level": "warn", "transaction_id_key": "txid"}


def test_empty_yaml_is_empty_mapping(tmp_path: Path) -> None:
    pytest.importorskip("yaml")
    path = _write(tmp_path, "empty.yaml", "")
    assert dict(YAMLFileLoader().load(str(path))) == {}


def test_missing_file_raises_not_found(tmp_path: Path) -> None:
    with pytest.raises(NotFound):
        TOMLFileLoader().load(str(tmp_path / "absent.toml"))


def test_invalid_document_raises_invalid_format(tmp_path: Path) -> None:
    path = _write(tmp_path, "broken.json", "{not json")
    with pytest.raises(InvalidFormat, match="Invalid JSON"):
        JSONFileLoader().load(str(path))


def test_invalid_toml_raises_invalid_format(tmp_path: Path) -> None:
    path = _write(tmp_path, "broken.toml", "api_id = \n")
    with pytest.raises(InvalidFormat, match="Invalid TOML"):
        load_settings_file(path)


def test_non_mapping_document_is_rejected(tmp_path: Path) -> None:
    path = _write(tmp_path, "list.json", "[1, 2]")
    with pytest.raises(InvalidFormat, match="did not produce a mapping"):
        load_settings_file(path)


def test_non_mapping_section_is_rejected(tmp_path: Path) -> None:
    path = _write(tmp_path, "section.json", json.dumps({"invocation_log": "debug"}))
    with pytest.raises(InvalidFormat):
        load_settings_file(path)


def test_unsupported_suffix(tmp_path: Path) -> None:
    path = _write(tmp_path, "settings.ini", "[invocation_log]\n")
    with pytest.raises(InvalidFormat, match="Unsupported settings file type"):
        load_settings_file(path)
