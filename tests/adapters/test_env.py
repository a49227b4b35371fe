from __future__ import annotations

import pytest

from lib_invocation_log.adapters.env.default import DEFAULT_ENV_PREFIX, DefaultEnvLoader, default_env_prefix


def test_only_prefixed_variables_are_loaded() -> None:
    env = {
        "LIB_INVOCATION_LOG_LOG_LEVEL": "debug",
        "LIB_INVOCATION_LOG_API_ID": "Orders",
        "PATH": "/usr/bin",
        "LIB_INVOCATION_LOGGER": "nope",
    }
    assert DefaultEnvLoader(environ=env).load() == {"log_level": "debug", "api_id": "Orders"}


def test_prefix_with_trailing_underscore_is_accepted() -> None:
    env = {"SVC_ERROR_HTTP_STATUS_CODE": "503"}
    assert DefaultEnvLoader(environ=env).load("SVC_") == {"error_http_status_code": "503"}


@pytest.mark.parametrize("marker", ["null", "NULL", "None", " none "])
def test_null_markers_become_none(marker: str) -> None:
    env = {f"{DEFAULT_ENV_PREFIX}_TRANSACTION_ID_KEY": marker}
    assert DefaultEnvLoader(environ=env).load() == {"transaction_id_key": None}


def test_values_stay_text() -> None:
    env = {f"{DEFAULT_ENV_PREFIX}_SUCCESS_HTTP_STATUS_CODE": "201", f"{DEFAULT_ENV_PREFIX}_API_ID": " padded "}
    assert DefaultEnvLoader(environ=env).load() == {"success_http_status_code": "201", "api_id": " padded "}


def test_bare_prefix_variable_is_skipped() -> None:
    assert DefaultEnvLoader(environ={"LIB_INVOCATION_LOG_": "x"}).load() == {}


def test_reads_os_environ_by_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LIB_INVOCATION_LOG_CORRELATION_ID_KEY", "requestId")
    assert DefaultEnvLoader().load()["correlation_id_key"] == "requestId"


def test_default_env_prefix() -> None:
    assert default_env_prefix("lib-invocation-log") == DEFAULT_ENV_PREFIX
