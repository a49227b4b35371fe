from __future__ import annotations

import logging
from typing import Iterator

import pytest

from lib_invocation_log import AMBIENT_CONTEXT, AmbientContext, reset_engine
from lib_invocation_log.observability import bind_correlation_key, get_record_logger
from lib_invocation_log.testing import CollectingSink


@pytest.fixture(autouse=True)
def _isolate_process_state() -> Iterator[None]:
    """Restore the record logger level, default engine and ambient context after each test."""

    record_logger = get_record_logger()
    previous_level = record_logger.level
    yield
    record_logger.setLevel(previous_level)
    logging.disable(logging.NOTSET)
    for key in AMBIENT_CONTEXT.snapshot():
        AMBIENT_CONTEXT.clear(key)
    bind_correlation_key("correlationId")
    reset_engine()


@pytest.fixture()
def context() -> AmbientContext:
    return AmbientContext("lib_invocation_log_test")


@pytest.fixture()
def sink() -> CollectingSink:
    return CollectingSink()
