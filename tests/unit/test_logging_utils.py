"""Tests for utils/logging.py — configure_logging."""
from __future__ import annotations

import io
import json
import logging
import sys

import structlog

from openshift_build_sdk.utils.logging import configure_logging


# ---------------------------------------------------------------------------
# configure_logging
# ---------------------------------------------------------------------------


def test_configure_logging_info_json_does_not_raise() -> None:
    configure_logging("INFO", json=True)


def test_configure_logging_debug_text_does_not_raise() -> None:
    configure_logging("DEBUG", json=False)


def test_configure_logging_sets_root_level_debug() -> None:
    configure_logging("DEBUG", json=False)
    assert logging.getLogger().level == logging.DEBUG


def test_configure_logging_sets_root_level_warning() -> None:
    configure_logging("WARNING", json=True)
    assert logging.getLogger().level == logging.WARNING


def test_configure_logging_installs_single_stderr_handler() -> None:
    configure_logging("INFO", json=True)
    configure_logging("INFO", json=True)
    handlers = logging.getLogger().handlers
    assert len(handlers) == 1
    assert isinstance(handlers[0], logging.StreamHandler)
    assert handlers[0].stream is sys.stderr


def test_configure_logging_invalid_level_falls_back_to_info() -> None:
    configure_logging("NOTAREAL_LEVEL", json=False)
    assert logging.getLogger().level == logging.INFO


# ---------------------------------------------------------------------------
# Rendered output
# ---------------------------------------------------------------------------


def test_json_output_carries_event_and_bound_context() -> None:
    stream = io.StringIO()
    configure_logging("INFO", json=True, stream=stream)

    logger = structlog.get_logger("openshift_build_sdk.build.builder")
    with structlog.contextvars.bound_contextvars(build_id="app-build-1"):
        logger.info("build_triggered", namespace="ci")

    record = json.loads(stream.getvalue().strip().splitlines()[-1])
    assert record["event"] == "build_triggered"
    assert record["build_id"] == "app-build-1"
    assert record["namespace"] == "ci"
    assert record["level"] == "info"
    assert record["logger"] == "openshift_build_sdk.build.builder"


def test_records_below_level_are_dropped() -> None:
    stream = io.StringIO()
    configure_logging("WARNING", json=True, stream=stream)

    structlog.get_logger("openshift_build_sdk.watch.resource").info("watch_started")

    assert stream.getvalue() == ""


def test_stdlib_records_share_the_handler() -> None:
    stream = io.StringIO()
    configure_logging("INFO", json=True, stream=stream)

    logging.getLogger("asyncio").warning("slow callback")

    record = json.loads(stream.getvalue().strip())
    assert record["event"] == "slow callback"
    assert record["level"] == "warning"
