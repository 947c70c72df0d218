from __future__ import annotations

import logging

import pytest

from tuplegen.infra.logging.setup import closeCommandLogger, createCommandLogger, logEvent, mapLogLevel


def test_map_log_level_accepts_known_names():
    assert mapLogLevel("warn") == logging.WARNING
    assert mapLogLevel("WARNING") == logging.WARNING
    assert mapLogLevel(" debug ") == logging.DEBUG
    with pytest.raises(ValueError):
        mapLogLevel("LOUD")


def test_command_logger_writes_run_id_and_component(tmp_path):
    logger, path = createCommandLogger("product", str(tmp_path), "run-7", "INFO")
    try:
        logEvent(logger, logging.INFO, "run-7", "product", "hello")
        logger.info("plain message")
        logger.debug("hidden")
    finally:
        closeCommandLogger(logger)

    text = (tmp_path / "product_run-7.log").read_text(encoding="utf-8")
    assert path.endswith("product_run-7.log")
    assert "runId=run-7 comp=product msg=hello" in text
    assert "comp=core msg=plain message" in text
    assert "hidden" not in text
    assert logger.handlers == []
