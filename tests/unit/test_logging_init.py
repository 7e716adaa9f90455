from __future__ import annotations

import logging
from io import StringIO

from ticket_ingest.logging.init import (
    LOGGER_NAME,
    SUMMARY_LEVEL,
    LabeledFormatter,
    get_logger,
    log_summary,
    setup_logging,
)


def test_setup_logging_creates_logger_with_labeled_formatter():
    logger = setup_logging()
    assert logger.name == LOGGER_NAME
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, LabeledFormatter)
    assert logger.propagate is False


def test_setup_logging_is_idempotent_and_enables_debug():
    first = setup_logging()
    second = setup_logging(debug=True)
    assert first is second
    assert second.level == logging.DEBUG
    assert all(h.level == logging.DEBUG for h in second.handlers)


def test_get_logger_configures_on_first_use():
    assert get_logger().name == LOGGER_NAME


def test_labeled_prefixes():
    captured = StringIO()
    logger = logging.getLogger("test_ticket_ingest_labels")
    logger.setLevel(logging.DEBUG)
    for h in logger.handlers[:]:
        logger.removeHandler(h)
    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")
    handler = logging.StreamHandler(captured)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    logger.info("Test info message")
    logger.warning("Test warning message")
    logger.error("Test error message")
    logger.log(SUMMARY_LEVEL, "rows=1")

    assert captured.getvalue().splitlines() == [
        "INFO Test info message",
        "WARN Test warning message",
        "ERROR Test error message",
        "SUMMARY rows=1",
    ]


def test_log_summary_and_module_loggers_go_to_stdout(capsys):
    setup_logging()
    log_summary("rows=3 records=2")
    logging.getLogger("ticket_ingest.services.pipeline").info("from a module")
    out = capsys.readouterr().out
    assert "SUMMARY rows=3 records=2" in out
    assert "INFO from a module" in out


def test_debug_hidden_by_default(capsys):
    setup_logging()
    logging.getLogger("ticket_ingest.normalize.dates").debug("hidden")
    assert "hidden" not in capsys.readouterr().out
