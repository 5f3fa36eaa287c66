"""Test the centralized logging functionality."""

import logging
from io import StringIO

from wg_hub.log_config import get_logger, set_global_log_level


def test_set_global_log_level():
    set_global_log_level(logging.WARNING)
    assert logging.getLogger("wg_hub").level == logging.WARNING

    set_global_log_level(logging.DEBUG)
    assert logging.getLogger("wg_hub").level == logging.DEBUG

    set_global_log_level(logging.INFO)
    assert logging.getLogger("wg_hub").level == logging.INFO


def test_logger_hierarchy():
    set_global_log_level(logging.WARNING)
    child_logger = get_logger("wg_hub.topology")
    assert child_logger.getEffectiveLevel() == logging.WARNING


def test_logging_output():
    logger = get_logger("wg_hub.test.output")

    log_capture = StringIO()
    handler = logging.StreamHandler(log_capture)
    handler.setLevel(logging.DEBUG)

    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)

    logger.debug("Debug message")
    logger.warning("Warning message")

    log_output = log_capture.getvalue()
    assert "Debug message" in log_output
    assert "Warning message" in log_output

    logger.removeHandler(handler)
