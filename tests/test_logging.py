import io
import json
import logging

import structlog

from candle_sim.config import LogFormat, Settings
from candle_sim.utils.logging import get_logger, log_order_rejected, setup_logging


def test_json_logging_filters_by_level() -> None:
    stream = io.StringIO()
    setup_logging(Settings(log_format=LogFormat.JSON, log_level="INFO"), stream=stream)
    try:
        logger = get_logger("candle_sim.tests")
        logger.debug("hidden_event")
        log_order_rejected(logger, action="buy", error="INVALID_AMOUNT", amount="abc")
    finally:
        logging.getLogger().handlers.clear()
        structlog.reset_defaults()

    lines = stream.getvalue().splitlines()
    assert len(lines) == 1
    record = json.loads(lines[0])
    assert record["event"] == "order_rejected"
    assert record["level"] == "warning"
    assert record["logger"] == "candle_sim.tests"
    assert record["error"] == "INVALID_AMOUNT"
    assert record["timestamp"].endswith("Z")


def test_console_logging_writes_to_given_stream() -> None:
    stream = io.StringIO()
    setup_logging(Settings(log_format=LogFormat.CONSOLE, log_level="DEBUG"), stream=stream)
    try:
        get_logger("candle_sim.tests").debug("candle_generated", close=101.5)
    finally:
        logging.getLogger().handlers.clear()
        structlog.reset_defaults()

    output = stream.getvalue()
    assert "candle_generated" in output
    assert "close=101.5" in output
