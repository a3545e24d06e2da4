import logging
from unittest.mock import patch

from loguru import logger

from vipride.core.config import settings
from vipride.core.logger import InterceptHandler, setup_logging


@patch("vipride.core.logger.logger")
def test_setup_logging_uses_configured_level_and_error_file(mock_logger):
    with patch.object(settings, "LOG_LEVEL", "debug"), \
         patch.object(settings, "LOG_ERROR_FILE", "var/log/vipride-errors.log"):
        setup_logging()

    mock_logger.remove.assert_called_once()
    console, error_file = mock_logger.add.call_args_list
    assert console.kwargs["level"] == "DEBUG"
    assert error_file.args[0] == "var/log/vipride-errors.log"
    assert error_file.kwargs["level"] == "ERROR"
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


@patch("vipride.core.logger.logger")
def test_setup_logging_without_error_file(mock_logger):
    setup_logging(level="WARNING", error_file="")

    assert mock_logger.add.call_count == 1
    assert mock_logger.add.call_args.kwargs["level"] == "WARNING"


def test_stdlib_records_reach_loguru():
    messages = []
    sink_id = logger.add(messages.append, level="INFO", format="{message}")
    stdlib_logger = logging.getLogger("vipride.tests.intercept")
    stdlib_logger.addHandler(InterceptHandler())
    stdlib_logger.propagate = False
    try:
        stdlib_logger.warning("pool checkout took 2.5s")
    finally:
        logger.remove(sink_id)
        stdlib_logger.handlers.clear()

    assert any("pool checkout took 2.5s" in str(message) for message in messages)
