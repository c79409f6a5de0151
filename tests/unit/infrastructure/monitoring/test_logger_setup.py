import logging
from logging.handlers import RotatingFileHandler

import pytest

from ghlens.infrastructure.monitoring.logger_setup import resolve_log_level, setup_logging

@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)

@pytest.mark.parametrize(
    "value, expected",
    [("debug", logging.DEBUG), ("INFO", logging.INFO), (logging.ERROR, logging.ERROR), (None, logging.WARNING), ("loud", logging.WARNING)],
)
def test_resolve_log_level(value, expected):
    assert resolve_log_level(value) == expected

def test_setup_logging_with_file(restore_root_logger, tmp_path):
    log_file = tmp_path / "ghlens.log"

    setup_logging("INFO", log_file=str(log_file))
    logging.getLogger("ghlens.test").info("hello from the test")

    assert restore_root_logger.level == logging.INFO
    assert any(isinstance(h, RotatingFileHandler) for h in restore_root_logger.handlers)
    assert logging.getLogger("httpx").level == logging.WARNING
    for handler in restore_root_logger.handlers:
        handler.flush()
    assert "hello from the test" in log_file.read_text()
