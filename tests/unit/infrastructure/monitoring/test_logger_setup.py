import logging

import pytest

from capsweep.infrastructure.monitoring.logger_setup import parse_log_level, setup_logging


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


@pytest.mark.parametrize("name, expected", [
    ("debug", logging.DEBUG),
    ("INFO", logging.INFO),
    (None, logging.WARNING),
    ("nonsense", logging.WARNING),
])
def test_parse_log_level(name, expected):
    assert parse_log_level(name) == expected


def test_setup_logging_replaces_handlers(restore_root_logger):
    setup_logging(log_level=logging.INFO)

    assert restore_root_logger.level == logging.INFO
    assert len(restore_root_logger.handlers) == 1
    assert logging.getLogger("httpx").level == logging.WARNING


def test_setup_logging_with_file(restore_root_logger, tmp_path):
    log_file = tmp_path / "capsweep.log"

    setup_logging(log_level=logging.DEBUG, log_file=str(log_file))
    logging.getLogger("capsweep.test").debug("hello file")
    for handler in restore_root_logger.handlers:
        handler.flush()

    assert len(restore_root_logger.handlers) == 2
    assert "hello file" in log_file.read_text(encoding="utf-8")
