import logging

import pytest

from finboard.logging_config import ColoredFormatter, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_setup_logging_with_file(tmp_path, restore_root_logger) -> None:
    log_file = tmp_path / "logs" / "finboard.log"

    setup_logging("warning", log_file)
    logging.getLogger("finboard.test").warning("disk almost full")
    for handler in restore_root_logger.handlers:
        handler.flush()

    assert restore_root_logger.level == logging.WARNING
    assert len(restore_root_logger.handlers) == 2
    assert "disk almost full" in log_file.read_text(encoding="utf-8")


def test_colored_formatter_restores_levelname() -> None:
    record = logging.LogRecord("x", logging.ERROR, __file__, 1, "boom", None, None)

    text = ColoredFormatter("%(levelname)s %(message)s").format(record)

    assert "ERROR" in text and "boom" in text
    assert record.levelname == "ERROR"
