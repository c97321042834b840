import logging
import logging.handlers

from config import settings

import utils.logging as logging_utils


def test_setup_logging_adds_file_and_console_handlers(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "LOG_DIR", str(tmp_path))
    monkeypatch.setattr(settings, "LOG_FILE", "movies.log")
    monkeypatch.setattr(settings, "ENABLE_RICH_LOGGING", False)
    monkeypatch.setattr(settings, "LOG_LEVEL_STR", "DEBUG")

    logging_utils.setup_logging()
    root_logger = logging.getLogger()
    try:
        kinds = {type(h) for h in root_logger.handlers}
        assert logging.handlers.RotatingFileHandler in kinds
        assert logging.StreamHandler in kinds
        assert (tmp_path / "movies.log").exists()
        assert logging.getLogger("neo4j").level == logging.DEBUG
        assert logging.getLogger("neo4j.notifications").level == logging.WARNING
    finally:
        for handler in list(root_logger.handlers):
            handler.close()
        root_logger.handlers.clear()


def test_setup_logging_rich_console(monkeypatch):
    monkeypatch.setattr(settings, "LOG_FILE", None)
    monkeypatch.setattr(settings, "ENABLE_RICH_LOGGING", True)

    logging_utils.setup_logging()
    root_logger = logging.getLogger()
    try:
        assert any(
            isinstance(h, logging_utils.RichHandler) for h in root_logger.handlers
        )
    finally:
        root_logger.handlers.clear()
