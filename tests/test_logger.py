import logging
from datetime import datetime

from pattern_scout.logger.logger import Logger


def _close(logger):
    for handler in logger.handlers:
        handler.close()


def test_writes_dated_log_and_error_files(tmp_path):
    logger = Logger(logger_name="scout", log_dir=str(tmp_path))
    try:
        logger.info("analysis finished")
        logger.error("store unavailable")
    finally:
        _close(logger)

    day = datetime.now().strftime("%Y_%m_%d")
    main_log = (tmp_path / "scout" / day / "scout.log").read_text(encoding="utf-8")
    error_log = (tmp_path / "errors" / day / "scout.log").read_text(encoding="utf-8")

    assert "analysis finished" in main_log
    assert "store unavailable" in main_log
    assert "store unavailable" in error_log
    assert "analysis finished" not in error_log


def test_console_only(tmp_path):
    logger = Logger(logger_name="console", log_dir=str(tmp_path), log_to_file=False, logger_debug=True)
    try:
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        logger.debug("debug line")
    finally:
        _close(logger)
    assert not (tmp_path / "console").exists()
