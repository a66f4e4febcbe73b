import logging
import os
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler

from rich.console import Console
from rich.logging import RichHandler

ERRORS_SUBDIR = "errors"


def dated_log_path(log_dir: str, subdir: str, filename: str) -> str:
    """``<log_dir>/<subdir>/<YYYY_MM_DD>/<filename>`` for today."""
    day = datetime.now().strftime("%Y_%m_%d")
    return os.path.normpath(os.path.join(log_dir, subdir, day, filename))


class DailyRotatingFileHandler(TimedRotatingFileHandler):
    """File handler that follows the date: each day writes into its own directory."""

    def __init__(self, log_dir: str, subdir: str, filename: str, **kwargs):
        self.log_dir = log_dir
        self.subdir = subdir
        self.log_filename = filename
        path = dated_log_path(log_dir, subdir, filename)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        super().__init__(path, **kwargs)

    def emit(self, record):
        path = dated_log_path(self.log_dir, self.subdir, self.log_filename)
        if os.path.normpath(self.baseFilename) != path:
            if self.stream:
                self.stream.close()
                self.stream = None
            os.makedirs(os.path.dirname(path), exist_ok=True)
            self.baseFilename = path
            self.stream = self._open()
        super().emit(record)

    def shouldRollover(self, record):
        # Dated directories replace rename-based rotation
        return False


class Logger(logging.Logger):
    """
    Rich console logger with optional daily file and error-file output.

    Args:
        logger_name: Name used for the logger and its log sub-directory.
        log_filename_prefix: Prefix for log file names.
        log_dir: Root log directory; defaults to the configured LOG_DIR.
        logger_debug: Log at DEBUG instead of INFO.
        log_to_file: Attach the dated file handlers.
    """

    def __init__(self, logger_name: str = '', log_filename_prefix: str = '', log_dir: str = None,
                 logger_debug: bool = False, log_to_file: bool = True) -> None:
        safe_name = logger_name.replace('/', '_').replace('\\', '_')
        super().__init__(safe_name, logging.DEBUG if logger_debug else logging.INFO)

        if log_dir is None:
            from pattern_scout.config.loader import config
            log_dir = config.LOG_DIR

        self.log_dir = log_dir
        self.log_filename = f"{log_filename_prefix}{safe_name or 'default'}.log"
        self.log_to_file = log_to_file

        if not self.handlers:
            self.addHandler(self._console_handler())
            if log_to_file:
                self.addHandler(self._file_handler(safe_name or 'default', self.level))
                self.addHandler(self._file_handler(ERRORS_SUBDIR, logging.ERROR))

        self.debug(f"Logger {safe_name} writing to {self.log_dir if log_to_file else 'console only'}")

    def _formatter(self) -> logging.Formatter:
        if self.level == logging.DEBUG:
            fmt = "[{asctime}] {levelname} {filename}.{funcName} - {message}"
        else:
            fmt = "[{asctime}] {levelname} - {message}"
        return logging.Formatter(fmt, datefmt="%d.%m.%Y %H:%M:%S", style="{")

    def _console_handler(self) -> logging.Handler:
        console = Console(color_system="auto", width=160, stderr=True)
        handler = RichHandler(console=console, rich_tracebacks=False, show_path=False)
        handler.setLevel(self.level)
        return handler

    def _file_handler(self, subdir: str, level: int) -> logging.Handler:
        handler = DailyRotatingFileHandler(
            self.log_dir,
            subdir,
            self.log_filename,
            when='midnight',
            backupCount=30,
            encoding='utf-8',
            delay=True
        )
        handler.setLevel(level)
        handler.setFormatter(self._formatter())
        return handler
