"""
Logging configuration module.

Console logging always; optional daily log files named
jobqueue_YYYYMMDD_<START_HHMMSS>.log.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

# Module loggers live under the src package
APP_LOGGER_NAME = "src"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(threadName)s] %(message)s"

# Process start time is captured once and reused for all daily logs
_PROCESS_START_TIME: Optional[str] = None


class DailyRotatingFileHandler(logging.FileHandler):
    """
    File handler that switches to a new file when the date changes.

    START_HHMMSS is fixed at process start, only YYYYMMDD changes.
    """

    def __init__(self, log_dir: str = "logs", encoding: str = "utf-8"):
        global _PROCESS_START_TIME

        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

        if _PROCESS_START_TIME is None:
            _PROCESS_START_TIME = datetime.now().strftime("%H%M%S")

        self._start_hhmmss = _PROCESS_START_TIME
        self._current_date = datetime.now().strftime("%Y%m%d")
        super().__init__(self._log_path_for(self._current_date), mode="a", encoding=encoding)

    def _log_path_for(self, date_str: str) -> str:
        return str(self.log_dir / f"jobqueue_{date_str}_{self._start_hhmmss}.log")

    def emit(self, record: logging.LogRecord) -> None:
        """Emit a record, rotating to a new file if the date changed."""
        current_date = datetime.now().strftime("%Y%m%d")

        if self._current_date != current_date:
            self.close()
            self.baseFilename = self._log_path_for(current_date)
            self._current_date = current_date
            self.stream = self._open()

        super().emit(record)


def setup_logging(
    log_level: str = "INFO",
    log_to_file: bool = False,
    log_dir: str = "logs",
) -> logging.Logger:
    """
    Configure the application logger and return it.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_to_file: Also write to a daily rotating file in log_dir
        log_dir: Directory for log files

    Returns:
        logging.Logger: Configured application logger
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(APP_LOGGER_NAME)
    logger.setLevel(numeric_level)
    logger.propagate = False

    # Remove existing handlers (prevent duplicates on re-setup)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_to_file:
        file_handler = DailyRotatingFileHandler(log_dir=log_dir, encoding="utf-8")
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
        logger.info(f"Logging started - level: {log_level}, file: {file_handler.baseFilename}")
    else:
        logger.info(f"Logging started - level: {log_level}")

    return logger
