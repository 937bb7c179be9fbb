import logging
import sys
from typing import TextIO

LOGGER_NAME = "intake"
LOG_FORMAT = "%(asctime)s [%(levelname)s] (%(threadName)s) %(message)s"


class Log:
    """Process-wide logger for the intake pipeline.

    Stage workers log from pool threads, so every record carries the
    thread name next to the level.
    """

    _logger: logging.Logger = logging.getLogger(LOGGER_NAME)

    @classmethod
    def configure(cls, log_level: str, stream: TextIO | None = None) -> None:
        """Set the level and attach a single stream handler (stdout by default)."""
        cls._logger.setLevel(log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(stream or sys.stdout)
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            cls._logger.addHandler(handler)

    @classmethod
    def info(cls, message: str) -> None:
        cls._logger.info(message)

    @classmethod
    def error(cls, message: str, exc_info: bool = False) -> None:
        cls._logger.error(message, exc_info=exc_info)

    @classmethod
    def warning(cls, message: str, exc_info: bool = False) -> None:
        cls._logger.warning(message, exc_info=exc_info)

    @classmethod
    def debug(cls, message: str) -> None:
        cls._logger.debug(message)
