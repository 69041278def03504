"""Logging setup for the CRM engine CLI.

The engine itself only creates module loggers; handlers are installed by
the CLI when ``--log-level`` is given. Records go to stderr so that
``--json`` output on stdout stays parseable.
"""

import json
import logging
import os
import sys
from typing import TYPE_CHECKING, Optional, TextIO

if TYPE_CHECKING:
    from crm_engine.config.settings import EngineConfig

# LogRecord attributes that are not user-supplied context
_RESERVED_FIELDS = set(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime"}

STANDARD_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per record.

    Context fields (correlation id, action, anything passed via ``extra``)
    become top-level keys next to level, logger and message.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_FIELDS and not key.startswith("_"):
                log_data[key] = value

        return json.dumps(log_data, default=str)


class LoggingConfig:
    """
    Level and format of the engine's log output.

    Attributes:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: 'standard' text lines or 'json' objects
    """

    VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
    VALID_FORMATS = {"standard", "json"}

    def __init__(self, log_level: str = "INFO", log_format: str = "standard"):
        """
        Initialize logging configuration.

        Raises:
            ValueError: If invalid log level or format
        """
        if log_level.upper() not in self.VALID_LEVELS:
            raise ValueError(
                f"Invalid log level: {log_level}. "
                f"Must be one of {', '.join(sorted(self.VALID_LEVELS))}"
            )

        if log_format not in self.VALID_FORMATS:
            raise ValueError(
                f"Invalid log format: {log_format}. "
                f"Must be one of {', '.join(sorted(self.VALID_FORMATS))}"
            )

        self.log_level = log_level.upper()
        self.log_format = log_format

    @classmethod
    def from_env(cls, engine_config: Optional["EngineConfig"] = None) -> "LoggingConfig":
        """
        Build the configuration from the engine settings and LOG_FORMAT.

        The level comes from the engine configuration when one is given,
        otherwise from LOG_LEVEL.

        Returns:
            LoggingConfig instance
        """
        level = engine_config.log_level if engine_config else os.getenv("LOG_LEVEL", "INFO")
        return cls(log_level=level, log_format=os.getenv("LOG_FORMAT", "standard"))

    def build_formatter(self) -> logging.Formatter:
        if self.log_format == "json":
            return JSONFormatter()
        return logging.Formatter(fmt=STANDARD_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")


def configure_logging(config: LoggingConfig, stream: Optional[TextIO] = None) -> None:
    """
    Install a single stream handler on the root logger.

    Handlers configured before are removed, so calling this twice does not
    duplicate output. The handler carries the ``ContextFilter`` that adds
    ``LogContext`` fields to every record.

    Args:
        config: LoggingConfig instance
        stream: Output stream (default: stderr)
    """
    from crm_engine.utils.logging_utils import ContextFilter

    reset_logging()
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, config.log_level))

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(config.build_formatter())
    handler.addFilter(ContextFilter())
    root_logger.addHandler(handler)


def reset_logging() -> None:
    """Remove all root handlers and restore the WARNING level."""
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.setLevel(logging.WARNING)
