"""
Logging configuration

Structured console output:
    [TIMESTAMP] [LEVEL] [MODULE:FUNCTION:LINE] MESSAGE
"""

import logging
import os
import sys
from datetime import datetime
from typing import Optional


class StructuredFormatter(logging.Formatter):
    """Single-line formatter with call-site location."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime('%Y-%m-%d %H:%M:%S.%f')[:-3]
        location = f"{record.module}:{record.funcName}:{record.lineno}"
        msg = f"[{timestamp}] [{record.levelname:8s}] [{location}] {record.getMessage()}"

        if record.exc_info:
            msg += f"\n{self.formatException(record.exc_info)}"

        return msg


def setup_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Set up a logger with structured console output.

    Args:
        name: Logger name (usually __name__)
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to the
            LOG_LEVEL env var or INFO

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Avoid duplicate handlers on Streamlit reruns
    if logger.handlers:
        return logger

    if level is None:
        level = os.getenv('LOG_LEVEL', 'INFO')

    log_level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(log_level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(StructuredFormatter())
    logger.addHandler(handler)

    logger.propagate = False

    return logger
