"""Logging configuration for glimmer."""

import logging
import logging.handlers
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Marks handlers installed here so repeated calls do not stack them
_HANDLER_FLAG = "_glimmer_handler"


def setup_logging(
    level: str = "INFO",
    log_file: Path | None = None,
    name: str = "glimmer",
) -> logging.Logger:
    """Attach console (and optionally rotating file) handlers to a logger.

    Calling it again replaces the handlers it installed before.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path of a rotating log file.
        name: Logger name, the package logger by default.

    Returns:
        The configured logger.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logger = logging.getLogger(name)
    logger.setLevel(numeric_level)

    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_FLAG, False):
            logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    setattr(console_handler, _HANDLER_FLAG, True)
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10485760,  # 10MB
            backupCount=5,
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        setattr(file_handler, _HANDLER_FLAG, True)
        logger.addHandler(file_handler)

    return logger
