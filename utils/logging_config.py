"""
Logging configuration for the ITURHFProp prediction service.
Provides consistent logging setup across the application.
"""

import logging
import logging.handlers
import os
from typing import Optional
from config import get_config


def setup_logging(
    name: Optional[str] = None,
    level: Optional[str] = None,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Set up logging configuration.

    Args:
        name: Logger name (the root logger when omitted, so every
            module logger created with ``logging.getLogger(__name__)``
            shares the same handlers)
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path

    Returns:
        Configured logger instance
    """
    config = get_config()

    # Determine log level
    if level is None:
        level = config.LOG_LEVEL or ('DEBUG' if config.DEBUG else 'INFO')
    if log_file is None:
        log_file = config.LOG_FILE

    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    # Clear existing handlers
    logger.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(getattr(logging, level.upper()))
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5
        )
        file_handler.setLevel(getattr(logging, level.upper()))
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = __name__) -> logging.Logger:
    """
    Get a logger, configuring the root logger first if nothing has.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    if not logging.getLogger().handlers:
        setup_logging()

    return logging.getLogger(name)
