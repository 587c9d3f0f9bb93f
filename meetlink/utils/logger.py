"""
Logging setup for the web app and the clear job.

Modules log through logging.getLogger(__name__); setup_logging() installs a
single stdout handler on the root logger. Calling it again replaces the
handler rather than adding a second one. Refresh tokens are never logged.
"""

import os
import logging
import sys
from typing import Optional

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
VERBOSE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(pathname)s:%(lineno)d - %(message)s'
DEFAULT_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(level_name: Optional[str] = None, debug: Optional[bool] = None) -> logging.Logger:
    """
    Configure global logging for the application.

    Args:
        level_name: Log level name. Falls back to the LOG_LEVEL environment variable.
        debug: Use the verbose format. Falls back to the DEBUG environment variable.

    Returns:
        logging.Logger: Logger for the application package
    """
    if debug is None:
        debug = os.getenv("DEBUG", "False").lower() == "true"
    level_name = (level_name or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates when reloading
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(
        VERBOSE_FORMAT if debug else DEFAULT_FORMAT,
        datefmt=DEFAULT_DATE_FORMAT
    )
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(logging.DEBUG if debug else log_level)
    root_logger.addHandler(console_handler)

    logging.getLogger('sqlalchemy.engine').setLevel(
        logging.INFO if debug else logging.WARNING
    )
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('httpcore').setLevel(logging.WARNING)

    logger = logging.getLogger('meetlink')
    logger.info(f"Logging initialized with level {level_name}")
    return logger
