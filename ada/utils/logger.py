"""
Logger configuration utility
"""
import sys
from typing import Optional
from loguru import logger


LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{file.path}</cyan>:<cyan>{line}</cyan> | <level>{message}</level>"
)


def setup_logger(level: str = "INFO", log_file: Optional[str] = None):
    """
    Setup loguru logger with custom format

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional path of a rotating log file written alongside stderr
    """
    logger.remove()
    logger.add(
        sys.stderr,
        format=LOG_FORMAT,
        level=level,
        colorize=True,
        backtrace=True,
        diagnose=True,
    )
    if log_file:
        logger.add(
            log_file,
            format=LOG_FORMAT,
            level=level,
            rotation="10 MB",
            retention=5,
            enqueue=True,
        )
    return logger
