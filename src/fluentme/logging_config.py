"""
Logging configuration for fluentme.

The CLI calls setup_logging() once; library modules only create
module-level loggers with logging.getLogger(__name__).
"""

import logging
import os
import sys
from typing import Optional


LOG_FORMAT = "[%(asctime)s] %(levelname)s [%(name)s] - %(message)s"


def setup_logging(
    level: int | str = logging.INFO,
    log_file: Optional[str] = None,
) -> None:
    """
    Configure the root logger.

    Args:
        level: Base log level, as int or name ("DEBUG", "INFO", ...)
        log_file: Optional file to also write logs to
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # faster-whisper and its decoders are chatty at INFO
    logging.getLogger("faster_whisper").setLevel(logging.WARNING)
    logging.getLogger("ctranslate2").setLevel(logging.WARNING)

    logging.getLogger(__name__).debug("Logging initialized at %s", logging.getLevelName(level))
