"""
Logging configuration for the wall axis engine.

Engine modules log through `logging.getLogger(__name__)`; this module only
decides where those records go.
"""

from __future__ import annotations
import logging
import os
import sys
from datetime import datetime

PACKAGE_LOGGER = "wallaxis"


def configure_logging(debug_mode: bool = False, log_dir: str | None = None) -> str | None:
    """
    Configure the package logger.

    Args:
        debug_mode: If True, sets DEBUG level (per-merge and per-pair detail).
        log_dir: Optional directory for a timestamped log file.

    Returns:
        Path to the created log file, or None when logging only to console.
    """
    level = logging.DEBUG if debug_mode else logging.INFO
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    # Reconfiguring replaces earlier handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter("%(name)s - %(levelname)s: %(message)s"))
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    if not log_dir:
        return None

    os.makedirs(log_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(log_dir, f"wallaxis_{timestamp}.log")

    file_handler = logging.FileHandler(log_file)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    file_handler.setLevel(logging.DEBUG)
    logger.addHandler(file_handler)

    return log_file
