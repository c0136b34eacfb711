from __future__ import annotations

import logging
from typing import Optional

from vocadrill.config import get_log_level


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """Create or reuse a module-level logger with a simple stdout handler."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(fmt="%(asctime)s %(levelname)s %(name)s: %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(level if level is not None else get_log_level())
    return logger


__all__ = ["get_logger"]
