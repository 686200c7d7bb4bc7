"""
Logging setup for the command line entry points.

Library modules only create module-level loggers; handlers are
configured here, once, by whoever runs the process.
"""

import logging
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the root logger (idempotent)."""
    from .config import config

    level_name = (level or config.log_level or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
    )
    logging.getLogger().setLevel(getattr(logging, level_name, logging.INFO))
