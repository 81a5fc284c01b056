# Licensed under the Apache License, Version 2.0
import logging
import os
from typing import Optional

PACKAGE_LOGGER = "authorship"


def _env_level() -> int:
    level_name = os.getenv("AUTHORSHIP_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    return level if isinstance(level, int) else logging.INFO


def setup_logging(verbose: Optional[bool] = None) -> logging.Logger:
    """
    Configure the root handler once and set the level of the package logger.

    The level comes from AUTHORSHIP_LOG_LEVEL; ``verbose=True`` forces DEBUG
    for ``authorship.*`` loggers only.
    """
    level = _env_level()
    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    logging.basicConfig(level=level, format=fmt)

    pkg = logging.getLogger(PACKAGE_LOGGER)
    pkg.setLevel(logging.DEBUG if verbose else level)
    return pkg
