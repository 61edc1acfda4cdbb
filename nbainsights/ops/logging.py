"""Logging setup."""

import logging
import os
from typing import Optional


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Configure process-wide logging for the CLI and dashboard."""
    level_name = (level or os.environ.get("NBA_INSIGHTS_LOG_LEVEL", "INFO")).upper()
    resolved = getattr(logging, level_name, logging.INFO)
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    logging.basicConfig(level=resolved, format=fmt, handlers=handlers, force=True)
