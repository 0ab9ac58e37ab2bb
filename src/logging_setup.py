"""Root logger configuration for entry points."""

import logging
from typing import Optional

from config.settings import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the root logger, at the settings level unless `level` is given."""
    level_name = (level or get_settings().log_level).upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT)
    # aiohttp is chatty at debug level
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
