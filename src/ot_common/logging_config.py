"""Process-wide logging setup: stdlib logging, level from settings.LOG_LEVEL.

Log format:
    2026-10-18 12:00:00,000 INFO src.ot_matching.engine.engine: order order_1 ...
"""

import logging

from config.settings import settings

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(level=(level or settings.LOG_LEVEL).upper(), format=_FORMAT)
