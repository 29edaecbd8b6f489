import logging
import sys

from app.core.config import settings

LOG_FORMAT = "[%(asctime)s] %(levelname)-8s | %(name)s | %(message)s"


def setup_logging(level: str = None) -> None:
    """
    Install a single stdout handler on the root logger.
    Safe to call more than once; existing handlers are left alone.
    """
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, "%Y-%m-%d %H:%M:%S"))
        root.addHandler(handler)
    root.setLevel((level or settings.log_level).upper())
