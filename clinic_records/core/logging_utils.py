import logging
from typing import Optional

from .config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def configure_logging(level: Optional[str] = None):
    """Set up root logging once for scripts and the app root."""
    global _configured
    if _configured:
        return

    logging.basicConfig(level=(level or LOG_LEVEL), format=LOG_FORMAT)
    _configured = True
