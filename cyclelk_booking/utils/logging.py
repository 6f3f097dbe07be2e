"""
Logger factory shared by the service modules.
"""

import logging

from ..config import get_settings

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_configured = False


def configure_logging(level: str | None = None) -> None:
    """Install a single stream handler on the ``cyclelk`` logger tree."""
    global _configured
    root = logging.getLogger("cyclelk")
    root.setLevel((level or get_settings().log_level).upper())
    if not _configured:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)
        _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``cyclelk`` namespace."""
    if not _configured:
        configure_logging()
    if not name.startswith("cyclelk"):
        name = f"cyclelk.{name}"
    return logging.getLogger(name)
